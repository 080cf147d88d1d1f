"""Result types returned by ContactService."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Invalid:
    """Input was rejected before reaching storage (bad name, email or phone number)."""

    reason: str
