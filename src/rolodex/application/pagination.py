"""Page number / page size to LIMIT / OFFSET arithmetic, shared by every repository."""

from dataclasses import dataclass

from rolodex.domain.errors import InvalidPageError, ParsingError

DEFAULT_PAGE_NO = 1
DEFAULT_PAGE_SIZE = 5

# Largest page number or page size accepted from a query string (unsigned 32-bit).
PAGINATION_VALUE_MAX = 2**32 - 1

# offset + limit must fit a signed 64-bit integer (SQL BIGINT, sys.maxsize for islice).
ROW_BOUND_MAX = 2**63 - 1


def get_limit_and_offset(
    page_no: int | None = None, page_size: int | None = None
) -> tuple[int, int]:
    """Return (limit, offset) for a 1-based page number and a page size.

    Missing values fall back to DEFAULT_PAGE_NO / DEFAULT_PAGE_SIZE. Page 0 is
    rejected instead of producing a negative offset, and so is a window whose
    end does not fit in a signed 64-bit integer.
    """
    page_no = DEFAULT_PAGE_NO if page_no is None else page_no
    page_size = DEFAULT_PAGE_SIZE if page_size is None else page_size
    if page_no < 1:
        raise InvalidPageError(f"Page number must be at least 1, got {page_no}.")
    if page_size < 0:
        raise InvalidPageError(f"Page size must not be negative, got {page_size}.")
    if page_no > PAGINATION_VALUE_MAX or page_size > PAGINATION_VALUE_MAX:
        raise InvalidPageError(
            f"Page number and page size must not exceed {PAGINATION_VALUE_MAX}."
        )
    offset = (page_no - 1) * page_size
    if offset + page_size > ROW_BOUND_MAX:
        raise InvalidPageError("Requested page lies beyond the addressable range.")
    return page_size, offset


def parse_pagination_value(text: str | None) -> int | None:
    """Parse a query string value as a non-negative integer. None means 'not supplied'."""
    if text is None:
        return None
    # Only plain ASCII digits: int() alone would accept "+3", " 3", "3_0" or "٣".
    if not text or not text.isascii() or not text.isdigit():
        raise ParsingError(text)
    value = int(text)
    if value > PAGINATION_VALUE_MAX:
        raise ParsingError(text)
    return value


@dataclass(frozen=True)
class Pagination:
    """Parsed pagination query parameters."""

    page_no: int | None = None
    page_size: int | None = None

    @classmethod
    def from_query(cls, page_no: str | None, page_size: str | None) -> "Pagination":
        return cls(
            page_no=parse_pagination_value(page_no),
            page_size=parse_pagination_value(page_size),
        )
