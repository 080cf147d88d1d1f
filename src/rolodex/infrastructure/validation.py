"""Contact input validation: local regex checks and remote phone number verification.

The remote call goes through a requests.Session whose transport adapter
retries transient failures (connection errors, 5xx) with exponential backoff.
Client errors (4xx) are never retried and never downgraded to the local check.
"""

import logging
import os
import re

import requests
from pydantic import BaseModel, ConfigDict, ValidationError
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from rolodex.domain import NAME_MAX_LENGTH, ConfigError, ExternalValidationError

logger = logging.getLogger(__name__)

APILAYER_KEY_KEY = "APILAYER_KEY"
APILAYER_BASE_URL_KEY = "APILAYER_BASE_URL"
APILAYER_BASE_URL = "https://api.apilayer.com/number_verification/validate?number="
API_KEY_HEADER = "apikey"

MAX_RETRIES = 3
BACKOFF_FACTOR = 0.5
BACKOFF_MAX = 4.0
# (connect, read) seconds per attempt; with BACKOFF_MAX this bounds the whole sequence.
REQUEST_TIMEOUT = (3.05, 5.0)

VALID_COUNTRY_CODE = "DE"

EMAIL_REGEX = re.compile(
    r"([a-z0-9_+]([a-z0-9_+.]*[a-z0-9_+])?)@([a-z0-9]+([\-.][a-z0-9]+)*\.[a-z]{2,6})",
    re.IGNORECASE,
)

# German numbers in stored form: country code 49, no "+" or separators.
DE_PHONE_REGEX = re.compile(r"49[0-9]{9,10}")


class NumberVerificationResponse(BaseModel):
    """Payload of the number verification API. Only valid and country_code are used."""

    model_config = ConfigDict(extra="ignore")

    valid: bool
    country_code: str
    number: str | None = None
    international_format: str | None = None
    country_name: str | None = None
    carrier: str | None = None
    line_type: str | None = None


def is_phone_no_valid_fallback(phone_no: int) -> bool:
    """Local stand-in for the remote check: a German number in stored form."""
    return DE_PHONE_REGEX.fullmatch(str(phone_no)) is not None


def build_retrying_session(
    max_retries: int = MAX_RETRIES,
    backoff_factor: float = BACKOFF_FACTOR,
    backoff_max: float = BACKOFF_MAX,
) -> requests.Session:
    """Session that retries GETs on connection errors and 5xx with exponential backoff.

    After the last retry the final response is returned as-is (no exception),
    so the caller decides what a surviving 5xx means.
    """
    retry = Retry(
        total=max_retries,
        connect=max_retries,
        read=max_retries,
        status=max_retries,
        backoff_factor=backoff_factor,
        backoff_max=backoff_max,
        status_forcelist=frozenset(range(500, 600)),
        allowed_methods=frozenset({"GET"}),
        raise_on_status=False,
        # Retry-After would let the server stretch the sequence past BACKOFF_MAX.
        respect_retry_after_header=False,
    )
    session = requests.Session()
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class PhoneNumberVerifier:
    """Client for the remote phone number verification API."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = APILAYER_BASE_URL,
        session: requests.Session | None = None,
        timeout: tuple[float, float] = REQUEST_TIMEOUT,
    ) -> None:
        if not api_key:
            raise ConfigError("Phone verification API key must be non-empty.")
        self._api_key = api_key
        self._base_url = base_url
        self._session = session or build_retrying_session()
        self._timeout = timeout

    @classmethod
    def from_env(cls) -> "PhoneNumberVerifier":
        api_key = os.environ.get(APILAYER_KEY_KEY, "").strip()
        if not api_key:
            raise ConfigError(f"Missing environment variable: {APILAYER_KEY_KEY}")
        base_url = os.environ.get(APILAYER_BASE_URL_KEY, "").strip() or APILAYER_BASE_URL
        return cls(api_key, base_url=base_url)

    def get_valid_phone_no(self, phone_no: int) -> bool:
        """Ask the remote service whether phone_no is a valid German number.

        4xx -> ExternalValidationError. 5xx after retries, or no connection at
        all -> the local regex result.
        """
        url = f"{self._base_url}{phone_no}"
        try:
            response = self._session.get(
                url, headers={API_KEY_HEADER: self._api_key}, timeout=self._timeout
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            logger.warning(
                "Phone verification unreachable, using local check for %s: %s",
                phone_no,
                e,
            )
            return is_phone_no_valid_fallback(phone_no)

        status = response.status_code
        if 200 <= status < 300:
            try:
                payload = NumberVerificationResponse.model_validate_json(response.content)
            except ValidationError as e:
                raise ExternalValidationError(
                    f"Unexpected phone verification payload: {e.error_count()} error(s)",
                    status_code=status,
                ) from e
            return payload.valid and payload.country_code == VALID_COUNTRY_CODE
        if 400 <= status < 500:
            raise ExternalValidationError(
                f"Unexpected status_code: {status}", status_code=status
            )
        logger.warning(
            "Phone verification returned %s after retries, using local check for %s",
            status,
            phone_no,
        )
        return is_phone_no_valid_fallback(phone_no)


class ContactValidator:
    """Checks run on contact input before it is stored.

    Name and email are always checked locally. Phone numbers are only checked
    when a PhoneNumberVerifier is configured.
    """

    def __init__(self, verifier: PhoneNumberVerifier | None = None) -> None:
        self._verifier = verifier

    @staticmethod
    def is_name_invalid(name: str) -> bool:
        """True when the name is empty or longer than NAME_MAX_LENGTH characters."""
        return len(name) == 0 or len(name) > NAME_MAX_LENGTH

    @staticmethod
    def is_email_valid(email: str) -> bool:
        return EMAIL_REGEX.fullmatch(email) is not None

    @staticmethod
    def is_phone_no_valid_fallback(phone_no: int) -> bool:
        return is_phone_no_valid_fallback(phone_no)

    def is_phone_no_valid(self, phone_no: int) -> bool:
        if self._verifier is None:
            return True
        return self._verifier.get_valid_phone_no(phone_no)
