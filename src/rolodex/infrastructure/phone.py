"""Phone number parsing: human-entered text to the integer form stored on a contact."""

import phonenumbers


def parse_phone_no(raw: str, default_region: str | None = None) -> int | None:
    """Parse and return the E.164 digits of the number as an int, or None if invalid.

    "+49 170 1234567" -> 491701234567. Use default_region when the input has
    no leading + (e.g. "0170 1234567" with default_region "DE"). Input that is
    already bare digits with a country code ("491701234567") is read as-is.
    """
    if not raw or not str(raw).strip():
        return None
    raw = str(raw).strip()
    if raw.isdigit() and default_region is None:
        raw = "+" + raw
    try:
        parsed = phonenumbers.parse(raw, default_region)
    except phonenumbers.NumberParseException:
        return None
    if not phonenumbers.is_valid_number(parsed):
        return None
    e164 = phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)
    return int(e164.lstrip("+"))
