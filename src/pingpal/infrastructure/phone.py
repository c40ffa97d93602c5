"""E.164 normalization for the optional account phone."""

import phonenumbers


class PhoneNormalizer:
    """Callable turning raw input into E.164, or None when it is not a valid number.

    default_region resolves numbers written without a leading "+"; numbers that
    carry a country code ignore it.
    """

    def __init__(self, default_region: str | None = None) -> None:
        self.default_region = (default_region or "").strip().upper() or None

    def __call__(self, raw: str | None) -> str | None:
        text = str(raw or "").strip()
        if not text:
            return None
        try:
            number = phonenumbers.parse(text, self.default_region)
        except phonenumbers.NumberParseException:
            return None
        if not phonenumbers.is_valid_number(number):
            return None
        return phonenumbers.format_number(number, phonenumbers.PhoneNumberFormat.E164)
