"""Field validators for EPC069-12 payment data.

Each validator takes one raw field value and returns it normalized (spaces
stripped, upper-cased where the standard expects codes) or raises the
matching EpcError. Absent optional fields come back as None.
"""

import re
from decimal import Decimal, InvalidOperation

from epc_qr_generator import CURRENCY, MAX_AMOUNT, MIN_AMOUNT
from epc_qr_generator.charset import CharacterSet, is_permitted
from epc_qr_generator.errors import (
    AMOUNT_NEGATIVE,
    AMOUNT_NOT_A_NUMBER,
    AMOUNT_TOO_LARGE,
    AMOUNT_TOO_PRECISE,
    AMOUNT_ZERO,
    BIC_MALFORMED,
    BIC_NON_ALPHANUMERIC,
    BIC_WRONG_LENGTH,
    IBAN_CHECKSUM_MISMATCH,
    IBAN_MALFORMED,
    IBAN_NON_ALPHANUMERIC,
    IBAN_UNSUPPORTED_COUNTRY,
    IBAN_WRONG_LENGTH,
    ConflictingRemittanceFields,
    FieldTooLong,
    FieldTooShort,
    InvalidAmount,
    InvalidBic,
    InvalidCharacter,
    InvalidIban,
    MissingField,
)


# Field length limits (characters)
MAX_NAME_LENGTH = 70
MAX_REFERENCE_LENGTH = 35
MAX_TEXT_LENGTH = 140
MAX_INFORMATION_LENGTH = 70
PURPOSE_CODE_LENGTH = 4

# IBAN lengths for the countries taking part in the SEPA schemes
IBAN_LENGTHS = {
    "AD": 24, "AL": 28, "AT": 20, "AX": 18, "BE": 16, "BG": 22, "BL": 27,
    "CH": 21, "CY": 28, "CZ": 24, "DE": 22, "DK": 18, "EE": 20, "ES": 24,
    "FI": 18, "FO": 18, "FR": 27, "GB": 22, "GF": 27, "GG": 22, "GI": 23,
    "GL": 18, "GP": 27, "GR": 27, "HR": 21, "HU": 28, "IE": 22, "IM": 22,
    "IS": 26, "IT": 27, "JE": 22, "LI": 21, "LT": 20, "LU": 20, "LV": 21,
    "MC": 27, "MD": 24, "ME": 22, "MF": 27, "MK": 19, "MQ": 27, "MT": 31,
    "NC": 27, "NL": 18, "NO": 15, "PF": 27, "PL": 28, "PM": 27, "PT": 25,
    "RE": 27, "RO": 24, "RS": 22, "SE": 24, "SI": 19, "SK": 24, "SM": 27,
    "TF": 27, "VA": 22, "WF": 27, "YT": 27,
}

_ALPHANUMERIC = re.compile(r"[A-Z0-9]+")
_IBAN_PREFIX = re.compile(r"[A-Z]{2}[0-9]{2}")
_BIC_PATTERN = re.compile(r"[A-Z]{6}[A-Z0-9]{2}([A-Z0-9]{3})?")
_PURPOSE_CHAR = re.compile(r"[A-Z]")
_REFERENCE_CHAR = re.compile(r"[A-Z0-9]")


def is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _compact(value: str) -> str:
    """Remove all whitespace and upper-case a code-like value."""
    return "".join(value.split()).upper()


def check_length(field: str, value: str, max_length: int) -> None:
    if len(value) > max_length:
        raise FieldTooLong(field, max_length, len(value))


def check_characters(
    field: str,
    value: str,
    character_set: CharacterSet | None = None,
) -> None:
    """Reject the first character (left to right) that a payload cannot carry."""
    for position, char in enumerate(value):
        if not is_permitted(char, character_set):
            raise InvalidCharacter(field, char, position)


def validate_text(
    field: str,
    value: str | None,
    max_length: int,
    character_set: CharacterSet | None = None,
    required: bool = False,
) -> str | None:
    """Validate a free-text field (name, remittance text, information)."""
    if is_blank(value):
        if required:
            raise MissingField(field)
        return None

    value = value.strip()
    check_length(field, value, max_length)
    check_characters(field, value, character_set)
    return value


def validate_name(value: str, character_set: CharacterSet | None = None) -> str:
    return validate_text(
        "beneficiary_name", value, MAX_NAME_LENGTH, character_set, required=True
    )


def iban_checksum(iban: str) -> int:
    """ISO 7064 MOD 97-10 remainder of an IBAN (1 for a valid one)."""
    rearranged = iban[4:] + iban[:4]
    digits = "".join(str(int(char, 36)) for char in rearranged)
    return int(digits) % 97


def validate_iban(value: str) -> str:
    """Validate an IBAN and return it without spaces, upper-cased."""
    if is_blank(value):
        raise MissingField("iban")

    iban = _compact(value)
    if not _ALPHANUMERIC.fullmatch(iban):
        raise InvalidIban(IBAN_NON_ALPHANUMERIC)
    if not _IBAN_PREFIX.match(iban):
        raise InvalidIban(IBAN_MALFORMED)

    expected_length = IBAN_LENGTHS.get(iban[:2])
    if expected_length is None:
        raise InvalidIban(IBAN_UNSUPPORTED_COUNTRY)
    if len(iban) != expected_length:
        raise InvalidIban(IBAN_WRONG_LENGTH)

    if iban_checksum(iban) != 1:
        raise InvalidIban(IBAN_CHECKSUM_MISMATCH)
    return iban


def validate_bic(value: str | None) -> str | None:
    """Validate an optional BIC (8 or 11 characters)."""
    if is_blank(value):
        return None

    bic = _compact(value)
    if len(bic) not in (8, 11):
        raise InvalidBic(BIC_WRONG_LENGTH)
    if not _ALPHANUMERIC.fullmatch(bic):
        raise InvalidBic(BIC_NON_ALPHANUMERIC)
    if not _BIC_PATTERN.fullmatch(bic):
        raise InvalidBic(BIC_MALFORMED)
    return bic


def validate_amount(value) -> Decimal | None:
    """Validate an optional amount in euro and return it with two decimals.

    Accepts Decimal, int or str. Floats are converted through their shortest
    ``repr`` so ``12.5`` becomes ``Decimal("12.5")``, not its binary expansion.
    """
    if is_blank(value):
        return None
    if isinstance(value, bool):
        raise InvalidAmount(AMOUNT_NOT_A_NUMBER)
    if isinstance(value, float):
        value = str(value)

    try:
        amount = Decimal(value.strip() if isinstance(value, str) else value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(AMOUNT_NOT_A_NUMBER) from None
    if not amount.is_finite():
        raise InvalidAmount(AMOUNT_NOT_A_NUMBER)

    if amount < 0:
        raise InvalidAmount(AMOUNT_NEGATIVE)
    if amount > MAX_AMOUNT:
        raise InvalidAmount(AMOUNT_TOO_LARGE)
    cents = amount.quantize(MIN_AMOUNT)
    if cents != amount:
        raise InvalidAmount(AMOUNT_TOO_PRECISE)
    if cents < MIN_AMOUNT:
        raise InvalidAmount(AMOUNT_ZERO)
    return cents


def format_amount(amount: Decimal | None) -> str:
    if amount is None:
        return ""
    return f"{CURRENCY}{amount:.2f}"


def validate_purpose_code(value: str | None) -> str | None:
    """Validate an optional ISO 20022 purpose code such as ``GDDS``."""
    if is_blank(value):
        return None

    code = value.strip().upper()
    check_length("purpose_code", code, PURPOSE_CODE_LENGTH)
    if len(code) < PURPOSE_CODE_LENGTH:
        raise FieldTooShort("purpose_code", PURPOSE_CODE_LENGTH, len(code))
    for position, char in enumerate(code):
        if not _PURPOSE_CHAR.fullmatch(char):
            raise InvalidCharacter("purpose_code", char, position)
    return code


def validate_reference(value: str | None) -> str | None:
    """Validate a structured creditor reference (e.g. ISO 11649 ``RF...``)."""
    if is_blank(value):
        return None

    reference = _compact(value)
    check_length("remittance_reference", reference, MAX_REFERENCE_LENGTH)
    for position, char in enumerate(reference):
        if not _REFERENCE_CHAR.fullmatch(char):
            raise InvalidCharacter("remittance_reference", char, position)
    return reference


def validate_remittance(
    reference: str | None,
    text: str | None,
    character_set: CharacterSet | None = None,
) -> tuple[str | None, str | None]:
    """Validate the mutually exclusive remittance fields.

    Returns ``(reference, text)`` with at most one of them set.
    """
    if not is_blank(reference) and not is_blank(text):
        raise ConflictingRemittanceFields()
    return (
        validate_reference(reference),
        validate_text("remittance_text", text, MAX_TEXT_LENGTH, character_set),
    )


def validate_information(
    value: str | None, character_set: CharacterSet | None = None
) -> str | None:
    return validate_text("information", value, MAX_INFORMATION_LENGTH, character_set)
