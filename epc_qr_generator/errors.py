"""Validation errors raised while building or parsing EPC payloads.

Every error is a ``ValueError`` so callers that only care about "bad input"
can catch that, while the CLI and tests can inspect the structured fields.
"""

from epc_qr_generator import MAX_PAYLOAD_BYTES


# Reasons carried by InvalidIban
IBAN_NON_ALPHANUMERIC = "non-alphanumeric"
IBAN_MALFORMED = "malformed"
IBAN_UNSUPPORTED_COUNTRY = "unsupported country"
IBAN_WRONG_LENGTH = "wrong length for country"
IBAN_CHECKSUM_MISMATCH = "checksum mismatch"

# Reasons carried by InvalidBic
BIC_WRONG_LENGTH = "wrong length"
BIC_NON_ALPHANUMERIC = "non-alphanumeric"
BIC_MALFORMED = "malformed"

# Reasons carried by InvalidAmount
AMOUNT_NOT_A_NUMBER = "not a number"
AMOUNT_NEGATIVE = "negative"
AMOUNT_TOO_LARGE = "too large"
AMOUNT_TOO_PRECISE = "too many decimal places"
AMOUNT_ZERO = "zero"


class EpcError(ValueError):
    """Base class for every EPC payload error."""

    field: str | None = None


class FieldTooLong(EpcError):
    def __init__(self, field: str, max_length: int, actual: int):
        self.field = field
        self.max_length = max_length
        self.actual = actual
        super().__init__(
            f"{field} is too long ({actual} characters, maximum is {max_length})."
        )


class FieldTooShort(EpcError):
    def __init__(self, field: str, min_length: int, actual: int):
        self.field = field
        self.min_length = min_length
        self.actual = actual
        super().__init__(
            f"{field} is too short ({actual} characters, minimum is {min_length})."
        )


class MissingField(EpcError):
    def __init__(self, field: str):
        self.field = field
        super().__init__(f"{field} is required.")


class InvalidCharacter(EpcError):
    def __init__(self, field: str, char: str, position: int):
        self.field = field
        self.char = char
        self.position = position
        super().__init__(
            f"{field} contains the character {char!r} (U+{ord(char):04X}) "
            f"at position {position}, which cannot be encoded in an EPC QR code."
        )


class InvalidIban(EpcError):
    field = "iban"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid IBAN: {reason}.")


class InvalidBic(EpcError):
    field = "bic"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid BIC: {reason}.")


class InvalidAmount(EpcError):
    field = "amount"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(
            f"Invalid amount: {reason}. "
            "Expected a value between 0.01 and 999999999.99 with at most two decimals."
        )


class ConflictingRemittanceFields(EpcError):
    field = "remittance"

    def __init__(self):
        super().__init__(
            "At most one remittance field (reference or text) may be specified."
        )


class IncompatibleVersionForMissingBic(EpcError):
    field = "bic"

    def __init__(self, version: str):
        self.version = version
        super().__init__(
            f"EPC version {version} requires a BIC. "
            "Provide a BIC or use version 002."
        )


class InvalidVersion(EpcError):
    field = "version"

    def __init__(self, version):
        self.version = version
        super().__init__(f"Unknown EPC version {version!r}. Use 1 (001) or 2 (002).")


class PayloadTooLarge(EpcError):
    def __init__(self, actual: int, max_bytes: int = MAX_PAYLOAD_BYTES):
        self.actual = actual
        self.max_bytes = max_bytes
        super().__init__(
            f"Payload is {actual} bytes, larger than the maximum of {max_bytes} bytes."
        )


class InvalidPayload(EpcError):
    """Raised when parsing text that is not a well-formed EPC payload."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Not an EPC payload: {reason}.")
