"""Build and parse EPC069-12 payloads (the text block inside a Girocode)."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum, IntEnum

from epc_qr_generator import (
    CURRENCY,
    IDENTIFICATION,
    LINE_TERMINATOR,
    MAX_PAYLOAD_BYTES,
    SERVICE_TAG,
)
from epc_qr_generator import validators
from epc_qr_generator.charset import AUTO, CharacterSet, resolve_policy, select_character_set
from epc_qr_generator.errors import (
    IncompatibleVersionForMissingBic,
    InvalidPayload,
    InvalidVersion,
    PayloadTooLarge,
)


class Version(Enum):
    """EPC QR version tag. Version 001 requires a BIC, 002 makes it optional."""

    V1 = "001"
    V2 = "002"


class Slot(IntEnum):
    """Zero-based line index of each element of the payload."""

    SERVICE_TAG = 0
    VERSION = 1
    CHARACTER_SET = 2
    IDENTIFICATION = 3
    BIC = 4
    NAME = 5
    IBAN = 6
    AMOUNT = 7
    PURPOSE = 8
    REFERENCE = 9
    TEXT = 10
    INFORMATION = 11


SLOT_COUNT = len(Slot)


@dataclass(frozen=True)
class PaymentRecord:
    """Data for one SEPA credit transfer."""

    beneficiary_name: str
    iban: str
    bic: str | None = None
    amount: Decimal | str | int | float | None = None
    purpose_code: str | None = None
    remittance_reference: str | None = None
    remittance_text: str | None = None
    information: str | None = None


@dataclass(frozen=True)
class CanonicalPayload:
    """A finished payload: its slot lines plus the declared character set."""

    lines: tuple[str, ...]
    character_set: CharacterSet
    version: Version

    @property
    def text(self) -> str:
        return LINE_TERMINATOR.join(self.lines)

    def to_bytes(self) -> bytes:
        """The exact bytes to place in the QR code."""
        return self.text.encode(self.character_set.codec)

    def slot(self, slot: Slot) -> str:
        """Content of one slot; trailing slots dropped from the payload are ''."""
        if slot < len(self.lines):
            return self.lines[slot]
        return ""

    def to_record(self) -> PaymentRecord:
        """Recover the (normalized) payment data held by this payload."""
        amount = self.slot(Slot.AMOUNT)
        return PaymentRecord(
            beneficiary_name=self.slot(Slot.NAME),
            iban=self.slot(Slot.IBAN),
            bic=self.slot(Slot.BIC) or None,
            amount=amount[len(CURRENCY):] or None,
            purpose_code=self.slot(Slot.PURPOSE) or None,
            remittance_reference=self.slot(Slot.REFERENCE) or None,
            remittance_text=self.slot(Slot.TEXT) or None,
            information=self.slot(Slot.INFORMATION) or None,
        )

    def __str__(self) -> str:
        return self.text

    def __bytes__(self) -> bytes:
        return self.to_bytes()


def _resolve_version(version, has_bic: bool) -> Version:
    if version is None:
        return Version.V1 if has_bic else Version.V2
    if not isinstance(version, Version):
        try:
            version = Version(f"{int(version):03d}")
        except (TypeError, ValueError):
            raise InvalidVersion(version) from None
    if version is Version.V1 and not has_bic:
        raise IncompatibleVersionForMissingBic(version.value)
    return version


def _trim_trailing(lines: list[str]) -> list[str]:
    """Drop empty optional slots at the end; the IBAN slot always stays."""
    end = len(lines)
    while end > Slot.IBAN + 1 and not lines[end - 1]:
        end -= 1
    return lines[:end]


def build_payload(record: PaymentRecord, version=None, character_set=AUTO) -> CanonicalPayload:
    """Validate a PaymentRecord and assemble its EPC payload.

    Fields are checked in slot order (version, character set, BIC, name,
    IBAN, amount, purpose, remittance, information) and the first failure is
    raised, so the same record always reports the same error.

    Args:
        record: The payment data.
        version: ``None`` picks 001 when a BIC is given and 002 otherwise.
            Accepts a Version or 1/2.
        character_set: ``"auto"`` or a fixed CharacterSet (or its code 1-8).

    Returns:
        The CanonicalPayload.

    Raises:
        EpcError: The first validation failure.
    """
    has_bic = not validators.is_blank(record.bic)
    resolved_version = _resolve_version(version, has_bic)
    fixed_charset = resolve_policy(character_set)

    bic = validators.validate_bic(record.bic)
    name = validators.validate_name(record.beneficiary_name, fixed_charset)
    iban = validators.validate_iban(record.iban)
    amount = validators.validate_amount(record.amount)
    purpose = validators.validate_purpose_code(record.purpose_code)
    reference, text = validators.validate_remittance(
        record.remittance_reference, record.remittance_text, fixed_charset
    )
    information = validators.validate_information(record.information, fixed_charset)

    lines = [
        SERVICE_TAG,
        resolved_version.value,
        "",  # character set, decided once the content is known
        IDENTIFICATION,
        bic or "",
        name,
        iban,
        validators.format_amount(amount),
        purpose or "",
        reference or "",
        text or "",
        information or "",
    ]
    lines = _trim_trailing(lines)

    # The code is a single digit either way, so the placeholder keeps sizes exact
    lines[Slot.CHARACTER_SET] = "0"
    chosen = select_character_set(LINE_TERMINATOR.join(lines), character_set)
    lines[Slot.CHARACTER_SET] = str(chosen.value)

    payload = CanonicalPayload(tuple(lines), chosen, resolved_version)
    size = len(payload.to_bytes())
    if size > MAX_PAYLOAD_BYTES:
        raise PayloadTooLarge(size, MAX_PAYLOAD_BYTES)
    return payload


def parse_payload(data: bytes | str) -> CanonicalPayload:
    """Split an EPC payload back into its slots.

    Bytes are decoded with the character set declared in line 3. Only the
    header is checked here; run ``build_payload(result.to_record())`` to
    validate the fields themselves.
    """
    if isinstance(data, bytes):
        header = data.split(b"\n", 3)
        if len(header) < 3:
            raise InvalidPayload("missing header lines")
        charset = _parse_charset(header[2].strip().decode("ascii", errors="replace"))
        try:
            text = data.decode(charset.codec)
        except UnicodeDecodeError:
            raise InvalidPayload(f"content is not valid {charset.codec}") from None
    else:
        text = data

    lines = text.replace("\r\n", "\n").split("\n")
    while len(lines) > Slot.IBAN + 1 and not lines[-1]:
        lines.pop()

    if len(lines) > SLOT_COUNT:
        raise InvalidPayload(f"{len(lines)} lines, at most {SLOT_COUNT} allowed")
    if len(lines) <= Slot.IBAN:
        raise InvalidPayload("missing beneficiary name or IBAN")
    if lines[Slot.SERVICE_TAG] != SERVICE_TAG:
        raise InvalidPayload(f"service tag must be {SERVICE_TAG!r}")
    try:
        version = Version(lines[Slot.VERSION])
    except ValueError:
        raise InvalidPayload(f"unknown version {lines[Slot.VERSION]!r}") from None
    charset = _parse_charset(lines[Slot.CHARACTER_SET])
    if lines[Slot.IDENTIFICATION] != IDENTIFICATION:
        raise InvalidPayload(f"identification must be {IDENTIFICATION!r}")

    amount = lines[Slot.AMOUNT] if len(lines) > Slot.AMOUNT else ""
    if amount and not amount.startswith(CURRENCY):
        raise InvalidPayload(f"amount must start with {CURRENCY!r}")

    return CanonicalPayload(tuple(lines), charset, version)


def _parse_charset(code: str) -> CharacterSet:
    try:
        return CharacterSet(int(code))
    except ValueError:
        raise InvalidPayload(f"unknown character set {code!r}") from None
