"""Character sets declared in line 3 of an EPC payload."""

from enum import IntEnum

from epc_qr_generator import MAX_PAYLOAD_BYTES


AUTO = "auto"


class CharacterSet(IntEnum):
    """The eight character-set codes defined by EPC069-12."""

    UTF_8 = 1
    ISO_8859_1 = 2
    ISO_8859_2 = 3
    ISO_8859_4 = 4
    ISO_8859_5 = 5
    ISO_8859_7 = 6
    ISO_8859_10 = 7
    ISO_8859_15 = 8

    @property
    def codec(self) -> str:
        return _CODECS[self]

    @property
    def is_single_byte(self) -> bool:
        return self is not CharacterSet.UTF_8

    def can_encode(self, text: str) -> bool:
        try:
            text.encode(self.codec)
        except UnicodeEncodeError:
            return False
        return True


_CODECS = {
    CharacterSet.UTF_8: "utf-8",
    CharacterSet.ISO_8859_1: "iso8859-1",
    CharacterSet.ISO_8859_2: "iso8859-2",
    CharacterSet.ISO_8859_4: "iso8859-4",
    CharacterSet.ISO_8859_5: "iso8859-5",
    CharacterSet.ISO_8859_7: "iso8859-7",
    CharacterSet.ISO_8859_10: "iso8859-10",
    CharacterSet.ISO_8859_15: "iso8859-15",
}

SINGLE_BYTE_SETS = tuple(cs for cs in CharacterSet if cs.is_single_byte)


def _printable_repertoire() -> frozenset[str]:
    """Collect every printable character any single-byte EPC set can carry."""
    byte_values = bytes(list(range(0x20, 0x7F)) + list(range(0xA0, 0x100)))
    chars: set[str] = set()
    for charset in SINGLE_BYTE_SETS:
        # Undefined positions (e.g. a few slots in ISO 8859-7) decode to U+FFFD
        chars.update(byte_values.decode(charset.codec, errors="replace"))
    chars.discard("\ufffd")
    return frozenset(chars)


PERMITTED_CHARACTERS = _printable_repertoire()


def is_permitted(char: str, character_set: CharacterSet | None = None) -> bool:
    """Whether ``char`` may appear in a payload declared as ``character_set``.

    With no character set (automatic selection) any character from the
    EPC repertoire is allowed.
    """
    if char not in PERMITTED_CHARACTERS:
        return False
    return character_set is None or character_set.can_encode(char)


def resolve_policy(policy) -> CharacterSet | None:
    """Turn a policy value into a fixed CharacterSet, or None for automatic.

    Accepts ``"auto"``, a CharacterSet, or its integer code (also as a string).
    """
    if policy is None or policy == AUTO:
        return None
    if isinstance(policy, CharacterSet):
        return policy
    try:
        return CharacterSet(int(policy))
    except (TypeError, ValueError):
        raise ValueError(
            f"Unknown character set {policy!r}. "
            f"Choose '{AUTO}' or a code from 1 to {len(CharacterSet)}."
        ) from None


def select_character_set(text: str, policy=AUTO) -> CharacterSet:
    """Pick the character set to declare for a payload.

    A fixed policy is returned unchanged. Under the automatic policy UTF-8 is
    preferred since every banking app supports it; a single-byte set is only
    chosen when the UTF-8 encoding would exceed the payload limit and the
    single-byte one fits everything.
    """
    fixed = resolve_policy(policy)
    if fixed is not None:
        return fixed

    if text.isascii() or len(text.encode("utf-8")) <= MAX_PAYLOAD_BYTES:
        return CharacterSet.UTF_8

    for charset in SINGLE_BYTE_SETS:
        if charset.can_encode(text):
            return charset
    return CharacterSet.UTF_8
