"""Render EPC payloads as QR codes."""

import io

import qrcode
import segno
from PIL import Image
from qrcode.util import MODE_8BIT_BYTE, QRData

from epc_qr_generator.payload import CanonicalPayload


# EPC069-12 asks for level M; the others are available for experiments
DEFAULT_ERROR_CORRECTION = "M"

ERROR_CORRECTION_LEVELS = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}


def _error_correction(level: str) -> int:
    try:
        return ERROR_CORRECTION_LEVELS[level.upper()]
    except KeyError:
        raise ValueError(
            f"Unknown error correction level '{level}'. "
            f"Choose from: {', '.join(ERROR_CORRECTION_LEVELS)}"
        ) from None


def make_qr(
    payload: CanonicalPayload,
    error_correction: str = DEFAULT_ERROR_CORRECTION,
    box_size: int = 10,
    border: int = 4,
) -> qrcode.QRCode:
    """Build the QR symbol for a payload.

    The payload bytes go in as a single 8-bit byte segment so the encoding
    declared in line 3 is exactly what the scanner receives.

    Raises:
        ValueError: For an unknown error correction level.
        qrcode.exceptions.DataOverflowError: If the payload does not fit.
    """
    qr = qrcode.QRCode(
        error_correction=_error_correction(error_correction),
        box_size=box_size,
        border=border,
    )
    qr.add_data(QRData(payload.to_bytes(), mode=MODE_8BIT_BYTE))
    qr.make(fit=True)
    return qr


def generate_qr_code(
    payload: CanonicalPayload,
    error_correction: str = DEFAULT_ERROR_CORRECTION,
    box_size: int = 10,
    border: int = 4,
) -> Image.Image:
    """Generate a black-on-white greyscale QR code image for a payload.

    Args:
        payload: The built EPC payload.
        error_correction: One of L, M, Q, H. Default M as the standard requires.
        box_size: Pixels per module.
        border: Quiet zone width in modules (the QR spec minimum is 4).

    Returns:
        PIL Image in mode "L".
    """
    qr = make_qr(payload, error_correction, box_size, border)
    qr_image = qr.make_image(fill_color="black", back_color="white")
    return qr_image.convert("L")


def qr_matrix(
    payload: CanonicalPayload,
    error_correction: str = DEFAULT_ERROR_CORRECTION,
    border: int = 0,
) -> list[list[bool]]:
    """Return the module matrix (True = dark) for custom rendering."""
    qr = make_qr(payload, error_correction, box_size=1, border=border)
    return qr.get_matrix()


def render_svg(
    payload: CanonicalPayload,
    error_correction: str = DEFAULT_ERROR_CORRECTION,
    scale: int = 10,
    border: int = 4,
) -> bytes:
    """Render the payload as a standalone SVG document using segno."""
    _error_correction(error_correction)

    qr = segno.make(
        payload.to_bytes(),
        error=error_correction.upper(),
        mode="byte",
        micro=False,
        boost_error=False,
    )
    buffer = io.BytesIO()
    qr.save(buffer, kind="svg", scale=scale, border=border, xmldecl=False)
    return buffer.getvalue()
