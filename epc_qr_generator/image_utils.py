"""Image encoding, saving and verification for EPC QR codes."""

import base64
import io
import os
from enum import Enum

from PIL import Image

from epc_qr_generator.payload import CanonicalPayload, PaymentRecord
from epc_qr_generator.qr_generator import (
    DEFAULT_ERROR_CORRECTION,
    generate_qr_code,
    render_svg,
)


class ImageFormat(Enum):
    """Output formats for a rendered QR code."""

    PNG = "png"
    JPEG = "jpeg"
    QOI = "qoi"
    SVG = "svg"

    @property
    def extension(self) -> str:
        return "jpg" if self is ImageFormat.JPEG else self.value


class VerifyResult(Enum):
    """Result of QR scannability verification."""
    SCANNABLE = "scannable"
    NOT_SCANNABLE = "not_scannable"
    SKIPPED = "skipped"  # pyzbar not installed, or a vector format


_EXTENSIONS = {
    ".png": ImageFormat.PNG,
    ".jpg": ImageFormat.JPEG,
    ".jpeg": ImageFormat.JPEG,
    ".qoi": ImageFormat.QOI,
    ".svg": ImageFormat.SVG,
}

# Pillow save() format names and the modes those encoders accept
_PIL_FORMATS = {
    ImageFormat.PNG: ("PNG", "L"),
    ImageFormat.JPEG: ("JPEG", "L"),
    ImageFormat.QOI: ("QOI", "RGB"),
}


def guess_format(path: str) -> ImageFormat:
    """Pick the image format from a file extension (PNG when there is none).

    Raises:
        ValueError: If the extension is not a supported image format.
    """
    ext = os.path.splitext(path)[1].lower()
    if not ext:
        return ImageFormat.PNG
    try:
        return _EXTENSIONS[ext]
    except KeyError:
        raise ValueError(
            f"Unsupported image extension '{ext}'. "
            f"Choose from: {', '.join(sorted(_EXTENSIONS))}"
        ) from None


def encode_image(
    payload: CanonicalPayload,
    image_format: ImageFormat = ImageFormat.PNG,
    error_correction: str = DEFAULT_ERROR_CORRECTION,
    box_size: int = 10,
    border: int = 4,
) -> bytes:
    """Render a payload and serialize it in the requested format."""
    if image_format is ImageFormat.SVG:
        return render_svg(payload, error_correction, scale=box_size, border=border)

    pil_format, mode = _PIL_FORMATS[image_format]
    img = generate_qr_code(payload, error_correction, box_size, border)
    buffer = io.BytesIO()
    img.convert(mode).save(buffer, pil_format)
    return buffer.getvalue()


def encode_base64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def render_base64(
    payload: CanonicalPayload,
    image_format: ImageFormat = ImageFormat.PNG,
    **render_options,
) -> str:
    """Render a payload and return the image as base64 text (e.g. for data URIs)."""
    return encode_base64(encode_image(payload, image_format, **render_options))


def save_image(
    payload: CanonicalPayload,
    output_path: str,
    image_format: ImageFormat | None = None,
    **render_options,
) -> str:
    """Render a payload and write it to ``output_path``.

    Args:
        payload: The built EPC payload.
        output_path: Destination file; parent directories are created.
        image_format: Explicit format, or None to guess from the extension.
        **render_options: Passed to encode_image (error_correction, box_size, border).

    Returns:
        The output path where the image was saved.
    """
    if image_format is None:
        image_format = guess_format(output_path)

    data = encode_image(payload, image_format, **render_options)
    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    with open(output_path, "wb") as f:
        f.write(data)
    return output_path


def default_output_name(
    record: PaymentRecord,
    image_format: ImageFormat = ImageFormat.PNG,
) -> str:
    """File name built from BIC, IBAN and remittance, e.g. ``epc-DE02...-qr-code.png``."""
    parts = ["epc"]
    if record.bic:
        parts.append(record.bic)
    parts.append(record.iban.replace(" ", ""))
    remittance = record.remittance_reference or record.remittance_text
    if remittance:
        parts.append(remittance)
    parts.append("qr-code")

    name = "-".join(parts) + "." + image_format.extension
    for char in ("/", "\\", " "):
        name = name.replace(char, "_")
    return name


def verify_qr_scannable(
    image_path: str, expected: bytes
) -> tuple[VerifyResult, bytes | None]:
    """Decode the QR code in a written image and compare it to the payload.

    Uses pyzbar if available, otherwise returns SKIPPED.

    Args:
        image_path: Path to the image to verify.
        expected: The payload bytes the code should contain.

    Returns:
        Tuple of (VerifyResult, decoded_data: bytes | None).
    """
    if image_path.lower().endswith(".svg"):
        return VerifyResult.SKIPPED, None

    try:
        from pyzbar.pyzbar import decode as pyzbar_decode
    except ImportError:
        return VerifyResult.SKIPPED, None

    with Image.open(image_path) as img:
        results = pyzbar_decode(img.convert("L"))
    for result in results:
        if result.data == expected:
            return VerifyResult.SCANNABLE, result.data
    decoded = results[0].data if results else None
    return VerifyResult.NOT_SCANNABLE, decoded
