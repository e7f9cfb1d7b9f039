"""Tests for QR rendering, image encoding and output helpers."""

import base64

import pytest
from PIL import Image

from epc_qr_generator.image_utils import (
    ImageFormat,
    VerifyResult,
    default_output_name,
    encode_image,
    guess_format,
    render_base64,
    save_image,
    verify_qr_scannable,
)
from epc_qr_generator.payload import PaymentRecord, build_payload
from epc_qr_generator.qr_generator import generate_qr_code, make_qr, qr_matrix, render_svg

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


@pytest.fixture
def payload():
    return build_payload(PaymentRecord(
        beneficiary_name="Max Mustermann",
        iban="DE02120300000000202051",
        amount="12.50",
        remittance_text="Invoice 123",
    ))


# ---------------------------------------------------------------------------
# QR generation
# ---------------------------------------------------------------------------

def test_qr_uses_level_m_by_default(payload):
    import qrcode

    qr = make_qr(payload)
    assert qr.error_correction == qrcode.constants.ERROR_CORRECT_M


def test_generate_qr_code_size(payload):
    qr = make_qr(payload)
    img = generate_qr_code(payload, box_size=4, border=4)
    side = (qr.modules_count + 8) * 4
    assert img.mode == "L"
    assert img.size == (side, side)
    assert img.getpixel((0, 0)) == 255  # quiet zone
    assert img.getpixel((16, 16)) == 0  # finder pattern corner


def test_matrix_matches_symbol(payload):
    matrix = qr_matrix(payload)
    assert len(matrix) == 17 + 4 * make_qr(payload).version
    assert all(len(row) == len(matrix) for row in matrix)
    assert matrix[0][:7] == [True] * 7


def test_matrix_with_border(payload):
    assert len(qr_matrix(payload, border=2)) == len(qr_matrix(payload)) + 4


def test_unknown_error_correction(payload):
    with pytest.raises(ValueError):
        make_qr(payload, error_correction="X")
    with pytest.raises(ValueError):
        render_svg(payload, error_correction="X")


def test_render_svg(payload):
    svg = render_svg(payload)
    assert svg.lstrip().startswith(b"<svg")
    assert svg.rstrip().endswith(b"</svg>")


# ---------------------------------------------------------------------------
# Image encoding
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("image_format, magic", [
    (ImageFormat.PNG, PNG_SIGNATURE),
    (ImageFormat.JPEG, b"\xff\xd8\xff"),
    (ImageFormat.QOI, b"qoif"),
])
def test_encode_raster_formats(payload, image_format, magic):
    assert encode_image(payload, image_format).startswith(magic)


def test_render_base64(payload):
    data = base64.b64decode(render_base64(payload, ImageFormat.PNG, box_size=2))
    assert data.startswith(PNG_SIGNATURE)


def test_render_base64_svg(payload):
    svg = base64.b64decode(render_base64(payload, ImageFormat.SVG))
    assert svg == render_svg(payload)
    assert b"<svg" in svg


@pytest.mark.parametrize("path, expected", [
    ("code.png", ImageFormat.PNG),
    ("code.JPG", ImageFormat.JPEG),
    ("code.jpeg", ImageFormat.JPEG),
    ("code.qoi", ImageFormat.QOI),
    ("code.svg", ImageFormat.SVG),
    ("code", ImageFormat.PNG),
])
def test_guess_format(path, expected):
    assert guess_format(path) is expected


def test_guess_format_rejects_unknown_extension():
    with pytest.raises(ValueError):
        guess_format("code.gif")


def test_save_image_creates_directories(payload, tmp_path):
    target = tmp_path / "out" / "code.png"
    assert save_image(payload, str(target)) == str(target)
    with Image.open(target) as img:
        assert img.format == "PNG"


def test_save_image_explicit_format(payload, tmp_path):
    target = tmp_path / "code.bin"
    save_image(payload, str(target), ImageFormat.SVG)
    assert b"<svg" in target.read_bytes()


# ---------------------------------------------------------------------------
# Output naming and verification
# ---------------------------------------------------------------------------

def test_default_output_name_plain():
    record = PaymentRecord("Max", "DE02120300000000202051")
    assert default_output_name(record) == "epc-DE02120300000000202051-qr-code.png"


def test_default_output_name_with_bic_and_remittance():
    record = PaymentRecord(
        "Max", "DE02 1203 0000 0000 2020 51",
        bic="BYLADEM1001", remittance_text="Invoice 123/4",
    )
    assert default_output_name(record, ImageFormat.JPEG) == (
        "epc-BYLADEM1001-DE02120300000000202051-Invoice_123_4-qr-code.jpg"
    )


def test_verify_skips_svg(payload, tmp_path):
    target = save_image(payload, str(tmp_path / "code.svg"))
    assert verify_qr_scannable(target, payload.to_bytes()) == (VerifyResult.SKIPPED, None)


def test_verify_decodes_png(payload, tmp_path):
    pytest.importorskip("pyzbar.pyzbar")
    target = save_image(payload, str(tmp_path / "code.png"))
    result, decoded = verify_qr_scannable(target, payload.to_bytes())
    assert result == VerifyResult.SCANNABLE
    assert decoded == payload.to_bytes()


def test_verify_reports_unreadable_image(payload, tmp_path):
    pytest.importorskip("pyzbar.pyzbar")
    target = tmp_path / "blank.png"
    Image.new("L", (200, 200), color=255).save(target)
    assert verify_qr_scannable(str(target), payload.to_bytes()) == (VerifyResult.NOT_SCANNABLE, None)
