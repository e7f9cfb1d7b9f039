"""EPC QR Code Generator: SEPA credit transfer payloads (EPC069-12 / Girocode)."""

from decimal import Decimal

__version__ = "0.1.0"

# Shared constants
MAX_PAYLOAD_BYTES = 331  # Binary capacity of QR version 13 at error correction level M
LINE_TERMINATOR = "\n"
SERVICE_TAG = "BCD"
IDENTIFICATION = "SCT"  # SEPA Credit Transfer
CURRENCY = "EUR"
MIN_AMOUNT = Decimal("0.01")
MAX_AMOUNT = Decimal("999999999.99")
