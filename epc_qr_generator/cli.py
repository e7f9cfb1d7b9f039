"""CLI entry point for EPC QR Code Generator."""

import argparse
import sys

from epc_qr_generator import __version__


# Sentinel to detect if user explicitly set --output
_OUTPUT_DEFAULT = object()

CHARSET_CHOICES = ["auto", "1", "2", "3", "4", "5", "6", "7", "8"]


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="epc-qr-code-generator",
        description="Generate EPC QR codes (Girocode) for SEPA credit transfers.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Minimal code: beneficiary and IBAN, the payer fills in the rest
  python -m epc_qr_generator "Max Mustermann" DE02120300000000202051

  # Amount and remittance text, written to a custom file
  python -m epc_qr_generator "Max Mustermann" "DE02 1203 0000 0000 2020 51" \\
    --amount 12.50 --text "Invoice 123" -o invoice-123.png

  # Structured creditor reference with BIC (EPC version 001)
  python -m epc_qr_generator "Red Cross" BE68539007547034 --bic GKCCBEBB \\
    --reference RF18539007547034 --purpose CHAR

  # Print the payload and a base64 PNG without writing any file
  python -m epc_qr_generator "Max Mustermann" DE02120300000000202051 --base64
        """,
    )

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    # Required
    parser.add_argument(
        "beneficiary_name",
        help="Name of the beneficiary (max. 70 characters)",
    )
    parser.add_argument(
        "beneficiary_account",
        help="IBAN of the beneficiary; spaces are ignored",
    )

    # Optional: payment data
    parser.add_argument(
        "--bic", "-b",
        default=None,
        help="BIC of the beneficiary bank (8 or 11 characters)",
    )
    parser.add_argument(
        "--amount", "-a",
        default=None,
        help="Amount in euro, e.g. 12.50 (0.01-999999999.99)",
    )
    parser.add_argument(
        "--purpose", "-p",
        default=None,
        help="Four-letter purpose code, e.g. GDDS",
    )
    parser.add_argument(
        "--reference", "-r",
        dest="remittance_reference",
        default=None,
        help="Structured creditor reference (max. 35 characters)",
    )
    parser.add_argument(
        "--text", "-t",
        dest="remittance_text",
        default=None,
        help="Unstructured remittance text (max. 140 characters)",
    )
    parser.add_argument(
        "--info", "-i",
        default=None,
        help="Beneficiary to originator information (max. 70 characters)",
    )

    # Optional: payload encoding
    parser.add_argument(
        "--charset",
        default="auto",
        choices=CHARSET_CHOICES,
        help="Character set code to declare (1 = UTF-8, 2-8 = ISO 8859 variants). "
             "Default: auto",
    )
    parser.add_argument(
        "--epc-version",
        type=int,
        default=None,
        choices=[1, 2],
        help="EPC version tag. Version 1 requires --bic. "
             "Default: 1 with a BIC, 2 without",
    )

    # Optional: output
    parser.add_argument(
        "--output", "-o",
        default=_OUTPUT_DEFAULT,
        help="Output image path. Default: epc-[BIC-]IBAN[-REMITTANCE]-qr-code.<ext>",
    )
    parser.add_argument(
        "--image-format",
        default=None,
        choices=["png", "jpeg", "qoi", "svg"],
        help="Image format. Default: guessed from --output, png otherwise",
    )
    parser.add_argument(
        "--error-correction",
        default="M",
        choices=["L", "M", "Q", "H"],
        help="QR error correction level. EPC069-12 requires M. Default: M",
    )
    parser.add_argument(
        "--box-size",
        type=int,
        default=10,
        help="Pixels per QR module. Default: 10",
    )
    parser.add_argument(
        "--border",
        type=int,
        default=4,
        help="Quiet zone width in modules. Default: 4",
    )

    # Flags
    parser.add_argument(
        "--base64",
        action="store_true",
        help="Print the image as base64 instead of writing a file",
    )
    parser.add_argument(
        "--no-image",
        action="store_true",
        help="Only print the payload, do not render an image",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Decode the written image and compare it to the payload (needs pyzbar)",
    )
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Overwrite output file without prompting",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    import os
    parser = create_parser()
    args = parser.parse_args(argv)

    # Lazy imports for faster --help
    from epc_qr_generator.errors import EpcError
    from epc_qr_generator.payload import PaymentRecord, build_payload
    from epc_qr_generator.image_utils import (
        ImageFormat, VerifyResult, default_output_name, guess_format,
        render_base64, save_image, verify_qr_scannable,
    )

    record = PaymentRecord(
        beneficiary_name=args.beneficiary_name,
        iban=args.beneficiary_account,
        bic=args.bic,
        amount=args.amount,
        purpose_code=args.purpose,
        remittance_reference=args.remittance_reference,
        remittance_text=args.remittance_text,
        information=args.info,
    )

    try:
        payload = build_payload(
            record, version=args.epc_version, character_set=args.charset
        )
    except EpcError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print(payload.text)

    if args.no_image:
        return 0

    render_options = {
        "error_correction": args.error_correction,
        "box_size": args.box_size,
        "border": args.border,
    }

    try:
        # ------------------------------------------------------------------
        # Resolve output path and image format
        # ------------------------------------------------------------------
        if args.image_format:
            image_format = ImageFormat(args.image_format)
        elif args.output is not _OUTPUT_DEFAULT:
            image_format = guess_format(args.output)
        else:
            image_format = ImageFormat.PNG

        if args.base64:
            print(render_base64(payload, image_format, **render_options))
            return 0

        if args.output is _OUTPUT_DEFAULT:
            args.output = default_output_name(payload.to_record(), image_format)

        if os.path.exists(args.output) and not args.overwrite:
            response = input(f"  Output file '{args.output}' already exists. Overwrite? [y/N] ")
            if response.lower() not in ("y", "yes"):
                print("  Aborted.", file=sys.stderr)
                return 0

        output_path = save_image(payload, args.output, image_format, **render_options)
        print(f"  ✓ Saved: {output_path}", file=sys.stderr)

        if args.verify:
            result, decoded = verify_qr_scannable(output_path, payload.to_bytes())
            if result == VerifyResult.SCANNABLE:
                print(f"  ✓ QR code is SCANNABLE and matches the payload", file=sys.stderr)
            elif result == VerifyResult.SKIPPED:
                print(f"  ⊘ Verification skipped (pyzbar not installed or SVG output)", file=sys.stderr)
                print(f"    Install with: pip install pyzbar", file=sys.stderr)
            else:
                print(f"  ⚠️  WARNING: QR code could not be read back.", file=sys.stderr)
                print(f"     Decoded: {decoded!r}", file=sys.stderr)
                return 1
        return 0

    except (ValueError, OSError) as e:
        print(f"\n  ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
