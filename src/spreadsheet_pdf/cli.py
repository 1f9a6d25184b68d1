"""Command line entry point: convert a workbook on disk or run the API server."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from spreadsheet_pdf.config import settings
from spreadsheet_pdf.services.converter import WorkbookConverter
from spreadsheet_pdf.utils.exceptions import ConverterError
from spreadsheet_pdf.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spreadsheet-pdf", description="Convert .xlsx workbooks into PDF"
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Logging level (default: %(default)s)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    convert = subparsers.add_parser("convert", help="Convert one workbook to PDF")
    convert.add_argument("input", type=Path, help="Input .xlsx file")
    convert.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output path (default: input name with .xlsx swapped for .pdf)",
    )

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=settings.server_host, help="Bind host")
    serve.add_argument(
        "--port", type=int, default=settings.server_port, help="Bind port"
    )
    return parser


def run_convert(input_path: Path, output_path: Path | None) -> int:
    converter = WorkbookConverter(settings.layout_options())
    try:
        target = converter.convert_path(input_path, output_path)
    except ConverterError as e:
        logger.error("Conversion failed", error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return 1
    print(target)
    return 0


def run_serve(host: str, port: int) -> int:
    import uvicorn

    uvicorn.run("spreadsheet_pdf.api:app", host=host, port=port)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level)

    if args.command == "convert":
        return run_convert(args.input, args.output)
    return run_serve(args.host, args.port)


if __name__ == "__main__":
    raise SystemExit(main())
