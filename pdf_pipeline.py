from __future__ import annotations

import argparse
import logging
import sys
import warnings
from pathlib import Path

import pdfplumber

from pdf_context import process_page
from pdf_models import TextRun

logging.getLogger("pdfminer").setLevel(logging.ERROR)
warnings.filterwarnings("ignore", module="pdfminer")

logger = logging.getLogger(__name__)


def render_runs(runs: list[TextRun]) -> list[str]:
    """Return one text line per run, in run order."""
    return [run.text for run in runs]


def merge_pdf(
    pdf_path: str | Path,
    pages: list[int] | None = None,
    use_rulings: bool = True,
) -> dict[int, list[TextRun]]:
    """Merge the chars of each page of *pdf_path* into text runs.

    *pages* holds 1-based page numbers; None means every page.
    """
    path = Path(pdf_path)
    if not path.exists():
        raise FileNotFoundError(f"file not found: {path}")

    wanted = set(pages) if pages else None
    result: dict[int, list[TextRun]] = {}
    with pdfplumber.open(path) as pdf:
        for page in pdf.pages:
            if wanted is not None and page.page_number not in wanted:
                continue
            result[page.page_number] = process_page(page, use_rulings=use_rulings)
            logger.info("page %d: %d runs", page.page_number, len(result[page.page_number]))
    return result


def _print_page(page_number: int, runs: list[TextRun], verbose: bool) -> None:
    print("=" * 64)
    print(f"PAGE {page_number}")
    print("=" * 64)
    for run in runs:
        if verbose:
            print(f"  [{run.left:8.2f} {run.top:8.2f} {run.right:8.2f} {run.bottom:8.2f}]  {run.text!r}")
        else:
            print(f"  {run.text}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Merge the positioned characters of a PDF into words and line fragments.",
    )
    parser.add_argument("pdf", help="Path to the PDF file")
    parser.add_argument(
        "-p", "--page",
        type=int, action="append", dest="pages", metavar="N",
        help="Only process page N (1-based, repeatable)",
    )
    parser.add_argument(
        "--no-rulings",
        action="store_true",
        help="Ignore vertical rulings when merging",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show run bounding boxes and debug logging",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        merged = merge_pdf(args.pdf, pages=args.pages, use_rulings=not args.no_rulings)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not merged:
        print("No pages processed.")
        return 0

    for page_number, runs in merged.items():
        _print_page(page_number, runs, args.verbose)
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
