#!/usr/bin/env python3
"""Extract a JSON template from a PDF, or generate a PDF from a template + data."""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv("backend/.env")
sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), "backend"))

from pdf_templates.core.config import settings
from pdf_templates.services.document_engine import DocumentLoadError
from pdf_templates.services.pdf_template import (
    PdfToTemplateOptions,
    TemplateToPdfOptions,
    pdf_to_template,
    template_summary,
    template_to_pdf,
)
from pdf_templates.services.template_validator import TemplateValidationError

logging.basicConfig(level=settings.LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")


async def run_extract(args) -> None:
    pdf_path = Path(args.pdf)
    template = await pdf_to_template(
        pdf_path.read_bytes(),
        PdfToTemplateOptions(name=args.name, description=args.description),
        text_source=args.text_source,
    )

    output_path = Path(args.output) if args.output else pdf_path.with_suffix(".template.json")
    output_path.write_text(template.to_json(), encoding="utf-8")

    summary = template_summary(template)
    print(f"Template: {output_path}")
    print(f"  pages: {summary['pages']}  elements: {summary['elements']}")
    for name, pages in summary["fields"].items():
        print(f"  {{{{{name}}}}} → pages {pages}")


async def run_generate(args) -> None:
    template_path = Path(args.template)
    template = json.loads(template_path.read_text(encoding="utf-8"))
    data = json.loads(Path(args.data).read_text(encoding="utf-8")) if args.data else {}

    pdf_bytes = await template_to_pdf(
        template,
        data,
        TemplateToPdfOptions(missing_field_behavior=args.missing_field_behavior),
    )

    output_path = Path(args.output) if args.output else template_path.with_suffix(".pdf")
    output_path.write_bytes(pdf_bytes)
    print(f"Output saved: {output_path} ({len(pdf_bytes) / 1024:.1f} KB)")


def main():
    parser = argparse.ArgumentParser(
        description="PDF ↔ JSON template codec with {{placeholder}} fields",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python run_template.py extract invoice.pdf --name Invoice
    python run_template.py generate invoice.template.json -d data.json -o out.pdf
        """,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    extract = sub.add_parser("extract", help="Derive a template from a PDF")
    extract.add_argument("pdf", help="Path to the source PDF")
    extract.add_argument("-o", "--output", help="Template JSON path")
    extract.add_argument("--name", help="Template name")
    extract.add_argument("--description", help="Template description")
    extract.add_argument(
        "--text-source",
        choices=["proportional", "native"],
        help=f"Per-page text strategy (default: {settings.TEMPLATE_TEXT_SOURCE})",
    )

    generate = sub.add_parser("generate", help="Render a PDF from a template")
    generate.add_argument("template", help="Path to the template JSON")
    generate.add_argument("-d", "--data", help="JSON file with placeholder values")
    generate.add_argument("-o", "--output", help="Output PDF path")
    generate.add_argument(
        "--missing-field-behavior",
        choices=["leave_placeholder", "use_default", "empty_string"],
        help="Policy for placeholders without data",
    )

    args = parser.parse_args()

    try:
        if args.command == "extract":
            asyncio.run(run_extract(args))
        else:
            asyncio.run(run_generate(args))
    except FileNotFoundError as e:
        print(f"✗ Error: {e}", file=sys.stderr)
        sys.exit(1)
    except DocumentLoadError as e:
        print(f"✗ {e}", file=sys.stderr)
        sys.exit(1)
    except TemplateValidationError as e:
        print(f"✗ Template structurally invalid ({e.rule}): {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
