from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from .common import load_config
from .export import to_clipboard_text, write_google_csv
from .logging_utils import configure_logging
from .models import Contact
from .normalization import CaseStyle, PhoneFormat, normalize_contacts
from .quality import quality_report
from .readers import (
    IngestionError,
    MissingFileError,
    ReaderLimits,
    load_contacts,
    parse_pasted_text,
)

# use module logger instead of configuring logging at import time
logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_NAME = "contatos-normalizados.csv"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Map, normalize and export contact lists (CSV, Excel or pasted text)."
    )
    parser.add_argument("inputs", nargs="*", help="CSV/XLSX/XLS files to import.")
    parser.add_argument("--paste-file", type=str, default=None, help="Pasted name/phone list.")
    parser.add_argument("--config", type=str, default=None, help="Path to YAML config.")
    parser.add_argument("--out", type=str, default=None, help="Google Contacts CSV output path.")
    parser.add_argument("--out-dir", type=str, default=None)
    parser.add_argument("--clipboard-out", type=str, default=None)
    parser.add_argument("--report-out", type=str, default=None)
    parser.add_argument(
        "--phone-format",
        type=str,
        default=None,
        choices=[member.value for member in PhoneFormat],
    )
    parser.add_argument(
        "--case", type=str, default=None, choices=[member.value for member in CaseStyle]
    )
    for flag, help_text in (
        ("remove-accents", "Strip diacritics before casing."),
        ("combine-names", "Fill the display name from the name parts."),
        ("prefer-primary-phone", "Fill the display phone from the first phone."),
        ("include-all-phones", "Export phones 2-4."),
        ("include-emails", "Export e-mail columns."),
        ("include-address", "Export address columns."),
        ("include-organization", "Export organization columns."),
    ):
        parser.add_argument(
            f"--{flag}",
            dest=flag.replace("-", "_"),
            action=argparse.BooleanOptionalAction,
            default=None,
            help=help_text,
        )
    parser.add_argument("--max-rows", type=int, default=None)
    parser.add_argument("--max-file-size-mb", type=float, default=None)
    parser.add_argument("--log-level", type=str, default=None, help="Override logging level")
    return parser


def _collect_contacts(
    inputs: Sequence[str], paste_file: Optional[str], limits: ReaderLimits
) -> List[Contact]:
    contacts: List[Contact] = []
    for path in inputs:
        contacts.extend(load_contacts(path, limits))
    if paste_file:
        if not Path(paste_file).is_file():
            raise MissingFileError(f"File not found: {paste_file}")
        with open(paste_file, "r", encoding="utf-8-sig") as handle:
            contacts.extend(parse_pasted_text(handle.read(), limits))
    return contacts


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.inputs and not args.paste_file:
        parser.error("provide at least one input file or --paste-file")

    config = load_config(args)
    configure_logging(config, level_override=args.log_level)
    rules = config.rules()

    try:
        contacts = _collect_contacts(args.inputs, args.paste_file, config.limits())
    except IngestionError as exc:
        logger.error("%s", exc)
        return 2
    if not contacts:
        logger.warning("No contacts found in the given inputs")
        return 1

    normalized = normalize_contacts(contacts, rules)

    out_path = Path(args.out) if args.out else config.outputs.dir / DEFAULT_OUTPUT_NAME
    write_google_csv(out_path, normalized, rules)

    if args.clipboard_out:
        Path(args.clipboard_out).write_text(to_clipboard_text(normalized), encoding="utf-8")
        logger.info("Saved: %s", args.clipboard_out)
    if args.report_out:
        report = quality_report(contacts, normalized, rules)
        report.to_csv(args.report_out, index=False, encoding="utf-8")
        logger.info("Saved: %s", args.report_out)

    logger.info("%d contact(s) normalized", len(normalized))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
