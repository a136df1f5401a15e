from __future__ import annotations

import csv
import logging
import re
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Sequence, Set, Union

import pandas as pd

from .models import Contact
from .normalization import NormalizationRules
from .schema import EXPORT_HEADERS, GOOGLE_CONTACTS_HEADERS

logger = logging.getLogger(__name__)

UTF8_BOM = "\ufeff"
CLIPBOARD_HEADERS = ("Name", "Phone", "Email", "Company")
_CLIPBOARD_BREAKS_RE = re.compile(r"[\t\r\n]+")

EXTRA_PHONE_FIELDS: FrozenSet[str] = frozenset(
    f"phone{index}_{part}" for index in (2, 3, 4) for part in ("label", "value")
)
EMAIL_FIELDS: FrozenSet[str] = frozenset(
    f"email{index}_{part}" for index in (1, 2) for part in ("label", "value")
)
ADDRESS_FIELDS: FrozenSet[str] = frozenset(
    field_name
    for field_name in GOOGLE_CONTACTS_HEADERS.values()
    if field_name.startswith("address1_")
)
ORGANIZATION_FIELDS: FrozenSet[str] = frozenset(
    ("organization_name", "organization_title", "organization_department")
)


def excluded_fields(rules: Optional[NormalizationRules]) -> FrozenSet[str]:
    """Canonical fields the include toggles of ``rules`` leave out of an export."""
    if rules is None:
        return frozenset()
    excluded: Set[str] = set()
    if not rules.include_all_phones:
        excluded |= EXTRA_PHONE_FIELDS
    if not rules.include_emails:
        excluded |= EMAIL_FIELDS
    if not rules.include_address:
        excluded |= ADDRESS_FIELDS
    if not rules.include_organization:
        excluded |= ORGANIZATION_FIELDS
    return frozenset(excluded)


def _export_row(contact: Contact, excluded: FrozenSet[str]) -> Dict[str, str]:
    return {
        header: "" if field_name in excluded else getattr(contact, field_name)
        for header, field_name in GOOGLE_CONTACTS_HEADERS.items()
    }


def contacts_to_frame(
    contacts: Sequence[Contact], rules: Optional[NormalizationRules] = None
) -> pd.DataFrame:
    excluded = excluded_fields(rules)
    rows = [_export_row(contact, excluded) for contact in contacts]
    return pd.DataFrame(rows, columns=EXPORT_HEADERS, dtype=str)


def to_google_csv(
    contacts: Sequence[Contact], rules: Optional[NormalizationRules] = None
) -> str:
    """Google Contacts CSV text: BOM, header line, every cell quoted."""
    frame = contacts_to_frame(contacts, rules)
    body = frame.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
    return UTF8_BOM + body


def write_google_csv(
    path: Union[str, Path],
    contacts: Sequence[Contact],
    rules: Optional[NormalizationRules] = None,
) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as handle:
        handle.write(to_google_csv(contacts, rules))
    logger.info("Saved %d contact(s): %s", len(contacts), path)
    return path


def _clipboard_cell(value: str) -> str:
    return _CLIPBOARD_BREAKS_RE.sub(" ", value or "").strip()


def to_clipboard_text(contacts: Sequence[Contact]) -> str:
    lines: List[str] = ["\t".join(CLIPBOARD_HEADERS)]
    for contact in contacts:
        cells = (
            contact.name or contact.full_name(),
            contact.phone or contact.primary_phone(),
            contact.email1_value,
            contact.organization_name,
        )
        lines.append("\t".join(_clipboard_cell(cell) for cell in cells))
    return "\n".join(lines)
