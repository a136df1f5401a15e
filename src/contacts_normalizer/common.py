from __future__ import annotations

from typing import Any

from .config_loader import AppConfig, load_app_config
from .export import to_clipboard_text, to_google_csv, write_google_csv
from .mapping import coerce_cell, is_valid, map_row, map_rows
from .models import CANONICAL_FIELDS, Contact
from .normalization import (
    CaseStyle,
    NormalizationRules,
    PhoneFormat,
    format_name,
    format_phone,
    normalize_contact,
    normalize_contacts,
)
from .readers import IngestionError, ReaderLimits, load_contacts, parse_pasted_text, read_rows
from .schema import EXPORT_HEADERS, GOOGLE_CONTACTS_HEADERS

__all__ = [
    "AppConfig",
    "CANONICAL_FIELDS",
    "CaseStyle",
    "Contact",
    "EXPORT_HEADERS",
    "GOOGLE_CONTACTS_HEADERS",
    "IngestionError",
    "NormalizationRules",
    "PhoneFormat",
    "ReaderLimits",
    "coerce_cell",
    "ensure_contact",
    "format_name",
    "format_phone",
    "is_valid",
    "load_app_config",
    "load_config",
    "load_contacts",
    "map_row",
    "map_rows",
    "normalize_contact",
    "normalize_contacts",
    "parse_pasted_text",
    "read_rows",
    "to_clipboard_text",
    "to_google_csv",
    "write_google_csv",
]


def load_config(args: Any) -> AppConfig:
    return load_app_config(args)


def ensure_contact(obj: Any) -> Contact:
    if isinstance(obj, Contact):
        return obj
    if isinstance(obj, dict):
        return Contact.from_mapping(obj)
    raise TypeError(f"Unsupported contact payload type: {type(obj)!r}")
