"""
Field mapping from arbitrary spreadsheet rows onto the canonical contact schema.

Headers that match a Google Contacts export column exactly are copied verbatim.
Anything else goes through ``HEURISTIC_RULES``, an ordered list evaluated
top to bottom; the first rule that matches a header claims the cell and no
other rule sees it. Headers nothing matches are dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, time
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from .models import Contact
from .schema import GOOGLE_CONTACTS_HEADERS

logger = logging.getLogger(__name__)

PHONE_KEYWORDS: Tuple[str, ...] = ("phone", "telefone", "fone")
EMAIL_KEYWORDS: Tuple[str, ...] = ("email", "e-mail")
ORGANIZATION_KEYWORDS: Tuple[str, ...] = ("company", "organization", "empresa")
PLAIN_NAME_HEADERS: Tuple[str, ...] = ("name", "nome")

# (value field, label field, default label) in fill order
PHONE_SLOTS: Tuple[Tuple[str, str, str], ...] = (
    ("phone1_value", "phone1_label", "Mobile"),
    ("phone2_value", "phone2_label", "Other"),
)
EMAIL_SLOTS: Tuple[Tuple[str, str, str], ...] = (
    ("email1_value", "email1_label", "Personal"),
    ("email2_value", "email2_label", "Work"),
)

VALIDITY_FIELDS: Tuple[str, ...] = (
    "first_name",
    "last_name",
    "phone1_value",
    "phone2_value",
    "email1_value",
    "organization_name",
    "name",
)


def coerce_cell(value: Any) -> str:
    """Render a spreadsheet cell as trimmed text; missing values become ``""``."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    if isinstance(value, datetime) and value.time() == time.min:
        return value.date().isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _contains_all(header: str, *tokens: str) -> bool:
    return all(token in header for token in tokens)


def _contains_any(header: str, tokens: Iterable[str]) -> bool:
    return any(token in header for token in tokens)


def _fill_first_free_slot(
    contact: Contact, slots: Sequence[Tuple[str, str, str]], value: str, header: str
) -> None:
    for value_field, label_field, label in slots:
        if not getattr(contact, value_field):
            setattr(contact, value_field, value)
            setattr(contact, label_field, label)
            return
    logger.debug("All slots taken, dropping %r from column %r", value, header)


def _set_field(field_name: str) -> Callable[[Contact, str, str], None]:
    def apply(contact: Contact, value: str, header: str) -> None:
        setattr(contact, field_name, value)

    return apply


def _set_if_empty(field_name: str, *tokens: str) -> Callable[[str, Contact], bool]:
    def matches(header: str, contact: Contact) -> bool:
        return _contains_all(header, *tokens) and not getattr(contact, field_name)

    return matches


@dataclass(frozen=True)
class HeaderRule:
    name: str
    matches: Callable[[str, Contact], bool]
    apply: Callable[[Contact, str, str], None]


HEURISTIC_RULES: Tuple[HeaderRule, ...] = (
    HeaderRule(
        "first_name", _set_if_empty("first_name", "first", "name"), _set_field("first_name")
    ),
    HeaderRule("last_name", _set_if_empty("last_name", "last", "name"), _set_field("last_name")),
    HeaderRule(
        "middle_name", _set_if_empty("middle_name", "middle", "name"), _set_field("middle_name")
    ),
    HeaderRule(
        "plain_name",
        lambda header, contact: header in PLAIN_NAME_HEADERS and not contact.first_name,
        _set_field("first_name"),
    ),
    HeaderRule(
        "phone",
        lambda header, contact: _contains_any(header, PHONE_KEYWORDS),
        lambda contact, value, header: _fill_first_free_slot(contact, PHONE_SLOTS, value, header),
    ),
    HeaderRule(
        "email",
        lambda header, contact: _contains_any(header, EMAIL_KEYWORDS),
        lambda contact, value, header: _fill_first_free_slot(contact, EMAIL_SLOTS, value, header),
    ),
    HeaderRule(
        "organization",
        lambda header, contact: _contains_any(header, ORGANIZATION_KEYWORDS)
        and not contact.organization_name,
        _set_field("organization_name"),
    ),
)


def match_heuristic_rule(header: str, contact: Contact) -> Optional[HeaderRule]:
    lowered = header.lower()
    for rule in HEURISTIC_RULES:
        if rule.matches(lowered, contact):
            return rule
    return None


RawRow = Union[Mapping[Any, Any], Iterable[Tuple[Any, Any]]]


def _row_items(row: RawRow) -> Iterable[Tuple[Any, Any]]:
    if isinstance(row, Mapping):
        return row.items()
    return row


def map_row(row: RawRow) -> Contact:
    """
    Map one row onto a ``Contact``. Never raises.

    ``row`` is a header -> value mapping, or a sequence of (header, value)
    pairs when a sheet repeats a header.
    """
    contact = Contact()
    for raw_header, raw_value in _row_items(row):
        header = coerce_cell(raw_header)
        value = coerce_cell(raw_value)
        field_name = GOOGLE_CONTACTS_HEADERS.get(header)
        if field_name:
            setattr(contact, field_name, value)
            continue
        if not value:
            continue
        rule = match_heuristic_rule(header, contact)
        if rule is None:
            logger.debug("Ignoring unrecognized column %r", header)
            continue
        rule.apply(contact, value, header)
    return contact.with_derived()


def is_valid(contact: Contact) -> bool:
    return any(getattr(contact, field_name) for field_name in VALIDITY_FIELDS)


def map_rows(rows: Iterable[RawRow]) -> List[Contact]:
    contacts: List[Contact] = []
    dropped = 0
    for row in rows:
        contact = map_row(row)
        if is_valid(contact):
            contacts.append(contact)
        else:
            dropped += 1
    if dropped:
        logger.info("Skipped %d row(s) without any usable contact data", dropped)
    logger.debug("Mapped %d contact(s)", len(contacts))
    return contacts
