from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence, Tuple

import pandas as pd
import phonenumbers
from email_validator import EmailNotValidError, validate_email

from .mapping import coerce_cell
from .models import PHONE_VALUE_FIELDS, Contact
from .normalization import NormalizationRules, clean_phone_digits, is_phone_formattable

logger = logging.getLogger(__name__)

PHONE_REGION = "BR"
EMAIL_VALUE_FIELDS: Tuple[str, ...] = ("email1_value", "email2_value")

REPORT_COLUMNS: List[str] = [
    "name",
    "phones_total",
    "phones_formatted",
    "phones_untouched",
    "phones_valid",
    "emails_total",
    "emails_invalid",
]


def is_valid_br_phone(value: str) -> bool:
    digits = clean_phone_digits(value)
    if not digits:
        return False
    try:
        parsed = phonenumbers.parse(digits, PHONE_REGION)
    except phonenumbers.NumberParseException:
        return False
    return phonenumbers.is_valid_number(parsed)


def is_valid_email(value: str) -> bool:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def _phone_metrics(contact: Contact, rules: NormalizationRules) -> Dict[str, Any]:
    values = [coerce_cell(getattr(contact, field_name)) for field_name in PHONE_VALUE_FIELDS]
    values = [value for value in values if value]
    untouched = [value for value in values if not is_phone_formattable(value, rules.phone_format)]
    return {
        "phones_total": len(values),
        "phones_formatted": len(values) - len(untouched),
        "phones_untouched": "|".join(untouched),
        "phones_valid": sum(1 for value in values if is_valid_br_phone(value)),
    }


def _email_metrics(contact: Contact) -> Dict[str, Any]:
    values = [coerce_cell(getattr(contact, field_name)) for field_name in EMAIL_VALUE_FIELDS]
    values = [value for value in values if value]
    invalid = [value for value in values if not is_valid_email(value)]
    return {"emails_total": len(values), "emails_invalid": "|".join(invalid)}


def quality_report(
    originals: Sequence[Contact],
    normalized: Sequence[Contact],
    rules: NormalizationRules,
) -> pd.DataFrame:
    """
    Per-contact report of what normalization could not fix.

    Phone metrics are computed from the original values, since the pass-through
    fallback hides them in the normalized copy. The display name is taken from
    the normalized contact.
    """
    if len(originals) != len(normalized):
        raise ValueError(
            f"originals and normalized differ in length: {len(originals)} != {len(normalized)}"
        )
    rows: List[Dict[str, Any]] = []
    for original, result in zip(originals, normalized):
        row: Dict[str, Any] = {"name": result.name or result.full_name()}
        row.update(_phone_metrics(original, rules))
        row.update(_email_metrics(original))
        rows.append(row)
    report = pd.DataFrame(rows, columns=REPORT_COLUMNS)
    if not report.empty:
        untouched = int((report["phones_total"] - report["phones_formatted"]).sum())
        invalid_emails = sum(len(cell.split("|")) for cell in report["emails_invalid"] if cell)
        logger.info(
            "Quality: %d phone(s) left untouched, %d invalid email(s)", untouched, invalid_emails
        )
    return report
