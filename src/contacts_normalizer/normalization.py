from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from .mapping import coerce_cell
from .models import PHONE_VALUE_FIELDS, Contact

logger = logging.getLogger(__name__)

NAME_CLASS_FIELDS: Tuple[str, ...] = (
    "first_name",
    "middle_name",
    "last_name",
    "nickname",
    "name_prefix",
    "name_suffix",
    "organization_name",
    "organization_title",
    "organization_department",
)

COMBINING_MARKS_RE = re.compile(r"[\u0300-\u036f]")
NON_DIGIT_RE = re.compile(r"[^0-9]")
WORD_START_RE = re.compile(r"\b\w")

COUNTRY_CODE = "55"
TRUNK_PREFIX = "0"
MIN_PHONE_DIGITS = 10


class PhoneFormat(str, Enum):
    INTERNATIONAL_PARENS = "+55 (XX) XXXXX-XXXX"
    PARENS = "(XX) XXXXX-XXXX"
    INTERNATIONAL_SPACED = "+55 XX XXXXX XXXX"
    AREA_DASHED = "XX XXXXX-XXXX"
    DIGITS = "XXXXXXXXXXX"
    DIGITS_TEN = "XXXXXXXXXX"
    TRUNK_SPACED = "XXX X XXXX XXXX"

    @classmethod
    def parse(cls, value: Union["PhoneFormat", str]) -> "PhoneFormat":
        if isinstance(value, PhoneFormat):
            return value
        token = str(value or "").strip()
        for member in cls:
            if token in (member.value, member.name):
                return member
        raise ValueError(f"Unknown phone format: {value!r}")


class CaseStyle(str, Enum):
    NONE = "none"
    UPPER = "upper"
    LOWER = "lower"
    CAPITALIZE = "capitalize"

    @classmethod
    def parse(cls, value: Union["CaseStyle", str, None]) -> "CaseStyle":
        if isinstance(value, CaseStyle):
            return value
        name = str(value or "none").strip().lower()
        for member in cls:
            if name == member.value:
                return member
        raise ValueError(f"Unknown case style: {value!r}")


# legacy flag name -> case style it selects
CASE_FLAGS: Dict[str, CaseStyle] = {
    "upper_case": CaseStyle.UPPER,
    "lower_case": CaseStyle.LOWER,
    "capitalize": CaseStyle.CAPITALIZE,
}

OPTION_ALIASES: Dict[str, str] = {
    "phoneFormat": "phone_format",
    "removeAccents": "remove_accents",
    "upperCase": "upper_case",
    "lowerCase": "lower_case",
    "caseStyle": "case_style",
    "case": "case_style",
    "combineNames": "combine_names",
    "preferPrimaryPhone": "prefer_primary_phone",
    "includeAllPhones": "include_all_phones",
    "includeEmails": "include_emails",
    "includeAddress": "include_address",
    "includeOrganization": "include_organization",
}


def _option_name(key: str) -> str:
    return OPTION_ALIASES.get(key, key)


@dataclass(frozen=True)
class NormalizationRules:
    phone_format: PhoneFormat = PhoneFormat.INTERNATIONAL_PARENS
    remove_accents: bool = False
    case_style: CaseStyle = CaseStyle.CAPITALIZE
    combine_names: bool = True
    prefer_primary_phone: bool = True
    include_all_phones: bool = True
    include_emails: bool = True
    include_address: bool = True
    include_organization: bool = True

    @property
    def upper_case(self) -> bool:
        return self.case_style is CaseStyle.UPPER

    @property
    def lower_case(self) -> bool:
        return self.case_style is CaseStyle.LOWER

    @property
    def capitalize(self) -> bool:
        return self.case_style is CaseStyle.CAPITALIZE

    @classmethod
    def from_flags(cls, **options: Any) -> "NormalizationRules":
        """
        Build rules from the flag-style options of the import screen.

        Accepts camelCase or snake_case names. When several of
        ``upper_case``/``lower_case``/``capitalize`` are set, the first in that
        order wins; when none is set the case style is ``NONE``.
        """
        normalized = {_option_name(key): value for key, value in options.items()}
        case_flags = {key: normalized.pop(key) for key in list(CASE_FLAGS) if key in normalized}
        rules = cls()
        if "case_style" not in normalized and case_flags:
            selected = next(
                (CASE_FLAGS[key] for key in CASE_FLAGS if case_flags.get(key)), CaseStyle.NONE
            )
            rules = replace(rules, case_style=selected)
        for key, value in normalized.items():
            rules = rules.update(key, value)
        return rules

    def update(self, key: str, value: Any) -> "NormalizationRules":
        """Return a copy with one option changed, keeping the casing flags exclusive."""
        option = _option_name(key)
        if option in CASE_FLAGS:
            style = CASE_FLAGS[option]
            if value:
                return replace(self, case_style=style)
            if self.case_style is style:
                return replace(self, case_style=CaseStyle.NONE)
            return self
        if option == "case_style":
            return replace(self, case_style=CaseStyle.parse(value))
        if option == "phone_format":
            return replace(self, phone_format=PhoneFormat.parse(value))
        if option not in _TOGGLE_FIELDS:
            raise ValueError(f"Unknown normalization option: {key!r}")
        return replace(self, **{option: bool(value)})

    def to_flags(self) -> Dict[str, Any]:
        return {
            "phone_format": self.phone_format.value,
            "remove_accents": self.remove_accents,
            "upper_case": self.upper_case,
            "lower_case": self.lower_case,
            "capitalize": self.capitalize,
            "combine_names": self.combine_names,
            "prefer_primary_phone": self.prefer_primary_phone,
            "include_all_phones": self.include_all_phones,
            "include_emails": self.include_emails,
            "include_address": self.include_address,
            "include_organization": self.include_organization,
        }


_TOGGLE_FIELDS = frozenset(
    item.name
    for item in fields(NormalizationRules)
    if item.name not in ("phone_format", "case_style")
)


def remove_accents(text: str) -> str:
    return COMBINING_MARKS_RE.sub("", unicodedata.normalize("NFD", text))


def capitalize_words(text: str) -> str:
    return WORD_START_RE.sub(lambda match: match.group(0).upper(), text.lower())


_CASE_TRANSFORMS: Dict[CaseStyle, Callable[[str], str]] = {
    CaseStyle.UPPER: str.upper,
    CaseStyle.LOWER: str.lower,
    CaseStyle.CAPITALIZE: capitalize_words,
}


def format_name(value: Any, rules: NormalizationRules) -> str:
    formatted = coerce_cell(value)
    if not formatted:
        return ""
    if rules.remove_accents:
        formatted = remove_accents(formatted)
    transform = _CASE_TRANSFORMS.get(rules.case_style)
    if transform is not None:
        formatted = transform(formatted)
    return formatted


def clean_phone_digits(value: Any) -> str:
    digits = NON_DIGIT_RE.sub("", coerce_cell(value))
    if digits.startswith(COUNTRY_CODE) and len(digits) >= 11:
        digits = digits[len(COUNTRY_CODE) :]
    if digits.startswith(TRUNK_PREFIX) and len(digits) >= 10:
        digits = digits[len(TRUNK_PREFIX) :]
    return digits


def _split(digits: str) -> Optional[Tuple[str, str, str]]:
    """Split into area code, exchange and line; ``None`` unless 10 or 11 digits."""
    if len(digits) == 11:
        return digits[:2], digits[2:7], digits[7:]
    if len(digits) == 10:
        return digits[:2], digits[2:6], digits[6:]
    return None


def _render_trunk_spaced(digits: str) -> Optional[str]:
    if len(digits) == 11:
        return f"0{digits[:2]} {digits[2:3]} {digits[3:7]} {digits[7:]}"
    if len(digits) == 10:
        return f"0{digits[:2]} {digits[2:6]} {digits[6:]}"
    return None


_SPLIT_TEMPLATES: Dict[PhoneFormat, str] = {
    PhoneFormat.INTERNATIONAL_PARENS: "+55 ({0}) {1}-{2}",
    PhoneFormat.PARENS: "({0}) {1}-{2}",
    PhoneFormat.INTERNATIONAL_SPACED: "+55 {0} {1} {2}",
    PhoneFormat.AREA_DASHED: "{0} {1}-{2}",
}


def _render(digits: str, phone_format: PhoneFormat) -> Optional[str]:
    if phone_format is PhoneFormat.DIGITS:
        return digits
    if phone_format is PhoneFormat.DIGITS_TEN:
        return digits[:10]
    if phone_format is PhoneFormat.TRUNK_SPACED:
        return _render_trunk_spaced(digits)
    parts = _split(digits)
    if parts is None:
        return None
    return _SPLIT_TEMPLATES[phone_format].format(*parts)


def is_phone_formattable(value: Any, phone_format: Union[PhoneFormat, str]) -> bool:
    """True when ``format_phone`` can render ``value`` instead of passing it through."""
    if not value:
        return False
    try:
        selected = PhoneFormat.parse(phone_format)
    except ValueError:
        return False
    digits = clean_phone_digits(value)
    return len(digits) >= MIN_PHONE_DIGITS and _render(digits, selected) is not None


def format_phone(value: Any, phone_format: Union[PhoneFormat, str]) -> str:
    """
    Render a Brazilian phone number with the given format token.

    Country code and trunk prefix are stripped first. Numbers that end up
    shorter than 10 digits, or that a split pattern cannot place, come back
    exactly as given. Unknown tokens also return the input untouched.
Non-string values such as spreadsheet numbers are rendered as text first.
    """
    if not isinstance(value, str):
        value = coerce_cell(value)
    if not value:
        return ""
    try:
        selected = PhoneFormat.parse(phone_format)
    except ValueError:
        logger.debug("Unknown phone format %r, leaving %r as is", phone_format, value)
        return value
    digits = clean_phone_digits(value)
    if len(digits) < MIN_PHONE_DIGITS:
        return value
    rendered = _render(digits, selected)
    return value if rendered is None else rendered


def normalize_contact(contact: Contact, rules: NormalizationRules) -> Contact:
    changes: Dict[str, str] = {}
    for field_name in NAME_CLASS_FIELDS:
        changes[field_name] = format_name(getattr(contact, field_name), rules)
    for field_name in PHONE_VALUE_FIELDS:
        changes[field_name] = format_phone(getattr(contact, field_name), rules.phone_format)
    # derived values come from the untouched source parts, formatted once
    if rules.combine_names:
        changes["name"] = format_name(contact.full_name(), rules)
    if rules.prefer_primary_phone:
        changes["phone"] = format_phone(contact.primary_phone(), rules.phone_format)
    return replace(contact, **changes)


def normalize_contacts(
    contacts: Sequence[Contact], rules: NormalizationRules
) -> List[Contact]:
    normalized = [normalize_contact(contact, rules) for contact in contacts]
    logger.debug(
        "Normalized %d contact(s) with phone format %s and case %s",
        len(normalized),
        rules.phone_format.value,
        rules.case_style.value,
    )
    return normalized
