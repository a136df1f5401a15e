from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Tuple

NAME_PART_FIELDS: Tuple[str, ...] = (
    "name_prefix",
    "first_name",
    "middle_name",
    "last_name",
    "name_suffix",
)

PHONE_VALUE_FIELDS: Tuple[str, ...] = (
    "phone1_value",
    "phone2_value",
    "phone3_value",
    "phone4_value",
)

DERIVED_FIELDS: Tuple[str, ...] = ("name", "phone")


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def join_name_parts(*parts: Any) -> str:
    return " ".join(text for text in map(_text, parts) if text)


def first_non_empty(*values: Any) -> Any:
    return next((value for value in values if _text(value)), "")


@dataclass
class Contact:
    # name
    first_name: str = ""
    middle_name: str = ""
    last_name: str = ""
    phonetic_first_name: str = ""
    phonetic_middle_name: str = ""
    phonetic_last_name: str = ""
    name_prefix: str = ""
    name_suffix: str = ""
    nickname: str = ""
    file_as: str = ""
    # organization
    organization_name: str = ""
    organization_title: str = ""
    organization_department: str = ""
    # personal
    birthday: str = ""
    notes: str = ""
    photo: str = ""
    labels: str = ""
    # emails
    email1_label: str = ""
    email1_value: str = ""
    email2_label: str = ""
    email2_value: str = ""
    # phones, phone1 is primary
    phone1_label: str = ""
    phone1_value: str = ""
    phone2_label: str = ""
    phone2_value: str = ""
    phone3_label: str = ""
    phone3_value: str = ""
    phone4_label: str = ""
    phone4_value: str = ""
    # address
    address1_label: str = ""
    address1_formatted: str = ""
    address1_street: str = ""
    address1_city: str = ""
    address1_po_box: str = ""
    address1_region: str = ""
    address1_postal_code: str = ""
    address1_country: str = ""
    address1_extended_address: str = ""
    # website
    website1_label: str = ""
    website1_value: str = ""
    # derived display values, never authoritative
    name: str = ""
    phone: str = ""

    @classmethod
    def from_mapping(cls, payload: Dict[str, Any]) -> "Contact":
        values = {}
        for item in fields(cls):
            raw = payload.get(item.name, "")
            values[item.name] = str(raw or "").strip()
        return cls(**values)

    @classmethod
    def from_simple(cls, name: str, phone: str) -> "Contact":
        """Build a record from the two-field name/phone view used by pasted lists."""
        name = (name or "").strip()
        phone = (phone or "").strip()
        return cls(
            first_name=name,
            phone1_label="Mobile",
            phone1_value=phone,
        ).with_derived()

    def full_name(self) -> str:
        return join_name_parts(*(getattr(self, part) for part in NAME_PART_FIELDS))

    def primary_phone(self) -> str:
        return first_non_empty(*(getattr(self, part) for part in PHONE_VALUE_FIELDS))

    def with_derived(self) -> "Contact":
        return replace(self, name=self.full_name(), phone=self.primary_phone())

    def to_dict(self) -> Dict[str, str]:
        return {item.name: getattr(self, item.name) for item in fields(self)}

    def canonical_values(self) -> Dict[str, str]:
        return {name: getattr(self, name) for name in CANONICAL_FIELDS}

    def replace(self, **changes: Any) -> "Contact":
        return replace(self, **changes)


CANONICAL_FIELDS: Tuple[str, ...] = tuple(
    item.name for item in fields(Contact) if item.name not in DERIVED_FIELDS
)
