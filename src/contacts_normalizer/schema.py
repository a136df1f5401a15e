from __future__ import annotations

from collections import OrderedDict
from typing import Dict, List

from .models import CANONICAL_FIELDS

# Google Contacts CSV export headers, in export column order.
GOOGLE_CONTACTS_HEADERS: "OrderedDict[str, str]" = OrderedDict(
    [
        ("First Name", "first_name"),
        ("Middle Name", "middle_name"),
        ("Last Name", "last_name"),
        ("Phonetic First Name", "phonetic_first_name"),
        ("Phonetic Middle Name", "phonetic_middle_name"),
        ("Phonetic Last Name", "phonetic_last_name"),
        ("Name Prefix", "name_prefix"),
        ("Name Suffix", "name_suffix"),
        ("Nickname", "nickname"),
        ("File As", "file_as"),
        ("Organization Name", "organization_name"),
        ("Organization Title", "organization_title"),
        ("Organization Department", "organization_department"),
        ("Birthday", "birthday"),
        ("Notes", "notes"),
        ("Photo", "photo"),
        ("Labels", "labels"),
        ("E-mail 1 - Label", "email1_label"),
        ("E-mail 1 - Value", "email1_value"),
        ("E-mail 2 - Label", "email2_label"),
        ("E-mail 2 - Value", "email2_value"),
        ("Phone 1 - Label", "phone1_label"),
        ("Phone 1 - Value", "phone1_value"),
        ("Phone 2 - Label", "phone2_label"),
        ("Phone 2 - Value", "phone2_value"),
        ("Phone 3 - Label", "phone3_label"),
        ("Phone 3 - Value", "phone3_value"),
        ("Phone 4 - Label", "phone4_label"),
        ("Phone 4 - Value", "phone4_value"),
        ("Address 1 - Label", "address1_label"),
        ("Address 1 - Formatted", "address1_formatted"),
        ("Address 1 - Street", "address1_street"),
        ("Address 1 - City", "address1_city"),
        ("Address 1 - PO Box", "address1_po_box"),
        ("Address 1 - Region", "address1_region"),
        ("Address 1 - Postal Code", "address1_postal_code"),
        ("Address 1 - Country", "address1_country"),
        ("Address 1 - Extended Address", "address1_extended_address"),
        ("Website 1 - Label", "website1_label"),
        ("Website 1 - Value", "website1_value"),
    ]
)

EXPORT_HEADERS: List[str] = list(GOOGLE_CONTACTS_HEADERS.keys())

_FIELD_TO_HEADER: Dict[str, str] = {
    field_name: header for header, field_name in GOOGLE_CONTACTS_HEADERS.items()
}

if tuple(GOOGLE_CONTACTS_HEADERS.values()) != CANONICAL_FIELDS:  # pragma: no cover
    raise RuntimeError("Google Contacts headers out of sync with Contact fields")


def header_for(field_name: str) -> str:
    try:
        return _FIELD_TO_HEADER[field_name]
    except KeyError:
        raise KeyError(f"Not a canonical contact field: {field_name!r}") from None
