import csv
import io

from contacts_normalizer.export import (
    CLIPBOARD_HEADERS,
    UTF8_BOM,
    contacts_to_frame,
    excluded_fields,
    to_clipboard_text,
    to_google_csv,
    write_google_csv,
)
from contacts_normalizer.models import Contact
from contacts_normalizer.normalization import NormalizationRules
from contacts_normalizer.schema import EXPORT_HEADERS


def _sample_contacts():
    return [
        Contact(
            first_name="Ana",
            last_name='Souza "Aninha"',
            organization_name="Acme",
            email1_value="ana@gmail.com",
            phone1_value="+55 (31) 99999-8888",
            phone2_value="+55 (31) 3322-4455",
            address1_city="Belo Horizonte",
        ).with_derived(),
        Contact(first_name="Bruno", phone1_value="(31) 98888-7777").with_derived(),
    ]


def _parse(text):
    assert text.startswith(UTF8_BOM)
    return list(csv.reader(io.StringIO(text[len(UTF8_BOM):])))


def test_google_csv_has_bom_header_and_quoted_cells():
    text = to_google_csv(_sample_contacts())
    lines = text[len(UTF8_BOM):].split("\n")
    assert lines[0].startswith('"First Name","Middle Name","Last Name"')
    assert '"Souza ""Aninha"""' in lines[1]
    # every cell quoted, empty ones included
    assert lines[2].startswith('"Bruno","",""')

    rows = _parse(text)
    assert rows[0] == list(EXPORT_HEADERS)
    assert len(rows) == 3
    assert all(len(row) == len(EXPORT_HEADERS) for row in rows)
    assert rows[1][EXPORT_HEADERS.index("Last Name")] == 'Souza "Aninha"'


def test_google_csv_for_no_contacts_is_header_only():
    rows = _parse(to_google_csv([]))
    assert rows == [list(EXPORT_HEADERS)]


def test_include_toggles_blank_excluded_groups():
    rules = NormalizationRules(
        include_all_phones=False,
        include_emails=False,
        include_address=False,
        include_organization=False,
    )
    frame = contacts_to_frame(_sample_contacts(), rules)
    first = frame.iloc[0]
    assert first["Phone 1 - Value"] == "+55 (31) 99999-8888"
    assert first["Phone 2 - Value"] == ""
    assert first["E-mail 1 - Value"] == ""
    assert first["Address 1 - City"] == ""
    assert first["Organization Name"] == ""
    assert first["First Name"] == "Ana"


def test_excluded_fields():
    assert excluded_fields(None) == frozenset()
    assert excluded_fields(NormalizationRules()) == frozenset()
    only_emails = excluded_fields(NormalizationRules(include_emails=False))
    assert only_emails == {"email1_label", "email1_value", "email2_label", "email2_value"}
    phones = excluded_fields(NormalizationRules(include_all_phones=False))
    assert "phone1_value" not in phones
    assert "phone4_label" in phones


def test_write_google_csv_creates_parent_dirs(tmp_path):
    target = tmp_path / "out" / "nested" / "contatos.csv"
    written = write_google_csv(target, _sample_contacts())
    assert written == target
    raw = target.read_bytes()
    assert raw.startswith(b"\xef\xbb\xbf")
    assert b"\r\n" not in raw
    rows = list(csv.reader(io.StringIO(target.read_text(encoding="utf-8-sig"))))
    assert rows[0][0] == "First Name"
    assert rows[2][0] == "Bruno"


def test_clipboard_text():
    contacts = _sample_contacts()
    contacts.append(Contact(first_name="Carla\tMaria", notes="x"))
    lines = to_clipboard_text(contacts).split("\n")
    assert lines[0] == "\t".join(CLIPBOARD_HEADERS)
    assert lines[1] == 'Ana Souza "Aninha"\t+55 (31) 99999-8888\tana@gmail.com\tAcme'
    assert lines[2] == "Bruno\t(31) 98888-7777\t\t"
    # derived fields missing, falls back to the parts
    assert lines[3] == "Carla Maria\t\t\t"
