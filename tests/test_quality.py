import pytest

from contacts_normalizer.models import Contact
from contacts_normalizer.normalization import NormalizationRules, PhoneFormat, normalize_contacts
from contacts_normalizer.quality import (
    REPORT_COLUMNS,
    is_valid_br_phone,
    is_valid_email,
    quality_report,
)


def test_phone_and_email_validators():
    assert is_valid_br_phone("31999998888") is True
    assert is_valid_br_phone("+55 (31) 3322-4455") is True
    assert is_valid_br_phone("123") is False
    assert is_valid_br_phone("") is False
    assert is_valid_email("ana@gmail.com") is True
    assert is_valid_email("ana@") is False
    assert is_valid_email("not an email") is False


def test_quality_report_counts_untouched_phones_and_bad_emails():
    originals = [
        Contact(
            first_name="ana",
            phone1_value="31999998888",
            phone2_value="9999-8888",
            email1_value="ana@gmail.com",
            email2_value="ana@",
        ).with_derived(),
        Contact(first_name="bruno").with_derived(),
    ]
    rules = NormalizationRules(phone_format=PhoneFormat.PARENS)
    normalized = normalize_contacts(originals, rules)
    report = quality_report(originals, normalized, rules)

    assert list(report.columns) == REPORT_COLUMNS
    assert len(report) == 2
    first = report.iloc[0]
    assert first["name"] == "Ana"
    assert first["phones_total"] == 2
    assert first["phones_formatted"] == 1
    assert first["phones_untouched"] == "9999-8888"
    assert first["phones_valid"] == 1
    assert first["emails_total"] == 2
    assert first["emails_invalid"] == "ana@"

    second = report.iloc[1]
    assert second["phones_total"] == 0
    assert second["phones_untouched"] == ""
    assert second["emails_invalid"] == ""


def test_quality_report_requires_matching_lengths():
    with pytest.raises(ValueError):
        quality_report([Contact()], [], NormalizationRules())


def test_quality_report_empty():
    report = quality_report([], [], NormalizationRules())
    assert report.empty
    assert list(report.columns) == REPORT_COLUMNS
