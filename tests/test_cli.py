import csv

import pandas as pd
import pytest

from contacts_normalizer import cli
from contacts_normalizer.export import UTF8_BOM
from contacts_normalizer.logging_utils import LOG_LEVEL_ENV


@pytest.fixture(autouse=True)
def _no_env_log_level(monkeypatch):
    monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)


def _write_source(tmp_path):
    path = tmp_path / "planilha.csv"
    path.write_text(
        "Nome,Telefone Celular,Email,Empresa\n"
        "joão da silva,31999998888,joao@gmail.com,Acme\n"
        "MARIA SOUZA,(31) 3322-4455,maria@,\n",
        encoding="utf-8",
    )
    return path


def test_main_normalizes_and_writes_every_output(tmp_path):
    source = _write_source(tmp_path)
    paste = tmp_path / "colado.txt"
    paste.write_text("Carla Dias;31988887777\n", encoding="utf-8")
    out = tmp_path / "out" / "google.csv"
    clipboard = tmp_path / "clipboard.txt"
    report = tmp_path / "report.csv"

    code = cli.main(
        [
            str(source),
            "--paste-file",
            str(paste),
            "--out",
            str(out),
            "--clipboard-out",
            str(clipboard),
            "--report-out",
            str(report),
            "--remove-accents",
            "--phone-format",
            "(XX) XXXXX-XXXX",
        ]
    )
    assert code == 0

    text = out.read_text(encoding="utf-8")
    assert text.startswith(UTF8_BOM)
    rows = list(csv.DictReader(text[len(UTF8_BOM):].splitlines()))
    assert [row["First Name"] for row in rows] == ["Joao Da Silva", "Maria Souza", "Carla Dias"]
    assert [row["Phone 1 - Value"] for row in rows] == [
        "(31) 99999-8888",
        "(31) 3322-4455",
        "(31) 98888-7777",
    ]
    assert rows[0]["Organization Name"] == "Acme"
    assert rows[0]["E-mail 1 - Value"] == "joao@gmail.com"

    lines = clipboard.read_text(encoding="utf-8").split("\n")
    assert lines[1] == "Joao Da Silva\t(31) 99999-8888\tjoao@gmail.com\tAcme"

    frame = pd.read_csv(report, keep_default_na=False)
    assert list(frame["emails_invalid"]) == ["", "maria@", ""]


def test_main_defaults_to_output_dir(tmp_path):
    source = _write_source(tmp_path)
    code = cli.main([str(source), "--out-dir", str(tmp_path / "exports"), "--case", "upper"])
    assert code == 0
    written = tmp_path / "exports" / cli.DEFAULT_OUTPUT_NAME
    rows = list(csv.DictReader(written.read_text(encoding="utf-8-sig").splitlines()))
    assert rows[0]["First Name"] == "JOÃO DA SILVA"
    assert rows[1]["Phone 1 - Value"] == "+55 (31) 3322-4455"


def test_main_returns_one_when_nothing_is_usable(tmp_path):
    source = tmp_path / "notes.csv"
    source.write_text("Notes,Cidade\nligar depois,BH\n", encoding="utf-8")
    assert cli.main([str(source), "--out-dir", str(tmp_path)]) == 1
    assert not (tmp_path / cli.DEFAULT_OUTPUT_NAME).exists()


def test_main_returns_two_on_ingestion_error(tmp_path):
    assert cli.main([str(tmp_path / "missing.csv"), "--out-dir", str(tmp_path)]) == 2
    assert cli.main(["--paste-file", str(tmp_path / "missing.txt")]) == 2
    bad = tmp_path / "contacts.pdf"
    bad.write_text("x", encoding="utf-8")
    assert cli.main([str(bad)]) == 2


def test_main_requires_an_input():
    with pytest.raises(SystemExit) as excinfo:
        cli.main([])
    assert excinfo.value.code == 2
