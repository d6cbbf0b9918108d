import json

import pytest

from govdash import cli


@pytest.fixture(autouse=True)
def isolated_store(tmp_path, monkeypatch):
    monkeypatch.setenv("GOVDASH_STORE_BACKEND", "file")
    monkeypatch.setenv("GOVDASH_STORE_PATH", str(tmp_path / "store"))


def test_parse_prints_json(xlsx_path, capsys):
    assert cli.main(["parse", str(xlsx_path)]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["volume"]["total"] == 1234.57
    assert payload["appStats"]["interfaceCount"] == 12345


def test_parse_bad_file_exits_2(tmp_path, capsys):
    bad = tmp_path / "bad.xlsx"
    bad.write_bytes(b"not a workbook")
    assert cli.main(["parse", str(bad)]) == 2
    assert "valid .xlsx" in capsys.readouterr().err


def test_save_then_show(xlsx_path, capsys):
    assert cli.main(["show"]) == 1
    assert cli.main(["parse", str(xlsx_path), "--save"]) == 0
    capsys.readouterr()
    assert cli.main(["show", "--indent", "0"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["users"]["percentage"] == 25.0
