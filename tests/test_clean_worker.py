import io
import json
from pathlib import Path

import pytest

from clean_forward import clean_worker


def test_cleans_files(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    body = tmp_path / "body.txt"
    body.write_text("Looks good.\n\n> quoted reply\n", encoding="utf-8")

    assert clean_worker.main([str(body)]) == 0
    assert capsys.readouterr().out == "Looks good.\n"


def test_json_output_includes_html(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    body = tmp_path / "body.txt"
    body.write_text("Go to https://example.com.", encoding="utf-8")

    assert clean_worker.main([str(body), "--json", "--html"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["source"] == str(body)
    assert payload["body"] == "Go to https://example.com."
    assert payload["html"].startswith('Go to <a href="https://example.com"')


def test_reads_stdin(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(b"Hi\n...\nold"), encoding="utf-8"))
    assert clean_worker.main([]) == 0
    assert capsys.readouterr().out == "Hi\n"


def test_missing_file_reports_error(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    assert clean_worker.main([str(tmp_path / "missing.txt")]) == 1
    assert "error:" in capsys.readouterr().err


def test_invalid_utf8_on_stdin_is_cleaned(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(b"Hi caf\xe9\n> old\n"), encoding="utf-8"))
    assert clean_worker.main([]) == 0
    assert capsys.readouterr().out == "Hi caf\n"


def test_stdin_and_file_agree_on_escaped_utf8(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    raw = b"Merci, caf\xc3\xa9 demain.\n> old\n"
    body = tmp_path / "body.bin"
    body.write_bytes(raw)

    assert clean_worker.main([str(body)]) == 0
    from_file = capsys.readouterr().out

    monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(raw), encoding="utf-8"))
    assert clean_worker.main([]) == 0
    assert capsys.readouterr().out == from_file == "Merci, café demain.\n"
