"""Integration tests for the command-line entry point."""
import io
import json

import pytest

from callsheet.extraction.cli import main


@pytest.fixture
def sheet(tmp_path, scenario_c):
    path = tmp_path / "crew.csv"
    path.write_text(scenario_c, encoding="utf-8")
    return path


def test_single_file_prints_json(sheet, capsys):
    assert main([str(sheet), "--quiet"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["success"] is True
    assert len(payload["contacts"]) == 5
    assert payload["metadata"]["method"] == "heuristic"


def test_logs_go_to_stderr(sheet, capsys):
    assert main([str(sheet)]) == 0
    captured = capsys.readouterr()
    json.loads(captured.out)
    assert "5 contacts" in captured.err


def test_output_file_and_options(sheet, tmp_path, capsys):
    output = tmp_path / "out" / "crew.json"
    code = main([str(sheet), "--output", str(output), "--role", "Gaffer", "--threshold", "0.5", "--quiet"])
    assert code == 0
    assert capsys.readouterr().out == ""
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["contacts"][0]["name"] == "Cara Diaz"


def test_stdin(monkeypatch, capsys, scenario_a):
    monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(scenario_a.encode("utf-8"))))
    assert main(["--quiet"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["contacts"][0]["phone"] == "(929) 250-6798"


def test_garbage_input_fails(tmp_path, pdf_garbage, capsys):
    path = tmp_path / "sheet.txt"
    path.write_text(pdf_garbage, encoding="utf-8")
    assert main([str(path), "--quiet"]) == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload["success"] is False
    assert "PDF structure markers" in payload["error"]


def test_log_files(sheet, tmp_path, capsys):
    log_file = tmp_path / "run.log"
    trace_file = tmp_path / "run.trace"
    assert main([str(sheet), "--quiet", "--log-file", str(log_file), "--trace-file", str(trace_file)]) == 0
    assert "5 contacts" in log_file.read_text(encoding="utf-8")
    trace = trace_file.read_text(encoding="utf-8")
    assert "'Cara Diaz'" in trace
    assert "[callsheet.extraction.router]" in trace


class TestArguments:
    def test_missing_input(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.txt")]) == 1
        assert "does not exist" in capsys.readouterr().err

    def test_threshold_out_of_range(self, sheet, capsys):
        assert main([str(sheet), "--threshold", "1.5"]) == 1
        assert "--threshold" in capsys.readouterr().err

    def test_bad_environment(self, sheet, monkeypatch, capsys):
        monkeypatch.setenv("CALLSHEET_METHOD", "magic")
        assert main([str(sheet)]) == 1
        assert "Unknown extraction method" in capsys.readouterr().err


class TestBatch:
    def test_directory_is_processed(self, tmp_path, scenario_a, scenario_b, capsys):
        source = tmp_path / "sheets"
        (source / "day2").mkdir(parents=True)
        (source / "day1.txt").write_text(scenario_a, encoding="utf-8")
        (source / "day2" / "crew.md").write_text(scenario_b, encoding="utf-8")
        (source / "notes.pdf").write_bytes(b"%PDF-1.4")
        output = tmp_path / "results"

        assert main([str(source), "--output", str(output), "--workers", "2", "--quiet"]) == 0

        day1 = json.loads((output / "day1.json").read_text(encoding="utf-8"))
        day2 = json.loads((output / "day2" / "crew.json").read_text(encoding="utf-8"))
        assert day1["contacts"][0]["name"] == "Coni Tarallo"
        assert len(day2["contacts"]) == 2
        assert not (output / "notes.json").exists()

    def test_failed_document_sets_exit_code(self, tmp_path, scenario_a, pdf_garbage, capsys):
        source = tmp_path / "sheets"
        source.mkdir()
        (source / "good.txt").write_text(scenario_a, encoding="utf-8")
        (source / "bad.txt").write_text(pdf_garbage, encoding="utf-8")

        assert main([str(source), "--quiet"]) == 1
        assert json.loads((source / "good.json").read_text(encoding="utf-8"))["success"] is True
        assert json.loads((source / "bad.json").read_text(encoding="utf-8"))["success"] is False

    def test_empty_directory(self, tmp_path, capsys):
        assert main([str(tmp_path), "--quiet"]) == 0
