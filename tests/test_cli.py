from __future__ import annotations

import json
from pathlib import Path

import pytest

from swift_style_scanner import __version__
from swift_style_scanner.cli import main


def write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_clean_file_exits_zero(tmp_path: Path, capsys) -> None:
    target = write(tmp_path / "Clean.swift", "let value = 1\n")

    code = main(["lint", str(target)])

    out = capsys.readouterr().out
    assert code == 0
    assert out.strip() == "1 files analyzed: 0 findings (0 errors, 0 warnings, 0 info), 0 tooling errors"


def test_error_finding_exits_one(tmp_path: Path, capsys) -> None:
    target = write(tmp_path / "Bad.swift", "let MAX_WIDGET_COUNT = 5\n")

    code = main(["lint", str(target)])

    out = capsys.readouterr().out
    assert code == 1
    assert f"{target.as_posix()}:1:5: error: Variable name 'MAX_WIDGET_COUNT'" in out
    assert "[naming-case]" in out


def test_fail_on_warning(tmp_path: Path, capsys) -> None:
    target = write(tmp_path / "Warn.swift", "let a = b!\n")

    assert main(["lint", str(target)]) == 0
    assert main(["lint", "--fail-on", "warning", str(target)]) == 1
    capsys.readouterr()


def test_json_output(tmp_path: Path, capsys) -> None:
    target = write(tmp_path / "Bad.swift", "let MAX_WIDGET_COUNT = 5\n")

    main(["lint", "--format", "json", str(tmp_path)])

    payload = json.loads(capsys.readouterr().out)
    assert payload["summary"]["findings_total"] == 1
    assert payload["findings"][0]["path"] == target.as_posix()
    assert payload["findings"][0]["rule_id"] == "naming-case"


def test_output_file(tmp_path: Path, capsys) -> None:
    target = write(tmp_path / "Bad.swift", "let MAX_WIDGET_COUNT = 5\n")
    report_path = tmp_path / "reports" / "lint.csv"

    main(["lint", "--format", "csv", "--output", str(report_path), str(target)])

    assert capsys.readouterr().out == ""
    lines = report_path.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("path,line,column")
    assert len(lines) == 2


def test_config_file_is_applied(tmp_path: Path, capsys) -> None:
    target = write(tmp_path / "Bad.swift", "let MAX_WIDGET_COUNT = 5\n")
    config = write(tmp_path / "style.json", json.dumps({"naming-case": {"severity": "warning"}}))

    assert main(["lint", "--config", str(config), str(target)]) == 0
    capsys.readouterr()


def test_invalid_config_exits_two(tmp_path: Path, capsys) -> None:
    target = write(tmp_path / "A.swift", "let a = 1\n")
    config = write(tmp_path / "style.json", json.dumps({"no-such-rule": {}}))

    with pytest.raises(SystemExit) as excinfo:
        main(["lint", "--config", str(config), str(target)])

    assert excinfo.value.code == 2
    assert "Unknown rule id: no-such-rule" in capsys.readouterr().err


def test_invalid_jobs_exits_two(tmp_path: Path, capsys) -> None:
    target = write(tmp_path / "A.swift", "let a = 1\n")

    with pytest.raises(SystemExit) as excinfo:
        main(["lint", "--jobs", "0", str(target)])

    assert excinfo.value.code == 2
    capsys.readouterr()


def test_missing_path_exits_two(tmp_path: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["lint", str(tmp_path / "missing.swift")])

    assert excinfo.value.code == 2
    assert "Path does not exist" in capsys.readouterr().err


def test_parse_error_exits_two(tmp_path: Path, capsys) -> None:
    write(tmp_path / "Broken.swift", "struct {\n")

    assert main(["lint", str(tmp_path)]) == 2
    assert "parse-error: expected a name after 'struct'" in capsys.readouterr().out


def test_fix_rewrites_and_reports_remaining(tmp_path: Path, capsys) -> None:
    target = write(tmp_path / "Fixable.swift", "let a = 1;   \nlet MAX = 2")

    code = main(["lint", "--fix", str(target)])

    assert target.read_text(encoding="utf-8") == "let a = 1\nlet MAX = 2\n"
    assert code == 1
    out = capsys.readouterr().out
    assert "[naming-case]" in out
    assert "[trailing-semicolon]" not in out


def test_include_exts_override(tmp_path: Path, capsys) -> None:
    write(tmp_path / "A.swift", "let MAX = 1\n")
    write(tmp_path / "B.swiftinterface", "let value = 1\n")

    assert main(["lint", "--include-exts", "swiftinterface", str(tmp_path)]) == 0
    assert "1 files analyzed" in capsys.readouterr().out


def test_rules_listing(capsys) -> None:
    assert main(["rules"]) == 0
    out = capsys.readouterr().out
    assert "line-length" in out
    assert "max_length=120" in out

    assert main(["rules", "--format", "json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    ids = [item["id"] for item in payload]
    assert len(ids) == 20
    assert "force-unwrap" in ids
    line_length = next(item for item in payload if item["id"] == "line-length")
    assert line_length["params"]["max_length"]["default"] == 120
    assert line_length["params"]["max_length"]["type"] == "int"


def test_version(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])

    assert excinfo.value.code == 0
    assert __version__ in capsys.readouterr().out
