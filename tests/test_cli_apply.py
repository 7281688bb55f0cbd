from __future__ import annotations

import json

from typer.testing import CliRunner

from fixit_rewriter.cli import app

DIAGNOSTICS = """
    diagnostics:
      - severity: warning
        message: pointer should be const
        fixits:
          - insert_at: 10
            text: "const "
      - severity: error
        message: narrowing conversion
        fixits:
          - replace: [20, 25]
            text: int64_t
"""


def test_apply_writes_sibling_fixit_file(sample_project) -> None:
    diagnostics_path = sample_project.write_diagnostics(DIAGNOSTICS)

    runner = CliRunner()
    result = runner.invoke(
        app,
        ["apply", str(sample_project.source_path), "--diagnostics", str(diagnostics_path)],
        catch_exceptions=False,
    )

    assert result.exit_code == 0, result.output
    fixed = sample_project.root / "foo.fixit.c"
    assert fixed.read_text(encoding="utf-8") == "void f(); const char *p;  int64_t n;\n"
    assert sample_project.source_path.read_text(encoding="utf-8") == "void f(); char *p;  int32 n;\n"


def test_apply_honours_explicit_output_and_document_source(sample_project) -> None:
    diagnostics_path = sample_project.write_diagnostics(
        f"source: {sample_project.source_path.as_posix()}\n" + DIAGNOSTICS.replace("\n    ", "\n")
    )
    target = sample_project.root / "patched.c"

    runner = CliRunner()
    result = runner.invoke(
        app,
        ["apply", "--diagnostics", str(diagnostics_path), "-o", str(target)],
        catch_exceptions=False,
    )

    assert result.exit_code == 0, result.output
    assert target.read_text(encoding="utf-8") == "void f(); const char *p;  int64_t n;\n"
    assert not (sample_project.root / "foo.fixit.c").exists()


def test_apply_suppresses_output_after_failure(sample_project) -> None:
    diagnostics_path = sample_project.write_diagnostics(
        """
        diagnostics:
          - severity: warning
            fixits:
              - remove: [0, 5]
          - severity: error
            message: no way to fix this
        """
    )

    runner = CliRunner()
    result = runner.invoke(
        app,
        ["apply", str(sample_project.source_path), "-d", str(diagnostics_path)],
        catch_exceptions=False,
    )

    assert result.exit_code == 1
    assert "1 fix-it failures detected; code will not be modified" in result.output
    assert not (sample_project.root / "foo.fixit.c").exists()


def test_apply_reports_unchanged_file(sample_project) -> None:
    diagnostics_path = sample_project.write_diagnostics(
        """
        diagnostics:
          - severity: note
            message: just a note
        """
    )

    runner = CliRunner()
    result = runner.invoke(
        app,
        ["apply", str(sample_project.source_path), "-d", str(diagnostics_path)],
        catch_exceptions=False,
    )

    assert result.exit_code == 0, result.output
    assert "Main file is unchanged" in result.output
    assert not (sample_project.root / "foo.fixit.c").exists()


def test_apply_streams_stdin_to_stdout(sample_project) -> None:
    diagnostics_path = sample_project.write_diagnostics(DIAGNOSTICS)

    runner = CliRunner()
    result = runner.invoke(
        app,
        ["apply", "-", "-d", str(diagnostics_path)],
        input="void f(); char *p;  int32 n;\n",
        catch_exceptions=False,
    )

    assert result.exit_code == 0, result.output
    assert "void f(); const char *p;  int64_t n;\n" in result.output


def test_apply_uses_configured_marker(sample_project) -> None:
    diagnostics_path = sample_project.write_diagnostics(DIAGNOSTICS)
    config_path = sample_project.root / "fixit.yaml"
    config_path.write_text("output:\n  marker: patched\n", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "apply",
            str(sample_project.source_path),
            "-d",
            str(diagnostics_path),
            "--config",
            str(config_path),
        ],
        catch_exceptions=False,
    )

    assert result.exit_code == 0, result.output
    assert (sample_project.root / "foo.patched.c").exists()


def test_apply_fails_cleanly_when_fix_cannot_be_encoded(sample_project) -> None:
    diagnostics_path = sample_project.write_diagnostics(
        """
        diagnostics:
          - severity: warning
            fixits:
              - insert_at: 0
                text: "中"
        """
    )
    config_path = sample_project.root / "fixit.yaml"
    config_path.write_text("output:\n  encoding: latin-1\n", encoding="utf-8")
    existing = sample_project.root / "foo.fixit.c"
    existing.write_text("previous good output\n", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(
        app,
        ["apply", str(sample_project.source_path), "-d", str(diagnostics_path), "-c", str(config_path)],
        catch_exceptions=False,
    )

    assert result.exit_code == 1
    assert "Failed to write fixed file" in result.output
    assert existing.read_text(encoding="utf-8") == "previous good output\n"


def test_apply_rejects_malformed_diagnostics(sample_project) -> None:
    diagnostics_path = sample_project.write_diagnostics(
        """
        diagnostics:
          - severity: catastrophic
        """
    )

    runner = CliRunner()
    result = runner.invoke(
        app,
        ["apply", str(sample_project.source_path), "-d", str(diagnostics_path)],
        catch_exceptions=False,
    )

    assert result.exit_code == 1
    assert "did not validate" in result.output


def test_check_reports_outcomes_as_json(sample_project) -> None:
    diagnostics_path = sample_project.write_diagnostics(
        """
        diagnostics:
          - severity: warning
            fixits:
              - insert_at: 0
                text: "// "
          - severity: fatal
            fixits:
              - replace: [4, 99]
                text: nope
        """
    )

    runner = CliRunner()
    result = runner.invoke(
        app,
        ["check", str(sample_project.source_path), "-d", str(diagnostics_path), "--json"],
        catch_exceptions=False,
    )

    assert result.exit_code == 1
    start = result.output.index("{")
    payload = json.loads(result.output[start : result.output.rindex("}") + 1])
    assert payload["failures"] == 1
    assert [entry["status"] for entry in payload["outcomes"]] == ["APPLIED", "VALIDATION_REJECTED"]
    assert payload["outcomes"][1]["validation"]["status"] == "UNADDRESSABLE"
    assert not (sample_project.root / "foo.fixit.c").exists()
