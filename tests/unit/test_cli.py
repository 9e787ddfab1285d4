"""
Unit tests for the command-line interface.
"""

from pathlib import Path

import pytest
from click.testing import CliRunner

from logjournal import main


@pytest.fixture
def cli_config(temp_dir: Path) -> Path:
    """Settings file pointing storage and exports into the temporary directory."""
    config = temp_dir / "settings.yaml"
    config.write_text(
        f"""
storage:
  data_dir: "{(temp_dir / 'data').as_posix()}"

export:
  output_dir: "{(temp_dir / 'exports').as_posix()}"

logging:
  file: ""
""".strip()
    )
    return config


@pytest.fixture
def run(cli_config, monkeypatch, restore_environ):
    """Invoke the CLI against the temporary store."""
    monkeypatch.setattr(main, "setup_logging", lambda *args, **kwargs: None)
    runner = CliRunner()

    def invoke(*args: str):
        return runner.invoke(main.cli, ["--config", str(cli_config), *args])

    return invoke


def created_id(result) -> str:
    return result.output.strip().split()[-1]


class TestLogCommands:
    """Test log entry commands."""

    def test_add_list_show(self, run):
        """Test creating, listing and previewing an entry."""
        result = run("logs", "add", "--title", "설비 점검", "--content", "완료", "--item", "청소")
        assert result.exit_code == 0, result.output
        log_id = created_id(result)

        listing = run("logs", "list")
        assert log_id in listing.output
        assert "[0/1]" in listing.output

        shown = run("logs", "show", log_id)
        assert "설비 점검" in shown.output
        assert "완료" in shown.output

    def test_add_requires_checked_required_items(self, run):
        """Test a required unchecked item fails validation."""
        result = run("logs", "add", "--title", "점검", "--required", "전원")
        assert result.exit_code == 1
        assert "필수 체크리스트 항목을 모두 체크해주세요." in result.output

        result = run("logs", "add", "--title", "점검", "--required", "전원", "--check", "전원")
        assert result.exit_code == 0, result.output

    def test_add_with_template(self, run):
        """Test a log template's checklist is merged in."""
        template_id = created_id(run("templates", "add", "일일 점검", "--item", "A", "--required", "B"))

        result = run("logs", "add", "--title", "x", "--template", template_id, "--check", "B")
        assert result.exit_code == 0, result.output

        listing = run("logs", "list", "--json")
        assert '"text": "A"' in listing.output
        assert f'"templateId": "{template_id}"' in listing.output

    def test_edit_and_delete(self, run):
        """Test editing and deleting an entry."""
        log_id = created_id(run("logs", "add", "--title", "before"))

        assert run("logs", "edit", log_id, "--title", "after").exit_code == 0
        assert "after" in run("logs", "list").output

        assert run("logs", "delete", log_id).exit_code == 0
        assert run("logs", "delete", log_id).exit_code == 1

    def test_failed_edit_leaves_entry_unchanged(self, run):
        """Test a template adding an unchecked required item aborts the whole edit."""
        template_id = created_id(run("templates", "add", "T", "--required", "must"))
        log_id = created_id(run("logs", "add", "--title", "orig"))
        before = run("logs", "list", "--json").output

        result = run("logs", "edit", log_id, "--template", template_id, "--title", "changed")

        assert result.exit_code == 1
        assert "필수 체크리스트 항목을 모두 체크해주세요." in result.output
        assert run("logs", "list", "--json").output == before

    def test_edit_with_template(self, run):
        """Test a template with optional items is merged on edit."""
        template_id = created_id(run("templates", "add", "T", "--item", "A"))
        log_id = created_id(run("logs", "add", "--title", "orig", "--item", "A"))

        result = run("logs", "edit", log_id, "--template", template_id)
        assert result.exit_code == 0, result.output

        listing = run("logs", "list", "--json").output
        assert listing.count('"text": "A"') == 1
        assert f'"templateId": "{template_id}"' in listing

    def test_edit_missing_entry(self, run):
        """Test editing an unknown entry reports the error."""
        result = run("logs", "edit", "missing", "--title", "x")
        assert result.exit_code == 1
        assert "일지를 찾을 수 없습니다." in result.output

    def test_attach_and_detach(self, run, temp_dir):
        """Test attachment metadata is read from a real file."""
        log_id = created_id(run("logs", "add", "--title", "x"))
        upload = temp_dir / "photo.jpg"
        upload.write_bytes(b"\0" * 2048)

        result = run("logs", "attach", str(upload), "--log", log_id)
        assert result.exit_code == 0, result.output
        attachment_id = result.output.strip().split("(")[-1].rstrip(")")

        shown = run("logs", "list", "--json").output
        assert '"mimeType": "image/jpeg"' in shown
        assert '"sizeBytes": 2048' in shown

        assert run("logs", "detach", attachment_id, "--log", log_id).exit_code == 0

    def test_target_options_are_exclusive(self, run):
        """Test exactly one of --log and --draft must be given."""
        assert run("logs", "toggle", "item").exit_code == 2
        assert run("logs", "toggle", "item", "--log", "x", "--draft").exit_code == 2


class TestDraftCommands:
    """Test draft commands."""

    def test_save_and_submit(self, run):
        """Test saving the draft in steps and promoting it."""
        assert run("draft", "save", "--title", "A").exit_code == 0
        assert run("draft", "save", "--content", "B").exit_code == 0

        shown = run("draft", "show").output
        assert "Title: A" in shown
        assert "B" in shown

        result = run("draft", "submit")
        assert result.exit_code == 0, result.output
        assert "No draft." in run("draft", "show").output
        assert "A" in run("logs", "list").output

    def test_toggle_required_item_then_submit(self, run):
        """Test a required draft item must be checked before submitting."""
        run("draft", "save", "--title", "A", "--required", "필수")
        assert run("draft", "submit").exit_code == 1

        shown = run("draft", "show").output
        item_id = shown.strip().splitlines()[-1].split("(")[-1].rstrip(")")
        assert run("logs", "toggle", item_id, "--draft").exit_code == 0
        assert run("draft", "submit").exit_code == 0

    def test_apply_and_clear(self, run):
        """Test applying a template to the draft and clearing it."""
        template_id = created_id(run("templates", "add", "T", "--item", "A"))

        assert run("draft", "apply", template_id).exit_code == 0
        assert "[ ] A" in run("draft", "show").output

        assert run("draft", "clear").exit_code == 0
        assert "No draft." in run("draft", "show").output


class TestTemplateCommands:
    """Test checklist and export template commands."""

    def test_edit_log_template(self, run):
        """Test renaming a template, adding an item and dropping another."""
        template_id = created_id(run("templates", "add", "T", "--item", "A", "--item", "B"))
        shown = run("templates", "show", template_id).output
        item_a = next(line for line in shown.splitlines() if "] A" in line)
        item_a_id = item_a.split("(")[-1].rstrip(")")

        result = run(
            "templates", "edit", template_id,
            "--name", "U", "--required", "C", "--item", "B", "--drop", item_a_id
        )
        assert result.exit_code == 0, result.output

        shown = run("templates", "show", template_id).output
        assert shown.splitlines()[0] == "U"
        assert "] A" not in shown
        assert shown.count("] B") == 1
        assert "[ ] C *" in shown

    def test_edit_missing_log_template(self, run):
        """Test editing an unknown template fails."""
        assert run("templates", "edit", "missing", "--name", "x").exit_code == 1

    def test_show_and_edit_export_template(self, run):
        """Test an export template's settings can be shown and changed."""
        template_id = created_id(run(
            "export-templates", "add", "E", "--format", "pdf", "--header", "H"
        ))
        shown = run("export-templates", "show", template_id).output
        assert "Format: pdf" in shown
        assert "Header: H" in shown

        result = run(
            "export-templates", "edit", template_id,
            "--format", "xlsx", "--no-header", "--footer", "F", "--checklist"
        )
        assert result.exit_code == 0, result.output

        shown = run("export-templates", "show", template_id).output
        assert "Format: xlsx" in shown
        assert "Sections: footer, checklist" in shown
        assert "Footer: F" in shown
        assert "Header:" not in shown

    def test_edit_export_template_conflicting_flags(self, run):
        """Test enabling and disabling the header at once is rejected."""
        template_id = created_id(run("export-templates", "add", "E"))
        result = run("export-templates", "edit", template_id, "--header", "H", "--no-header")
        assert result.exit_code == 2

    def test_missing_export_template(self, run):
        """Test unknown export templates fail show and edit."""
        assert run("export-templates", "show", "missing").exit_code == 1
        assert run("export-templates", "edit", "missing", "--name", "x").exit_code == 1


class TestExportCommands:
    """Test export and history commands."""

    def test_export_and_redownload(self, run, temp_dir):
        """Test exporting a text document and repeating it from history."""
        run("logs", "add", "--title", "일지", "--content", "본문")
        template_id = created_id(run("export-templates", "add", "보고서", "--format", "text"))

        result = run("export", "run", template_id, "weekly")
        assert result.exit_code == 0, result.output
        exported = temp_dir / "exports" / "weekly.txt"
        assert exported.read_text(encoding="utf-8").startswith("보고서 출력 문서")

        history = run("history", "list").output
        assert "weekly.txt" in history
        history_id = history.split()[0]

        exported.unlink()
        assert run("history", "redownload", history_id).exit_code == 0
        assert exported.exists()

        assert run("history", "delete", history_id).exit_code == 0
        assert "No exports yet." in run("history", "list").output

    def test_export_failure(self, run):
        """Test an unknown template fails the command."""
        run("logs", "add", "--title", "일지")
        result = run("export", "run", "missing", "weekly")
        assert result.exit_code == 1
        assert "Export failed" in result.output

    def test_export_template_listing(self, run):
        """Test export templates show their enabled sections."""
        template_id = created_id(run(
            "export-templates", "add", "E", "--format", "docx", "--header", "H", "--checklist"
        ))
        listing = run("export-templates", "list").output
        assert template_id in listing
        assert "docx" in listing
        assert "header, checklist" in listing

        assert run("export-templates", "delete", template_id).exit_code == 0
        assert "No export templates." in run("export-templates", "list").output
