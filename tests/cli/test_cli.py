"""Tests for the ESGenius CLI.

Tests cover:
- status and version output
- Upload, list, show and delete of reports
- Section management commands
- analyze with a mocked auditor, translate with a mocked translator
- reset confirmation
"""

import json
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from esgenius.cli import main as cli_main
from esgenius.data_management.schemas import FlaggedStatement, GreenwashingAnalysis, RiskLevel
from esgenius.extraction.pdf_text import PdfExtractionResult
from esgenius.pipelines import analysis_pipeline
from esgenius.pipelines.analysis_pipeline import AnalysisPipeline

runner = CliRunner()


# ── Fixtures ──────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    monkeypatch.setattr(cli_main.console, "width", 200)


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def pdf_file(tmp_path):
    path = tmp_path / "acme-2024.pdf"
    path.write_bytes(b"%PDF-1.4 fake report")
    return path


def _invoke(*args):
    return runner.invoke(cli_main.app, [str(a) for a in args])


def _upload(pdf_file, data_dir) -> str:
    result = _invoke("upload", pdf_file, "--data-dir", data_dir, "--category", "Energy")
    assert result.exit_code == 0, result.output
    index = json.loads((data_dir / "db" / "pdfs.json").read_text())
    return index["pdfs"][-1]["id"]


@pytest.fixture
def mocked_analysis(monkeypatch, data_dir):
    auditor = MagicMock()
    auditor.analyze.return_value = GreenwashingAnalysis(
        flagged_statements=[
            FlaggedStatement(statement=f"claim {i}", risk_level=RiskLevel.MAJOR)
            for i in range(4)
        ]
    )
    monkeypatch.setattr(
        cli_main,
        "_pipeline",
        lambda _data_dir: AnalysisPipeline.from_data_dir(data_dir, auditor=auditor),
    )
    extracted = PdfExtractionResult(success=True, text="Acme report text", page_count=1)
    with patch.object(analysis_pipeline, "extract_pdf_text", return_value=extracted):
        yield auditor


class TestInfoCommands:
    """status and version."""

    def test_status(self):
        result = _invoke("status")
        assert result.exit_code == 0
        assert "Gemini API" in result.output
        assert "OpenRouter API" in result.output

    def test_version(self):
        result = _invoke("version")
        assert result.exit_code == 0
        assert "ESGenius" in result.output
        assert "55" in result.output


class TestReportCommands:
    """Report lifecycle through the CLI."""

    def test_upload_and_list(self, pdf_file, data_dir):
        report_id = _upload(pdf_file, data_dir)

        result = _invoke("list", "--data-dir", data_dir)
        assert result.exit_code == 0
        assert report_id in result.output
        assert "Not yet analyzed" in result.output

    def test_show(self, pdf_file, data_dir):
        report_id = _upload(pdf_file, data_dir)
        result = _invoke("show", report_id, "--data-dir", data_dir)
        assert result.exit_code == 0
        assert "acme-2024" in result.output
        assert "not yet analyzed" in result.output

    def test_show_unknown(self, data_dir):
        result = _invoke("show", "missing", "--data-dir", data_dir)
        assert result.exit_code == 1
        assert "Report not found" in result.output

    def test_delete(self, pdf_file, data_dir):
        report_id = _upload(pdf_file, data_dir)

        result = _invoke("delete", report_id, "--yes", "--data-dir", data_dir)
        assert result.exit_code == 0
        assert list((data_dir / "uploads").iterdir()) == []

        result = _invoke("delete", report_id, "--yes", "--data-dir", data_dir)
        assert result.exit_code == 1


class TestAnalysisCommands:
    """analyze, translate and reset."""

    def test_analyze_writes_score(self, pdf_file, data_dir, mocked_analysis, tmp_path):
        report_id = _upload(pdf_file, data_dir)
        out = tmp_path / "analysis.json"

        result = _invoke("analyze", report_id, "--json-out", out)
        assert result.exit_code == 0, result.output
        assert "70%" in result.output

        stored = json.loads((data_dir / "db" / "esg_analysis_results.json").read_text())
        assert stored[report_id] == {"confidenceScore": 70, "classification": "Major"}
        assert json.loads(out.read_text())["confidence_score"] == 70

    def test_analyze_unknown(self, data_dir, mocked_analysis):
        result = _invoke("analyze", "missing")
        assert result.exit_code == 1
        mocked_analysis.analyze.assert_not_called()

    def test_translate(self, tmp_path):
        analysis = GreenwashingAnalysis(
            flagged_statements=[FlaggedStatement(statement="x", risk_level=RiskLevel.MINOR)]
        )
        source = tmp_path / "analysis.json"
        source.write_text(analysis.model_dump_json())

        translator = MagicMock()
        translator.return_value.translate.return_value = {"confidence_score": 15}
        with patch("esgenius.analysis.translator.AnalysisTranslator", translator):
            result = _invoke("translate", source, "--language", "French")

        assert result.exit_code == 0, result.output
        assert '"confidence_score": 15' in result.output
        called_analysis = translator.return_value.translate.call_args.args[0]
        assert called_analysis.confidence_score == 15
        assert translator.return_value.translate.call_args.kwargs["language"] == "French"

    def test_reset_requires_confirmation(self, pdf_file, data_dir, mocked_analysis):
        report_id = _upload(pdf_file, data_dir)
        assert _invoke("analyze", report_id).exit_code == 0
        results_file = data_dir / "db" / "esg_analysis_results.json"

        result = runner.invoke(cli_main.app, ["reset"], input="n\n")
        assert result.exit_code == 1
        assert results_file.exists()

        result = runner.invoke(cli_main.app, ["reset"], input="y\n")
        assert result.exit_code == 0
        assert not results_file.exists()


class TestSectionCommands:
    """section sub-commands."""

    def _section_id(self, data_dir, name):
        sections = json.loads((data_dir / "db" / "esg_report_sections.json").read_text())
        return next(s["id"] for s in sections if s["name"] == name)

    def test_section_lifecycle(self, pdf_file, data_dir):
        report_id = _upload(pdf_file, data_dir)

        assert _invoke("section", "create", "Banks", "--data-dir", data_dir).exit_code == 0
        section_id = self._section_id(data_dir, "Banks")

        result = _invoke("section", "add", report_id, section_id, "--data-dir", data_dir)
        assert result.exit_code == 0
        assert "Banks" in result.output

        result = _invoke("section", "list", "--data-dir", data_dir)
        assert section_id in result.output

        result = _invoke("section", "rename", section_id, "Lenders", "--data-dir", data_dir)
        assert result.exit_code == 0
        assert self._section_id(data_dir, "Lenders") == section_id

        result = _invoke("section", "remove", report_id, "--data-dir", data_dir)
        assert "unsectioned" in result.output
        result = _invoke("section", "remove", report_id, "--data-dir", data_dir)
        assert "was not in a section" in result.output

        assert _invoke("section", "delete", section_id, "--data-dir", data_dir).exit_code == 0
        assert _invoke("section", "delete", section_id, "--data-dir", data_dir).exit_code == 1

    def test_add_to_unknown_section(self, pdf_file, data_dir):
        report_id = _upload(pdf_file, data_dir)
        result = _invoke("section", "add", report_id, "section_missing", "--data-dir", data_dir)
        assert result.exit_code == 1
        assert "Section not found" in result.output

    def test_create_blank_name(self, data_dir):
        result = _invoke("section", "create", "  ", "--data-dir", data_dir)
        assert result.exit_code == 1
