"""Interactive CLI for ESGenius using Typer and Rich."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from esgenius.config.settings import settings
from esgenius.config.logging import get_logger
from esgenius.data_management.errors import (
    ReportNotFoundError,
    SectionNotFoundError,
    StoreWriteError,
)
from esgenius.data_management.schemas import Classification, GreenwashingAnalysis
from esgenius.pipelines.analysis_pipeline import AnalysisPipeline
from esgenius.pipelines.dashboard import ReportCard, load_dashboard
from esgenius.scoring import MAJOR_THRESHOLD

app = typer.Typer(
    help="ESGenius CLI - ESG report greenwashing screening",
    add_completion=False,
)
section_app = typer.Typer(help="Manage report sections")
app.add_typer(section_app, name="section")

console = Console()

logger = get_logger("cli")

DataDirOption = typer.Option(None, "--data-dir", help="Data directory (defaults to DATA_DIR)")


def _pipeline(data_dir: Optional[Path]) -> AnalysisPipeline:
    return AnalysisPipeline.from_data_dir(data_dir)


def _fail(message: str) -> None:
    console.print(f"\n[red]✗[/red] {message}")
    raise typer.Exit(1)


def _classification_label(classification: Optional[Classification]) -> str:
    if classification is Classification.MAJOR:
        return "[red]Major[/red]"
    if classification is Classification.MINOR:
        return "[yellow]Minor[/yellow]"
    return "[dim]Not analyzed[/dim]"


def _add_card_rows(table: Table, group: str, cards: list[ReportCard]) -> None:
    for card in cards:
        score = "-" if card.confidence_score is None else f"{card.confidence_score}%"
        table.add_row(
            group,
            card.id,
            card.report.title,
            card.report.category,
            score,
            _classification_label(card.classification),
        )


@app.command()
def status() -> None:
    """Display system configuration."""
    logger.info("Displaying system status")

    table = Table(title="ESGenius Status", show_header=True, header_style="bold magenta")
    table.add_column("Component", style="cyan", width=20)
    table.add_column("Status", style="green", width=15)
    table.add_column("Details", style="yellow")

    python_version = f"Python {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
    table.add_row("Environment", "✓ Ready", python_version)

    gemini_status = "✓ Configured" if settings.gemini_api_key else "⚠ Not Configured"
    table.add_row("Gemini API", gemini_status, settings.gemini_model)

    openrouter_status = "✓ Configured" if settings.openrouter_api_key else "⚠ Not Configured"
    table.add_row("OpenRouter API", openrouter_status, settings.openrouter_model)

    table.add_row("Data", "✓ Active", str(settings.data_dir))
    table.add_row("Logging", "✓ Active", f"Level: {settings.log_level}, Format: {settings.log_format}")

    console.print(table)


@app.command()
def upload(
    pdf: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    title: Optional[str] = typer.Option(None, help="Display title"),
    category: Optional[str] = typer.Option(None, help="Report category"),
    description: Optional[str] = typer.Option(None, help="Short description"),
    data_dir: Optional[Path] = DataDirOption,
) -> None:
    """Upload a PDF report."""
    pipeline = _pipeline(data_dir)
    try:
        report = asyncio.run(
            pipeline.report_store.add_report(
                pdf.name,
                pdf.read_bytes(),
                title=title,
                category=category,
                description=description,
            )
        )
    except (ValueError, StoreWriteError) as e:
        _fail(f"Upload failed: {e}")

    console.print(f"[green]✓[/green] Uploaded [bold]{report.title}[/bold] as {report.id}")


@app.command("list")
def list_reports(data_dir: Optional[Path] = DataDirOption) -> None:
    """List reports grouped by section and classification."""
    pipeline = _pipeline(data_dir)
    view = asyncio.run(
        load_dashboard(pipeline.report_store, pipeline.analysis_store, pipeline.section_store)
    )

    table = Table(title="ESG Reports", show_header=True, header_style="bold magenta")
    table.add_column("Group", style="cyan")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Title")
    table.add_column("Category")
    table.add_column("Score", justify="right")
    table.add_column("Classification")

    for section_view in view.sections:
        _add_card_rows(table, section_view.section.name, section_view.cards)
    _add_card_rows(table, "Major cross-checking needed", view.major)
    _add_card_rows(table, "Minor cross-checking needed", view.minor)
    _add_card_rows(table, "Not yet analyzed", view.not_analyzed)

    console.print(table)


@app.command()
def show(report_id: str, data_dir: Optional[Path] = DataDirOption) -> None:
    """Show a report's metadata and stored analysis."""
    pipeline = _pipeline(data_dir)

    async def _load():
        return (
            await pipeline.report_store.get_report(report_id),
            await pipeline.analysis_store.get(report_id),
            await pipeline.section_store.get_section_for_report(report_id),
        )

    report, record, section = asyncio.run(_load())
    if report is None:
        _fail(f"Report not found: {report_id}")

    lines = [
        f"[bold]{report.title}[/bold] ({report.file_name})",
        f"Category: {report.category}",
        f"Uploaded: {report.upload_date:%Y-%m-%d %H:%M}",
        f"Section: {section.name if section else '-'}",
    ]
    if record is None:
        lines.append("Analysis: [dim]not yet analyzed[/dim]")
    else:
        lines.append(
            f"Potential greenwashing: {record.confidence_score}% "
            f"({_classification_label(record.classification)})"
        )
    console.print(Panel("\n".join(lines), title=report_id, border_style="green"))


def _print_analysis(analysis: GreenwashingAnalysis) -> None:
    profile = analysis.report_metadata
    console.print(Panel(
        f"Company: {profile.company_name or '-'}\n"
        f"Year: {profile.reporting_year or '-'}\n"
        f"Frameworks claimed: {', '.join(analysis.frameworks_claimed) or '-'}\n"
        f"Potential greenwashing: {analysis.confidence_score}% "
        f"({_classification_label(analysis.classification)} cross checking needed)",
        title="ESG Analysis",
        border_style="green",
    ))

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Risk")
    table.add_column("Category", style="cyan")
    table.add_column("Statement")
    table.add_column("Reason", style="dim")
    for statement in analysis.flagged_statements:
        risk = statement.risk_level.value if statement.risk_level else "?"
        table.add_row(risk, statement.esg_category.value, statement.statement, statement.reason)
    console.print(table)


@app.command()
def analyze(
    report_id: str,
    json_out: Optional[Path] = typer.Option(None, "--json-out", help="Write the full analysis as JSON"),
    data_dir: Optional[Path] = DataDirOption,
) -> None:
    """Analyze a report for potential greenwashing and save its score."""
    pipeline = _pipeline(data_dir)
    logger.info(f"Analyze command invoked: {report_id}")

    try:
        outcome = asyncio.run(pipeline.analyze_report(report_id))
    except ReportNotFoundError as e:
        _fail(str(e))
    except StoreWriteError as e:
        _fail(f"Failed to save analysis: {e}")
    except Exception as e:
        logger.error(f"Analysis failed: {e}")
        _fail(f"Analysis failed: {e}")

    _print_analysis(outcome.analysis)
    if json_out:
        json_out.write_text(
            json.dumps(outcome.analysis.model_dump(mode="json"), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        console.print(f"[dim]Analysis written to {json_out}[/dim]")


@app.command()
def translate(
    analysis_json: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    language: str = typer.Option("Chinese", help="Target language"),
) -> None:
    """Translate a saved analysis (from analyze --json-out)."""
    from esgenius.analysis.translator import AnalysisTranslator

    try:
        analysis = GreenwashingAnalysis.model_validate_json(analysis_json.read_text(encoding="utf-8"))
        translated = AnalysisTranslator().translate(analysis, language=language)
    except Exception as e:
        logger.error(f"Translation failed: {e}")
        _fail(f"Failed to translate ESG analysis: {e}")

    console.print_json(json.dumps(translated, ensure_ascii=False))


@app.command()
def chat(
    report_id: Optional[str] = typer.Argument(None, help="Report to use as context"),
    data_dir: Optional[Path] = DataDirOption,
) -> None:
    """Chat with the ESG assistant, optionally about a stored report."""
    from esgenius.analysis.assistant import ESGAssistant
    from esgenius.llm.openrouter_client import OpenRouterClient

    pipeline = _pipeline(data_dir)

    async def _session() -> None:
        text = None
        if report_id:
            text = await pipeline.extract_report_text(report_id)
            console.print(f"[dim]Loaded {len(text)} characters of report context[/dim]")

        async with OpenRouterClient() as client:
            assistant = ESGAssistant(client, report_text=text)
            while True:
                question = typer.prompt("You", default="", show_default=False)
                if question.strip().lower() in {"", "exit", "quit"}:
                    break
                answer = await assistant.ask(question)
                console.print(Panel(answer, title="ESGenius Assistant", border_style="cyan"))

    try:
        asyncio.run(_session())
    except Exception as e:
        logger.error(f"Chat failed: {e}")
        _fail(f"Chat failed: {e}")


@app.command()
def delete(
    report_id: str,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    data_dir: Optional[Path] = DataDirOption,
) -> None:
    """Delete a report with its analysis and section membership."""
    if not yes:
        typer.confirm(f"Delete report {report_id}?", abort=True)

    try:
        deleted = asyncio.run(_pipeline(data_dir).delete_report(report_id))
    except StoreWriteError as e:
        _fail(f"Failed to delete report: {e}")

    if not deleted:
        _fail(f"Report not found: {report_id}")
    console.print(f"[green]✓[/green] Deleted report {report_id}")


@app.command()
def reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    data_dir: Optional[Path] = DataDirOption,
) -> None:
    """Clear all stored analysis results (reports are kept)."""
    if not yes:
        typer.confirm(
            "Reset all analysis results? Every report will show as not yet analyzed.",
            abort=True,
        )

    try:
        asyncio.run(_pipeline(data_dir).reset_analyses())
    except StoreWriteError as e:
        _fail(f"Failed to reset analysis data: {e}")

    console.print(
        "[green]✓[/green] Analysis data has been reset. "
        "New scores will be calculated on next analysis."
    )


@section_app.command("create")
def section_create(name: str, data_dir: Optional[Path] = DataDirOption) -> None:
    """Create a section."""
    try:
        section = asyncio.run(_pipeline(data_dir).section_store.create_section(name))
    except (ValueError, StoreWriteError) as e:
        _fail(f"Failed to create section: {e}")
    console.print(f"[green]✓[/green] Created section [bold]{section.name}[/bold] ({section.id})")


@section_app.command("list")
def section_list(data_dir: Optional[Path] = DataDirOption) -> None:
    """List sections and their member counts."""
    sections = asyncio.run(_pipeline(data_dir).section_store.get_sections())

    table = Table(title="Sections", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="cyan")
    table.add_column("Reports", justify="right")
    for section in sections:
        table.add_row(section.id, section.name, str(len(section.reports)))
    console.print(table)


@section_app.command("rename")
def section_rename(section_id: str, name: str, data_dir: Optional[Path] = DataDirOption) -> None:
    """Rename a section."""
    try:
        asyncio.run(_pipeline(data_dir).section_store.rename_section(section_id, name))
    except (SectionNotFoundError, ValueError, StoreWriteError) as e:
        _fail(f"Failed to update section: {e}")
    console.print(f"[green]✓[/green] Renamed section {section_id}")


@section_app.command("delete")
def section_delete(section_id: str, data_dir: Optional[Path] = DataDirOption) -> None:
    """Delete a section (its reports become unsectioned)."""
    try:
        deleted = asyncio.run(_pipeline(data_dir).section_store.delete_section(section_id))
    except StoreWriteError as e:
        _fail(f"Failed to delete section: {e}")
    if not deleted:
        _fail(f"Section not found: {section_id}")
    console.print(f"[green]✓[/green] Deleted section {section_id}")


@section_app.command("add")
def section_add(report_id: str, section_id: str, data_dir: Optional[Path] = DataDirOption) -> None:
    """Move a report into a section."""
    try:
        section = asyncio.run(_pipeline(data_dir).section_store.add_to_section(report_id, section_id))
    except (SectionNotFoundError, StoreWriteError) as e:
        _fail(f"Failed to add report to section: {e}")
    console.print(f"[green]✓[/green] Moved {report_id} to [bold]{section.name}[/bold]")


@section_app.command("remove")
def section_remove(report_id: str, data_dir: Optional[Path] = DataDirOption) -> None:
    """Remove a report from its section."""
    try:
        was_member = asyncio.run(
            _pipeline(data_dir).section_store.remove_from_all_sections(report_id)
        )
    except StoreWriteError as e:
        _fail(f"Failed to remove report from section: {e}")

    if was_member:
        console.print(f"[green]✓[/green] Report {report_id} moved to unsectioned reports")
    else:
        console.print(f"[dim]Report {report_id} was not in a section[/dim]")


@app.command()
def version() -> None:
    """Display version information."""
    console.print("[bold]ESGenius[/bold]")
    console.print("Version: 0.1.0")
    console.print(f"Major threshold: score > {MAJOR_THRESHOLD}")


if __name__ == "__main__":
    app()
