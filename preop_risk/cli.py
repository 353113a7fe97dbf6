"""Command Line Interface for the pre-operative risk engine.

Commands:
    assess  - score one patient and print the surgical plan
    batch   - score every record of a CSV/JSON/JSONL file
    slots   - show the configured operating room slot catalog
    info    - show the active configuration
"""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from preop_risk.domain.enums import RiskTier
from preop_risk.domain.guardrails import CircuitBreakerOpenError
from preop_risk.domain.patient_record import PatientRecord, reference_patient_record, validate_patient_record
from preop_risk.domain.ports import AssessmentError, ValidationError
from preop_risk.domain.scheduling import SurgicalPlan
from preop_risk.domain.services import plan_surgery
from preop_risk.domain.services.resource_advisor import describe_resources
from preop_risk.infrastructure.logging_config import setup_logging
from preop_risk.infrastructure.settings import APP_VERSION, settings
from preop_risk.infrastructure.slot_catalog import load_slot_catalog
from preop_risk.pipeline import process_batch

app = typer.Typer(
    name="preop-risk",
    help="Pre-operative risk scoring and surgical planning",
    add_completion=False
)
console = Console()

TIER_STYLES = {
    RiskTier.LOW: "green",
    RiskTier.MODERATE: "yellow",
    RiskTier.HIGH: "red",
}


def _load_record(input_file: Optional[Path]) -> PatientRecord:
    if input_file is None:
        return reference_patient_record()
    try:
        with open(input_file, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError(f"Invalid JSON in {input_file}: {str(e)}", source=str(input_file)) from e
    return validate_patient_record(data, source=str(input_file))


def _print_plan(plan: SurgicalPlan) -> None:
    assessment = plan.assessment
    tier_style = TIER_STYLES[assessment.overall_risk]

    console.print("\n[bold blue]Risk Assessment[/bold blue]")
    scores_table = Table(show_header=False, box=None, padding=(0, 2))
    for category, score in assessment.category_scores().items():
        scores_table.add_row(f"{category}:", f"{score:.1f}%")
    scores_table.add_row(
        "Overall risk:",
        f"[bold {tier_style}]{assessment.overall_risk.value}[/bold {tier_style}]"
    )
    console.print(scores_table)

    if assessment.risk_factors:
        factors_table = Table(title="Risk Factors")
        factors_table.add_column("Factor", style="bold")
        factors_table.add_column("Impact", justify="right")
        factors_table.add_column("Explanation")
        for rf in assessment.risk_factors:
            factors_table.add_row(rf.factor, f"{rf.impact:.1f}", rf.explanation)
        console.print(factors_table)
    else:
        console.print("[dim]No risk factors identified[/dim]")

    console.print("\n[bold]Required Resources:[/bold]")
    for resource in describe_resources(plan.required_resources):
        console.print(f"  - {resource}")

    slots_table = Table(title="Operating Room Slots")
    slots_table.add_column("Slot")
    slots_table.add_column("Date")
    slots_table.add_column("Time")
    slots_table.add_column("Room")
    slots_table.add_column("Team")
    slots_table.add_column("Recommended")
    slots_table.add_column("Rationale")
    for annotated in plan.slots:
        slot = annotated.slot
        slots_table.add_row(
            slot.slot_id,
            slot.scheduled_date.isoformat(),
            slot.start_time,
            slot.operating_room,
            slot.surgical_team,
            "[green]yes[/green]" if annotated.recommended else "[dim]no[/dim]",
            annotated.rationale,
        )
    console.print(slots_table)

    console.print(f"\n[bold]Estimated duration:[/bold] {plan.duration.display}")
    for advisory in plan.advisories:
        console.print(f"[yellow]![/yellow] {advisory}")


@app.command()
def assess(
    input_file: Optional[Path] = typer.Argument(
        None, help="Patient record JSON file (default: built-in reference record)", exists=True, dir_okay=False
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the surgical plan as JSON"),
) -> None:
    """Assess one patient and print the surgical plan.

    Examples:
        preop-risk assess
        preop-risk assess patient.json --json
    """
    try:
        record = _load_record(input_file)
        catalog = load_slot_catalog(settings.slot_catalog_path)
        plan = plan_surgery(record, catalog)
    except AssessmentError as e:
        console.print(f"[red]✗[/red] Assessment failed: {str(e)}")
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(plan.model_dump_json(by_alias=True, indent=2))
        return
    _print_plan(plan)


@app.command()
def batch(
    input_file: Path = typer.Argument(..., help="Input file path (CSV, TSV, JSON or JSONL)", exists=True, dir_okay=False),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Results file (.csv or .json); default: <report dir>/<input>_assessments.csv"
    ),
    chunk_size: Optional[int] = typer.Option(None, "--chunk-size", "-c", min=1, help="CSV read chunk size"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging and list rejected records"),
) -> None:
    """Assess every patient record in a batch file.

    Exits with code 1 if any record was rejected.

    Examples:
        preop-risk batch data/patients.csv
        preop-risk batch data/patients.jsonl --output results.json --verbose
    """
    if verbose:
        setup_logging(use_json=settings.json_logs, log_level="DEBUG")
        console.print("[dim]Verbose logging enabled[/dim]")

    output_path = output or settings.report_path / f"{input_file.stem}_assessments.csv"
    console.print("\n[bold blue]Batch Risk Assessment[/bold blue]")
    console.print(f"[dim]Input file:[/dim] {input_file}")
    console.print(f"[dim]Output file:[/dim] {output_path}")

    try:
        with console.status("[bold green]Assessing records..."):
            result = process_batch(input_file, output_path=output_path, chunk_size=chunk_size)
    except CircuitBreakerOpenError as e:
        console.print(
            f"\n[red]✗[/red] Batch aborted: {str(e)} "
            f"({e.failures} of {e.records_processed} records rejected)"
        )
        raise typer.Exit(code=1)
    except AssessmentError as e:
        console.print(f"\n[red]✗[/red] Batch failed: {str(e)}")
        raise typer.Exit(code=1)

    console.print("\n[bold]Batch Summary:[/bold]")
    summary_table = Table(show_header=False, box=None, padding=(0, 2))
    summary_table.add_row("Total processed:", f"[bold]{result.total_count:,}[/bold]")
    summary_table.add_row("Assessed:", f"[green]{result.success_count:,}[/green]")
    summary_table.add_row(
        "Rejected:",
        f"[red]{result.failure_count:,}[/red]" if result.failure_count > 0 else f"{result.failure_count:,}"
    )
    for tier, count in result.tier_counts().items():
        style = TIER_STYLES[RiskTier(tier)]
        summary_table.add_row(f"{tier} risk:", f"[{style}]{count:,}[/{style}]")
    if result.breaker_stats:
        stats = result.breaker_stats
        summary_table.add_row(
            "Failure rate:", f"{stats['failure_rate']:.1f}% of last {stats['records_in_window']:,} records"
        )
    summary_table.add_row("Run ID:", result.run_id)
    console.print(summary_table)

    if verbose and result.failures:
        failures_table = Table(title="Rejected Records")
        failures_table.add_column("Record", justify="right")
        failures_table.add_column("Error Type")
        failures_table.add_column("Error")
        for failure in result.failures:
            failures_table.add_row(str(failure["record_index"]), failure["error_type"], failure["error"])
        console.print(failures_table)

    console.print(f"\n[green]✓[/green] Results saved: {result.output_path}")
    if result.failure_count > 0:
        console.print(f"[yellow]⚠[/yellow] {result.failure_count} records rejected")
        raise typer.Exit(code=1)


@app.command()
def slots() -> None:
    """Display the configured operating room slot catalog."""
    try:
        catalog = load_slot_catalog(settings.slot_catalog_path)
    except AssessmentError as e:
        console.print(f"[red]✗[/red] Cannot load slot catalog: {str(e)}")
        raise typer.Exit(code=1)

    table = Table(title=f"Slot Catalog ({len(catalog)} slots)")
    table.add_column("Slot")
    table.add_column("Date")
    table.add_column("Time")
    table.add_column("Room")
    table.add_column("Team")
    for slot in catalog:
        table.add_row(
            slot.slot_id, slot.scheduled_date.isoformat(), slot.start_time, slot.operating_room, slot.surgical_team
        )
    console.print(table)


@app.command()
def info() -> None:
    """Display application configuration."""
    console.print("[bold blue]System Information[/bold blue]\n")

    info_table = Table(show_header=False, box=None, padding=(0, 2))
    for name, value in settings.as_dict().items():
        info_table.add_row(f"{name.replace('_', ' ').title()}:", _format_setting(value))
    console.print(info_table)


def _format_setting(value) -> str:
    if value is None:
        return "default"
    if isinstance(value, bool):
        return "Enabled" if value else "Disabled"
    return str(value)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"{settings.app_name} v{APP_VERSION}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False, "--version", help="Show version information", callback=_version_callback, is_eager=True
    )
) -> None:
    """Pre-operative risk scoring and surgical planning."""
    setup_logging(use_json=settings.json_logs, log_level=settings.log_level)


if __name__ == "__main__":
    app()
