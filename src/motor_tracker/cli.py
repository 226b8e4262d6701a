"""CLI application using Typer."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="motor-tracker",
    help="Parkinson's motor-symptom tracking: spiral, tapping and medication state",
    no_args_is_help=True,
)
console = Console()
logger = logging.getLogger(__name__)

# Sub-applications
config_app = typer.Typer(help="Configuration management")
spiral_app = typer.Typer(help="Spiral drawing analysis")
tap_app = typer.Typer(help="Finger tapping analysis")
med_app = typer.Typer(help="Medication log")

app.add_typer(config_app, name="config")
app.add_typer(spiral_app, name="spiral")
app.add_typer(tap_app, name="tap")
app.add_typer(med_app, name="med")

UserOption = Annotated[str, typer.Option("--user", "-u", help="User identifier")]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
):
    """Configure logging for all commands."""
    from motor_tracker.core.config import get_settings

    settings = _run(get_settings)
    level = logging.DEBUG if verbose else getattr(logging, settings.logging.level, logging.INFO)
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _load_json(path: Path) -> Any:
    if not path.exists():
        console.print(f"[red]File not found: {path}[/red]")
        raise typer.Exit(1)
    try:
        return json.loads(path.read_text())
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON in {path}: {e}[/red]")
        raise typer.Exit(1)


def _spiral_payload(data: Any) -> dict[str, Any]:
    """Accept either a bare point list or a {"points": [...]} object."""
    return {"points": data} if isinstance(data, list) else data


def _tap_list(data: Any) -> list[dict[str, Any]]:
    """Accept raw timestamps, tap objects or a {"taps": [...]} object."""
    from motor_tracker.analysis.tapping import build_tap_events

    taps = data.get("taps", []) if isinstance(data, dict) else data
    if taps and all(isinstance(t, (int, float)) for t in taps):
        return [
            {"timestamp": e.timestamp, "interval": e.interval} for e in build_tap_events([int(t) for t in taps])
        ]
    return taps


def _metrics_table(title: str, metrics: dict[str, Any]) -> Table:
    table = Table(title=title)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    for key, value in metrics.items():
        table.add_row(key, f"{value:.2f}" if isinstance(value, float) else str(value))
    return table


def _run(func, *args, **kwargs):
    """Call a service operation, reporting tracker errors."""
    from motor_tracker.core.errors import TrackerError

    try:
        return func(*args, **kwargs)
    except TrackerError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


def _service():
    from motor_tracker.core.database import init_db
    from motor_tracker.tracking.service import TrackingService

    init_db()
    return TrackingService()


def _require_gate(metrics) -> None:
    """Exit with the unmet capture requirements, if any."""
    from motor_tracker.core.config import get_settings

    problems = get_settings().capture.to_gate().check(metrics)
    if problems:
        for problem in problems:
            console.print(f"[yellow]- {problem}[/yellow]")
        raise typer.Exit(1)


# ============================================================================
# Config commands
# ============================================================================


@config_app.command("show")
def config_show():
    """Show current configuration."""
    from motor_tracker.core.config import get_settings

    data = get_settings().to_dict()

    console.print("[bold]Current Configuration[/bold]\n")

    for section, values in data.items():
        console.print(f"[cyan]{section}:[/cyan]")
        for key, value in values.items():
            # Mask sensitive values
            if "api_key" in key.lower() and value:
                value = value[:8] + "..." if len(str(value)) > 8 else "***"
            console.print(f"  {key}: {value}")
        console.print()


@config_app.command("init")
def config_init(
    path: Annotated[Path, typer.Option("--path", "-p", help="Config file path")] = Path(
        "config/settings.yaml"
    ),
):
    """Initialize configuration file."""
    path.parent.mkdir(parents=True, exist_ok=True)

    if path.exists():
        console.print(f"[yellow]Config already exists at {path}[/yellow]")
        if not typer.confirm("Overwrite?"):
            raise typer.Abort()

    yaml_content = """# Motor Tracker Configuration

database:
  url: sqlite:///data/motor_tracker.db
  echo: false

claude:
  # Set ANTHROPIC_API_KEY environment variable or add key here
  api_key: ""
  model: claude-sonnet-4-20250514
  max_tokens: 200
  temperature: 0.3

capture:
  # strict: points/duration/path minimums below; simple: 10 points
  gate: strict
  min_points: 40
  min_duration_ms: 3500
  min_path_length: 500

logging:
  level: INFO
"""

    path.write_text(yaml_content)
    console.print(f"[green]Created config at {path}[/green]")


# ============================================================================
# Spiral commands
# ============================================================================


@spiral_app.command("analyze")
def spiral_analyze(
    file: Annotated[Path, typer.Argument(help="JSON file with spiral points")],
):
    """Analyze a spiral drawing without saving it."""
    from motor_tracker.analysis.spiral import SpiralAnalyzer
    from motor_tracker.tracking.schemas import SpiralSessionRequest, parse_payload

    request = _run(parse_payload, SpiralSessionRequest, _spiral_payload(_load_json(file)))
    result = SpiralAnalyzer().analyze(request.to_points())
    console.print(_metrics_table("Spiral Analysis", result.to_dict()))


@spiral_app.command("check")
def spiral_check(
    file: Annotated[Path, typer.Argument(help="JSON file with spiral points")],
):
    """Show live capture metrics and whether the capture may be submitted."""
    from motor_tracker.analysis.spiral import compute_live_metrics
    from motor_tracker.tracking.schemas import SpiralSessionRequest, parse_payload

    request = _run(parse_payload, SpiralSessionRequest, _spiral_payload(_load_json(file)))
    metrics = compute_live_metrics(request.to_points())
    console.print(_metrics_table("Capture Metrics", metrics.to_dict()))

    _require_gate(metrics)
    console.print("[green]Ready to analyze[/green]")


@spiral_app.command("submit")
def spiral_submit(
    file: Annotated[Path, typer.Argument(help="JSON file with spiral points")],
    user: UserOption = "local",
):
    """Analyze a spiral drawing and store it if the capture is complete."""
    from motor_tracker.analysis.spiral import compute_live_metrics
    from motor_tracker.tracking.schemas import SpiralSessionRequest, parse_payload

    payload = _spiral_payload(_load_json(file))
    request = _run(parse_payload, SpiralSessionRequest, payload)
    _require_gate(compute_live_metrics(request.to_points()))

    service = _service()
    row = _run(service.submit_spiral, user, payload)
    console.print(f"[green]Saved session {row.id}: severity {row.severity_score} ({row.tremor_state})[/green]")


@spiral_app.command("list")
def spiral_list(
    user: UserOption = "local",
    limit: Annotated[int, typer.Option("--limit", "-l", help="Max sessions to show")] = 20,
):
    """List stored spiral sessions."""
    sessions = _service().storage.get_sessions(user)[:limit]
    if not sessions:
        console.print("[yellow]No sessions recorded[/yellow]")
        return

    table = Table(title="Spiral Sessions")
    table.add_column("ID", justify="right")
    table.add_column("Time")
    table.add_column("Severity", justify="right")
    table.add_column("State", style="cyan")
    table.add_column("Frequency (Hz)", justify="right")

    for s in sessions:
        table.add_row(
            str(s.id),
            s.timestamp.strftime("%Y-%m-%d %H:%M"),
            f"{s.severity_score or 0:.1f}",
            s.tremor_state or "-",
            f"{s.estimated_frequency or 0:.1f}",
        )
    console.print(table)


# ============================================================================
# Tapping commands
# ============================================================================


@tap_app.command("analyze")
def tap_analyze(
    file: Annotated[Path, typer.Argument(help="JSON file with tap timestamps or tap events")],
):
    """Analyze a tapping capture without saving it."""
    from motor_tracker.analysis.tapping import TapAnalyzer
    from motor_tracker.tracking.schemas import FingerTappingRequest, parse_payload

    request = _run(
        parse_payload, FingerTappingRequest, {"hand": "right", "taps": _tap_list(_load_json(file))}
    )
    result = TapAnalyzer().analyze(request.to_events())
    console.print(_metrics_table("Finger Tapping Analysis", result.to_dict()))


@tap_app.command("submit")
def tap_submit(
    file: Annotated[Path, typer.Argument(help="JSON file with tap timestamps or tap events")],
    hand: Annotated[str, typer.Option("--hand", help="left or right")] = "right",
    user: UserOption = "local",
):
    """Analyze a tapping capture and store it."""
    service = _service()
    payload = {"hand": hand, "taps": _tap_list(_load_json(file))}
    row = _run(service.submit_finger_tapping, user, payload)
    console.print(
        f"[green]Saved tapping session {row.id}: {row.taps_per_second:.1f} taps/s, "
        f"regularity {row.regularity_score:.0f}%[/green]"
    )


# ============================================================================
# Medication commands
# ============================================================================


@med_app.command("log")
def med_log(
    name: Annotated[str, typer.Argument(help="Medication name")],
    dosage: Annotated[Optional[str], typer.Option("--dosage", "-d", help="Dosage")] = None,
    time: Annotated[
        Optional[str], typer.Option("--time", "-t", help="ISO time taken (default: now)")
    ] = None,
    user: UserOption = "local",
):
    """Log a medication dose."""
    payload: dict[str, Any] = {"medicationName": name, "dosage": dosage}
    if time:
        payload["timeTaken"] = time
    row = _run(_service().log_medication, user, payload)
    console.print(f"[green]Logged {row.medication_name} (id {row.id}) at {row.time_taken:%Y-%m-%d %H:%M}[/green]")


@med_app.command("list")
def med_list(user: UserOption = "local"):
    """List logged doses."""
    logs = _service().storage.get_medication_logs(user)
    if not logs:
        console.print("[yellow]No medication logged[/yellow]")
        return

    table = Table(title="Medication Log")
    table.add_column("ID", justify="right")
    table.add_column("Medication", style="cyan")
    table.add_column("Dosage")
    table.add_column("Taken")

    for m in logs:
        table.add_row(str(m.id), m.medication_name, m.dosage or "-", m.time_taken.strftime("%Y-%m-%d %H:%M"))
    console.print(table)


@med_app.command("delete")
def med_delete(
    log_id: Annotated[int, typer.Argument(help="Medication log ID")],
    user: UserOption = "local",
):
    """Delete a logged dose."""
    _run(_service().delete_medication, user, log_id)
    console.print(f"[green]Deleted medication log {log_id}[/green]")


# ============================================================================
# Dashboard and insight
# ============================================================================


@app.command("dashboard")
def dashboard(
    user: UserOption = "local",
    as_json: Annotated[bool, typer.Option("--json", help="Print raw JSON")] = False,
):
    """Show medication state, tremor trend and timeline."""
    snapshot = _service().dashboard(user)
    data = snapshot.to_dict()

    if as_json:
        typer.echo(json.dumps(data, indent=2))
        return

    console.print(f"[bold]Medication state:[/bold] {data['currentMedicationState']}")
    console.print(f"[bold]Minutes since last dose:[/bold] {data['timeSinceLastDoseMinutes']}")
    console.print(f"[bold]Tremor trend:[/bold] {data['tremorTrend']}")
    console.print(f"[bold]Average tremor score:[/bold] {data['averageTremorScore']}")
    console.print(f"\n[cyan]{data['insight']}[/cyan]")


@app.command("report")
def report(
    user: UserOption = "local",
    days: Annotated[int, typer.Option("--days", "-d", min=1, help="Window length in days")] = 7,
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Write Markdown here")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print raw JSON")] = False,
):
    """Summarize recent sessions and doses."""
    from motor_tracker.tracking.report import render_report

    summary = _service().report(user, days=days)

    if as_json:
        typer.echo(json.dumps(summary.to_dict(), indent=2))
        return

    content = render_report(summary, output)
    if output:
        console.print(f"[green]Report saved to {output}[/green]")
    else:
        typer.echo(content)


@app.command("insight")
def insight(
    user: UserOption = "local",
    prompt: Annotated[Optional[str], typer.Option("--prompt", "-p", help="Custom prompt")] = None,
):
    """Generate an AI summary of recent history."""
    service = _service()
    with console.status("Generating insight..."):
        text = _run(service.generate_insight, user, prompt)
    console.print(text)


if __name__ == "__main__":
    app()
