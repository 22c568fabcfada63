import os
import sys
from datetime import date

from rich.console import Console
from rich.prompt import Prompt, Confirm
from rich.panel import Panel
from rich.table import Table

from energy_balance.config import MAX_REPORT_DAYS
from energy_balance.consumption_grid import profile_stats
from energy_balance.exporter import save_report_csv, save_report_xlsx
from energy_balance.file_reader import (
    clean_path,
    read_consumption_slots,
    read_insolation_samples,
)
from energy_balance.models import Location, ReportData, load_locations_json, primary_location
from energy_balance.mwe import (
    build_mwe_schedule,
    generate_mwe_csv,
    mwe_filename,
    validate_mwe_schedule,
)
from energy_balance.report import build_report, check_data_availability
from energy_balance.utils import build_output_filename
from energy_balance.validation import ValidationError, as_date

console = Console()

STATUS_COLORS = {"PASS": "green", "WARN": "yellow", "FAIL": "red"}


def prompt_file_path(label: str) -> str:
    """Ask for an existing file path (drag-and-drop friendly)."""
    while True:
        path = clean_path(Prompt.ask(f"  {label}"))
        if os.path.isfile(path):
            return path
        console.print(f"  [red]File not found: {path}[/red]")


def prompt_location(locations: list[Location]) -> Location:
    """Pick a location; the primary one is the default choice."""
    if not locations:
        raise ValidationError("No locations defined", field="locations")

    console.print("\n[bold yellow]Locations[/bold yellow]")
    for i, loc in enumerate(locations):
        marker = " [cyan](primary)[/cyan]" if loc.is_primary else ""
        console.print(f"    ({i + 1}) {loc.name} - {loc.city}, "
                      f"{loc.pv_power_kwp:g} kWp{marker}")

    primary = primary_location(locations)
    default_idx = locations.index(primary) + 1 if primary else 1
    choices = [str(i + 1) for i in range(len(locations))]
    choice = Prompt.ask("  Select location", choices=choices, default=str(default_idx))
    return locations[int(choice) - 1]


def prompt_date(label: str, default: date | None = None) -> date:
    """Ask for a YYYY-MM-DD date until a valid one is entered."""
    default_str = default.isoformat() if default else None
    while True:
        answer = Prompt.ask(f"  {label} (YYYY-MM-DD)", default=default_str)
        try:
            return as_date(answer, label)
        except ValidationError as e:
            console.print(f"  [red]{e}[/red]")


def display_availability(availability: dict):
    table = Table(title="Data Availability", show_lines=True)
    table.add_column("Check", style="bold", width=22)
    table.add_column("Status", width=8)
    table.add_column("Details", width=60)
    for check in availability["checks"]:
        color = STATUS_COLORS.get(check["status"], "white")
        table.add_row(check["name"], f"[{color}]{check['status']}[/{color}]",
                      check["details"])
    console.print(table)


def display_summary(report: ReportData):
    s = report.summary
    table = Table(title=f"Energy Balance - {report.location.name} "
                        f"({report.start_date} .. {report.end_date})")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Hours", str(len(report.rows)))
    table.add_row("Production", f"{s.total_production:.2f} kWh")
    table.add_row("Consumption", f"{s.total_consumption:.2f} kWh")
    table.add_row("Export", f"[green]{s.total_export:.2f} kWh[/green]")
    table.add_row("Import", f"[red]{s.total_import:.2f} kWh[/red]")
    color = "green" if s.net_balance >= 0 else "red"
    table.add_row("Net balance", f"[{color}]{s.net_balance:+.2f} kWh[/{color}]")
    table.add_row("Self-consumption", f"{s.self_consumption_rate:.1%}")
    table.add_row("Autarky", f"{s.autarky_rate:.1%}")
    console.print(table)


def export_mwe(report: ReportData, output_dir: str) -> str | None:
    """Write the MWE schedule when the location has a plant code."""
    code = report.location.mwe_code
    if not code:
        return None
    rows = build_mwe_schedule(report)
    result = validate_mwe_schedule(code, rows)
    for warning in result["warnings"]:
        console.print(f"  [yellow]{warning}[/yellow]")
    if not result["valid"]:
        console.print(Panel("\n".join(result["errors"][:20]),
                            title="MWE validation errors", border_style="red"))
        return None
    path = os.path.join(output_dir, mwe_filename(code, report.start_date, report.end_date))
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(generate_mwe_csv(code, rows))
    console.print(f"  [green]Saved: {path}[/green]")
    return path


def run():
    """Main orchestrator: inputs, availability check, report, export."""
    try:
        console.print(Panel("Prosumer Energy Balance Report", border_style="cyan"))

        # ===== Inputs =====
        locations = load_locations_json(prompt_file_path("Locations JSON file"))
        location = prompt_location(locations)

        console.print("\n[bold cyan]Consumption Profile[/bold cyan]")
        slots = read_consumption_slots(
            prompt_file_path("Consumption profile file (CSV/XLSX)"), location.id)
        stats = profile_stats(slots)
        if not stats["is_complete"]:
            console.print("  [yellow]Profile is incomplete; missing hours count "
                          "as 0 kWh[/yellow]")

        console.print("\n[bold cyan]Insolation Data[/bold cyan]")
        samples = read_insolation_samples(
            prompt_file_path("Insolation data file (CSV/XLSX)"), location.city)

        start = prompt_date("Start date")
        end = prompt_date("End date", default=start)

        # ===== Availability & report =====
        display_availability(
            check_data_availability(location, slots, samples, start, end))
        report = build_report(location, slots, samples, start, end,
                              max_days=MAX_REPORT_DAYS)
        display_summary(report)

        # ===== Export =====
        output_dir = os.getcwd()
        if Confirm.ask("\nSave hourly CSV?", default=True):
            csv_name = build_output_filename(location.name, "EnergyBalance", "csv")
            save_report_csv(report, os.path.join(output_dir, csv_name))
        if Confirm.ask("Save formatted XLSX?", default=False):
            xlsx_name = build_output_filename(location.name, "EnergyBalance", "xlsx")
            save_report_xlsx(report, os.path.join(output_dir, xlsx_name))
        if location.mwe_code and Confirm.ask("Save MWE schedule?", default=False):
            export_mwe(report, output_dir)

        console.print("\n[bold green]Done![/bold green]")

    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled by user.[/yellow]")
        sys.exit(0)
    except ValidationError as e:
        console.print(f"\n[bold red]Invalid input: {e}[/bold red]")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n[bold red]Error: {e}[/bold red]")
        console.print_exception(show_locals=False)
        sys.exit(1)


if __name__ == "__main__":
    run()
