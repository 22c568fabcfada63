import os

import pandas as pd
from openpyxl import load_workbook
from openpyxl.styles import Font, Alignment
from openpyxl.utils import get_column_letter
from rich.console import Console

from energy_balance.config import CSV_COLUMNS, CSV_DECIMALS
from energy_balance.models import ReportData
from energy_balance.report import daily_breakdown

console = Console()

_NUMERIC_COLUMNS = ["production_kwh", "consumption_kwh", "balance_kwh"]


def _csv_frame(report: ReportData) -> pd.DataFrame:
    df = pd.DataFrame(
        [(r.date.isoformat(), r.hour, r.production_kwh, r.consumption_kwh,
          r.balance_kwh) for r in report.rows],
        columns=CSV_COLUMNS,
    )
    for col in _NUMERIC_COLUMNS:
        # + 0.0 turns -0.0 into 0.0 so tiny imports never print "-0.00"
        df[col] = df[col].astype(float).round(CSV_DECIMALS) + 0.0
    return df[CSV_COLUMNS]


def to_csv(report: ReportData) -> str:
    """Serialize a report's hourly rows to CSV text.

    Columns: date, hour, production_kwh, consumption_kwh, balance_kwh.
    Fixed 2-decimal numbers, no thousands separators, "\\n" line endings,
    header always present.
    """
    return _csv_frame(report).to_csv(
        index=False,
        float_format=f"%.{CSV_DECIMALS}f",
        lineterminator="\n",
    )


def save_report_csv(report: ReportData, output_path: str):
    console.print(f"\n  Saving CSV: [bold]{os.path.basename(output_path)}[/bold]")
    with open(output_path, "w", encoding="utf-8", newline="") as f:
        f.write(to_csv(report))
    console.print(f"  [green]Saved: {output_path}[/green]")
    console.print(f"  Rows: {len(report.rows)}")


def _summary_rows(report: ReportData) -> list[dict]:
    s = report.summary
    return [
        {"Metric": "Location", "Value": report.location.name},
        {"Metric": "City", "Value": report.location.city},
        {"Metric": "PV Power (kWp)", "Value": report.location.pv_power_kwp},
        {"Metric": "Start Date", "Value": report.start_date.isoformat()},
        {"Metric": "End Date", "Value": report.end_date.isoformat()},
        {"Metric": "Total Production (kWh)", "Value": round(s.total_production, 2)},
        {"Metric": "Total Consumption (kWh)", "Value": round(s.total_consumption, 2)},
        {"Metric": "Total Export (kWh)", "Value": round(s.total_export, 2)},
        {"Metric": "Total Import (kWh)", "Value": round(s.total_import, 2)},
        {"Metric": "Net Balance (kWh)", "Value": round(s.net_balance, 2)},
        {"Metric": "Self-Consumption Rate",
         "Value": f"{s.self_consumption_rate:.1%}"},
        {"Metric": "Autarky Rate", "Value": f"{s.autarky_rate:.1%}"},
    ]


def save_report_xlsx(report: ReportData, output_path: str):
    """Save a report to a formatted XLSX file (Summary, Daily, Hourly sheets)."""
    console.print(f"\n  Saving XLSX: [bold]{os.path.basename(output_path)}[/bold]")

    hourly = _csv_frame(report)
    daily = daily_breakdown(report).reset_index()
    if not daily.empty:
        daily["date"] = daily["date"].map(lambda d: d.isoformat())

    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        pd.DataFrame(_summary_rows(report)).to_excel(
            writer, sheet_name="Summary", index=False)
        daily.to_excel(writer, sheet_name="Daily", index=False)
        hourly.to_excel(writer, sheet_name="Hourly", index=False)

    wb = load_workbook(output_path)
    header_font = Font(bold=True, size=11)
    for ws in wb.worksheets:
        for col_idx in range(1, ws.max_column + 1):
            cell = ws.cell(row=1, column=col_idx)
            cell.font = header_font
            cell.alignment = Alignment(horizontal="center")
            col_letter = get_column_letter(col_idx)
            ws.column_dimensions[col_letter].width = 24 if ws.title == "Summary" else 18

    # Value columns: 2 decimal places, no thousands separator
    for name in ("Daily", "Hourly"):
        ws = wb[name]
        for col_idx in range(1, ws.max_column + 1):
            header = str(ws.cell(row=1, column=col_idx).value or "")
            if not header.endswith("_kwh"):
                continue
            for row_idx in range(2, ws.max_row + 1):
                cell = ws.cell(row=row_idx, column=col_idx)
                if cell.value is not None:
                    cell.number_format = "0.00"
                    cell.alignment = Alignment(horizontal="right")

    wb.save(output_path)
    console.print(f"  [green]Saved: {output_path}[/green]")
    console.print(f"  Hourly rows: {len(report.rows)}, Days: {report.days}")
