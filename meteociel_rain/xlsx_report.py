"""
Excel export of the multi-model rain table.

Same content as the console table: one block per day, one column per model,
cells filled by rain intensity, and a per-day total row.
"""

import logging
from pathlib import Path
from typing import Union

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from meteociel_rain.entities import MultiModelForecast
from meteociel_rain.report import (
    DISPLAY_ORDER,
    day_totals,
    format_fetched_at,
    format_optional_rain,
    group_by_day,
    rain_intensity,
    unavailable_notice,
)

logger = logging.getLogger(__name__)

HEADER_FILL = "DDE3F0"
DAY_FILL = "F0F8FF"


def create_thin_border() -> Border:
    thin = Side(style='thin', color='808080')
    return Border(left=thin, right=thin, top=thin, bottom=thin)


def _solid(color: str) -> PatternFill:
    return PatternFill(start_color=color, end_color=color, fill_type="solid")


def write_xlsx_report(forecast: MultiModelForecast, path: Union[str, Path]) -> Path:
    """
    Write the comparison table to an .xlsx workbook.

    Args:
        forecast: Merged multi-model forecast
        path: Destination file; parent directories are created

    Returns:
        Path of the written workbook
    """
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info(f"[write_xlsx_report] Writing {output_path}")

    wb = Workbook()
    ws = wb.active
    ws.title = "Pluie"

    bold = Font(bold=True)
    center_align = Alignment(horizontal='center', vertical='center')
    thin_border = create_thin_border()
    last_col = len(DISPLAY_ORDER) + 1
    available = set(forecast.available_models())

    row = 1
    ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=last_col)
    title = ws.cell(row=row, column=1, value=f"Prévisions de pluie - {forecast.location}")
    title.font = Font(bold=True, size=14)
    title.alignment = center_align

    row += 1
    ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=last_col)
    ws.cell(row=row, column=1, value=f"Mis à jour {format_fetched_at(forecast.fetched_at)}").alignment = center_align

    for model in DISPLAY_ORDER:
        last_update = forecast.last_update_for(model)
        if last_update:
            row += 1
            ws.cell(row=row, column=1, value=model.value).font = bold
            ws.cell(row=row, column=2, value=last_update)

    for model in DISPLAY_ORDER:
        if model not in available:
            row += 1
            ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=last_col)
            notice = ws.cell(row=row, column=1, value=unavailable_notice(model))
            notice.font = Font(italic=True, color="B45309")

    for day, entries in group_by_day(forecast.entries).items():
        row += 2
        ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=last_col)
        day_cell = ws.cell(row=row, column=1, value=day)
        day_cell.font = bold
        day_cell.fill = _solid(DAY_FILL)

        row += 1
        for col, label in enumerate(["Période (3h)"] + [m.value for m in DISPLAY_ORDER], start=1):
            cell = ws.cell(row=row, column=col, value=label)
            cell.font = bold
            cell.alignment = center_align
            cell.border = thin_border
            cell.fill = _solid(HEADER_FILL)

        for entry in entries:
            row += 1
            ws.cell(row=row, column=1, value=entry.time_range).border = thin_border
            for col, model in enumerate(DISPLAY_ORDER, start=2):
                amount = entry.amount_for(model)
                cell = ws.cell(row=row, column=col, value=format_optional_rain(amount))
                cell.alignment = center_align
                cell.border = thin_border
                if amount is not None:
                    cell.fill = _solid(rain_intensity(amount).fill_color)

        row += 1
        totals = day_totals(entries, DISPLAY_ORDER)
        ws.cell(row=row, column=1, value="Total").font = bold
        for col, model in enumerate(DISPLAY_ORDER, start=2):
            value = f"{totals[model]:.1f} mm" if model in available else "-"
            cell = ws.cell(row=row, column=col, value=value)
            cell.font = bold
            cell.alignment = center_align

    ws.column_dimensions[get_column_letter(1)].width = 16
    for col in range(2, last_col + 1):
        ws.column_dimensions[get_column_letter(col)].width = 13

    wb.save(output_path)
    logger.info(f"[write_xlsx_report] Saved {output_path}")
    return output_path
