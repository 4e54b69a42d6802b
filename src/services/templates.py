"""
Default invoice template generation.
"""

from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, Side

# Layout of the default template (1-indexed rows)
TEMPLATE_LAYOUT = {
    "recipient_rows": [
        "{{anrede}}{{titel}} {{vorname}} {{name}}",
        "{{adresse}}",
        "{{plzundstadt}}",
    ],
    "recipient_start_row": 3,
    "date_row": 7,
    "title_row": 9,
    "greeting_row": 11,
    "table_header_row": 13,
    "line_item_row": 14,
    "gross_row": 16,
    "net_row": 17,
    "vat_row": 18,
    "footer_row": 21,
}

TABLE_HEADERS = ["Leistung", "Std.", "Betrag brutto"]

LINE_ITEM_CELLS = [
    "{{spieltag}} Halle {{halle}} Platz {{platz}} von {{startzeit}} bis {{endzeit}} Uhr",
    "{{stunden}}",
    "{{betrag}}",
]

COLUMN_WIDTHS = {"A": 62.0, "B": 10.0, "C": 18.0}


def write_invoice_template(ws) -> None:
    """Write the default invoice layout with placeholder tokens to a worksheet."""
    layout = TEMPLATE_LAYOUT
    thin = Side(style="thin")

    ws.sheet_view.showGridLines = False

    for offset, text in enumerate(layout["recipient_rows"]):
        ws.cell(row=layout["recipient_start_row"] + offset, column=1, value=text)

    date_cell = ws.cell(row=layout["date_row"], column=3, value="Datum: {{datum}}")
    date_cell.alignment = Alignment(horizontal="right")

    title_cell = ws.cell(row=layout["title_row"], column=1, value="Rechnung Hallenbelegung {{jahr}}")
    title_cell.font = Font(bold=True, size=14)

    ws.cell(row=layout["greeting_row"], column=1, value="Sehr geehrte(r) {{anrede}}{{titel}} {{name}},")

    # Table header
    for col_idx, header in enumerate(TABLE_HEADERS, start=1):
        cell = ws.cell(row=layout["table_header_row"], column=col_idx, value=header)
        cell.font = Font(bold=True)
        cell.border = Border(bottom=thin)

    # Repeatable line-item row
    for col_idx, text in enumerate(LINE_ITEM_CELLS, start=1):
        cell = ws.cell(row=layout["line_item_row"], column=col_idx, value=text)
        if col_idx > 1:
            cell.alignment = Alignment(horizontal="right")

    # Totals
    gross_label = ws.cell(row=layout["gross_row"], column=1, value="Gesamtbetrag brutto")
    gross_label.font = Font(bold=True)
    gross_value = ws.cell(row=layout["gross_row"], column=3, value="{{BruttoSumme}}")
    gross_value.font = Font(bold=True, size=11)
    gross_value.alignment = Alignment(horizontal="right")
    gross_value.border = Border(top=thin)

    ws.cell(row=layout["net_row"], column=1, value="Nettobetrag")
    net_value = ws.cell(row=layout["net_row"], column=3, value="{{netto}}")
    net_value.font = Font(italic=True, size=8)
    net_value.alignment = Alignment(horizontal="right")

    ws.cell(row=layout["vat_row"], column=1, value="enthaltene USt. 19 %")
    vat_value = ws.cell(row=layout["vat_row"], column=3, value="{{erhalteneUst}}")
    vat_value.font = Font(italic=True, size=8)
    vat_value.alignment = Alignment(horizontal="right")

    ws.cell(
        row=layout["footer_row"],
        column=1,
        value="Bitte überweisen Sie den Gesamtbetrag innerhalb von 14 Tagen.",
    )

    for col_letter, width in COLUMN_WIDTHS.items():
        ws.column_dimensions[col_letter].width = width


def create_invoice_template(output_path: Path) -> Path:
    """Create the default invoice template workbook."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Rechnung"
    write_invoice_template(ws)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(str(output_path))
    return output_path
