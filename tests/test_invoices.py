"""Tests for invoice totals, formatting and template filling."""

import warnings
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
from openpyxl import Workbook, load_workbook

from core.errors import (
    CustomerNotFoundWarning,
    FatalArithmeticError,
    MissingInputError,
    NoBookingsError,
)
from models.bookings import CustomerRecord, TimeBlock
from services.invoices import (
    build_output_filename,
    build_output_path,
    compute_totals,
    fill_placeholders,
    format_hours,
    format_money,
    generate_invoice,
    generate_invoice_to_bytes,
    get_invoice_date,
    populate_line_items,
    render_invoice,
    replace_document_placeholders,
    save_workbook,
    split_address,
    tax_split,
)

INVOICE_DATE = date(2025, 3, 14)


def cell_values(ws):
    return [cell.value for row in ws.iter_rows() for cell in row if cell.value is not None]


class TestFormatting:
    @pytest.mark.parametrize(
        "amount, expected",
        [
            (Decimal("87"), "87,00 €"),
            (Decimal("1234.5"), "1.234,50 €"),
            (Decimal("73.1092"), "73,11 €"),
            (Decimal("0.005"), "0,01 €"),
            (None, ""),
        ],
    )
    def test_format_money(self, amount, expected):
        assert format_money(amount) == expected

    @pytest.mark.parametrize(
        "hours, expected",
        [(Decimal("1.5"), "1,5"), (Decimal("0.5"), "0,5"), (Decimal("2"), "2"), (Decimal("10"), "10")],
    )
    def test_format_hours(self, hours, expected):
        assert format_hours(hours) == expected

    @pytest.mark.parametrize(
        "address, expected",
        [
            ("Hauptstr. 1 12345 Berlin", ("Hauptstr. 1", "12345 Berlin")),
            ("Hauptstr. 1 D-12345 Berlin", ("Hauptstr. 1", "12345 Berlin")),
            ("Hauptstr. 1", ("Hauptstr. 1", None)),
            ("12345 Berlin", (None, "12345 Berlin")),
            (None, (None, None)),
        ],
    )
    def test_split_address(self, address, expected):
        assert split_address(address) == expected

    def test_fill_placeholders_blanks_unknown_tokens(self):
        assert fill_placeholders("{{anrede}} {{unbekannt}}!", {"anrede": "Frau"}) == "Frau !"

    def test_invoice_date_override(self):
        assert get_invoice_date(INVOICE_DATE) == INVOICE_DATE
        assert isinstance(get_invoice_date(), date)


class TestOutputNames:
    def test_filename_from_last_name(self):
        assert build_output_filename("Müller") == "Rechnung_Müller.xlsx"

    def test_unsafe_characters_are_removed(self):
        assert build_output_filename("O'Neil / Smith") == "Rechnung_ONeilSmith.xlsx"

    @pytest.mark.parametrize("last_name", [None, "", "!!!"])
    def test_empty_name_falls_back(self, last_name):
        assert build_output_filename(last_name) == "Rechnung_Unbekannt.xlsx"

    def test_output_path_is_dated_folder(self, tmp_path):
        path = build_output_path("Müller", INVOICE_DATE, tmp_path)
        assert path == tmp_path / "invoices" / "2025-03-14" / "Rechnung_Müller.xlsx"
        assert path.parent.is_dir()


class BrokenWorkbook:
    """Workbook stand-in whose save fails after writing part of the file."""

    def save(self, filename):
        Path(filename).write_bytes(b"partial")
        raise OSError("disk full")


class TestSaveWorkbook:
    def test_replaces_existing_invoice(self, tmp_path):
        output = tmp_path / "Rechnung_Müller.xlsx"
        output.write_bytes(b"old")

        save_workbook(Workbook(), output)

        assert output.read_bytes()[:2] == b"PK"
        assert list(tmp_path.iterdir()) == [output]

    def test_failed_save_leaves_no_file(self, tmp_path):
        output = tmp_path / "Rechnung_Müller.xlsx"

        with pytest.raises(OSError):
            save_workbook(BrokenWorkbook(), output)

        assert list(tmp_path.iterdir()) == []

    def test_failed_save_keeps_previous_invoice(self, tmp_path):
        output = tmp_path / "Rechnung_Müller.xlsx"
        output.write_bytes(b"old")

        with pytest.raises(OSError):
            save_workbook(BrokenWorkbook(), output)

        assert output.read_bytes() == b"old"
        assert list(tmp_path.iterdir()) == [output]



class TestTotals:
    def test_tax_split(self):
        net, vat = tax_split(Decimal("119"))
        assert net == Decimal("100")
        assert vat == Decimal("19")

    def test_tax_split_without_gross_is_fatal(self):
        with pytest.raises(FatalArithmeticError):
            tax_split(None)

    def test_totals_over_all_blocks(self):
        blocks = [TimeBlock("Mo", "1", "2", 720, 810, 3), TimeBlock("Di", "2", "1", 1080, 1110, 1)]
        totals = compute_totals(blocks, Decimal("14.50"))

        assert totals.total_units == 4
        assert totals.gross == Decimal("58.00")
        assert totals.net + totals.vat == totals.gross
        assert format_money(totals.net) == "48,74 €"
        assert format_money(totals.vat) == "9,26 €"


class TestTemplateFilling:
    def test_line_item_row_repeated_with_styles(self, invoice_template):
        wb = load_workbook(invoice_template)
        ws = wb.active
        blocks = [TimeBlock("Mo", "1", "2", 720, 810, 3), TimeBlock("Di", "2", "1", 1080, 1110, 1)]

        assert populate_line_items(ws, blocks, Decimal("10")) == 2

        assert ws["A14"].value == "Mo Halle 1 Platz 2 von 12:00 bis 13:30 Uhr"
        assert ws["C14"].value == "30,00 €"
        assert ws["A15"].value == "Di Halle 2 Platz 1 von 18:00 bis 18:30 Uhr"
        assert ws["B15"].value == "0,5"
        assert ws["C15"].alignment.horizontal == "right"
        assert ws["C17"].value == "{{BruttoSumme}}"

    def test_template_without_line_item_row(self):
        ws = Workbook().active
        ws["A1"] = "{{name}}"
        assert populate_line_items(ws, [TimeBlock("Mo", "1", "2", 720, 750, 1)], None) == 0

    def test_headers_and_footers_are_filled(self):
        wb = Workbook()
        ws = wb.active
        ws["A1"] = "Rechnung {{jahr}}"
        ws.oddHeader.center.text = "{{name}}"
        ws.oddFooter.right.text = "Stand {{datum}}"

        replace_document_placeholders(wb, {"jahr": "2025", "name": "Müller", "datum": "14.03.2025"})

        assert ws["A1"].value == "Rechnung 2025"
        assert ws.oddHeader.center.text == "Müller"
        assert ws.oddFooter.right.text == "Stand 14.03.2025"

    def test_document_tokens_in_line_item_row(self, tmp_path):
        wb = Workbook()
        wb.active["A1"] = "{{spieltag}} {{startzeit}} für {{name}}"
        template = tmp_path / "template.xlsx"
        wb.save(template)
        blocks = [TimeBlock("Mo", "1", "2", 720, 750, 1), TimeBlock("Di", "2", "1", 1080, 1110, 1)]
        totals = compute_totals(blocks, Decimal("14.50"))

        filled = render_invoice(template, CustomerRecord(last_name="Müller"), blocks, totals, INVOICE_DATE)

        assert filled.active["A1"].value == "Mo 12:00 für Müller"
        assert filled.active["A2"].value == "Di 18:00 für Müller"

    def test_line_item_values_win_over_document_values(self):
        ws = Workbook().active
        ws["A1"] = "{{spieltag}} {{datum}}"
        blocks = [TimeBlock("Mo", "1", "2", 720, 750, 1)]

        populate_line_items(ws, blocks, None, {"spieltag": "Montag", "datum": "14.03.2025"})

        assert ws["A1"].value == "Mo 14.03.2025"

    def test_merged_cells_follow_inserted_rows(self):
        ws = Workbook().active
        ws["A1"] = "Leistung"
        ws["A2"] = "{{spieltag}} {{startzeit}}"
        ws["C2"] = "{{betrag}}"
        ws["A4"] = "Summe {{BruttoSumme}}"
        ws.merge_cells("A2:B2")
        ws.merge_cells("D1:D3")
        ws.merge_cells("A4:C4")
        blocks = [
            TimeBlock("Mo", "1", "2", 720, 750, 1),
            TimeBlock("Mo", "1", "2", 780, 810, 1),
            TimeBlock("Di", "2", "1", 1080, 1110, 1),
        ]

        assert populate_line_items(ws, blocks, Decimal("10")) == 3

        assert {merged.coord for merged in ws.merged_cells.ranges} == {
            "A2:B2",
            "A3:B3",
            "A4:B4",
            "D1:D5",
            "A6:C6",
        }
        assert [ws.cell(row=r, column=1).value for r in range(2, 5)] == ["Mo 12:00", "Mo 13:00", "Di 18:00"]
        assert ws["C4"].value == "10,00 €"
        assert ws["A6"].value == "Summe {{BruttoSumme}}"


class TestGenerateInvoice:
    def test_invoice_file_for_customer(self, booking_plan, invoice_template, tmp_path):
        output = generate_invoice(
            booking_plan,
            "Müller",
            template_path=invoice_template,
            invoice_date=INVOICE_DATE,
            output_dir=tmp_path / "out",
        )

        assert output == tmp_path / "out" / "invoices" / "2025-03-14" / "Rechnung_Müller.xlsx"
        ws = load_workbook(output).active

        assert ws["A3"].value == "Herr Dr. Hans Müller"
        assert ws["A4"].value == "Hauptstr. 1"
        assert ws["A5"].value == "12345 Berlin"
        assert ws["C7"].value == "Datum: 14.03.2025"
        assert ws["A9"].value == "Rechnung Hallenbelegung 2025"

        assert [ws.cell(row=r, column=1).value for r in range(14, 18)] == [
            "Mo Halle 1 Platz 2 von 12:00 bis 13:30 Uhr",
            "Mo Halle 1 Platz 2 von 15:00 bis 15:30 Uhr",
            "Di Halle 2 Platz 1 von 18:00 bis 18:30 Uhr",
            "Mi Halle 1 Platz 1 von 09:00 bis 09:30 Uhr",
        ]
        assert [ws.cell(row=r, column=2).value for r in range(14, 18)] == ["1,5", "0,5", "0,5", "0,5"]
        assert ws["C14"].value == "43,50 €"
        assert ws["C17"].value == "14,50 €"

        assert ws["C19"].value == "87,00 €"
        assert ws["C20"].value == "73,11 €"
        assert ws["C21"].value == "13,89 €"

        assert not any("{{" in str(value) for value in cell_values(ws))

    def test_invoice_bytes(self, booking_plan, invoice_template):
        content, result = generate_invoice_to_bytes(
            booking_plan, "Weber", INVOICE_DATE, template_path=invoice_template
        )

        assert content[:2] == b"PK"
        assert result.filename == "Rechnung_Weber.xlsx"
        assert result.totals.gross == Decimal("20")
        assert [(b.start, b.end) for b in result.blocks] == [("19:00", "19:30")]
        assert result.warnings == []

    def test_unknown_customer(self, booking_plan, invoice_template):
        with warnings.catch_warnings():
            warnings.simplefilter("error", CustomerNotFoundWarning)
            with pytest.raises(NoBookingsError):
                generate_invoice_to_bytes(booking_plan, "Niemand", template_path=invoice_template)

    def test_no_prices_is_fatal(self, make_booking_plan, invoice_template):
        plan = make_booking_plan({"Mo": [["Name", "Zeit"], ["Kraus", "10:00"]]})
        with pytest.raises(FatalArithmeticError):
            generate_invoice_to_bytes(plan, "Kraus", template_path=invoice_template)

    def test_missing_template(self, booking_plan, tmp_path):
        with pytest.raises(MissingInputError):
            generate_invoice_to_bytes(booking_plan, "Weber", template_path=tmp_path / "missing.xlsx")

    def test_differing_prices_are_billed_at_first_price(self, make_booking_plan, invoice_template):
        plan = make_booking_plan(
            {"Mo": [["Name", "Zeit", "Preis"], ["Kraus", "10:00", "10"], ["Kraus", "10:30", "12"]]}
        )
        _, result = generate_invoice_to_bytes(plan, "Kraus", template_path=invoice_template)

        assert result.totals.gross == Decimal("20")
        assert len(result.warnings) == 1
        assert "12,00 €" in result.warnings[0]

    def test_customer_record_passes_through(self, booking_plan, invoice_template):
        _, result = generate_invoice_to_bytes(
            booking_plan, "schmidt", INVOICE_DATE, template_path=invoice_template
        )
        assert isinstance(result.customer, CustomerRecord)
        assert result.customer.last_name == "Schmidt"
        assert result.customer.salutation == "Frau"
