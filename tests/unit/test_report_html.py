"""Unit tests for printable report rendering"""

from datetime import date, datetime
from unittest.mock import patch

import pytest

from loanlight_admin.domain.exceptions import PrintSurfaceUnavailableError
from loanlight_admin.domain.models import ClientStatus, Column, LoanStatus
from loanlight_admin.reporting.export import csv_cell
from loanlight_admin.reporting.html import format_cell, generate_report_html
from loanlight_admin.reporting.printing import BrowserSurface, CapturedSurface, print_report

GENERATED_AT = datetime(2026, 10, 18, 14, 5, 0)


def test_format_cell_policy():
    assert format_cell(None) == "-"
    assert format_cell(True) == "Yes"
    assert format_cell(False) == "No"
    assert format_cell(date(2026, 10, 18)) == "18 Oct 2026"
    assert format_cell(42) == "42"
    assert format_cell(5, Column(key="n", label="N", formatter=lambda v: f"#{v}")) == "#5"


def test_format_cell_unwraps_enum_values():
    assert format_cell(ClientStatus.ACTIVE) == "ACTIVE"
    assert format_cell(LoanStatus.DEFAULTED) == csv_cell(LoanStatus.DEFAULTED)


def test_table_report_uses_first_row_keys():
    html = generate_report_html(
        "Loan Portfolio",
        [{"client": "Jane", "amount": 1000, "active": True}, {"client": "John", "amount": None, "active": False}],
        generated_at=GENERATED_AT,
    )

    assert html.startswith("<!DOCTYPE html>")
    assert "<th>client</th><th>amount</th><th>active</th>" in html
    assert "<td>Jane</td><td>1000</td><td>Yes</td>" in html
    assert "<td>John</td><td>-</td><td>No</td>" in html
    assert "Date: 18 Oct 2026" in html
    assert "Generated on 18 Oct 2026 14:05:00" in html


def test_explicit_columns_and_formatters():
    html = generate_report_html(
        "Loans",
        [{"amount": 1500, "ignored": "x"}],
        columns=[Column(key="amount", label="Amount", formatter=lambda v: f"KES {v:,}")],
        generated_at=GENERATED_AT,
    )

    assert "<th>Amount</th>" in html
    assert "<td>KES 1,500</td>" in html
    assert "ignored" not in html


def test_empty_dataset_renders_empty_table():
    html = generate_report_html("Nothing Here", [], generated_at=GENERATED_AT)

    assert "<table>" in html
    assert "<tbody>" in html and "</tbody>" in html
    assert "<td>" not in html
    assert html.rstrip().endswith("</html>")


def test_single_record_renders_key_value_table():
    html = generate_report_html("Client", {"Name": "Jane Doe", "Active": True}, generated_at=GENERATED_AT)

    assert '<th style="width: 30%;">Name</th><td>Jane Doe</td>' in html
    assert '<th style="width: 30%;">Active</th><td>Yes</td>' in html
    assert "<thead>" not in html


def test_header_options_and_summary():
    html = generate_report_html(
        "Branch Performance",
        [{"branch": "CBD"}],
        subtitle="October 2026",
        organization_name="LoanLight",
        logo="https://cdn.example.com/logo.png",
        summary={"Total Loans": 12},
        show_date=False,
        generated_at=GENERATED_AT,
    )

    assert '<img src="https://cdn.example.com/logo.png"' in html
    assert "<h2>LoanLight</h2>" in html
    assert "<h2>October 2026</h2>" in html
    assert '<td class="label">Total Loans</td><td class="value">12</td>' in html
    assert "Date:" not in html


def test_text_is_escaped():
    html = generate_report_html("<script>alert(1)</script>", [{"name": "A & B <b>"}], generated_at=GENERATED_AT)

    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;" in html
    assert "A &amp; B &lt;b&gt;" in html


def test_print_report_opens_document_on_surface():
    surface = CapturedSurface()

    document = print_report(surface, "Report", [{"a": 1}])

    assert surface.last == document


def test_captured_surface_without_document():
    with pytest.raises(PrintSurfaceUnavailableError):
        CapturedSurface().last


@patch("loanlight_admin.reporting.printing.webbrowser.open", return_value=False)
def test_browser_surface_raises_when_window_blocked(mock_open, tmp_path):
    with patch("loanlight_admin.reporting.printing.tempfile.tempdir", str(tmp_path)):
        with pytest.raises(PrintSurfaceUnavailableError):
            BrowserSurface().open("<html></html>")

    mock_open.assert_called_once()
