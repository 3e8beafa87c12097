"""Downloadable report exports: CSV text and PDF documents"""

import csv
import io
import json
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from loanlight_admin.domain.exceptions import EmptyDatasetError, ExportError
from loanlight_admin.domain.formatters import format_currency, format_date
from loanlight_admin.domain.models import Client, Column
from loanlight_admin.reporting.html import format_cell, resolve_columns


def csv_cell(value: Any) -> Any:
    """
    Convert one value for the CSV writer.

    Numbers and booleans pass through and are written unquoted; everything else
    becomes a string and is quoted. Nested objects are JSON-encoded with commas
    swapped for semicolons so the cell stays readable in spreadsheets.
    """
    if value is None:
        return ""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, default=str).replace(",", ";")
    return str(value)


def export_csv(rows: Sequence[Mapping[str, Any]], columns: Optional[Sequence[Column]] = None) -> str:
    """
    Serialize records to CSV text.

    Header comes from column labels, or the first row's keys. String fields are
    always quoted with embedded quotes doubled.

    Example:
        export_csv([{"id": 1, "name": "Acme"}]) -> 'id,name\\n1,"Acme"\\n'
    """
    if not rows:
        raise EmptyDatasetError("No data to export")

    resolved = resolve_columns(rows, columns)
    buffer = io.StringIO()
    # Labels are quoted only when they need it
    csv.writer(buffer, lineterminator="\n").writerow([column.label for column in resolved])

    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    try:
        for row in rows:
            writer.writerow(
                [
                    column.formatter(row.get(column.key)) if column.formatter else csv_cell(row.get(column.key))
                    for column in resolved
                ]
            )
    except (csv.Error, TypeError, ValueError) as e:
        raise ExportError(f"Failed to write CSV: {e}") from e

    return buffer.getvalue()


def export_pdf(
    title: str,
    rows: Sequence[Mapping[str, Any]],
    columns: Optional[Sequence[Column]] = None,
    subtitle: Optional[str] = None,
    organization_name: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> bytes:
    """Render records as a landscape A4 PDF table with a repeating header row"""
    if not rows:
        raise EmptyDatasetError("No data to export")

    generated_at = generated_at or datetime.now()
    resolved = resolve_columns(rows, columns)
    styles = getSampleStyleSheet()

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        rightMargin=20,
        leftMargin=20,
        topMargin=40,
        bottomMargin=20,
        title=title,
    )

    elements = []
    if organization_name:
        elements.append(Paragraph(escape(organization_name), styles["Heading2"]))
    elements.append(Paragraph(escape(title), styles["Title"]))
    if subtitle:
        elements.append(Paragraph(f"<i>{escape(subtitle)}</i>", styles["Normal"]))
    elements.append(Paragraph(f"Generated on: {format_date(generated_at)}", styles["Normal"]))
    elements.append(Spacer(1, 12))

    data = [[column.label for column in resolved]]
    for row in rows:
        data.append([format_cell(row.get(column.key), column) for column in resolved])

    table = Table(data, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#2563eb")),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.whitesmoke]),
                ("GRID", (0, 0), (-1, -1), 0.3, colors.grey),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ]
        )
    )
    elements.append(table)

    try:
        doc.build(elements)
    except Exception as e:
        raise ExportError(f"Failed to build PDF: {e}") from e

    return buffer.getvalue()


def _plain_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _iso_day(value: Optional[date]) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def prepare_clients_for_export(clients: Sequence[Client]) -> List[Dict[str, str]]:
    """Labelled, all-text rows for the client list CSV"""
    return [
        {
            "ID": client.id,
            "First Name": client.first_name,
            "Last Name": client.last_name,
            "Email": client.email or "",
            "Phone": client.phone,
            "Address": client.address,
            "National ID": client.national_id,
            "Date of Birth": _iso_day(client.date_of_birth),
            "Gender": client.gender,
            "Occupation": client.occupation,
            "Income Source": client.income_source,
            "Monthly Income": _plain_number(client.monthly_income),
            "Status": client.status.value,
            "Created At": _iso_day(client.created_at),
        }
        for client in clients
    ]


CLIENT_PDF_COLUMNS = [
    Column(key="id", label="ID"),
    Column(key="name", label="Name"),
    Column(key="contact", label="Contact"),
    Column(key="national_id", label="National ID"),
    Column(key="income", label="Monthly Income"),
    Column(key="status", label="Status"),
    Column(key="created_at", label="Created At"),
]


def prepare_clients_for_pdf(clients: Sequence[Client]) -> List[Dict[str, str]]:
    """Condensed client rows for the PDF list; pair with CLIENT_PDF_COLUMNS"""
    return [
        {
            "id": client.id,
            "name": client.full_name,
            "contact": client.email or client.phone,
            "national_id": client.national_id,
            "income": format_currency(client.monthly_income),
            "status": client.status.value,
            "created_at": _iso_day(client.created_at),
        }
        for client in clients
    ]
