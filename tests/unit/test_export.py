"""Unit tests for CSV and PDF exports"""

import csv
import io
from datetime import date, datetime, timezone

import pytest

from loanlight_admin.domain.exceptions import EmptyDatasetError
from loanlight_admin.domain.models import Client, ClientStatus, Column
from loanlight_admin.reporting.export import (
    CLIENT_PDF_COLUMNS,
    export_csv,
    export_pdf,
    prepare_clients_for_export,
    prepare_clients_for_pdf,
)


@pytest.fixture
def sample_client() -> Client:
    created = datetime(2026, 10, 1, 8, 0, tzinfo=timezone.utc)
    return Client(
        id="c-1",
        first_name="Jane",
        last_name="Doe",
        phone="+254700000001",
        address="Moi Avenue",
        national_id="12345678",
        gender="female",
        occupation="Trader",
        income_source="Business",
        monthly_income=45000.0,
        branch_id="b-1",
        status=ClientStatus.ACTIVE,
        created_at=created,
        updated_at=created,
        date_of_birth=date(1990, 5, 17),
    )


def test_csv_quotes_strings_not_numbers():
    text = export_csv([{"id": 1, "name": "Acme", "amount": 100}, {"id": 2, "name": "Be,ta", "amount": 200}])

    lines = text.splitlines()
    assert lines[0] == "id,name,amount"
    assert lines[1] == '1,"Acme",100'
    assert lines[2] == '2,"Be,ta",200'


def test_csv_cell_conversions():
    text = export_csv(
        [
            {
                "note": 'say "hi"',
                "missing": None,
                "paid": True,
                "due": date(2026, 10, 18),
                "meta": {"a": 1, "b": 2},
                "status": ClientStatus.ACTIVE,
            }
        ]
    )

    row = text.splitlines()[1]
    assert row == '"say ""hi""","",True,"2026-10-18","{""a"": 1; ""b"": 2}","ACTIVE"'


def test_csv_round_trip_recovers_values_as_text():
    rows = [{"id": 1, "name": "Acme", "amount": 100.5}, {"id": 2, "name": "Be,ta", "amount": 200}]

    parsed = list(csv.DictReader(io.StringIO(export_csv(rows))))

    assert parsed == [
        {"id": "1", "name": "Acme", "amount": "100.5"},
        {"id": "2", "name": "Be,ta", "amount": "200"},
    ]


def test_csv_uses_column_labels():
    text = export_csv([{"a": 1}], columns=[Column(key="a", label="Amount, KES")])

    assert text.splitlines()[0] == '"Amount, KES"'


def test_empty_exports_are_rejected():
    with pytest.raises(EmptyDatasetError):
        export_csv([])
    with pytest.raises(EmptyDatasetError):
        export_pdf("Empty", [])


def test_pdf_export_produces_document():
    rows = [{"name": f"Client {i}", "amount": i * 100} for i in range(120)]

    content = export_pdf("Loan Portfolio", rows, organization_name="LoanLight & Co")

    assert content.startswith(b"%PDF")
    assert len(content) > 1000


def test_prepare_clients_for_export(sample_client: Client):
    (row,) = prepare_clients_for_export([sample_client])

    assert list(row) == [
        "ID",
        "First Name",
        "Last Name",
        "Email",
        "Phone",
        "Address",
        "National ID",
        "Date of Birth",
        "Gender",
        "Occupation",
        "Income Source",
        "Monthly Income",
        "Status",
        "Created At",
    ]
    assert row["Email"] == ""
    assert row["Date of Birth"] == "1990-05-17"
    assert row["Monthly Income"] == "45000"
    assert row["Created At"] == "2026-10-01"


def test_prepare_clients_for_pdf(sample_client: Client):
    (row,) = prepare_clients_for_pdf([sample_client])

    assert row["name"] == "Jane Doe"
    assert row["contact"] == "+254700000001"
    assert row["income"] == "KES 45,000"
    assert {column.key for column in CLIENT_PDF_COLUMNS} == set(row)
