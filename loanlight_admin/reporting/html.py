"""Printable HTML report rendering"""

from datetime import date, datetime
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence, Union

from jinja2 import Environment, select_autoescape

from loanlight_admin.domain.formatters import format_date
from loanlight_admin.domain.models import Column

ReportData = Union[Sequence[Mapping[str, Any]], Mapping[str, Any]]

REPORT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{{ title }}</title>
  <style>
    body { font-family: Arial, sans-serif; margin: 0; padding: 20px; color: #333; }
    .header { display: flex; align-items: center; margin-bottom: 20px; border-bottom: 1px solid #eee; padding-bottom: 10px; }
    .logo { margin-right: 20px; width: 80px; height: 80px; }
    .report-info { flex-grow: 1; }
    .report-date { text-align: right; }
    h1 { margin: 0; color: #2563eb; }
    h2 { color: #666; font-weight: normal; margin: 5px 0; }
    table { width: 100%; border-collapse: collapse; margin-top: 20px; }
    th, td { border: 1px solid #ddd; padding: 8px; text-align: left; }
    th { background-color: #f2f2f2; }
    tr:nth-child(even) { background-color: #f9f9f9; }
    .summary { margin-top: 20px; padding: 10px; background-color: #f9f9f9; border-radius: 5px; }
    .summary h3 { margin-top: 0; }
    .summary td { border: none; padding: 5px; }
    .summary td.label { font-weight: bold; }
    .summary td.value { text-align: right; }
    .footer { margin-top: 30px; text-align: center; font-size: 12px; color: #666; }
    .actions { margin-top: 20px; text-align: center; }
    .actions button { padding: 10px 20px; background-color: #2563eb; color: white; border: none; border-radius: 5px; cursor: pointer; }
    @media print { body { padding: 0; } button { display: none; } }
  </style>
</head>
<body>
  <div class="header">
    {% if logo %}<img src="{{ logo }}" alt="Organization Logo" class="logo">{% endif %}
    <div class="report-info">
      {% if organization_name %}<h2>{{ organization_name }}</h2>{% endif %}
      <h1>{{ title }}</h1>
      {% if subtitle %}<h2>{{ subtitle }}</h2>{% endif %}
    </div>
    {% if show_date %}<div class="report-date">Date: {{ report_date }}</div>{% endif %}
  </div>

  <div class="report-content">
    {% if record is not none %}
    <table>
      <tbody>
        {% for label, value in record %}
        <tr><th style="width: 30%;">{{ label }}</th><td>{{ value }}</td></tr>
        {% endfor %}
      </tbody>
    </table>
    {% else %}
    <table>
      <thead>
        <tr>{% for label in headers %}<th>{{ label }}</th>{% endfor %}</tr>
      </thead>
      <tbody>
        {% for row in rows %}
        <tr>{% for value in row %}<td>{{ value }}</td>{% endfor %}</tr>
        {% endfor %}
      </tbody>
    </table>
    {% endif %}
    {% if summary %}
    <div class="summary">
      <h3>Summary</h3>
      <table>
        {% for label, value in summary %}
        <tr><td class="label">{{ label }}</td><td class="value">{{ value }}</td></tr>
        {% endfor %}
      </table>
    </div>
    {% endif %}
  </div>

  <div class="footer">
    <p>Generated on {{ generated_on }}</p>
  </div>

  <div class="actions">
    <button onclick="window.print()">Print Report</button>
  </div>
</body>
</html>
"""

_environment = Environment(autoescape=select_autoescape(default=True, default_for_string=True))
_template = _environment.from_string(REPORT_TEMPLATE)


def format_cell(value: Any, column: Optional[Column] = None) -> str:
    """Display text for one report cell"""
    if column is not None and column.formatter is not None:
        return column.formatter(value)
    if value is None:
        return "-"
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (date, datetime)):
        return format_date(value)
    return str(value)


def resolve_columns(rows: Sequence[Mapping[str, Any]], columns: Optional[Sequence[Column]] = None) -> List[Column]:
    """Explicit columns, or one column per key of the first row"""
    if columns:
        return list(columns)
    if not rows:
        return []
    return [Column(key=key, label=key) for key in rows[0]]


def generate_report_html(
    title: str,
    data: ReportData,
    columns: Optional[Sequence[Column]] = None,
    summary: Optional[Mapping[str, Any]] = None,
    subtitle: Optional[str] = None,
    organization_name: Optional[str] = None,
    logo: Optional[str] = None,
    show_date: bool = True,
    generated_at: Optional[datetime] = None,
) -> str:
    """
    Render a self-contained printable HTML document.

    `data` is either a list of records (rendered as a table, one row per record)
    or a single record (rendered as a two-column key/value table). An empty list
    still produces a well-formed document with an empty table.
    """
    generated_at = generated_at or datetime.now()

    record = None
    headers: List[str] = []
    rows: List[List[str]] = []
    if isinstance(data, Mapping):
        record = [(key, format_cell(value)) for key, value in data.items()]
    else:
        resolved = resolve_columns(data, columns)
        headers = [column.label for column in resolved]
        rows = [[format_cell(row.get(column.key), column) for column in resolved] for row in data]

    return _template.render(
        title=title,
        subtitle=subtitle,
        organization_name=organization_name,
        logo=logo,
        show_date=show_date,
        report_date=format_date(generated_at),
        generated_on=f"{format_date(generated_at)} {generated_at.strftime('%H:%M:%S')}",
        record=record,
        headers=headers,
        rows=rows,
        summary=[(label, str(value)) for label, value in (summary or {}).items()],
    )
