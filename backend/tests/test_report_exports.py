from __future__ import annotations

import io
from datetime import date, datetime

import pytest
from openpyxl import load_workbook

from backend.app.services import report_exports
from backend.app.services.finance_reports import compose_report
from backend.app.services.finance_types import (
    CustomerRef,
    DetailedOrder,
    FinancialMetrics,
    OrderItemRow,
    TimeSeriesPoint,
)
from backend.app.services.periods import resolve_period
from backend.app.services.report_exports import (
    MEDIA_TYPES,
    ReportFormat,
    export_filename,
    render_csv,
    render_pdf,
    render_report,
    render_workbook,
)


@pytest.fixture
def report():
    period = resolve_period("quarter", date(2025, 1, 1))
    metrics = FinancialMetrics(
        revenue=14500, cogs=None, gross_profit=None, expenses=2300, net_profit=12200, order_count=2, aov=7250
    )
    series = [
        TimeSeriesPoint("January 2025", datetime(2025, 1, 1), 10500, 1500, None, 9000),
        TimeSeriesPoint("February 2025", datetime(2025, 2, 1), 0, 300, None, -300),
        TimeSeriesPoint("March 2025", datetime(2025, 3, 1), 4000, 500, None, 3500),
    ]
    orders = [
        DetailedOrder(
            id="o1",
            order_number="A-1",
            created_at=datetime(2025, 1, 5, 10, 0),
            status="paid",
            source="shopify",
            amount_minor=10000,
            shipping_minor=500,
            customer=CustomerRef(full_name="Alice, Doha", phone="+97455501234"),
            items=(OrderItemRow(quantity=2, unit_price_minor=5000, product_name="Abaya"),),
        ),
        DetailedOrder(id="o2", status="completed", amount_minor=4000),
    ]
    return compose_report(
        period, metrics, series, orders, generated_at=datetime(2025, 4, 2, 8, 15), currency="QAR"
    )


def test_export_filename_slugifies_period_label():
    assert export_filename("March 2025", ReportFormat.XLSX) == "financial-report-march-2025.xlsx"
    assert export_filename("Q1 2025", "pdf") == "financial-report-q1-2025.pdf"


def test_workbook_has_one_sheet_per_section(report):
    workbook = load_workbook(io.BytesIO(render_workbook(report)))

    assert workbook.sheetnames == ["Summary", "Revenue Trend", "Orders", "Products", "Customers"]

    summary = workbook["Summary"]
    assert summary["A1"].value == "Financial Report"
    assert summary["B1"].value == "Q1 2025"
    assert summary["A2"].value == "Generated"
    assert summary["B2"].value == "2025-04-02 08:15"
    metrics = {
        row[0]: row[1]
        for row in summary.iter_rows(min_row=6, values_only=True)
        if row[0] is not None
    }
    assert metrics["Total Revenue (incl. Shipping)"] == "QAR 145.00"
    assert metrics["Cost of Goods Sold"] == "N/A"

    trend = list(workbook["Revenue Trend"].iter_rows(values_only=True))
    assert trend[0] == ("Period", "Revenue (QAR)", "Expenses (QAR)", "Net Profit (QAR)", "Margin %")
    assert trend[1][0] == "January 2025"
    assert float(trend[1][1]) == pytest.approx(105.0)
    assert trend[-1][0] == "TOTAL"
    assert float(trend[-1][3]) == pytest.approx(122.0)

    orders = list(workbook["Orders"].iter_rows(values_only=True))
    assert orders[1][0] == "A-1"
    assert orders[2][2] == "N/A"
    assert orders[2][5] == "walk_in"

    assert workbook["Summary"].column_dimensions["A"].width == 30


def test_csv_contains_trend_rows_and_total(report):
    lines = render_csv(report).decode("utf-8").splitlines()

    assert lines[0] == "Period,Revenue (QAR),Expenses (QAR),Net Profit (QAR),Margin %"
    assert lines[1] == '"January 2025","105.00","15.00","90.00","85.7%"'
    assert lines[2] == '"February 2025","0.00","3.00","-3.00","0.0%"'
    assert lines[-1] == '"TOTAL","145.00","23.00","122.00","84.1%"'
    assert len(lines) == 5


def test_pdf_renders_a_document(report):
    content = render_pdf(report, limit=1)

    assert content.startswith(b"%PDF")
    assert len(content) > 1000


@pytest.mark.parametrize("report_format", list(ReportFormat))
def test_render_report_sets_media_type_and_filename(report, report_format):
    rendered = render_report(report, report_format.value)

    assert rendered.media_type == MEDIA_TYPES[report_format]
    assert rendered.filename == f"financial-report-q1-2025.{report_format.value}"
    assert rendered.content


@pytest.fixture
def pdf_paragraphs(monkeypatch):
    texts: list[str] = []
    original = report_exports.Paragraph

    def recording_paragraph(text, *args, **kwargs):
        texts.append(text)
        return original(text, *args, **kwargs)

    monkeypatch.setattr(report_exports, "Paragraph", recording_paragraph)
    return texts


def test_pdf_overview_of_condensed_report_describes_every_order(pdf_paragraphs):
    period = resolve_period("month", date(2025, 3, 1))
    orders = [
        DetailedOrder(
            id=f"o{index}",
            order_number=f"A-{index}",
            created_at=datetime(2025, 3, index, 10, 0),
            status="paid",
            amount_minor=index * 1000,
            customer=CustomerRef(id=f"c{index}", full_name=f"Customer {index}"),
            items=(OrderItemRow(quantity=1, unit_price_minor=index * 1000, product_name=f"Product {index}"),),
        )
        for index in range(1, 9)
    ]
    metrics = FinancialMetrics(revenue=36000, expenses=0, net_profit=36000, order_count=8, aov=4500)
    report = compose_report(period, metrics, [], orders, generated_at=datetime(2025, 4, 1, 9, 0))

    content = render_pdf(report.condensed(5))

    assert content.startswith(b"%PDF")
    assert "Processed 8 orders during this period." in pdf_paragraphs
    assert "Average transaction: QAR 45.00" in pdf_paragraphs
    assert "8 unique products sold with 8 total items." in pdf_paragraphs
    assert "8 unique customers served during this period." in pdf_paragraphs
    assert "Top 5 Orders" in pdf_paragraphs


def test_pdf_footer_numbers_pages_against_total(report, monkeypatch):
    footers: list[str] = []
    original = report_exports.FooterCanvas.drawRightString

    def recording_draw(self, x, y, text, *args, **kwargs):
        footers.append(text)
        return original(self, x, y, text, *args, **kwargs)

    monkeypatch.setattr(report_exports.FooterCanvas, "drawRightString", recording_draw)

    render_pdf(report)

    assert [text for text in footers if text.startswith("Page ")] == ["Page 1 of 1"]
