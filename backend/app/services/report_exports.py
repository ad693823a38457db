"""Render :class:`FinancialReport` objects into downloadable files.

Three renderers share the same report sections:

* ``render_workbook`` writes one spreadsheet sheet per section.
* ``render_pdf`` writes the condensed, paginated variant.
* ``render_csv`` writes the trend section as a flat table.
"""

from __future__ import annotations

import csv
import enum
import io
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

import pandas as pd
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.pdfgen.canvas import Canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .finance_reports import DEFAULT_TOP_N, FinancialReport, TrendRow
from .financial_calculations import (
    basis_points_to_percent,
    format_currency,
    minor_to_decimal,
)

LOGGER = logging.getLogger(__name__)

PRIMARY_COLOR = colors.Color(139 / 255, 92 / 255, 46 / 255)
ACCENT_COLOR = colors.Color(34 / 255, 139 / 255, 34 / 255)
NEGATIVE_COLOR = colors.Color(220 / 255, 53 / 255, 69 / 255)
LIGHT_GRAY = colors.Color(245 / 255, 245 / 255, 245 / 255)


class ReportFormat(str, enum.Enum):
    XLSX = "xlsx"
    PDF = "pdf"
    CSV = "csv"


MEDIA_TYPES = {
    ReportFormat.XLSX: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ReportFormat.PDF: "application/pdf",
    ReportFormat.CSV: "text/csv; charset=utf-8",
}


@dataclass(frozen=True)
class RenderedReport:
    content: bytes
    media_type: str
    filename: str


def export_filename(period_label: str, report_format: ReportFormat) -> str:
    """``March 2025`` becomes ``financial-report-march-2025.xlsx``."""

    slug = re.sub(r"\s+", "-", period_label.strip()).lower()
    return f"financial-report-{slug}.{ReportFormat(report_format).value}"


def _format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return value.strftime("%Y-%m-%d %H:%M")


def _format_date(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return value.strftime("%Y-%m-%d")


def _trend_columns(currency: str) -> List[str]:
    return [
        "Period",
        f"Revenue ({currency})",
        f"Expenses ({currency})",
        f"Net Profit ({currency})",
        "Margin %",
    ]


def _trend_values(row: TrendRow) -> list:
    return [
        row.label,
        minor_to_decimal(row.revenue),
        minor_to_decimal(row.expenses),
        minor_to_decimal(row.net_profit),
        basis_points_to_percent(row.margin_bps),
    ]


def _trend_table(report: FinancialReport) -> List[list]:
    rows = [_trend_values(row) for row in report.trend.rows]
    rows.append(_trend_values(report.trend.total))
    return rows


# Spreadsheet


def _summary_frame(report: FinancialReport) -> pd.DataFrame:
    summary = report.summary
    rows: List[list] = [
        [summary.title, summary.period_label],
        ["Generated", _format_timestamp(summary.generated_at)],
        [None, None],
        ["EXECUTIVE SUMMARY", None],
        ["Metric", "Value"],
    ]
    rows.extend([row.metric, row.display] for row in summary.rows)
    return pd.DataFrame(rows)


def _orders_frame(report: FinancialReport) -> pd.DataFrame:
    currency = report.currency
    return pd.DataFrame(
        [
            [
                row.order_ref,
                _format_date(row.created_at),
                row.customer_name or "N/A",
                row.customer_phone or "N/A",
                row.status or "",
                row.source,
                row.item_count,
                minor_to_decimal(row.subtotal),
                minor_to_decimal(row.shipping),
                minor_to_decimal(row.total),
            ]
            for row in report.orders.rows
        ],
        columns=[
            "Order #",
            "Date",
            "Customer",
            "Phone",
            "Status",
            "Source",
            "Items",
            f"Subtotal ({currency})",
            f"Shipping ({currency})",
            f"Total ({currency})",
        ],
    )


def _products_frame(report: FinancialReport) -> pd.DataFrame:
    return pd.DataFrame(
        [[row.name, row.quantity, minor_to_decimal(row.revenue)] for row in report.products.rows],
        columns=["Product", "Total Quantity", f"Total Revenue ({report.currency})"],
    )


def _customers_frame(report: FinancialReport) -> pd.DataFrame:
    return pd.DataFrame(
        [
            [row.name, row.phone or "N/A", row.order_count, minor_to_decimal(row.total_spend)]
            for row in report.customers.rows
        ],
        columns=["Customer Name", "Phone", "Total Orders", f"Total Spent ({report.currency})"],
    )


def _set_column_widths(worksheet, widths: Sequence[int]) -> None:
    for index, width in enumerate(widths, start=1):
        worksheet.column_dimensions[get_column_letter(index)].width = width


def render_workbook(report: FinancialReport) -> bytes:
    """One sheet per section: Summary, Revenue Trend, Orders, Products, Customers."""

    sheets = [
        ("Summary", _summary_frame(report), False, (30, 20)),
        (
            "Revenue Trend",
            pd.DataFrame(_trend_table(report), columns=_trend_columns(report.currency)),
            True,
            (15, 15, 15, 15, 12),
        ),
        ("Orders", _orders_frame(report), True, (12, 12, 20, 15, 10, 12, 8, 15, 15, 15)),
        ("Products", _products_frame(report), True, (40, 15, 18)),
        ("Customers", _customers_frame(report), True, (25, 15, 15, 18)),
    ]

    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for sheet_name, frame, with_header, widths in sheets:
            frame.to_excel(writer, sheet_name=sheet_name, index=False, header=with_header)
            _set_column_widths(writer.sheets[sheet_name], widths)
    LOGGER.debug("Rendered workbook for %s", report.period.label)
    return buffer.getvalue()


# CSV


def _clean_csv_value(value) -> str:
    if value is None:
        return ""
    return str(value).replace(",", "")


def render_csv(report: FinancialReport) -> bytes:
    """Trend rows followed by the TOTAL row, every value quoted."""

    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="\n").writerow(_trend_columns(report.currency))
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for values in _trend_table(report):
        writer.writerow([_clean_csv_value(value) for value in values])
    return buffer.getvalue().encode("utf-8")


# PDF


class FooterCanvas(Canvas):
    """Canvas that stamps "Page i of N" once the page count is known."""

    def __init__(self, *args, footer_text: str = "", **kwargs):
        super().__init__(*args, **kwargs)
        self._footer_text = footer_text
        self._page_states: list = []

    def showPage(self) -> None:
        self._page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self) -> None:
        page_count = len(self._page_states)
        for state in self._page_states:
            self.__dict__.update(state)
            self._draw_footer(page_count)
            super().showPage()
        super().save()

    def _draw_footer(self, page_count: int) -> None:
        self.saveState()
        self.setFont("Helvetica", 8)
        self.setFillColor(colors.grey)
        page_width, _ = A4
        self.drawString(0.5 * inch, 0.4 * inch, self._footer_text)
        self.drawRightString(
            page_width - 0.5 * inch, 0.4 * inch, f"Page {self._pageNumber} of {page_count}"
        )
        self.restoreState()


def _pdf_table(head: List[str], body: Iterable[list], col_widths: Optional[Sequence[float]] = None) -> Table:
    table = Table([head, *body], colWidths=col_widths, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("FONT", (0, 0), (-1, 0), "Helvetica-Bold", 9),
                ("BACKGROUND", (0, 0), (-1, 0), PRIMARY_COLOR),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONT", (0, 1), (-1, -1), "Helvetica", 9),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, LIGHT_GRAY]),
                ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ]
        )
    )
    return table


def render_pdf(report: FinancialReport, *, limit: int = DEFAULT_TOP_N) -> bytes:
    """Paginated short-form report built from the top ``limit`` rows per section."""

    short = report if report.condensed_view else report.condensed(limit)
    currency = report.currency
    summary = report.summary

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "ReportTitle", parent=styles["Heading1"], fontSize=22, textColor=PRIMARY_COLOR, alignment=1
    )
    subtitle_style = ParagraphStyle("ReportSubtitle", parent=styles["Normal"], fontSize=12, alignment=1)
    heading_style = ParagraphStyle(
        "SectionHeading", parent=styles["Heading2"], fontSize=14, textColor=PRIMARY_COLOR
    )
    subheading_style = ParagraphStyle("SubHeading", parent=styles["Heading3"], fontSize=12)
    body_style = styles["Normal"]

    net_profit = summary.row("Net Profit")
    kpi_table = Table(
        [
            ["Total Revenue", "Total Orders", "Net Profit"],
            [
                summary.row("Total Revenue (incl. Shipping)").display,
                summary.row("Total Orders").display,
                net_profit.display,
            ],
        ],
        colWidths=[2.3 * inch] * 3,
    )
    kpi_table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, -1), LIGHT_GRAY),
                ("ALIGN", (0, 0), (-1, -1), "CENTER"),
                ("FONT", (0, 0), (-1, 0), "Helvetica", 10),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.grey),
                ("FONT", (0, 1), (-1, 1), "Helvetica-Bold", 14),
                ("TEXTCOLOR", (0, 1), (0, 1), ACCENT_COLOR),
                ("TEXTCOLOR", (1, 1), (1, 1), PRIMARY_COLOR),
                (
                    "TEXTCOLOR",
                    (2, 1),
                    (2, 1),
                    ACCENT_COLOR if (net_profit.value or 0) >= 0 else NEGATIVE_COLOR,
                ),
                ("TOPPADDING", (0, 0), (-1, -1), 8),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 8),
            ]
        )
    )

    elements: list = [
        Paragraph(summary.title, title_style),
        Paragraph(summary.period_label, subtitle_style),
        Spacer(1, 0.3 * inch),
        Paragraph("Executive Summary", heading_style),
        kpi_table,
        Spacer(1, 0.15 * inch),
        Paragraph(f"Average Order Value: {summary.row('Average Order Value').display}", body_style),
        Paragraph(f"Profit Margin: {summary.row('Profit Margin').display}", body_style),
        Paragraph(f"Total Expenses: {summary.row('Total Expenses').display}", body_style),
        Spacer(1, 0.25 * inch),
        Paragraph("Orders Overview", heading_style),
        Paragraph(f"Processed {report.orders.order_count} orders during this period.", body_style),
        Paragraph(
            f"Average transaction: {format_currency(report.orders.average_total, currency)}",
            body_style,
        ),
    ]

    if short.orders.rows:
        elements += [
            Paragraph(f"Top {len(short.orders.rows)} Orders", subheading_style),
            _pdf_table(
                ["Order #", "Customer", "Total"],
                [
                    [row.order_ref, row.customer_name or "N/A", format_currency(row.total, currency)]
                    for row in short.orders.rows
                ],
            ),
        ]

    elements += [
        Spacer(1, 0.25 * inch),
        Paragraph("Product Performance", heading_style),
        Paragraph(
            f"{report.products.product_count} unique products sold with "
            f"{report.products.total_quantity} total items.",
            body_style,
        ),
    ]
    if short.products.rows:
        elements += [
            Paragraph(f"Top {len(short.products.rows)} Products", subheading_style),
            _pdf_table(
                ["Product", "Qty", "Revenue"],
                [
                    [row.name, str(row.quantity), format_currency(row.revenue, currency)]
                    for row in short.products.rows
                ],
                col_widths=[3.6 * inch, 1.0 * inch, 1.6 * inch],
            ),
        ]

    elements += [
        Spacer(1, 0.25 * inch),
        Paragraph("Customer Insights", heading_style),
        Paragraph(f"{report.customers.customer_count} unique customers served during this period.", body_style),
    ]
    if short.customers.rows:
        elements += [
            Paragraph(f"Top {len(short.customers.rows)} Customers", subheading_style),
            _pdf_table(
                ["Customer", "Orders", "Total Spent"],
                [
                    [row.name, str(row.order_count), format_currency(row.total_spend, currency)]
                    for row in short.customers.rows
                ],
                col_widths=[3.2 * inch, 1.0 * inch, 2.0 * inch],
            ),
        ]

    generated = f"Generated: {_format_timestamp(summary.generated_at)}"

    def _canvas_with_footer(*args, **kwargs) -> FooterCanvas:
        return FooterCanvas(*args, footer_text=generated, **kwargs)

    buffer = io.BytesIO()
    document = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        title=f"{summary.title} - {summary.period_label}",
        topMargin=0.6 * inch,
        bottomMargin=0.7 * inch,
        leftMargin=0.5 * inch,
        rightMargin=0.5 * inch,
    )
    document.build(elements, canvasmaker=_canvas_with_footer)
    LOGGER.debug("Rendered PDF for %s", report.period.label)
    return buffer.getvalue()


def render_report(report: FinancialReport, report_format: ReportFormat | str) -> RenderedReport:
    report_format = ReportFormat(report_format)
    if report_format is ReportFormat.XLSX:
        content = render_workbook(report)
    elif report_format is ReportFormat.PDF:
        content = render_pdf(report)
    else:
        content = render_csv(report)
    return RenderedReport(
        content=content,
        media_type=MEDIA_TYPES[report_format],
        filename=export_filename(report.period.label, report_format),
    )
