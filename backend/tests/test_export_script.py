from __future__ import annotations

from contextlib import contextmanager
from datetime import date

from openpyxl import load_workbook

from backend.app.scripts import export_financial_report


def _use_session(monkeypatch, db_session) -> None:
    @contextmanager
    def session_scope():
        yield db_session

    monkeypatch.setattr(export_financial_report, "session_scope", session_scope)


def test_export_script_writes_csv_report(tmp_path, monkeypatch, db_session, seed_finance_data):
    _use_session(monkeypatch, db_session)

    exit_code = export_financial_report.main(
        ["--year", "2025", "--month", "3", "--format", "csv", "--output-dir", str(tmp_path)]
    )

    assert exit_code == 0
    lines = (tmp_path / "financial-report-march-2025.csv").read_text().splitlines()
    assert lines[-1] == '"TOTAL","145.00","23.00","116.00","80.0%"'


def test_export_script_defaults_to_current_period(tmp_path, monkeypatch, db_session, seed_finance_data):
    _use_session(monkeypatch, db_session)

    exit_code = export_financial_report.main(
        ["--period-type", "quarter", "--summary", "--output-dir", str(tmp_path)],
        today=date(2025, 2, 14),
    )

    assert exit_code == 0
    workbook = load_workbook(tmp_path / "financial-report-q1-2025.xlsx")
    assert workbook["Summary"]["B1"].value == "Q1 2025"


def test_export_script_rejects_invalid_period(tmp_path):
    exit_code = export_financial_report.main(
        ["--year", "2025", "--month", "13", "--output-dir", str(tmp_path)]
    )

    assert exit_code == 2
    assert not list(tmp_path.iterdir())
