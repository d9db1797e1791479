import io
from datetime import date

import pandas as pd
from openpyxl import load_workbook

from utils.sample_order_reporting.constants import (
    CUSTOMER_EXPORT_COLUMNS,
    ORDER_EXPORT_COLUMNS,
    SAMPLE_EXPORT_COLUMNS,
)
from utils.sample_order_reporting.export import ReportingExport


def _read(data: bytes):
    ws = load_workbook(io.BytesIO(data)).active
    rows = list(ws.iter_rows(values_only=True))
    return ws.title, list(rows[0]), rows[1:]


def test_filenames():
    today = date(2025, 1, 2)
    assert ReportingExport.sample_filename(today) == 'sample_requests_2025-01-02.xlsx'
    assert ReportingExport.order_filename('Yet to be Dispatched', today) == \
        'order_overview_yet_to_be_dispatched_2025-01-02.xlsx'
    assert ReportingExport.order_filename('ALL', today) == 'order_overview_all_2025-01-02.xlsx'
    assert ReportingExport.customer_filename(today) == 'customer_analysis_2025-01-02.xlsx'


def test_sample_export_uses_fixed_columns():
    df = pd.DataFrame({
        'submission_id': ['S1'],
        'employee_email': ['e1@x.com'],
        'timestamp': ['2025-01-10 09:00:00'],
        'total_books': [None],
        'sample_status': ['Delivered'],
    })
    title, header, rows = _read(ReportingExport.export_samples(df))
    assert title == 'Sample Requests'
    assert header == list(SAMPLE_EXPORT_COLUMNS.values())
    record = dict(zip(header, rows[0]))
    assert record['Submission ID'] == 'S1'
    assert record['Total Books'] == 0


def test_order_export_rounds_amounts():
    df = pd.DataFrame({
        'submission_id': ['SUB1', 'SUB2'],
        'company_trade_name': ['Beta School', 'Gamma'],
        'order_amount': [1000.6, None],
        'no_of_books': [10, 3],
        'status': ['Delivered', 'Cancelled'],
    })
    _, header, rows = _read(ReportingExport.export_orders(df))
    assert header == list(ORDER_EXPORT_COLUMNS.values())
    amounts = [dict(zip(header, row))['Invoice Amount'] for row in rows]
    assert amounts == [1001, 0]


def test_customer_export_is_ranked():
    analysis = pd.DataFrame({
        'customer_name': ['C', 'A'],
        'invoice_amount': [200.0, 100.0],
        'total_books': [4, 1],
    })
    _, header, rows = _read(ReportingExport.export_customers(analysis))
    assert header == list(CUSTOMER_EXPORT_COLUMNS.values())
    assert [row[0] for row in rows] == [1, 2]
    assert [row[1] for row in rows] == ['C', 'A']


def test_empty_export_has_header_only():
    _, header, rows = _read(ReportingExport.export_orders(pd.DataFrame()))
    assert header == list(ORDER_EXPORT_COLUMNS.values())
    assert rows == []
