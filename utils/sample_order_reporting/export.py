# utils/sample_order_reporting/export.py
"""
Excel Export for Sample & Order Reporting

One formatted sheet per export, with a fixed column set per page:
- Sample requests
- Order overview (status-filtered and searched rows)
- Customer analysis (ranked)

Uses openpyxl for formatting capabilities.
"""

import io
import logging
from datetime import date
from typing import Dict, Optional

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from .constants import (
    ALL,
    CUSTOMER_EXPORT_COLUMNS,
    EXCEL_STYLES,
    ORDER_EXPORT_COLUMNS,
    SAMPLE_EXPORT_COLUMNS,
)

logger = logging.getLogger(__name__)

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_NUMERIC_DEFAULTS = {'rank', 'total_books', 'no_of_books', 'order_amount', 'invoice_amount'}


class ReportingExport:
    """
    Usage:
        data = ReportingExport.export_samples(view.records)
        st.download_button("📥 Export", data=data,
                           file_name=ReportingExport.sample_filename(),
                           mime=XLSX_MIME)
    """

    # =========================================================================
    # FILE NAMES
    # =========================================================================

    @staticmethod
    def sample_filename(today: Optional[date] = None) -> str:
        return f"sample_requests_{(today or date.today()).isoformat()}.xlsx"

    @staticmethod
    def order_filename(status_filter: str = ALL, today: Optional[date] = None) -> str:
        label = 'all' if not status_filter or status_filter == ALL else status_filter.lower().replace(' ', '_')
        return f"order_overview_{label}_{(today or date.today()).isoformat()}.xlsx"

    @staticmethod
    def customer_filename(today: Optional[date] = None) -> str:
        return f"customer_analysis_{(today or date.today()).isoformat()}.xlsx"

    # =========================================================================
    # SHEET SHAPING
    # =========================================================================

    @staticmethod
    def shape(df: pd.DataFrame, columns: Dict[str, str]) -> pd.DataFrame:
        """Select and rename the fixed export columns; blanks for missing values."""
        out = pd.DataFrame(index=range(len(df)))
        for source, label in columns.items():
            if source in df.columns:
                series = df[source].reset_index(drop=True)
            else:
                series = pd.Series([None] * len(df))
            if source in _NUMERIC_DEFAULTS:
                series = pd.to_numeric(series, errors='coerce').fillna(0)
            else:
                series = series.where(series.notna(), '').astype(str)
            out[label] = series
        return out

    @staticmethod
    def export_samples(df: pd.DataFrame) -> bytes:
        return ReportingExport.to_excel(
            ReportingExport.shape(df, SAMPLE_EXPORT_COLUMNS), sheet_name='Sample Requests'
        )

    @staticmethod
    def export_orders(df: pd.DataFrame) -> bytes:
        shaped = ReportingExport.shape(df, ORDER_EXPORT_COLUMNS)
        amount = ORDER_EXPORT_COLUMNS['order_amount']
        shaped[amount] = shaped[amount].round().astype(int)
        return ReportingExport.to_excel(shaped, sheet_name='Order Overview')

    @staticmethod
    def export_customers(analysis: pd.DataFrame) -> bytes:
        ranked = analysis.reset_index(drop=True).copy()
        ranked.insert(0, 'rank', range(1, len(ranked) + 1))
        shaped = ReportingExport.shape(ranked, CUSTOMER_EXPORT_COLUMNS)
        amount = CUSTOMER_EXPORT_COLUMNS['invoice_amount']
        shaped[amount] = shaped[amount].round().astype(int)
        return ReportingExport.to_excel(shaped, sheet_name='Customer Analysis')

    # =========================================================================
    # WORKBOOK
    # =========================================================================

    @staticmethod
    def to_excel(df: pd.DataFrame, sheet_name: str = 'Data') -> bytes:
        """Convert DataFrame to formatted Excel bytes using openpyxl."""
        wb = Workbook()
        ws = wb.active
        ws.title = sheet_name

        header_fill = PatternFill(
            start_color=EXCEL_STYLES['header_fill_color'],
            end_color=EXCEL_STYLES['header_fill_color'],
            fill_type='solid'
        )
        header_font = Font(bold=True, color=EXCEL_STYLES['header_font_color'], size=11)
        thin_border = Side(style='thin', color='000000')
        cell_border = Border(left=thin_border, right=thin_border, top=thin_border, bottom=thin_border)

        # Write headers
        for col_idx, col_name in enumerate(df.columns, 1):
            cell = ws.cell(row=1, column=col_idx, value=col_name)
            cell.fill = header_fill
            cell.font = header_font
            cell.alignment = Alignment(horizontal='center', vertical='center')
            cell.border = cell_border
            ws.column_dimensions[get_column_letter(col_idx)].width = max(len(str(col_name)) + 4, 12)

        # Write data
        for row_idx, row in enumerate(df.itertuples(index=False), 2):
            for col_idx, value in enumerate(row, 1):
                if hasattr(value, 'item'):
                    value = value.item()
                cell = ws.cell(row=row_idx, column=col_idx, value=value)
                cell.border = cell_border

                col_name = str(df.columns[col_idx - 1]).lower()
                if 'amount' in col_name:
                    cell.number_format = EXCEL_STYLES['currency_format']
                    cell.alignment = Alignment(horizontal='right')

        ws.freeze_panes = 'A2'

        buffer = io.BytesIO()
        wb.save(buffer)
        buffer.seek(0)
        logger.info(f"Excel export '{sheet_name}' created with {len(df)} rows")
        return buffer.getvalue()
