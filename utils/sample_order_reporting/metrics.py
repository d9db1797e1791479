# utils/sample_order_reporting/metrics.py
"""
KPI Calculations for Sample & Order Reporting

Handles all aggregations over fetched record frames:
- Sample KPIs (status-bucketed counts, requested books)
- Order KPIs (non-cancelled totals, distinct orders, status buckets)
- Quota summary (rolled up) and per-employee utilisation with tiers
- Customer-wise invoice / book totals
- Top / bottom book rankings from the packed SKU column
- Submission-id search over fetched records

Every aggregation has a zero-valued default (empty_* methods) that the
view loader substitutes when the aggregation fails.
"""

import logging
from typing import Dict, Tuple

import numpy as np
import pandas as pd

from .constants import (
    BOOK_RANKING_SIZE,
    QUOTA_CRITICAL_ABOVE,
    QUOTA_TIER_CRITICAL,
    QUOTA_TIER_NORMAL,
    QUOTA_TIER_WARNING,
    QUOTA_WARNING_FROM,
    STATUS_B2B_UPLOADED,
    STATUS_CANCELLED,
    STATUS_DELIVERED,
    STATUS_DISPATCHED,
    STATUS_INVOICE_CREATED,
    STATUS_REQUEST_RECEIVED,
    TOP_CUSTOMERS_CHART_SIZE,
    ZM_PENDING_APPROVAL,
)
from .sku_parser import book_quantities_frame

logger = logging.getLogger(__name__)


def apply_submission_search(df: pd.DataFrame, query: str, column: str = 'submission_id') -> pd.DataFrame:
    """Case-insensitive substring match on the submission id."""
    query = (query or '').strip().lower()
    if df is None or df.empty or not query or column not in df.columns:
        return df
    mask = df[column].astype(str).str.lower().str.contains(query, regex=False, na=False)
    return df[mask]


CUSTOMER_COLUMNS = ['customer_name', 'invoice_amount', 'total_books']
UTILISATION_COLUMNS = [
    'employee_email', 'employee_name', 'assigned_quota', 'utilised_quota',
    'quota_left', 'utilised_percentage', 'tier',
]
BOOK_COLUMNS = ['name', 'quantity']


def _to_int(series: pd.Series) -> pd.Series:
    """Integer parse with 0 for blanks/garbage; fractional values truncate."""
    values = pd.to_numeric(series, errors='coerce').fillna(0)
    return np.trunc(values).astype(int)


def _to_float(series: pd.Series) -> pd.Series:
    return pd.to_numeric(series, errors='coerce').fillna(0.0).astype(float)


def usage_percentage(used: float, maximum: float) -> float:
    """used / max * 100 rounded half up to 2 decimals; 0 when max is 0."""
    if not maximum or maximum <= 0:
        return 0.0
    return float(np.floor(used / maximum * 100 * 100 + 0.5) / 100)


def quota_tier(percentage: float) -> str:
    """Display emphasis: critical above 100%, warning from 70%, else normal."""
    if percentage > QUOTA_CRITICAL_ABOVE:
        return QUOTA_TIER_CRITICAL
    if percentage >= QUOTA_WARNING_FROM:
        return QUOTA_TIER_WARNING
    return QUOTA_TIER_NORMAL


class ReportingMetrics:
    """
    Aggregations for the dashboard, sample and order views.

    Usage:
        kpis = ReportingMetrics.calculate_sample_kpis(samples_df)
        order_kpis = ReportingMetrics.calculate_order_kpis(orders_df)
        top10, low10 = ReportingMetrics.rank_books(orders_df, exclude_cancelled=True)
    """

    # =========================================================================
    # SAMPLE KPIs
    # =========================================================================

    @staticmethod
    def calculate_sample_kpis(df: pd.DataFrame) -> Dict:
        if df is None or df.empty:
            return ReportingMetrics.empty_sample_kpis()

        status = df['sample_status']
        received = status == STATUS_REQUEST_RECEIVED

        return {
            'sample_order_placed': int(len(df)),
            'total_request_books': int(_to_int(df['total_books']).sum()),
            'order_received': int(received.sum()),
            'zm_approval_pending': int((received & (df['zm_approval'] == ZM_PENDING_APPROVAL)).sum()),
            'dispatched': int((status == STATUS_DISPATCHED).sum()),
            'delivered': int((status == STATUS_DELIVERED).sum()),
        }

    @staticmethod
    def empty_sample_kpis() -> Dict:
        return {
            'sample_order_placed': 0,
            'total_request_books': 0,
            'order_received': 0,
            'zm_approval_pending': 0,
            'dispatched': 0,
            'delivered': 0,
        }

    # =========================================================================
    # ORDER KPIs
    # =========================================================================

    @staticmethod
    def calculate_order_kpis(df: pd.DataFrame) -> Dict:
        """
        Totals come from non-cancelled rows; an order spanning several rows
        counts once in total_order_placed. Status buckets count rows.
        """
        if df is None or df.empty:
            return ReportingMetrics.empty_order_kpis()

        status = df['status']
        active = df[status != STATUS_CANCELLED]

        return {
            'total_invoice_amount': float(_to_float(active['order_amount']).sum()),
            'total_books': int(_to_int(active['no_of_books']).sum()),
            'total_order_placed': int(active['submission_id'].nunique()),
            'order_in_process': int((status == STATUS_REQUEST_RECEIVED).sum()),
            'yet_to_be_dispatched': int(status.isin([STATUS_B2B_UPLOADED, STATUS_INVOICE_CREATED]).sum()),
            'zm_approval_pending': int((df['zm_approval'] == ZM_PENDING_APPROVAL).sum()),
            'order_in_transit': int((status == STATUS_DISPATCHED).sum()),
            'order_delivered': int((status == STATUS_DELIVERED).sum()),
            'order_cancelled': int((status == STATUS_CANCELLED).sum()),
        }

    @staticmethod
    def empty_order_kpis() -> Dict:
        return {
            'total_invoice_amount': 0.0,
            'total_books': 0,
            'total_order_placed': 0,
            'order_in_process': 0,
            'yet_to_be_dispatched': 0,
            'zm_approval_pending': 0,
            'order_in_transit': 0,
            'order_delivered': 0,
            'order_cancelled': 0,
        }

    # =========================================================================
    # QUOTA
    # =========================================================================

    @staticmethod
    def calculate_quota_summary(quota_df: pd.DataFrame) -> Dict:
        if quota_df is None or quota_df.empty:
            return ReportingMetrics.empty_quota_summary()

        sampling_quota = float(_to_float(quota_df['max_quota']).sum())
        quota_used = float(_to_float(quota_df['quota_used']).sum())

        return {
            'sampling_quota': sampling_quota,
            'quota_used': quota_used,
            'remaining_quota': sampling_quota - quota_used,
            'quota_used_percentage': usage_percentage(quota_used, sampling_quota),
        }

    @staticmethod
    def empty_quota_summary() -> Dict:
        return {
            'sampling_quota': 0.0,
            'quota_used': 0.0,
            'remaining_quota': 0.0,
            'quota_used_percentage': 0.0,
        }

    @staticmethod
    def calculate_quota_utilisation(quota_df: pd.DataFrame) -> pd.DataFrame:
        """Per-employee quota usage (not rolled up) with a display tier."""
        if quota_df is None or quota_df.empty:
            return ReportingMetrics.empty_quota_utilisation()

        assigned = _to_float(quota_df['max_quota'])
        utilised = _to_float(quota_df['quota_used'])
        percentages = [usage_percentage(u, a) for u, a in zip(utilised, assigned)]

        result = pd.DataFrame({
            'employee_email': quota_df['employee_email_id'].values,
            'employee_name': quota_df['employee_name'].fillna(quota_df['employee_email_id']).values,
            'assigned_quota': assigned.values,
            'utilised_quota': utilised.values,
            'quota_left': (assigned - utilised).values,
            'utilised_percentage': percentages,
        })
        result['tier'] = result['utilised_percentage'].apply(quota_tier)
        return result

    @staticmethod
    def empty_quota_utilisation() -> pd.DataFrame:
        return pd.DataFrame(columns=UTILISATION_COLUMNS)

    # =========================================================================
    # CUSTOMER ANALYSIS
    # =========================================================================

    @staticmethod
    def calculate_customer_analysis(df: pd.DataFrame) -> pd.DataFrame:
        """
        Non-cancelled orders grouped by customer, sorted by invoice amount
        descending (ties keep first-encounter order).
        """
        if df is None or df.empty:
            return ReportingMetrics.empty_customer_analysis()

        active = df[df['status'] != STATUS_CANCELLED]
        names = active['company_trade_name']
        active = active[names.notna() & (names.astype(str).str.strip() != '')]
        if active.empty:
            return ReportingMetrics.empty_customer_analysis()

        grouped = pd.DataFrame({
            'customer_name': active['company_trade_name'].values,
            'invoice_amount': _to_float(active['order_amount']).values,
            'total_books': _to_int(active['no_of_books']).values,
        }).groupby('customer_name', sort=False, as_index=False).sum()

        return grouped.sort_values(
            'invoice_amount', ascending=False, kind='mergesort'
        ).reset_index(drop=True)

    @staticmethod
    def empty_customer_analysis() -> pd.DataFrame:
        return pd.DataFrame(columns=CUSTOMER_COLUMNS)

    @staticmethod
    def top_customers_by_invoice(analysis: pd.DataFrame, n: int = TOP_CUSTOMERS_CHART_SIZE) -> pd.DataFrame:
        """First n rows of a customer analysis, shaped for a bar chart."""
        if analysis is None or analysis.empty:
            return pd.DataFrame(columns=['name', 'value'])
        top = analysis.head(n)
        return pd.DataFrame({'name': top['customer_name'].values, 'value': top['invoice_amount'].values})

    # =========================================================================
    # BOOK RANKING
    # =========================================================================

    @staticmethod
    def rank_books(
        df: pd.DataFrame,
        exclude_cancelled: bool = False,
        status_column: str = 'status',
        size: int = BOOK_RANKING_SIZE
    ) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """
        Accumulate book quantities from sku_info and rank them.

        Returns:
            (top, bottom): top = first `size` by quantity descending;
            bottom = last `size` of the same order, reversed so the
            lowest-quantity book comes first. Ties keep encounter order.
        """
        if df is None or df.empty or 'sku_info' not in df.columns:
            return ReportingMetrics.empty_book_ranking()

        if exclude_cancelled and status_column in df.columns:
            df = df[df[status_column] != STATUS_CANCELLED]

        books = book_quantities_frame(df['sku_info'])
        if books.empty:
            return ReportingMetrics.empty_book_ranking()

        ranked = books.sort_values('quantity', ascending=False, kind='mergesort').reset_index(drop=True)
        top = ranked.head(size).reset_index(drop=True)
        bottom = ranked.tail(size).iloc[::-1].reset_index(drop=True)
        return top, bottom

    @staticmethod
    def empty_book_ranking() -> Tuple[pd.DataFrame, pd.DataFrame]:
        return pd.DataFrame(columns=BOOK_COLUMNS), pd.DataFrame(columns=BOOK_COLUMNS)
