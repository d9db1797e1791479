# utils/sample_order_reporting/queries.py
"""
SQL Queries and Data Loading for Sample & Order Reporting

Handles all record-store interactions:
- Sample requests from sample_request
- Orders from order_form_k8_25_26 (one submission may span several rows)
- Quota rows from sample_quota
- Customer list for the order filter

All queries respect access control: the scope is resolved and validated
before the record query runs, and an empty scope returns an empty frame
without touching the record store.

Store errors are logged and degrade to an empty DataFrame, so callers
cannot tell "no data" from "fetch failed".
"""

import logging
from datetime import datetime, time, timedelta
from typing import Dict, FrozenSet, List, Optional, Tuple

import pandas as pd
from sqlalchemy import DateTime, bindparam, text

from utils.db import get_db_engine, execute_query_df
from .access_control import AccessControl
from .constants import (
    ALL,
    ORDER_TABLE,
    QUOTA_TABLE,
    SAMPLE_REQUEST_TABLE,
    STATUS_B2B_UPLOADED,
    STATUS_DELIVERED,
    STATUS_DISPATCHED,
    STATUS_INVOICE_CREATED,
    STATUS_REQUEST_RECEIVED,
    ZM_PENDING_APPROVAL,
)
from .models import FilterState, is_specific

logger = logging.getLogger(__name__)

SAMPLE_COLUMNS = [
    'submission_id', 'employee_email', 'timestamp', 'total_books', 'sku_info',
    'sample_status', 'zm_approval', 'dispatched_date', 'tracking_id',
    'tracking_link', 'delivered_date',
]

ORDER_COLUMNS = [
    'submission_id', 'employee_email_id', 'time_stamp', 'company_trade_name',
    'order_amount', 'no_of_books', 'sku_info', 'status', 'zm_approval',
    'invoice_link', 'dispatched_date', 'tracking_id', 'no_of_boxes',
    'logistic_partner', 'tracking_link', 'delivered_date',
]

QUOTA_COLUMNS = ['employee_email_id', 'employee_name', 'max_quota', 'quota_used']

# A status constraint: list of (column, allowed values) pairs, ANDed together
StatusConstraint = List[Tuple[str, List[str]]]


# =============================================================================
# STATUS FILTER TRANSLATION
# =============================================================================

def translate_sample_status(status_filter: Optional[str]) -> StatusConstraint:
    """Map a sample status-filter label to column constraints."""
    if not is_specific(status_filter):
        return []
    if status_filter == 'ZM Approval Pending':
        return [
            ('sample_status', [STATUS_REQUEST_RECEIVED]),
            ('zm_approval', [ZM_PENDING_APPROVAL]),
        ]
    if status_filter == 'Order Placed':
        return [('sample_status', [STATUS_REQUEST_RECEIVED, STATUS_B2B_UPLOADED])]
    if status_filter == 'Dispatched':
        return [('sample_status', [STATUS_DISPATCHED])]
    if status_filter == 'Delivered':
        return [('sample_status', [STATUS_DELIVERED])]
    return [('sample_status', [status_filter])]


def translate_order_status(status_filter: Optional[str]) -> StatusConstraint:
    """Map an order status-filter label to column constraints."""
    if not is_specific(status_filter):
        return []
    if status_filter == 'Order In Progress':
        return [('status', [STATUS_REQUEST_RECEIVED])]
    if status_filter == 'Yet to be Dispatched':
        return [('status', [STATUS_B2B_UPLOADED, STATUS_INVOICE_CREATED])]
    if status_filter == 'ZM Approval Pending':
        return [('zm_approval', [ZM_PENDING_APPROVAL])]
    if status_filter == 'Dispatched':
        return [('status', [STATUS_DISPATCHED])]
    if status_filter == 'Delivered':
        return [('status', [STATUS_DELIVERED])]
    return [('status', [status_filter])]


def date_bounds(filters: FilterState) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Inclusive calendar-day range as [start 00:00, day after end 00:00).
    """
    start = datetime.combine(filters.start_date, time.min) if filters.start_date else None
    end = (
        datetime.combine(filters.end_date + timedelta(days=1), time.min)
        if filters.end_date else None
    )
    return start, end


class ReportingQueries:
    """
    Data loading class for sample requests, orders and quota.

    Usage:
        access = AccessControl(role, viewer_email)
        queries = ReportingQueries(access)

        samples_df = queries.get_sample_requests(filters)
        orders_df = queries.get_orders(filters)
    """

    def __init__(self, access_control: AccessControl, engine=None):
        """
        Args:
            access_control: AccessControl instance for scoping
            engine: Optional engine (defaults to the shared singleton)
        """
        self.access = access_control
        self._engine = engine

    @property
    def engine(self):
        """Lazy load database engine."""
        if self._engine is None:
            self._engine = get_db_engine()
        return self._engine

    # =========================================================================
    # SAMPLE REQUESTS
    # =========================================================================

    def get_sample_requests(self, filters: FilterState) -> pd.DataFrame:
        """
        Load sample requests for the viewer's scope, newest first.

        Returns:
            DataFrame with SAMPLE_COLUMNS (empty on empty scope or error)
        """
        scope = self.access.get_allowed_emails(filters)
        return self._fetch_records(
            table=SAMPLE_REQUEST_TABLE,
            columns=SAMPLE_COLUMNS,
            owner_column='employee_email',
            timestamp_column='timestamp',
            scope=scope,
            filters=filters,
            status_constraint=translate_sample_status(filters.status_filter),
            label="sample requests",
        )

    # =========================================================================
    # ORDERS
    # =========================================================================

    def get_orders(self, filters: FilterState) -> pd.DataFrame:
        """
        Load order rows for the viewer's scope, newest first.

        Applies the customer selection in addition to date/status filters.
        Scope validation also checks the allowed lines of business.
        """
        scope = self.access.get_allowed_emails(filters, for_orders=True)
        extra = []
        if is_specific(filters.selected_customer):
            extra.append(('company_trade_name', [filters.selected_customer]))

        return self._fetch_records(
            table=ORDER_TABLE,
            columns=ORDER_COLUMNS,
            owner_column='employee_email_id',
            timestamp_column='time_stamp',
            scope=scope,
            filters=filters,
            status_constraint=extra + translate_order_status(filters.status_filter),
            label="orders",
        )

    def get_unique_customers(self, filters: FilterState) -> List[str]:
        """Distinct customer names (A-Z) in scope, ignoring the status and customer filters."""
        orders = self.get_orders(filters.with_status(ALL).with_customer(ALL))
        if orders.empty:
            return []
        names = orders['company_trade_name'].dropna()
        names = names[names.astype(str).str.strip() != '']
        return sorted(set(names), key=lambda name: str(name).lower())

    # =========================================================================
    # QUOTA
    # =========================================================================

    def get_quota_rows(self, filters: FilterState) -> pd.DataFrame:
        """
        Load per-employee quota rows for the viewer's scope.

        Raises:
            SQLAlchemyError: quota failures propagate so the view loader can
            substitute zero values for this slot only
        """
        scope = self.access.get_allowed_emails(filters)
        if not scope:
            return pd.DataFrame(columns=QUOTA_COLUMNS)

        query = text(f"""
            SELECT {', '.join(QUOTA_COLUMNS)}
            FROM {QUOTA_TABLE}
            WHERE employee_email_id IN :emails
            ORDER BY employee_name
        """).bindparams(bindparam('emails', expanding=True))

        df = execute_query_df(query, {'emails': sorted(scope)}, engine=self.engine)
        if df.empty:
            return pd.DataFrame(columns=QUOTA_COLUMNS)
        logger.info(f"Quota rows loaded: {len(df)}")
        return df

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _fetch_records(
        self,
        table: str,
        columns: List[str],
        owner_column: str,
        timestamp_column: str,
        scope: FrozenSet[str],
        filters: FilterState,
        status_constraint: StatusConstraint,
        label: str
    ) -> pd.DataFrame:
        if not scope:
            logger.info(f"Empty scope, skipping {label} query")
            return pd.DataFrame(columns=columns)

        query = f"""
            SELECT {', '.join(columns)}
            FROM {table}
            WHERE {owner_column} IN :emails
        """
        params: Dict = {'emails': sorted(scope)}
        binds = [bindparam('emails', expanding=True)]

        start, end = date_bounds(filters)
        if start is not None:
            query += f" AND {timestamp_column} >= :start_ts"
            params['start_ts'] = start
            binds.append(bindparam('start_ts', type_=DateTime()))
        if end is not None:
            query += f" AND {timestamp_column} < :end_ts"
            params['end_ts'] = end
            binds.append(bindparam('end_ts', type_=DateTime()))

        for idx, (column, values) in enumerate(status_constraint):
            name = f"status_{idx}"
            query += f" AND {column} IN :{name}"
            params[name] = list(values)
            binds.append(bindparam(name, expanding=True))

        query += f" ORDER BY {timestamp_column} DESC"

        return self._execute_query(text(query).bindparams(*binds), params, columns, label)

    def _execute_query(self, query, params: Dict, columns: List[str], label: str) -> pd.DataFrame:
        """Execute query with error handling (fail open to empty)."""
        try:
            df = execute_query_df(query, params, engine=self.engine)
            logger.info(f"Loaded {len(df)} {label}")
            if df.empty:
                return pd.DataFrame(columns=columns)
            return df
        except Exception as e:
            logger.error(f"Error fetching {label}: {e}")
            return pd.DataFrame(columns=columns)
