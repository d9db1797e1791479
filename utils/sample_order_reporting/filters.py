# utils/sample_order_reporting/filters.py
"""
Sidebar Filter Components for Sample & Order Reporting

Renders filter UI elements:
- Date range (optional start / end, inclusive)
- Zonal Manager selector (program team)
- Reporting Manager selector (program team, zonal manager)
- Employee selector (every role except employee)
- Customer selector (orders page)
- Status buttons and submission-id search (main area)

The selection lives in st.session_state as an immutable FilterState per page.
Changing a parent selector resets its children; child widget keys include
the parent selection so stale choices never survive a narrowing.
"""

import logging
from typing import List, Optional

import pandas as pd
import streamlit as st

from .access_control import AccessControl
from .constants import ALL
from .models import FilterState, ViewerRole

logger = logging.getLogger(__name__)


def _person_options(df: pd.DataFrame):
    """Options list [ALL, email...] and an email -> label mapping."""
    if df is None or df.empty:
        return [ALL], {}
    labels = {
        row.email: row.name if isinstance(row.name, str) and row.name else row.email
        for row in df.itertuples(index=False)
    }
    return [ALL] + list(labels.keys()), labels


class ReportingFilters:
    """
    Sidebar filter components with role-based selectors.

    Usage:
        filters_ui = ReportingFilters(access, page_key='orders')
        filters = filters_ui.render_sidebar(customers=queries.get_unique_customers(...))
        filters = filters_ui.render_status_buttons(ORDER_STATUS_FILTERS)
    """

    def __init__(self, access_control: AccessControl, page_key: str):
        self.access = access_control
        self.page_key = page_key
        self._state_key = f"{page_key}_filter_state"

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def state(self) -> FilterState:
        if self._state_key not in st.session_state:
            st.session_state[self._state_key] = FilterState()
        return st.session_state[self._state_key]

    @state.setter
    def state(self, value: FilterState):
        st.session_state[self._state_key] = value

    def reset(self):
        """Drop the filter state and every widget value owned by this page."""
        prefix = f"{self.page_key}_"
        for key in [k for k in st.session_state.keys() if str(k).startswith(prefix)]:
            del st.session_state[key]

    def is_first_load(self) -> bool:
        """True until the page has rendered once in this session."""
        flag = f"{self.page_key}_loaded"
        first = not st.session_state.get(flag, False)
        st.session_state[flag] = True
        return first

    # =========================================================================
    # SIDEBAR
    # =========================================================================

    def render_sidebar(self, customers: Optional[List[str]] = None) -> FilterState:
        """
        Render the filter bar and return the (possibly narrowed) state.

        Args:
            customers: Customer names for the customer selector; None hides it
        """
        with st.sidebar:
            st.header("🎛️ Filters")

            self._render_date_range()

            if self.access.role != ViewerRole.EMPLOYEE:
                st.divider()
            if self.access.can_select_zonal_manager():
                self._render_zonal_manager()
            if self.access.can_select_reporting_manager():
                self._render_reporting_manager()
            if self.access.can_select_employee():
                self._render_employee()

            if customers is not None:
                self._render_customer(customers)

            st.divider()
            if st.button("🔄 Reset Filters", use_container_width=True, key=f"{self.page_key}_reset"):
                self.reset()
                st.rerun()

            st.caption(f"Access: {self.access.role.display_name}")

        return self.state

    def _render_date_range(self):
        st.markdown("**📅 Date Range**")
        col_d1, col_d2 = st.columns(2)
        with col_d1:
            start_date = st.date_input(
                "Start", value=self.state.start_date, key=f"{self.page_key}_start_date",
                format="DD/MM/YYYY"
            )
        with col_d2:
            end_date = st.date_input(
                "End", value=self.state.end_date, key=f"{self.page_key}_end_date",
                format="DD/MM/YYYY"
            )

        if start_date and end_date and start_date > end_date:
            st.warning("Start date is after end date")

        if (start_date, end_date) != (self.state.start_date, self.state.end_date):
            self.state = self.state.with_dates(start_date, end_date)

    def _selectbox(self, label: str, all_label: str, df: pd.DataFrame, current: str, key: str) -> str:
        options, labels = _person_options(df)
        index = options.index(current) if current in options else 0
        return st.selectbox(
            label,
            options=options,
            index=index,
            key=key,
            format_func=lambda email: all_label if email == ALL else labels.get(email, email),
        )

    def _render_zonal_manager(self):
        selected = self._selectbox(
            "Zonal Manager", "All Zonal Managers",
            self.access.get_zonal_manager_options(),
            self.state.selected_zm,
            key=f"{self.page_key}_zm",
        )
        if selected != self.state.selected_zm:
            self.state = self.state.with_zonal_manager(selected)

    def _render_reporting_manager(self):
        state = self.state
        selected = self._selectbox(
            "Reporting Manager", "All Reporting Managers",
            self.access.get_reporting_manager_options(state),
            state.selected_rm,
            key=f"{self.page_key}_rm_{state.selected_zm}",
        )
        if selected != state.selected_rm:
            self.state = state.with_reporting_manager(selected)

    def _render_employee(self):
        state = self.state
        selected = self._selectbox(
            "Employee", "All Employees",
            self.access.get_employee_options(state),
            state.selected_employee,
            key=f"{self.page_key}_emp_{state.selected_zm}_{state.selected_rm}",
        )
        if selected != state.selected_employee:
            self.state = state.with_employee(selected)

    def _render_customer(self, customers: List[str]):
        options = [ALL] + list(customers)
        current = self.state.selected_customer
        selected = st.selectbox(
            "Customer",
            options=options,
            index=options.index(current) if current in options else 0,
            key=f"{self.page_key}_customer",
            format_func=lambda name: "All Customers" if name == ALL else name,
        )
        if selected != current:
            self.state = self.state.with_customer(selected)

    # =========================================================================
    # MAIN AREA
    # =========================================================================

    def render_status_buttons(self, labels: List[str]) -> FilterState:
        """One button per status label plus 'All'; the active one is primary."""
        current = self.state.status_filter
        options = [ALL] + list(labels)
        cols = st.columns(len(options))
        for col, label in zip(cols, options):
            with col:
                if st.button(
                    "All" if label == ALL else label,
                    key=f"{self.page_key}_status_{label}",
                    type="primary" if label == current else "secondary",
                    use_container_width=True,
                ):
                    if label != current:
                        self.state = self.state.with_status(label)
                        st.rerun()
        return self.state

    def render_search(self, placeholder: str = "Search by submission ID...") -> str:
        return st.text_input(
            "Search", placeholder=placeholder, key=f"{self.page_key}_search",
            label_visibility="collapsed"
        )


__all__ = [
    'ReportingFilters',
]
