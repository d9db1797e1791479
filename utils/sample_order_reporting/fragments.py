# utils/sample_order_reporting/fragments.py
"""
Streamlit Fragments for Sample & Order Reporting

KPI cards, tables and sections shared by the Dashboard, Sample Requests
and Orders pages. Sections with their own toggles use @st.fragment so
flipping a toggle does not reload the page data.
"""

from typing import Dict, List

import pandas as pd
import streamlit as st

from .charts import ReportingCharts
from .constants import COLORS, SAMPLE_STATUS_DISPLAY
from .export import XLSX_MIME, ReportingExport
from .formatters import format_date, format_indian_currency, format_number
from .metrics import ReportingMetrics

RANKING_TOP = "Top 10"
RANKING_LOW = "Low 10"


def render_failed_banner(failed_tasks: List[str]):
    """Generic notice when some sections fell back to zero values."""
    if failed_tasks:
        st.error("⚠️ Some data could not be loaded. Figures shown as zero may be incomplete. Please refresh.")


# =============================================================================
# KPI CARDS
# =============================================================================

def render_sample_kpis(kpis: Dict):
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("📝 Sample Orders", format_number(kpis.get('sample_order_placed', 0)),
                  help="Sample requests placed in the selected period")
    with col2:
        st.metric("📚 Requested Books", format_number(kpis.get('total_request_books', 0)),
                  help="Total books across all sample requests")
    with col3:
        st.metric("📥 Order Received", format_number(kpis.get('order_received', 0)),
                  help="Requests received or uploaded to the B2B app")

    col4, col5, col6 = st.columns(3)
    with col4:
        st.metric("⏳ ZM Approval Pending", format_number(kpis.get('zm_approval_pending', 0)))
    with col5:
        st.metric("🚚 Dispatched", format_number(kpis.get('dispatched', 0)))
    with col6:
        st.metric("✅ Delivered", format_number(kpis.get('delivered', 0)))


def render_quota_summary(quota: Dict):
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("🎯 Sampling Quota", format_number(quota.get('sampling_quota', 0)))
    with col2:
        st.metric("📦 Quota Used", format_number(quota.get('quota_used', 0)))
    with col3:
        st.metric("📊 Remaining", format_number(quota.get('remaining_quota', 0)))
    with col4:
        st.metric("📈 Used %", f"{quota.get('quota_used_percentage', 0):.2f}%")


def render_order_kpis(kpis: Dict):
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("💰 Invoice Amount", format_indian_currency(kpis.get('total_invoice_amount', 0)),
                  help="Sum of order amounts, cancelled orders excluded")
    with col2:
        st.metric("📚 Books", format_number(kpis.get('total_books', 0)),
                  help="Books ordered, cancelled orders excluded")
    with col3:
        st.metric("🧾 Orders Placed", format_number(kpis.get('total_order_placed', 0)),
                  help="Distinct submissions, cancelled orders excluded")

    col4, col5, col6, col7, col8, col9 = st.columns(6)
    with col4:
        st.metric("🔄 In Process", format_number(kpis.get('order_in_process', 0)))
    with col5:
        st.metric("📦 Yet to Dispatch", format_number(kpis.get('yet_to_be_dispatched', 0)))
    with col6:
        st.metric("⏳ ZM Pending", format_number(kpis.get('zm_approval_pending', 0)))
    with col7:
        st.metric("🚚 In Transit", format_number(kpis.get('order_in_transit', 0)))
    with col8:
        st.metric("✅ Delivered", format_number(kpis.get('order_delivered', 0)))
    with col9:
        st.metric("❌ Cancelled", format_number(kpis.get('order_cancelled', 0)))


# =============================================================================
# QUOTA UTILISATION
# =============================================================================

def _tier_style(tier: str) -> str:
    color = COLORS.get(tier)
    return f"color: {color}; font-weight: 600" if color else ""


def render_quota_utilisation(utilisation: pd.DataFrame):
    st.subheader("🎯 Quota Utilisation")
    if utilisation is None or utilisation.empty:
        st.info("No quota assigned for the selected employees")
        return

    display = utilisation[[
        'employee_name', 'assigned_quota', 'utilised_quota', 'quota_left', 'utilised_percentage', 'tier'
    ]].rename(columns={
        'employee_name': 'Employee',
        'assigned_quota': 'Assigned',
        'utilised_quota': 'Utilised',
        'quota_left': 'Left',
        'utilised_percentage': 'Utilised %',
    })

    tiers = display.pop('tier')
    styled = display.style.format({'Utilised %': '{:.2f}%'}).apply(
        lambda _: [_tier_style(t) for t in tiers], subset=['Utilised %']
    )
    st.dataframe(styled, use_container_width=True, hide_index=True)
    st.caption("🔴 over 100%  🟡 70% and above  🟢 below 70%")


# =============================================================================
# BOOK RANKING
# =============================================================================

@st.fragment
def book_ranking_fragment(top_books: pd.DataFrame, bottom_books: pd.DataFrame, fragment_key: str = "books"):
    col_header, col_toggle = st.columns([3, 2])
    with col_header:
        st.subheader("📚 Books")
    with col_toggle:
        mode = st.radio(
            "Ranking", [RANKING_TOP, RANKING_LOW], horizontal=True,
            key=f"{fragment_key}_ranking", label_visibility="collapsed"
        )

    books = top_books if mode == RANKING_TOP else bottom_books
    if books is None or books.empty:
        st.info("No books in the selected records")
        return

    st.altair_chart(ReportingCharts.build_book_ranking_chart(books), use_container_width=True)


# =============================================================================
# RECORD TABLES
# =============================================================================

def render_sample_table(records: pd.DataFrame):
    if records is None or records.empty:
        st.info("📭 No sample requests found for the selected filters")
        return

    display = pd.DataFrame({
        'Date': records['timestamp'].map(format_date),
        'Submission ID': records['submission_id'],
        'Employee': records['employee_email'],
        'Books': records['total_books'],
        'Status': records['sample_status'].map(lambda s: SAMPLE_STATUS_DISPLAY.get(s, s)),
        'ZM Approval': records['zm_approval'],
        'Dispatched': records['dispatched_date'].map(format_date),
        'Tracking ID': records['tracking_id'],
        'Tracking Link': records['tracking_link'],
        'Delivered': records['delivered_date'].map(format_date),
    })
    st.markdown(f"**Showing {len(display):,} requests**")
    st.dataframe(
        display,
        column_config={
            'Tracking Link': st.column_config.LinkColumn("Tracking Link", display_text="Track"),
        },
        use_container_width=True,
        hide_index=True,
        height=420
    )


def render_order_table(records: pd.DataFrame):
    if records is None or records.empty:
        st.info("📭 No orders found for the selected filters")
        return

    display = pd.DataFrame({
        'Date': records['time_stamp'].map(format_date),
        'Order ID': records['submission_id'],
        'Customer': records['company_trade_name'],
        'Invoice Amount': records['order_amount'].map(format_indian_currency),
        'Books': records['no_of_books'],
        'Status': records['status'],
        'ZM Approval': records['zm_approval'],
        'Invoice': records['invoice_link'],
        'Tracking Link': records['tracking_link'],
        'Delivered': records['delivered_date'].map(format_date),
    })
    st.markdown(f"**Showing {len(display):,} order lines**")
    st.dataframe(
        display,
        column_config={
            'Invoice': st.column_config.LinkColumn("Invoice", display_text="Open"),
            'Tracking Link': st.column_config.LinkColumn("Tracking Link", display_text="Track"),
        },
        use_container_width=True,
        hide_index=True,
        height=420
    )


# =============================================================================
# CUSTOMER ANALYSIS
# =============================================================================

@st.fragment
def customer_analysis_fragment(analysis: pd.DataFrame, fragment_key: str = "customers"):
    col_header, col_export = st.columns([4, 1])
    with col_header:
        st.subheader("🏢 Customer Analysis")
    if analysis is None or analysis.empty:
        st.info("No customer orders for the selected filters")
        return

    with col_export:
        st.download_button(
            "📥 Export",
            data=ReportingExport.export_customers(analysis),
            file_name=ReportingExport.customer_filename(),
            mime=XLSX_MIME,
            key=f"{fragment_key}_export",
            use_container_width=True,
        )

    st.altair_chart(
        ReportingCharts.build_top_customers_chart(ReportingMetrics.top_customers_by_invoice(analysis)),
        use_container_width=True
    )

    display = pd.DataFrame({
        'Rank': range(1, len(analysis) + 1),
        'Customer': analysis['customer_name'].values,
        'Invoice Amount': analysis['invoice_amount'].map(format_indian_currency).values,
        'Books': analysis['total_books'].values,
    })
    st.dataframe(display, use_container_width=True, hide_index=True, height=360)
