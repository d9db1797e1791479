# utils/sample_order_reporting/charts.py
"""
Altair chart builders for Sample & Order Reporting

- Top customers by invoice amount (horizontal bar)
- Book ranking by quantity (horizontal bar)
"""

import logging

import altair as alt
import pandas as pd

from .constants import COLORS

logger = logging.getLogger(__name__)

CHART_HEIGHT_PER_ROW = 28


class ReportingCharts:

    @staticmethod
    def _empty_chart(message: str = "No data") -> alt.Chart:
        return alt.Chart(pd.DataFrame({'text': [message]})).mark_text(
            size=14, color='#888'
        ).encode(text='text:N').properties(height=80)

    @staticmethod
    def build_top_customers_chart(top_customers: pd.DataFrame) -> alt.Chart:
        """
        Args:
            top_customers: DataFrame[name, value] from ReportingMetrics.top_customers_by_invoice
        """
        if top_customers is None or top_customers.empty:
            return ReportingCharts._empty_chart("No customer data")

        order = top_customers['name'].tolist()
        bars = alt.Chart(top_customers).mark_bar(color=COLORS['primary']).encode(
            x=alt.X('value:Q', title='Invoice Amount (₹)', axis=alt.Axis(format='~s')),
            y=alt.Y('name:N', sort=order, title=None),
            tooltip=[
                alt.Tooltip('name:N', title='Customer'),
                alt.Tooltip('value:Q', title='Invoice Amount', format=',.0f'),
            ]
        )
        text = bars.mark_text(align='left', dx=4, color='#333').encode(
            text=alt.Text('value:Q', format=',.0f')
        )
        return alt.layer(bars, text).properties(
            height=max(len(top_customers) * CHART_HEIGHT_PER_ROW, 120)
        )

    @staticmethod
    def build_book_ranking_chart(books: pd.DataFrame, title: str = 'Quantity') -> alt.Chart:
        """
        Args:
            books: DataFrame[name, quantity], already in display order
        """
        if books is None or books.empty:
            return ReportingCharts._empty_chart("No book data")

        order = books['name'].tolist()
        return alt.Chart(books).mark_bar(color=COLORS['primary']).encode(
            x=alt.X('quantity:Q', title=title),
            y=alt.Y('name:N', sort=order, title=None),
            tooltip=[
                alt.Tooltip('name:N', title='Book'),
                alt.Tooltip('quantity:Q', title='Quantity', format=',.0f'),
            ]
        ).properties(height=max(len(books) * CHART_HEIGHT_PER_ROW, 120))
