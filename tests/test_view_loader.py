import asyncio

import pandas as pd
import pytest

from utils.sample_order_reporting.cache import ResultCache
from utils.sample_order_reporting.metrics import ReportingMetrics
from utils.sample_order_reporting.models import FilterState
from utils.sample_order_reporting.view_loader import (
    ReportingViewLoader,
    gather_isolated,
)


class StubQueries:
    """Record fetchers backed by in-memory frames; quota can be made to fail."""

    def __init__(self, fail_quota=False):
        self.fail_quota = fail_quota
        self.calls = []
        self.samples = pd.DataFrame({
            'submission_id': ['S1', 'S2'],
            'total_books': [5, 3],
            'sku_info': ['Atlas $ 5', 'Globe $ 3'],
            'sample_status': ['Request Received', 'Delivered'],
            'zm_approval': ['Pending Approval', 'Approved'],
        })
        self.orders = pd.DataFrame({
            'submission_id': ['SUB1', 'SUB2'],
            'company_trade_name': ['Beta', 'Gamma'],
            'order_amount': [1000, 300],
            'no_of_books': [10, 3],
            'sku_info': ['Atlas $ 10', 'Globe $ 3'],
            'status': ['Delivered', 'Cancelled'],
            'zm_approval': ['Approved', 'Approved'],
        })

    def get_sample_requests(self, filters):
        self.calls.append(('samples', filters.status_filter))
        if filters.status_filter == 'Delivered':
            return self.samples[self.samples['sample_status'] == 'Delivered']
        return self.samples

    def get_orders(self, filters):
        self.calls.append(('orders', filters.status_filter))
        return self.orders

    def get_quota_rows(self, filters):
        self.calls.append(('quota', filters.status_filter))
        if self.fail_quota:
            raise RuntimeError("quota store unavailable")
        return pd.DataFrame({
            'employee_email_id': ['a'], 'employee_name': ['A'],
            'max_quota': [200], 'quota_used': [150],
        })


def test_gather_isolated_keeps_siblings():
    def boom():
        raise ValueError("nope")

    outcomes = asyncio.run(gather_isolated({
        'good': (lambda: 42, lambda: 0),
        'bad': (boom, lambda: -1),
    }))
    assert outcomes['good'].ok and outcomes['good'].value == 42
    assert not outcomes['bad'].ok
    assert outcomes['bad'].value == -1
    assert 'nope' in outcomes['bad'].error


def test_failed_quota_leaves_kpis_intact():
    loader = ReportingViewLoader(StubQueries(fail_quota=True))
    view = loader.load_dashboard(FilterState())

    assert view.sample_kpis['sample_order_placed'] == 2
    assert view.order_kpis['total_order_placed'] == 1
    assert view.quota == ReportingMetrics.empty_quota_summary()
    assert view.failed_tasks == ['quota']


def test_sample_kpis_ignore_status_filter():
    queries = StubQueries()
    view = ReportingViewLoader(queries).load_samples(FilterState(status_filter='Delivered'))

    assert list(view.records['submission_id']) == ['S2']
    assert view.kpis['sample_order_placed'] == 2
    assert view.quota['quota_used_percentage'] == 75.0
    assert list(view.quota_utilisation['tier']) == ['warning']
    assert list(view.top_books['name']) == ['Globe']


def test_order_view_rankings_skip_cancelled():
    view = ReportingViewLoader(StubQueries()).load_orders(FilterState())

    assert list(view.top_books['name']) == ['Atlas']
    assert list(view.customer_analysis['customer_name']) == ['Beta']
    assert view.kpis['order_cancelled'] == 1


def test_search_narrows_records_and_book_rankings():
    view = ReportingViewLoader(StubQueries()).load_samples(FilterState())
    searched = view.with_search('s1')

    assert list(searched.records['submission_id']) == ['S1']
    assert list(searched.top_books['name']) == ['Atlas']
    assert list(searched.bottom_books['name']) == ['Atlas']
    assert searched.kpis == view.kpis
    assert list(view.top_books['name']) == ['Atlas', 'Globe']


def test_order_search_ranks_only_matching_orders():
    view = ReportingViewLoader(StubQueries()).load_orders(FilterState())

    assert view.with_search('SUB2').top_books.empty
    assert list(view.with_search('').top_books['name']) == ['Atlas']


def test_cached_view_skips_fetching():
    queries = StubQueries()
    cache = ResultCache(store={})
    loader = ReportingViewLoader(queries, cache=cache, viewer='a@x.com')

    first = loader.load_samples(FilterState())
    fetches = len(queries.calls)
    second = loader.load_samples(FilterState())

    assert not first.from_cache
    assert second.from_cache
    assert len(queries.calls) == fetches
    assert second.kpis == first.kpis
    assert list(second.top_books['name']) == list(first.top_books['name'])


def test_force_refresh_bypasses_cache():
    queries = StubQueries()
    loader = ReportingViewLoader(queries, cache=ResultCache(store={}), viewer='a@x.com')

    loader.load_orders(FilterState())
    fetches = len(queries.calls)
    view = loader.load_orders(FilterState(), force_refresh=True)

    assert not view.from_cache
    assert len(queries.calls) == 2 * fetches


def test_failed_view_is_not_cached():
    queries = StubQueries(fail_quota=True)
    cache = ResultCache(store={})
    loader = ReportingViewLoader(queries, cache=cache, viewer='a@x.com')

    loader.load_dashboard(FilterState())
    assert cache.store == {}

    queries.fail_quota = False
    view = loader.load_dashboard(FilterState())
    assert not view.from_cache
    assert view.failed_tasks == []
    assert view.quota['quota_used_percentage'] == pytest.approx(75.0)
