# utils/sample_order_reporting/view_loader.py
"""
Concurrent view loading with per-task failure isolation.

Each page view issues its independent aggregations as asyncio tasks
(blocking store calls run in worker threads via asyncio.to_thread) and
waits for all of them. Every task yields a TaskOutcome: either its value,
or its declared zero default when it raised. A failing task never
cancels or blanks its siblings.

Views:
- Dashboard: sample KPIs, quota summary, order KPIs
- Samples:   records, sample KPIs, quota summary, quota utilisation
- Orders:    records, order KPIs, customer analysis

KPI-style slots ignore the page status filter; record slots honour it.
Results are read from / written to the ResultCache when caching is on;
a view with any failed slot is not cached.
"""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Tuple

import pandas as pd

from .cache import ResultCache
from .constants import ALL
from .metrics import ReportingMetrics, apply_submission_search
from .models import FilterState
from .queries import ORDER_COLUMNS, SAMPLE_COLUMNS, ReportingQueries

logger = logging.getLogger(__name__)


# =============================================================================
# TAGGED TASK RESULTS
# =============================================================================

@dataclass
class TaskOutcome:
    """Result of one isolated task: ok + value, or failed + default value."""
    name: str
    ok: bool
    value: Any
    error: Optional[str] = None


# name -> (callable producing the value, callable producing the default)
TaskSpec = Dict[str, Tuple[Callable[[], Any], Callable[[], Any]]]


async def run_isolated(name: str, func: Callable[[], Any], default: Callable[[], Any]) -> TaskOutcome:
    try:
        value = await asyncio.to_thread(func)
        return TaskOutcome(name=name, ok=True, value=value)
    except Exception as e:
        logger.error(f"View task '{name}' failed, using default: {e}")
        return TaskOutcome(name=name, ok=False, value=default(), error=str(e))


async def gather_isolated(tasks: TaskSpec) -> Dict[str, TaskOutcome]:
    """Run all tasks concurrently and wait for every one of them to settle."""
    outcomes = await asyncio.gather(
        *(run_isolated(name, func, default) for name, (func, default) in tasks.items())
    )
    return {outcome.name: outcome for outcome in outcomes}


# =============================================================================
# VIEW MODELS
# =============================================================================

@dataclass
class DashboardView:
    sample_kpis: Dict = field(default_factory=ReportingMetrics.empty_sample_kpis)
    quota: Dict = field(default_factory=ReportingMetrics.empty_quota_summary)
    order_kpis: Dict = field(default_factory=ReportingMetrics.empty_order_kpis)
    failed_tasks: List[str] = field(default_factory=list)
    from_cache: bool = False


@dataclass
class SampleView:
    records: pd.DataFrame = field(default_factory=lambda: pd.DataFrame(columns=SAMPLE_COLUMNS))
    kpis: Dict = field(default_factory=ReportingMetrics.empty_sample_kpis)
    quota: Dict = field(default_factory=ReportingMetrics.empty_quota_summary)
    quota_utilisation: pd.DataFrame = field(default_factory=ReportingMetrics.empty_quota_utilisation)
    top_books: pd.DataFrame = field(default_factory=lambda: ReportingMetrics.empty_book_ranking()[0])
    bottom_books: pd.DataFrame = field(default_factory=lambda: ReportingMetrics.empty_book_ranking()[1])
    failed_tasks: List[str] = field(default_factory=list)
    from_cache: bool = False

    def with_search(self, query: str) -> 'SampleView':
        """Narrow records by submission id and re-rank books over what is left."""
        records = apply_submission_search(self.records, query)
        top, bottom = ReportingMetrics.rank_books(records)
        return replace(self, records=records, top_books=top, bottom_books=bottom)


@dataclass
class OrderView:
    records: pd.DataFrame = field(default_factory=lambda: pd.DataFrame(columns=ORDER_COLUMNS))
    kpis: Dict = field(default_factory=ReportingMetrics.empty_order_kpis)
    customer_analysis: pd.DataFrame = field(default_factory=ReportingMetrics.empty_customer_analysis)
    top_books: pd.DataFrame = field(default_factory=lambda: ReportingMetrics.empty_book_ranking()[0])
    bottom_books: pd.DataFrame = field(default_factory=lambda: ReportingMetrics.empty_book_ranking()[1])
    failed_tasks: List[str] = field(default_factory=list)
    from_cache: bool = False

    def with_search(self, query: str) -> 'OrderView':
        records = apply_submission_search(self.records, query)
        top, bottom = ReportingMetrics.rank_books(records, exclude_cancelled=True)
        return replace(self, records=records, top_books=top, bottom_books=bottom)


def _empty_samples() -> pd.DataFrame:
    return pd.DataFrame(columns=SAMPLE_COLUMNS)


def _empty_orders() -> pd.DataFrame:
    return pd.DataFrame(columns=ORDER_COLUMNS)


# =============================================================================
# LOADER
# =============================================================================

class ReportingViewLoader:
    """
    Usage:
        loader = ReportingViewLoader(queries, cache=ResultCache(st.session_state),
                                     viewer=session.email)
        view = loader.load_samples(filters, force_refresh=is_first_load)
    """

    def __init__(self, queries: ReportingQueries, cache: ResultCache = None, viewer: str = ''):
        self.queries = queries
        self.cache = cache
        self.viewer = viewer

    # ------------------------------------------------------------------ cache

    def _read_cached(self, cache_type: str, filters: FilterState, slots: List[str]) -> Optional[Dict]:
        if self.cache is None:
            return None
        key = ResultCache.generate_key(cache_type, filters, self.viewer)
        values = {}
        for slot in slots:
            value = self.cache.get(f"{key}_{slot}")
            if value is None:
                return None
            values[slot] = value
        logger.info(f"Cache hit for {cache_type} view")
        return values

    def _write_cached(self, cache_type: str, filters: FilterState, values: Dict, failed: List[str]):
        if self.cache is None or failed:
            return
        key = ResultCache.generate_key(cache_type, filters, self.viewer)
        for slot, value in values.items():
            self.cache.set(f"{key}_{slot}", value)

    @staticmethod
    def _fold(outcomes: Dict[str, TaskOutcome]) -> Tuple[Dict, List[str]]:
        values = {name: outcome.value for name, outcome in outcomes.items()}
        failed = [name for name, outcome in outcomes.items() if not outcome.ok]
        return values, failed

    # -------------------------------------------------------------- dashboard

    async def load_dashboard_async(self, filters: FilterState, force_refresh: bool = False) -> DashboardView:
        slots = ['kpis', 'quota', 'order_kpis']
        if not force_refresh:
            cached = self._read_cached('dashboard', filters, slots)
            if cached:
                return DashboardView(
                    sample_kpis=cached['kpis'], quota=cached['quota'],
                    order_kpis=cached['order_kpis'], from_cache=True,
                )

        kpi_filters = filters.with_status(ALL)
        q = self.queries
        outcomes = await gather_isolated({
            'kpis': (
                lambda: ReportingMetrics.calculate_sample_kpis(q.get_sample_requests(kpi_filters)),
                ReportingMetrics.empty_sample_kpis,
            ),
            'quota': (
                lambda: ReportingMetrics.calculate_quota_summary(q.get_quota_rows(kpi_filters)),
                ReportingMetrics.empty_quota_summary,
            ),
            'order_kpis': (
                lambda: ReportingMetrics.calculate_order_kpis(q.get_orders(kpi_filters)),
                ReportingMetrics.empty_order_kpis,
            ),
        })
        values, failed = self._fold(outcomes)
        self._write_cached('dashboard', filters, values, failed)

        return DashboardView(
            sample_kpis=values['kpis'], quota=values['quota'],
            order_kpis=values['order_kpis'], failed_tasks=failed,
        )

    def load_dashboard(self, filters: FilterState, force_refresh: bool = False) -> DashboardView:
        return asyncio.run(self.load_dashboard_async(filters, force_refresh))

    # ---------------------------------------------------------------- samples

    async def load_samples_async(self, filters: FilterState, force_refresh: bool = False) -> SampleView:
        slots = ['data', 'kpis', 'quota', 'quota_util']
        values = None if force_refresh else self._read_cached('sample', filters, slots)
        failed: List[str] = []
        from_cache = values is not None

        if values is None:
            kpi_filters = filters.with_status(ALL)
            q = self.queries
            outcomes = await gather_isolated({
                'data': (lambda: q.get_sample_requests(filters), _empty_samples),
                'kpis': (
                    lambda: ReportingMetrics.calculate_sample_kpis(q.get_sample_requests(kpi_filters)),
                    ReportingMetrics.empty_sample_kpis,
                ),
                'quota': (
                    lambda: ReportingMetrics.calculate_quota_summary(q.get_quota_rows(kpi_filters)),
                    ReportingMetrics.empty_quota_summary,
                ),
                'quota_util': (
                    lambda: ReportingMetrics.calculate_quota_utilisation(q.get_quota_rows(kpi_filters)),
                    ReportingMetrics.empty_quota_utilisation,
                ),
            })
            values, failed = self._fold(outcomes)
            self._write_cached('sample', filters, values, failed)

        top, bottom = ReportingMetrics.rank_books(values['data'])
        return SampleView(
            records=values['data'], kpis=values['kpis'], quota=values['quota'],
            quota_utilisation=values['quota_util'], top_books=top, bottom_books=bottom,
            failed_tasks=failed, from_cache=from_cache,
        )

    def load_samples(self, filters: FilterState, force_refresh: bool = False) -> SampleView:
        return asyncio.run(self.load_samples_async(filters, force_refresh))

    # ----------------------------------------------------------------- orders

    async def load_orders_async(self, filters: FilterState, force_refresh: bool = False) -> OrderView:
        slots = ['data', 'kpis', 'customer']
        values = None if force_refresh else self._read_cached('order', filters, slots)
        failed: List[str] = []
        from_cache = values is not None

        if values is None:
            kpi_filters = filters.with_status(ALL)
            q = self.queries
            outcomes = await gather_isolated({
                'data': (lambda: q.get_orders(filters), _empty_orders),
                'kpis': (
                    lambda: ReportingMetrics.calculate_order_kpis(q.get_orders(kpi_filters)),
                    ReportingMetrics.empty_order_kpis,
                ),
                'customer': (
                    lambda: ReportingMetrics.calculate_customer_analysis(q.get_orders(kpi_filters)),
                    ReportingMetrics.empty_customer_analysis,
                ),
            })
            values, failed = self._fold(outcomes)
            self._write_cached('order', filters, values, failed)

        top, bottom = ReportingMetrics.rank_books(values['data'], exclude_cancelled=True)
        return OrderView(
            records=values['data'], kpis=values['kpis'], customer_analysis=values['customer'],
            top_books=top, bottom_books=bottom, failed_tasks=failed, from_cache=from_cache,
        )

    def load_orders(self, filters: FilterState, force_refresh: bool = False) -> OrderView:
        return asyncio.run(self.load_orders_async(filters, force_refresh))
