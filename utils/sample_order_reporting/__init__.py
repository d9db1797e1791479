# utils/sample_order_reporting/__init__.py
"""
Sample & Order Reporting Module

Isolated utilities for the hierarchy-scoped sample request and order pages.
All components are self-contained within this module.

Components:
- directory: Org-tree lookups and role classification
- access_control: Role-based scope resolution (employee/RM/ZM/program team)
- queries: Scoped record fetchers (samples, orders, quota, customers)
- metrics: KPI calculations, quota utilisation, customer and book rankings
- view_loader: Concurrent per-page loading with per-task isolation
- cache: Session result cache with TTL
- filters: Sidebar filter components
- charts: Altair visualizations
- export: Formatted Excel report generation

Usage:
    from utils.sample_order_reporting import (
        AccessControl,
        ReportingQueries,
        ReportingViewLoader,
        ReportingFilters,
        ResultCache,
        FilterState,
    )
"""

from .models import FilterState, ViewerRole
from .directory import HierarchyDirectory, classify_role
from .access_control import AccessControl
from .queries import ReportingQueries
from .metrics import ReportingMetrics, apply_submission_search
from .cache import ResultCache
from .view_loader import ReportingViewLoader, DashboardView, SampleView, OrderView
from .filters import ReportingFilters
from .charts import ReportingCharts
from .export import ReportingExport, XLSX_MIME

# Constants
from .constants import (
    ALL,
    COLORS,
    SAMPLE_STATUS_FILTERS,
    ORDER_STATUS_FILTERS,
    CACHE_TTL_SECONDS,
)

__all__ = [
    # Classes
    'FilterState',
    'ViewerRole',
    'HierarchyDirectory',
    'classify_role',
    'AccessControl',
    'ReportingQueries',
    'ReportingMetrics',
    'ResultCache',
    'ReportingViewLoader',
    'DashboardView',
    'SampleView',
    'OrderView',
    'ReportingFilters',
    'apply_submission_search',
    'ReportingCharts',
    'ReportingExport',
    'XLSX_MIME',

    # Constants
    'ALL',
    'COLORS',
    'SAMPLE_STATUS_FILTERS',
    'ORDER_STATUS_FILTERS',
    'CACHE_TTL_SECONDS',
]

__version__ = '1.0.0'
