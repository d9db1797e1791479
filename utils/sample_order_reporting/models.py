# utils/sample_order_reporting/models.py
"""
Domain types shared by the reporting modules.

- ViewerRole: the four visibility tiers a logged-in user can hold
- FilterState: immutable drill-down + date/status selection
"""

import json
from dataclasses import dataclass, replace, asdict
from datetime import date
from enum import Enum
from typing import Optional

from .constants import ALL


class ViewerRole(str, Enum):
    """Visibility tier derived from the employee directory at login."""
    EMPLOYEE = 'employee'
    REPORTING_MANAGER = 'reporting_manager'
    ZONAL_MANAGER = 'zonal_manager'
    PROGRAM_TEAM = 'program_team'

    @property
    def display_name(self) -> str:
        return self.value.replace('_', ' ').title()


def is_specific(value: Optional[str]) -> bool:
    """True when a selector holds a concrete identity rather than ALL/empty."""
    return bool(value) and value != ALL


@dataclass(frozen=True)
class FilterState:
    """
    Filter selection for one page view.

    Dates are inclusive calendar days. Selectors hold an identity
    (email / customer name / status label) or ALL.

    Narrowing helpers keep the hierarchy consistent:
        state.with_zonal_manager(zm)     -> RM and employee reset to ALL
        state.with_reporting_manager(rm) -> employee reset to ALL
    """
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    selected_zm: str = ALL
    selected_rm: str = ALL
    selected_employee: str = ALL
    selected_customer: str = ALL
    status_filter: str = ALL

    def with_zonal_manager(self, zm_email: str) -> 'FilterState':
        return replace(self, selected_zm=zm_email or ALL, selected_rm=ALL, selected_employee=ALL)

    def with_reporting_manager(self, rm_email: str) -> 'FilterState':
        return replace(self, selected_rm=rm_email or ALL, selected_employee=ALL)

    def with_employee(self, email: str) -> 'FilterState':
        return replace(self, selected_employee=email or ALL)

    def with_customer(self, customer: str) -> 'FilterState':
        return replace(self, selected_customer=customer or ALL)

    def with_status(self, status: str) -> 'FilterState':
        return replace(self, status_filter=status or ALL)

    def with_dates(self, start_date: Optional[date], end_date: Optional[date]) -> 'FilterState':
        return replace(self, start_date=start_date, end_date=end_date)

    def cache_token(self) -> str:
        """Stable JSON form used inside cache keys."""
        data = asdict(self)
        data['start_date'] = self.start_date.isoformat() if self.start_date else None
        data['end_date'] = self.end_date.isoformat() if self.end_date else None
        return json.dumps(data, sort_keys=True)
