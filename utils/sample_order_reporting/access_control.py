# utils/sample_order_reporting/access_control.py
"""
Role-based Access Control for Sample & Order Reporting

Resolves which employee emails a viewer may see:
- employee: own data only
- reporting_manager: self + active Sales reports
- zonal_manager: every RM under the ZM together with their reports
- program_team: all active Sales employees, narrowed by ZM / RM selection

A specific employee selection always narrows to that single email.
The resolved set is re-validated against the directory before any record
fetch (Active + Sales, and for orders an allowed line of business).

The ZM subtree is walked RM by RM: reporting_manager_email is the
authoritative link, zonal_manager_email is only used to find the RMs.
"""

import logging
from typing import FrozenSet, List, Optional, Set

import pandas as pd

from utils.config import config
from .constants import DEFAULT_ORDER_LINES_OF_BUSINESS
from .directory import PERSON_COLUMNS, HierarchyDirectory, unique_by_email
from .models import FilterState, ViewerRole, is_specific

logger = logging.getLogger(__name__)


class AccessControl:
    """
    Manage data access based on viewer role and the org hierarchy.

    Usage:
        access = AccessControl(
            role=session.role,
            viewer_email=session.email,
        )

        scope = access.get_allowed_emails(filters)              # validated
        order_scope = access.get_allowed_emails(filters, for_orders=True)
    """

    def __init__(
        self,
        role: ViewerRole,
        viewer_email: str,
        directory: HierarchyDirectory = None,
        order_lines_of_business: Optional[List[str]] = None
    ):
        """
        Args:
            role: Viewer role from the session context
            viewer_email: Viewer email from the session context
            directory: Directory access (a new one on the shared engine if omitted)
            order_lines_of_business: Allowed line_of_business values for order scopes
        """
        self.role = ViewerRole(role)
        self.viewer_email = viewer_email
        self.directory = directory or HierarchyDirectory()
        if order_lines_of_business is None:
            order_lines_of_business = config.get_app_setting(
                "ORDER_LINES_OF_BUSINESS", DEFAULT_ORDER_LINES_OF_BUSINESS
            )
        self.order_lines_of_business = list(order_lines_of_business)

        logger.info(f"AccessControl initialized: role={self.role.value}, email={self.viewer_email}")

    # =========================================================================
    # CAPABILITIES
    # =========================================================================

    def can_select_zonal_manager(self) -> bool:
        return self.role == ViewerRole.PROGRAM_TEAM

    def can_select_reporting_manager(self) -> bool:
        return self.role in (ViewerRole.PROGRAM_TEAM, ViewerRole.ZONAL_MANAGER)

    def can_select_employee(self) -> bool:
        return self.role != ViewerRole.EMPLOYEE

    # =========================================================================
    # SCOPE RESOLUTION
    # =========================================================================

    def resolve_allowed_emails(self, filters: FilterState) -> FrozenSet[str]:
        """
        Apply the role rules to the filter selection (no re-validation).

        Managers only ever get emails from their own subtree: a selected
        employee or RM outside it resolves to an empty scope.

        Returns:
            Set of employee emails, possibly empty
        """
        if self.role == ViewerRole.EMPLOYEE:
            return frozenset([self.viewer_email]) if self.viewer_email else frozenset()

        if self.role == ViewerRole.PROGRAM_TEAM:
            if is_specific(filters.selected_employee):
                return frozenset([filters.selected_employee])
            return self._program_team_scope(filters)

        if self.role == ViewerRole.REPORTING_MANAGER:
            visible = self._managed_set(self.viewer_email)
        else:
            visible = self._zonal_subtree(self.viewer_email)

        if is_specific(filters.selected_employee):
            return visible & {filters.selected_employee}

        if self.role == ViewerRole.ZONAL_MANAGER and is_specific(filters.selected_rm):
            return self._managed_set(filters.selected_rm) & visible

        return visible

    def _managed_set(self, rm_email: str) -> FrozenSet[str]:
        employees = self.directory.get_employees_by_rm(rm_email)
        return frozenset(employees['email']) if not employees.empty else frozenset()

    def _zonal_subtree(self, zm_email: str) -> FrozenSet[str]:
        emails: Set[str] = set()
        rms = self.directory.get_reporting_managers_by_zm(zm_email)
        for rm_email in rms['email'] if not rms.empty else []:
            emails |= self._managed_set(rm_email)
        return frozenset(emails)

    def _program_team_scope(self, filters: FilterState) -> FrozenSet[str]:
        employees = self.directory.get_all_active_sales_employees()
        if employees.empty:
            return frozenset()

        if is_specific(filters.selected_zm):
            employees = employees[employees['zonal_manager_email'] == filters.selected_zm]

        if is_specific(filters.selected_rm):
            employees = employees[employees['reporting_manager_email'] == filters.selected_rm]

        return frozenset(employees['email'])

    # =========================================================================
    # SELECTOR OPTIONS (email, name) FOR THE FILTER BAR
    # =========================================================================

    def get_zonal_manager_options(self) -> pd.DataFrame:
        if not self.can_select_zonal_manager():
            return pd.DataFrame(columns=PERSON_COLUMNS)
        return self.directory.get_all_zonal_managers()

    def get_reporting_manager_options(self, filters: FilterState) -> pd.DataFrame:
        if self.role == ViewerRole.ZONAL_MANAGER:
            return self.directory.get_reporting_managers_by_zm(self.viewer_email)
        if self.role == ViewerRole.PROGRAM_TEAM:
            if is_specific(filters.selected_zm):
                return self.directory.get_reporting_managers_by_zm(filters.selected_zm)
            return self.directory.get_all_reporting_managers()
        return pd.DataFrame(columns=PERSON_COLUMNS)

    def get_employee_options(self, filters: FilterState) -> pd.DataFrame:
        """Employees selectable under the current ZM / RM selection."""
        if self.role == ViewerRole.EMPLOYEE:
            return pd.DataFrame(columns=PERSON_COLUMNS)

        if self.role == ViewerRole.REPORTING_MANAGER:
            employees = self.directory.get_employees_by_rm(self.viewer_email)
        elif self.role == ViewerRole.ZONAL_MANAGER:
            if is_specific(filters.selected_rm):
                employees = self.directory.get_employees_by_rm(filters.selected_rm)
            else:
                rms = self.directory.get_reporting_managers_by_zm(self.viewer_email)
                frames = [self.directory.get_employees_by_rm(rm) for rm in rms['email']] if not rms.empty else []
                employees = unique_by_email(pd.concat(frames, ignore_index=True)) if frames else pd.DataFrame()
        else:
            employees = self.directory.get_all_active_sales_employees()
            if not employees.empty and is_specific(filters.selected_zm):
                employees = employees[employees['zonal_manager_email'] == filters.selected_zm]
            if not employees.empty and is_specific(filters.selected_rm):
                employees = employees[employees['reporting_manager_email'] == filters.selected_rm]

        if employees.empty:
            return pd.DataFrame(columns=PERSON_COLUMNS)
        return employees[PERSON_COLUMNS].reset_index(drop=True)

    # =========================================================================
    # VALIDATED SCOPE
    # =========================================================================

    def validate_scope(self, emails: FrozenSet[str], for_orders: bool = False) -> FrozenSet[str]:
        """
        Drop emails that are not Active Sales employees
        (or, for orders, not in an allowed line of business).
        """
        if not emails:
            return frozenset()

        lines = self.order_lines_of_business if for_orders else None
        valid = frozenset(self.directory.filter_valid_emails(sorted(emails), lines))

        dropped = len(emails) - len(valid)
        if dropped:
            logger.debug(f"Scope validation dropped {dropped} email(s)")
        return valid

    def get_allowed_emails(self, filters: FilterState, for_orders: bool = False) -> FrozenSet[str]:
        """
        Resolve + validate. Directory errors degrade to an empty scope.
        """
        try:
            resolved = self.resolve_allowed_emails(filters)
            allowed = self.validate_scope(resolved, for_orders=for_orders)
        except Exception as e:
            logger.error(f"Error resolving scope for {self.viewer_email}: {e}")
            return frozenset()

        logger.info(
            f"Scope ({self.role.value}, orders={for_orders}): "
            f"{len(resolved)} resolved, {len(allowed)} valid"
        )
        return allowed

    def __repr__(self) -> str:
        return f"AccessControl(role='{self.role.value}', email='{self.viewer_email}')"
