# utils/sample_order_reporting/directory.py
"""
Hierarchy Directory Access

Read-only lookups against the employee roster (emp_record):
- Employees under a reporting manager (RM included)
- Reporting managers under a zonal manager
- All reporting / zonal manager references
- All active Sales employees, employees under a zonal manager
- Scope re-validation (Active + Sales [+ line of business])

Every listing is deduplicated by email (first occurrence wins).
Member listings only contain rows with status='Active' AND team='Sales';
manager listings return the distinct manager references found on such rows,
so a manager need not be Active/Sales to appear as a reference.

Failures are logged and degrade to an empty DataFrame.
"""

import logging
from typing import Dict, Iterable, List, Optional

import pandas as pd
from sqlalchemy import bindparam, text

from utils.db import get_db_engine, execute_query_df
from .constants import (
    EMPLOYEE_TABLE,
    STATUS_ACTIVE,
    TEAM_SALES,
    TEAM_PROGRAM,
)
from .models import ViewerRole

logger = logging.getLogger(__name__)

PERSON_COLUMNS = ['email', 'name']
EMPLOYEE_COLUMNS = [
    'email', 'name', 'team', 'status', 'line_of_business',
    'reporting_manager', 'reporting_manager_email',
    'zonal_manager', 'zonal_manager_email',
]

_ACTIVE_SALES = "status = :active_status AND team = :sales_team"

# Columns that may be checked with is_referenced_as()
_MANAGER_REFERENCE_COLUMNS = ('reporting_manager_email', 'zonal_manager_email')


def unique_by_email(df: pd.DataFrame) -> pd.DataFrame:
    """Drop rows without an email and keep the first row per email."""
    if df.empty:
        return df
    df = df[df['email'].notna() & (df['email'] != '')]
    return df.drop_duplicates(subset='email', keep='first').reset_index(drop=True)


class HierarchyDirectory:
    """
    Org-tree lookups used by the scope resolver and the filter bar.

    Usage:
        directory = HierarchyDirectory()
        team = directory.get_employees_by_rm('rm@example.com')
        rms = directory.get_reporting_managers_by_zm('zm@example.com')
    """

    def __init__(self, engine=None):
        self._engine = engine

    @property
    def engine(self):
        """Lazy load database engine."""
        if self._engine is None:
            self._engine = get_db_engine()
        return self._engine

    def _base_params(self) -> Dict:
        return {'active_status': STATUS_ACTIVE, 'sales_team': TEAM_SALES}

    def _people(self, query, params: Dict, label: str, columns: List[str] = None) -> pd.DataFrame:
        columns = columns or PERSON_COLUMNS
        try:
            df = execute_query_df(query, params, engine=self.engine)
        except Exception as e:
            logger.error(f"Error fetching {label}: {e}")
            return pd.DataFrame(columns=columns)
        if df.empty:
            return pd.DataFrame(columns=columns)
        return unique_by_email(df)

    # =========================================================================
    # SINGLE EMPLOYEE
    # =========================================================================

    def get_employee(self, email: str) -> Optional[Dict]:
        """
        Fetch one directory row by email, regardless of status/team.

        Raises:
            SQLAlchemyError: store errors propagate so login can reject cleanly
        """
        query = f"""
            SELECT {', '.join(EMPLOYEE_COLUMNS)}
            FROM {EMPLOYEE_TABLE}
            WHERE email = :email
            LIMIT 1
        """
        df = execute_query_df(query, {'email': email}, engine=self.engine)
        if df.empty:
            return None
        return df.iloc[0].to_dict()

    def is_referenced_as(self, column: str, email: str) -> bool:
        """True if any active Sales employee names `email` in the given manager column."""
        if column not in _MANAGER_REFERENCE_COLUMNS:
            raise ValueError(f"Unsupported manager column: {column}")

        query = f"""
            SELECT email
            FROM {EMPLOYEE_TABLE}
            WHERE {column} = :email
              AND {_ACTIVE_SALES}
            LIMIT 1
        """
        df = execute_query_df(query, {'email': email, **self._base_params()}, engine=self.engine)
        return not df.empty

    # =========================================================================
    # MEMBER LISTINGS
    # =========================================================================

    def get_employees_by_rm(self, rm_email: str) -> pd.DataFrame:
        """Active Sales reports of an RM, plus the RM when the RM row is itself active Sales."""
        params = {'rm_email': rm_email, **self._base_params()}
        try:
            reports = execute_query_df(
                f"""
                SELECT email, name
                FROM {EMPLOYEE_TABLE}
                WHERE reporting_manager_email = :rm_email
                  AND {_ACTIVE_SALES}
                """,
                params,
                engine=self.engine,
            )
        except Exception as e:
            # a failed reports query yields no team, not the RM alone
            logger.error(f"Error fetching employees for RM {rm_email}: {e}")
            return pd.DataFrame(columns=PERSON_COLUMNS)

        rm_row = self._people(
            f"""
            SELECT email, name
            FROM {EMPLOYEE_TABLE}
            WHERE email = :rm_email
              AND {_ACTIVE_SALES}
            """,
            params,
            f"RM record {rm_email}",
        )
        frames = [df for df in (reports, rm_row) if not df.empty]
        if not frames:
            return pd.DataFrame(columns=PERSON_COLUMNS)
        return unique_by_email(pd.concat(frames, ignore_index=True))

    def get_employees_by_zm(self, zm_email: str) -> pd.DataFrame:
        """Active Sales employees whose zonal manager is `zm_email`."""
        return self._people(
            f"""
            SELECT email, name
            FROM {EMPLOYEE_TABLE}
            WHERE zonal_manager_email = :zm_email
              AND {_ACTIVE_SALES}
            """,
            {'zm_email': zm_email, **self._base_params()},
            f"employees for ZM {zm_email}",
        )

    def get_all_active_sales_employees(self) -> pd.DataFrame:
        """Every active Sales employee with their reporting chain."""
        return self._people(
            f"""
            SELECT {', '.join(EMPLOYEE_COLUMNS)}
            FROM {EMPLOYEE_TABLE}
            WHERE {_ACTIVE_SALES}
            """,
            self._base_params(),
            "active sales employees",
            columns=EMPLOYEE_COLUMNS,
        )

    # =========================================================================
    # MANAGER LISTINGS
    # =========================================================================

    def _manager_references(self, prefix: str, where: str, params: Dict, label: str) -> pd.DataFrame:
        return self._people(
            f"""
            SELECT {prefix}_email AS email, {prefix} AS name
            FROM {EMPLOYEE_TABLE}
            WHERE {_ACTIVE_SALES}
              AND {prefix}_email IS NOT NULL
              AND {prefix}_email <> ''
              {where}
            """,
            {**params, **self._base_params()},
            label,
        )

    def get_reporting_managers_by_zm(self, zm_email: str) -> pd.DataFrame:
        """RMs referenced by the ZM's active reports (so every RM has at least one report)."""
        return self._manager_references(
            'reporting_manager',
            "AND zonal_manager_email = :zm_email",
            {'zm_email': zm_email},
            f"reporting managers for ZM {zm_email}",
        )

    def get_all_reporting_managers(self) -> pd.DataFrame:
        return self._manager_references('reporting_manager', '', {}, "reporting managers")

    def get_all_zonal_managers(self) -> pd.DataFrame:
        return self._manager_references('zonal_manager', '', {}, "zonal managers")

    # =========================================================================
    # SCOPE VALIDATION
    # =========================================================================

    def filter_valid_emails(
        self,
        emails: Iterable[str],
        lines_of_business: Optional[List[str]] = None
    ) -> List[str]:
        """
        Keep only emails that are Active Sales employees
        (and, when given, whose line_of_business is in the allowed list).

        Raises:
            SQLAlchemyError: callers decide how to degrade
        """
        emails = list(dict.fromkeys(e for e in emails if e))
        if not emails:
            return []

        query = f"""
            SELECT email
            FROM {EMPLOYEE_TABLE}
            WHERE email IN :emails
              AND {_ACTIVE_SALES}
        """
        params = {'emails': emails, **self._base_params()}
        binds = [bindparam('emails', expanding=True)]

        if lines_of_business:
            query += " AND line_of_business IN :lines_of_business"
            params['lines_of_business'] = list(lines_of_business)
            binds.append(bindparam('lines_of_business', expanding=True))

        df = execute_query_df(text(query).bindparams(*binds), params, engine=self.engine)
        valid = set(df['email']) if not df.empty else set()
        return [e for e in emails if e in valid]


# =============================================================================
# ROLE CLASSIFICATION
# =============================================================================

def classify_role(directory: HierarchyDirectory, email: str) -> Optional[ViewerRole]:
    """
    Derive the viewer role from the directory. Called once per login.

    Order of checks:
        Program Team member        -> PROGRAM_TEAM (status not required)
        not Active                 -> None
        referenced as ZM           -> ZONAL_MANAGER
        referenced as RM           -> REPORTING_MANAGER
        otherwise                  -> EMPLOYEE

    Returns None when the email is unknown or the directory is unreachable.
    """
    try:
        employee = directory.get_employee(email)
        if not employee:
            logger.warning(f"Role lookup for unknown email: {email}")
            return None

        if employee.get('team') == TEAM_PROGRAM:
            return ViewerRole.PROGRAM_TEAM

        if employee.get('status') != STATUS_ACTIVE:
            logger.warning(f"Role lookup for inactive employee: {email}")
            return None

        if directory.is_referenced_as('zonal_manager_email', email):
            return ViewerRole.ZONAL_MANAGER

        if directory.is_referenced_as('reporting_manager_email', email):
            return ViewerRole.REPORTING_MANAGER

        return ViewerRole.EMPLOYEE

    except Exception as e:
        logger.error(f"Error classifying role for {email}: {e}")
        return None
