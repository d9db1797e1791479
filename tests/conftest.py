"""
Shared fixtures: an in-memory SQLite store seeded with a small org tree.

    zm@x.com (ZM)
    ├── rm1@x.com (RM)  -> e1 (K8), e2 (Higher Ed)
    └── rm2@x.com (RM)  -> e3 (K8 & Test Prep), e4 (Inactive)
    zm2@x.com (ZM)
    └── rm3@x.com (RM)  -> e5 (K8)
    pt@x.com  Program Team (Inactive)
    ops@x.com Operations (Active)
"""

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from utils.sample_order_reporting.access_control import AccessControl
from utils.sample_order_reporting.directory import HierarchyDirectory
from utils.sample_order_reporting.models import ViewerRole
from utils.sample_order_reporting.queries import ReportingQueries

ORDER_LINES = ['K8 & Test Prep', 'K8']

EMPLOYEES = [
    # email, name, team, status, lob, rm, rm_email, zm, zm_email
    ('zm@x.com', 'Zara Zonal', 'Sales', 'Active', 'K8', None, None, None, None),
    ('rm1@x.com', 'Ravi One', 'Sales', 'Active', 'K8', None, None, 'Zara Zonal', 'zm@x.com'),
    ('e1@x.com', 'Esha One', 'Sales', 'Active', 'K8', 'Ravi One', 'rm1@x.com', 'Zara Zonal', 'zm@x.com'),
    ('e2@x.com', 'Eli Two', 'Sales', 'Active', 'Higher Ed', 'Ravi One', 'rm1@x.com', 'Zara Zonal', 'zm@x.com'),
    ('rm2@x.com', 'Rita Two', 'Sales', 'Active', 'K8', None, None, 'Zara Zonal', 'zm@x.com'),
    ('e3@x.com', 'Eshan Three', 'Sales', 'Active', 'K8 & Test Prep', 'Rita Two', 'rm2@x.com', 'Zara Zonal', 'zm@x.com'),
    ('e4@x.com', 'Eva Four', 'Sales', 'Inactive', 'K8', 'Rita Two', 'rm2@x.com', 'Zara Zonal', 'zm@x.com'),
    ('zm2@x.com', 'Zed Second', 'Sales', 'Active', 'K8', None, None, None, None),
    ('rm3@x.com', 'Rohan Three', 'Sales', 'Active', 'K8', None, None, 'Zed Second', 'zm2@x.com'),
    ('e5@x.com', 'Ekta Five', 'Sales', 'Active', 'K8', 'Rohan Three', 'rm3@x.com', 'Zed Second', 'zm2@x.com'),
    ('pt@x.com', 'Priya Program', 'Program Team', 'Inactive', None, None, None, None, None),
    ('ops@x.com', 'Omar Ops', 'Operations', 'Active', None, None, None, None, None),
]

SAMPLES = [
    # submission_id, employee_email, timestamp, total_books, sku_info, sample_status, zm_approval
    ('S1', 'e1@x.com', '2025-01-10 09:00:00', 5, 'Atlas $ 5', 'Request Received', 'Pending Approval'),
    ('S2', 'e2@x.com', '2025-01-12 10:00:00', 3, 'Map Set $ 3', 'Request Received', 'Approved'),
    ('S3', 'e3@x.com', '2025-01-15 11:00:00', 4, 'Atlas $ 4', 'Delivered', 'Pending Approval'),
    ('S4', 'rm1@x.com', '2025-01-20 23:59:59', 2, 'Globe $ 2', 'Dispatched with Tracking ID', 'Approved'),
    ('S5', 'e5@x.com', '2025-01-18 12:00:00', 6, 'Atlas $ 6', 'B2B App Uploaded', 'Approved'),
    ('S6', 'e1@x.com', '2025-02-01 08:00:00', 1, 'Globe $ 1', 'B2B App Uploaded', 'Approved'),
]

ORDERS = [
    # submission_id, employee_email_id, time_stamp, company_trade_name, order_amount,
    # no_of_books, sku_info, status, zm_approval
    ('SUB1', 'e1@x.com', '2025-01-05 10:00:00', 'Beta School', 1000, 10, 'Atlas $ 6 // Map Set $ 4', 'Delivered', 'Approved'),
    ('SUB1', 'e1@x.com', '2025-01-05 10:00:00', 'Beta School', 500, 5, 'Atlas $ 5', 'Delivered', 'Approved'),
    ('SUB2', 'e3@x.com', '2025-01-07 10:00:00', 'alpha academy', 2000, 20, 'Globe $ 20', 'Request Received', 'Pending Approval'),
    ('SUB3', 'rm2@x.com', '2025-01-08 10:00:00', 'Gamma', 300, 3, 'Globe $ 3', 'Cancelled', 'Approved'),
    ('SUB4', 'e2@x.com', '2025-01-09 10:00:00', 'Delta', 999, 9, 'Atlas $ 9', 'Delivered', 'Approved'),
    ('SUB5', 'e5@x.com', '2025-01-09 10:00:00', 'Epsilon', 700, 7, 'Atlas $ 7', 'Delivered', 'Approved'),
]

QUOTAS = [
    ('e1@x.com', 'Esha One', 100, 80),
    ('e3@x.com', 'Eshan Three', 50, 60),
    ('rm1@x.com', 'Ravi One', 50, 10),
    ('e5@x.com', 'Ekta Five', 100, 0),
]

SCHEMA = [
    """
    CREATE TABLE emp_record (
        email TEXT, name TEXT, team TEXT, status TEXT, line_of_business TEXT,
        reporting_manager TEXT, reporting_manager_email TEXT,
        zonal_manager TEXT, zonal_manager_email TEXT
    )
    """,
    """
    CREATE TABLE sample_request (
        submission_id TEXT, employee_email TEXT, timestamp TEXT, total_books INTEGER,
        sku_info TEXT, sample_status TEXT, zm_approval TEXT, dispatched_date TEXT,
        tracking_id TEXT, tracking_link TEXT, delivered_date TEXT
    )
    """,
    """
    CREATE TABLE order_form_k8_25_26 (
        submission_id TEXT, employee_email_id TEXT, time_stamp TEXT, company_trade_name TEXT,
        order_amount REAL, no_of_books INTEGER, sku_info TEXT, status TEXT, zm_approval TEXT,
        invoice_link TEXT, dispatched_date TEXT, tracking_id TEXT, no_of_boxes INTEGER,
        logistic_partner TEXT, tracking_link TEXT, delivered_date TEXT
    )
    """,
    """
    CREATE TABLE sample_quota (
        employee_email_id TEXT, employee_name TEXT, max_quota INTEGER, quota_used INTEGER
    )
    """,
]


def _seed(engine):
    with engine.begin() as conn:
        for ddl in SCHEMA:
            conn.execute(text(ddl))

        conn.execute(text("""
            INSERT INTO emp_record VALUES (:email, :name, :team, :status, :lob,
                                           :rm, :rm_email, :zm, :zm_email)
        """), [
            dict(zip(['email', 'name', 'team', 'status', 'lob', 'rm', 'rm_email', 'zm', 'zm_email'], row))
            for row in EMPLOYEES
        ])

        conn.execute(text("""
            INSERT INTO sample_request (submission_id, employee_email, timestamp, total_books,
                                        sku_info, sample_status, zm_approval)
            VALUES (:sid, :email, :ts, :books, :sku, :status, :zm)
        """), [
            dict(zip(['sid', 'email', 'ts', 'books', 'sku', 'status', 'zm'], row))
            for row in SAMPLES
        ])

        conn.execute(text("""
            INSERT INTO order_form_k8_25_26 (submission_id, employee_email_id, time_stamp,
                                             company_trade_name, order_amount, no_of_books,
                                             sku_info, status, zm_approval)
            VALUES (:sid, :email, :ts, :customer, :amount, :books, :sku, :status, :zm)
        """), [
            dict(zip(['sid', 'email', 'ts', 'customer', 'amount', 'books', 'sku', 'status', 'zm'], row))
            for row in ORDERS
        ])

        conn.execute(text("""
            INSERT INTO sample_quota VALUES (:email, :name, :max_quota, :used)
        """), [
            dict(zip(['email', 'name', 'max_quota', 'used'], row))
            for row in QUOTAS
        ])


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    _seed(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def empty_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def directory(engine):
    return HierarchyDirectory(engine=engine)


@pytest.fixture
def make_access(directory):
    def _make(role: ViewerRole, email: str) -> AccessControl:
        return AccessControl(role, email, directory=directory, order_lines_of_business=ORDER_LINES)
    return _make


@pytest.fixture
def make_queries(engine, make_access):
    def _make(role: ViewerRole, email: str) -> ReportingQueries:
        return ReportingQueries(make_access(role, email), engine=engine)
    return _make
