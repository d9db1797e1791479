# utils/sample_order_reporting/constants.py
"""
Constants for Sample & Order Reporting

Centralized configuration for:
- Store table names
- Directory values (team / status)
- Sample and order status values + filter labels
- Packed SKU separators
- Quota tiers
- Cache and export settings
"""

# =====================================================================
# FILTER SENTINEL
# =====================================================================

ALL = 'ALL'

# =====================================================================
# STORE TABLES
# =====================================================================

EMPLOYEE_TABLE = 'emp_record'
SAMPLE_REQUEST_TABLE = 'sample_request'
ORDER_TABLE = 'order_form_k8_25_26'
QUOTA_TABLE = 'sample_quota'

# =====================================================================
# DIRECTORY VALUES
# =====================================================================

TEAM_SALES = 'Sales'
TEAM_PROGRAM = 'Program Team'
LOGIN_TEAMS = [TEAM_SALES, TEAM_PROGRAM]

STATUS_ACTIVE = 'Active'

# Default for ORDER_LINES_OF_BUSINESS when config is silent
DEFAULT_ORDER_LINES_OF_BUSINESS = ['K8 & Test Prep', 'K8']

# =====================================================================
# RECORD STATUSES
# =====================================================================

STATUS_REQUEST_RECEIVED = 'Request Received'
STATUS_B2B_UPLOADED = 'B2B App Uploaded'
STATUS_INVOICE_CREATED = 'Invoice Created'
STATUS_DISPATCHED = 'Dispatched with Tracking ID'
STATUS_DELIVERED = 'Delivered'
STATUS_CANCELLED = 'Cancelled'

ZM_PENDING_APPROVAL = 'Pending Approval'

# =====================================================================
# STATUS FILTER LABELS (shown as buttons)
# =====================================================================

SAMPLE_STATUS_FILTERS = ['Order Placed', 'ZM Approval Pending', 'Dispatched', 'Delivered']

ORDER_STATUS_FILTERS = [
    'Order In Progress',
    'Yet to be Dispatched',
    'ZM Approval Pending',
    'Dispatched',
    'Delivered',
    'Cancelled',
]

# Display label for raw sample status values in tables
SAMPLE_STATUS_DISPLAY = {
    STATUS_B2B_UPLOADED: 'In Process',
}

# =====================================================================
# PACKED SKU STRING
# =====================================================================

SKU_ENTRY_SEPARATOR = ' // '
SKU_QTY_SEPARATOR = ' $ '

BOOK_RANKING_SIZE = 10
TOP_CUSTOMERS_CHART_SIZE = 10

# =====================================================================
# QUOTA UTILISATION TIERS
# =====================================================================

QUOTA_CRITICAL_ABOVE = 100   # strictly greater than
QUOTA_WARNING_FROM = 70      # greater than or equal

QUOTA_TIER_CRITICAL = 'critical'
QUOTA_TIER_WARNING = 'warning'
QUOTA_TIER_NORMAL = 'normal'

COLORS = {
    QUOTA_TIER_CRITICAL: "#dc3545",
    QUOTA_TIER_WARNING: "#f0ad00",
    QUOTA_TIER_NORMAL: "#28a745",
    "primary": "#1f77b4",
}

# =====================================================================
# CACHE SETTINGS
# =====================================================================

CACHE_PREFIX = 'dashboard_cache_'
CACHE_TTL_SECONDS = 300  # 5 minutes

# =====================================================================
# EXPORT SETTINGS
# =====================================================================

EXCEL_STYLES = {
    "header_fill_color": "1f77b4",
    "header_font_color": "FFFFFF",
    "currency_format": '#,##0',
    "percent_format": '0.00',
    "date_format": 'YYYY-MM-DD',
}

SAMPLE_EXPORT_COLUMNS = {
    'timestamp': 'Timestamp',
    'submission_id': 'Submission ID',
    'employee_email': 'Employee Email',
    'total_books': 'Total Books',
    'sample_status': 'Sample Status',
    'zm_approval': 'ZM Approval',
    'dispatched_date': 'Dispatched Date',
    'tracking_id': 'Tracking ID',
    'tracking_link': 'Tracking Link',
    'delivered_date': 'Delivered Date',
    'sku_info': 'SKU Info',
}

ORDER_EXPORT_COLUMNS = {
    'time_stamp': 'Date',
    'submission_id': 'Order ID',
    'company_trade_name': 'Customer Name',
    'order_amount': 'Invoice Amount',
    'no_of_books': 'Books',
    'status': 'Status',
    'invoice_link': 'Invoice Link',
    'dispatched_date': 'Dispatched Date',
    'tracking_id': 'Tracking ID',
    'no_of_boxes': 'No. of Boxes',
    'logistic_partner': 'Logistic Partner',
    'tracking_link': 'Tracking Link',
    'delivered_date': 'Delivered Date',
    'sku_info': 'SKU Info',
}

CUSTOMER_EXPORT_COLUMNS = {
    'rank': 'Rank',
    'customer_name': 'Customer Name',
    'invoice_amount': 'Invoice Amount',
    'total_books': 'Total Books',
}
