# utils/__init__.py
"""
Shared Utilities Package for Streamlit Apps

This package contains common utilities shared across all pages:
- auth: Passcode login and session context
- config: Configuration management (local + Streamlit Cloud)
- db: Database connection management with pooling
- otp_email: Login passcode delivery over SMTP

Usage:
    # Import specific modules
    from utils.auth import AuthManager
    from utils.db import get_db_engine, execute_query_df
    from utils.config import config

    # Or import commonly used items directly
    from utils import AuthManager, get_db_engine, config
"""

# Authentication
from .auth import (
    AuthManager,
    SessionContext,
)

# Configuration
from .config import (
    config,
    Config,
)

# Database
from .db import (
    get_db_engine,
    check_db_connection,
    execute_query_df,
)

__all__ = [
    # Auth
    'AuthManager',
    'SessionContext',

    # Config
    'config',
    'Config',

    # Database
    'get_db_engine',
    'check_db_connection',
    'execute_query_df',
]

__version__ = '1.0.0'
