# utils/config.py
"""
Centralized Configuration Management

Version: 1.0.0
Features:
- Support both local (.env) and Streamlit Cloud (secrets.toml)
- Singleton pattern for efficiency
- Type-safe getters with defaults
- Database settings validated lazily (when the engine is built)
"""

import os
import logging
from pathlib import Path
from dotenv import load_dotenv
from typing import Dict, Any, List, Optional
from dataclasses import dataclass

# Initialize logger
logger = logging.getLogger(__name__)


def is_running_on_streamlit_cloud() -> bool:
    """Detect if running on Streamlit Cloud"""
    try:
        import streamlit as st
        return hasattr(st, 'secrets') and len(st.secrets) > 0
    except Exception:
        return False


@dataclass
class DatabaseConfig:
    """Database configuration container"""
    host: str
    port: int
    user: str
    password: str
    database: str
    url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'host': self.host,
            'port': self.port,
            'user': self.user,
            'password': self.password,
            'database': self.database,
            'url': self.url,
        }

    def is_configured(self) -> bool:
        return bool(self.url or (self.host and self.user and self.password))


@dataclass
class EmailConfig:
    """SMTP configuration used to deliver login passcodes"""
    sender: Optional[str] = None
    password: Optional[str] = None
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587

    def is_configured(self) -> bool:
        return bool(self.sender and self.password)


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(',') if item.strip()]


class Config:
    """
    Centralized configuration management

    Usage:
        from utils.config import config

        db_config = config.get_db_config()
        ttl = config.get_app_setting("CACHE_TTL_SECONDS", 300)
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self.is_cloud = is_running_on_streamlit_cloud()
        self._load_config()
        self._initialized = True

    def _load_config(self):
        """Load configuration based on environment"""
        if self.is_cloud:
            self._load_cloud_config()
        else:
            self._load_local_config()

        self._load_app_config()
        self._log_config_status()

    def _load_cloud_config(self):
        """Load configuration from Streamlit Cloud secrets"""
        import streamlit as st

        db_secrets = st.secrets.get("DB_CONFIG", {})
        self._db_config = DatabaseConfig(
            host=db_secrets.get("host", ""),
            port=int(db_secrets.get("port", 3306)),
            user=db_secrets.get("user", ""),
            password=db_secrets.get("password", ""),
            database=db_secrets.get("database", "sales_reporting"),
            url=db_secrets.get("url"),
        )

        email_secrets = st.secrets.get("EMAIL", {})
        self._email_config = EmailConfig(
            sender=email_secrets.get("OTP_EMAIL_SENDER"),
            password=email_secrets.get("OTP_EMAIL_PASSWORD"),
            smtp_host=email_secrets.get("SMTP_HOST", "smtp.gmail.com"),
            smtp_port=int(email_secrets.get("SMTP_PORT", 587))
        )

        logger.info("☁️ Running in STREAMLIT CLOUD")

    def _load_local_config(self):
        """Load configuration from local .env file"""
        env_paths = [
            Path.cwd() / ".env",
            Path(__file__).parent.parent / ".env",
        ]

        for env_path in env_paths:
            if env_path.exists():
                load_dotenv(env_path)
                logger.info(f"Loaded .env from: {env_path}")
                break

        self._db_config = DatabaseConfig(
            host=os.getenv("DB_HOST", ""),
            port=int(os.getenv("DB_PORT", "3306")),
            user=os.getenv("DB_USER", ""),
            password=os.getenv("DB_PASSWORD", ""),
            database=os.getenv("DB_NAME", os.getenv("DB_DATABASE", "sales_reporting")),
            url=os.getenv("DB_URL") or None,
        )

        self._email_config = EmailConfig(
            sender=os.getenv("OTP_EMAIL_SENDER"),
            password=os.getenv("OTP_EMAIL_PASSWORD"),
            smtp_host=os.getenv("SMTP_HOST", "smtp.gmail.com"),
            smtp_port=int(os.getenv("SMTP_PORT", "587"))
        )

        logger.info("💻 Running in LOCAL environment")

    def _load_app_config(self):
        """Load application-specific settings"""
        self._app_config = {
            # Session
            "SESSION_TIMEOUT_HOURS": int(os.getenv("SESSION_TIMEOUT_HOURS", "8")),
            "OTP_TTL_MINUTES": int(os.getenv("OTP_TTL_MINUTES", "10")),
            "OTP_MAX_ATTEMPTS": int(os.getenv("OTP_MAX_ATTEMPTS", "5")),

            # Database pool
            "DB_POOL_SIZE": int(os.getenv("DB_POOL_SIZE", "5")),
            "DB_POOL_RECYCLE": int(os.getenv("DB_POOL_RECYCLE", "3600")),

            # Cache
            "CACHE_TTL_SECONDS": int(os.getenv("CACHE_TTL_SECONDS", "300")),

            # Business rules
            "ORDER_LINES_OF_BUSINESS": _split_csv(
                os.getenv("ORDER_LINES_OF_BUSINESS", "K8 & Test Prep,K8")
            ),

            # Feature flags
            "ENABLE_DEBUG_MODE": os.getenv("ENABLE_DEBUG_MODE", "false").lower() == "true",
        }

    def _log_config_status(self):
        """Log configuration status"""
        if self._db_config.url:
            logger.info("✅ Database: DB_URL override")
        elif self._db_config.is_configured():
            logger.info(f"✅ Database: {self._db_config.host}/{self._db_config.database}")
        else:
            logger.warning("⚠️ Database: Not configured")
        logger.info(f"✅ OTP email: {'Configured' if self._email_config.is_configured() else 'Not configured'}")

    # ==================== PUBLIC GETTERS ====================

    def get_db_config(self) -> Dict[str, Any]:
        """
        Get database configuration as dictionary

        Raises:
            ValueError: if neither DB_URL nor host/user/password are set
        """
        if not self._db_config.is_configured():
            logger.error("Missing required database configuration")
            raise ValueError("Missing required database configuration. Please check .env file.")
        return self._db_config.to_dict()

    def get_email_config(self) -> Dict[str, Any]:
        """Get SMTP configuration for passcode delivery"""
        return {
            "sender": self._email_config.sender,
            "password": self._email_config.password,
            "host": self._email_config.smtp_host,
            "port": self._email_config.smtp_port
        }

    def get_app_setting(self, key: str, default: Any = None) -> Any:
        """Get application setting with default"""
        return self._app_config.get(key, default)


# ==================== SINGLETON INSTANCE ====================

config = Config()


__all__ = [
    'config',
    'Config',
]
