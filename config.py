"""
Database configuration for PostgreSQL
Supports local development, testing and production
Environment-aware configuration based on APP_ENV
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional
from urllib.parse import quote_plus

from dotenv import load_dotenv

# Environment modes
EnvironmentMode = Literal["development", "test", "production"]

logger = logging.getLogger(__name__)


def load_app_environment(mode: Optional[str] = None) -> str:
    """
    Load environment variables from the appropriate .env file.

    Priority:
    1. Explicit 'mode' argument
    2. APP_ENV environment variable
    3. Default to 'development'

    Loads .env.{mode} if it exists, falling back to .env
    """
    if not mode:
        mode = os.getenv('APP_ENV', 'development')

    base_path = Path(__file__).parent
    env_file = base_path / f'.env.{mode}'
    if not env_file.exists():
        env_file = base_path / '.env'

    if env_file.exists():
        logger.info(f"Loading config from {env_file}")
        # override=False lets variables from the host environment win
        load_dotenv(env_file, override=False)
    else:
        logger.debug(f"No config file found for mode '{mode}'")

    return mode


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging from LOG_LEVEL (default: INFO)"""
    level = (level or os.getenv('LOG_LEVEL', 'INFO')).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


@dataclass
class DatabaseConfig:
    """PostgreSQL database configuration"""

    host: str
    port: int
    database: str
    user: str
    password: str

    # Connection pool settings
    min_pool_size: int = 2
    max_pool_size: int = 10
    command_timeout: int = 60  # seconds

    ssl_mode: str = "prefer"

    @property
    def dsn(self) -> str:
        """Get asyncpg DSN format"""
        return (
            f"postgresql://{self.user}:{quote_plus(self.password)}"
            f"@{self.host}:{self.port}/{self.database}"
        )

    @property
    def ssl(self):
        """
        SSL setting for asyncpg.
        asyncpg expects: True (require SSL), False (disable SSL), or 'prefer'
        """
        if self.ssl_mode == 'require':
            return True
        if self.ssl_mode == 'disable':
            return False
        return 'prefer'

    @classmethod
    def from_environment(cls, mode: Optional[EnvironmentMode] = None) -> 'DatabaseConfig':
        """
        Load configuration from environment variables

        Environment variables:
        - APP_ENV: Environment mode (development, test, production)
        - DB_HOST: Database host (default: localhost)
        - DB_PORT: Database port (default: 5432)
        - DB_NAME: Database name (default: postgres)
        - DB_USER: Database user (default: postgres)
        - DB_PASSWORD: Database password
        - DB_SSL_MODE: SSL mode (default: prefer, require in production)
        - DB_MIN_POOL_SIZE / DB_MAX_POOL_SIZE: pool bounds
        - DB_COMMAND_TIMEOUT: statement timeout in seconds

        Args:
            mode: Override environment mode (default: reads from APP_ENV)
        """
        mode = load_app_environment(mode)

        config = cls(
            host=os.getenv('DB_HOST', 'localhost'),
            port=int(os.getenv('DB_PORT', '5432')),
            database=os.getenv('DB_NAME', 'postgres'),
            user=os.getenv('DB_USER', 'postgres'),
            password=os.getenv('DB_PASSWORD', ''),
            ssl_mode=os.getenv('DB_SSL_MODE', 'require' if mode == 'production' else 'prefer'),
            min_pool_size=int(os.getenv('DB_MIN_POOL_SIZE', '2')),
            max_pool_size=int(os.getenv('DB_MAX_POOL_SIZE', '10')),
            command_timeout=int(os.getenv('DB_COMMAND_TIMEOUT', '60')),
        )

        config.validate_safety(mode)
        return config

    def validate_safety(self, mode: str):
        """Ensure configuration is safe for the requested mode"""
        if mode == 'test':
            if 'test' not in self.database:
                raise ValueError(f"SAFETY ERROR: Test mode requested but database is '{self.database}'. Test database must contain 'test'.")
            if 'prod' in self.database:
                raise ValueError(f"SAFETY ERROR: Test mode requested but database '{self.database}' appears to be production.")

        if mode == 'production' and self.ssl_mode != 'require':
            logger.warning(f"Production database {self.database} is used without ssl_mode=require")

    @classmethod
    def for_local_development(cls) -> 'DatabaseConfig':
        """Configuration for local PostgreSQL instance"""
        return cls(
            host='localhost',
            port=5432,
            database='postgres',
            user='postgres',
            password='postgres',
            ssl_mode='prefer',
            min_pool_size=2,
            max_pool_size=5,
        )

    @classmethod
    def for_testing(cls) -> 'DatabaseConfig':
        """Configuration for test PostgreSQL database"""
        return cls(
            host='localhost',
            port=5432,
            database='sql_queries_test',
            user='postgres',
            password='postgres',
            ssl_mode='prefer',
            min_pool_size=1,
            max_pool_size=5,
        )


# Utility functions
def get_environment_mode() -> EnvironmentMode:
    """Get current environment mode from APP_ENV variable"""
    mode = os.getenv('APP_ENV', 'development').lower()
    if mode not in ('development', 'test', 'production'):
        mode = 'development'
    return mode  # type: ignore


def is_test_mode() -> bool:
    """Check if running in test mode"""
    return get_environment_mode() == 'test'


def is_production_mode() -> bool:
    """Check if running in production mode"""
    return get_environment_mode() == 'production'
