"""
Configuration constants for the archive signature core
"""
from dataclasses import dataclass, field

DEFAULT_DB_PATH = "/app/data/archive.db"


@dataclass
class DatabaseConfig:
    """SQLite database configuration.

    The core talks to SQLite only: sync connections (sqlite3) for mutations
    and aiosqlite connections for non-blocking searches.
    """
    database_url: str = ""
    path: str = DEFAULT_DB_PATH  # SQLite database file path
    check_same_thread: bool = False  # SQLite threading mode
    busy_timeout_ms: int = 5000  # Wait for the write lock before failing

    @classmethod
    def from_url(cls, url: str, busy_timeout_ms: int = 5000) -> 'DatabaseConfig':
        """Parse DATABASE_URL and create config.

        Supports:
        - sqlite:///relative/db.sqlite
        - sqlite:////absolute/db.sqlite
        - sqlite:///:memory:
        """
        prefix = "sqlite:///"
        if not url.startswith(prefix):
            raise ValueError(f"Unsupported database url: {url}")

        path = url[len(prefix):] or DEFAULT_DB_PATH
        return cls(database_url=url, path=path, busy_timeout_ms=busy_timeout_ms)


@dataclass
class SearchConfig:
    """Generic search configuration"""
    default_page_size: int = 10
    fragment_case_sensitive: bool = False  # FRAGMENT uses LIKE (case-insensitive) unless set


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass
class Config:
    """Main configuration container"""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> 'Config':
        """Create config from environment - delegates to EnvironmentConfigLoader"""
        from environment_config_loader import EnvironmentConfigLoader
        return EnvironmentConfigLoader().load()


# Default instance
default_config = Config.from_env()
