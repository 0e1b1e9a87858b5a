"""
Environment configuration loader.

Logic for reading environment variables lives with the data source
(environment) rather than in the Config dataclass.
"""
import os
from config import Config, DatabaseConfig, SearchConfig, LoggingConfig, DEFAULT_DB_PATH


class EnvironmentConfigLoader:
    """Loads configuration from environment variables.

    Single Responsibility: Environment access logic.
    """

    def load(self) -> Config:
        """Create Config from environment variables"""
        return Config(
            database=self._load_database_config(),
            search=self._load_search_config(),
            logging=self._load_logging_config()
        )

    def _load_database_config(self) -> DatabaseConfig:
        """Load database configuration from environment.

        DATABASE_URL wins over ARCHIVE_DB_PATH when both are set.
        """
        busy_timeout = self._get_int("DB_BUSY_TIMEOUT_MS", 5000)
        url = self._get_optional("DATABASE_URL", "")
        if url:
            return DatabaseConfig.from_url(url, busy_timeout_ms=busy_timeout)
        return DatabaseConfig(
            path=self._get_optional("ARCHIVE_DB_PATH", DEFAULT_DB_PATH),
            busy_timeout_ms=busy_timeout
        )

    def _load_search_config(self) -> SearchConfig:
        """Load search configuration from environment"""
        return SearchConfig(
            default_page_size=self._get_int("SEARCH_DEFAULT_PAGE_SIZE", 10),
            fragment_case_sensitive=self._get_bool("SEARCH_FRAGMENT_CASE_SENSITIVE", False)
        )

    def _load_logging_config(self) -> LoggingConfig:
        """Load logging configuration from environment"""
        return LoggingConfig(level=self._get_optional("LOG_LEVEL", "INFO").upper())

    def _get_optional(self, key: str, default: str) -> str:
        """Get optional string environment variable"""
        return os.getenv(key, default)

    def _get_bool(self, key: str, default: bool) -> bool:
        """Get boolean environment variable"""
        value = os.getenv(key, str(default).lower())
        return value.lower() == "true"

    def _get_int(self, key: str, default: int) -> int:
        """Get integer environment variable"""
        value = os.getenv(key, str(default))
        return int(value)
