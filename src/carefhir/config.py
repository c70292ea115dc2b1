"""Configuration settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from zoneinfo import ZoneInfo


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class AppConfig:
    """Configuration for carefhir."""

    # FHIR store settings
    # store_backend is "remote" (FHIR server over HTTP) or "local" (JSON files)
    store_backend: str = "remote"
    fhir_base_url: str = "http://localhost:8080/fhir"
    fhir_data_dir: str = "data/fhir"
    fhir_timeout: float = 60.0
    fhir_max_pages: int = 20

    # Optional auth for the remote store
    fhir_access_token: str | None = None
    fhir_client_id: str | None = None
    fhir_client_secret: str | None = None
    fhir_token_url: str | None = None

    # Codec settings
    default_country: str = "IN"
    # IANA zone name; None means the host's local timezone
    timezone: str | None = None

    # Audit settings
    audit_page_size: int = 100
    audit_agent_name: str = "System User"
    audit_system_name: str = "Patient Management System"

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> AppConfig:
        """Load configuration from environment variables."""
        return cls(
            store_backend=os.getenv("CAREFHIR_STORE", "remote").lower(),
            fhir_base_url=os.getenv("CAREFHIR_FHIR_BASE_URL", "http://localhost:8080/fhir"),
            fhir_data_dir=os.getenv("CAREFHIR_FHIR_DATA_DIR", "data/fhir"),
            fhir_timeout=float(os.getenv("CAREFHIR_FHIR_TIMEOUT", "60")),
            fhir_max_pages=int(os.getenv("CAREFHIR_FHIR_MAX_PAGES", "20")),
            fhir_access_token=os.getenv("CAREFHIR_FHIR_ACCESS_TOKEN") or None,
            fhir_client_id=os.getenv("CAREFHIR_FHIR_CLIENT_ID") or None,
            fhir_client_secret=os.getenv("CAREFHIR_FHIR_CLIENT_SECRET") or None,
            fhir_token_url=os.getenv("CAREFHIR_FHIR_TOKEN_URL") or None,
            default_country=os.getenv("CAREFHIR_DEFAULT_COUNTRY", "IN"),
            timezone=os.getenv("CAREFHIR_TIMEZONE") or None,
            audit_page_size=int(os.getenv("CAREFHIR_AUDIT_PAGE_SIZE", "100")),
            audit_agent_name=os.getenv("CAREFHIR_AUDIT_AGENT", "System User"),
            audit_system_name=os.getenv("CAREFHIR_AUDIT_SYSTEM", "Patient Management System"),
            host=os.getenv("CAREFHIR_HOST", "0.0.0.0"),
            port=int(os.getenv("CAREFHIR_PORT", "8000")),
            debug=_flag("CAREFHIR_DEBUG", ""),
            log_level=os.getenv("CAREFHIR_LOG_LEVEL", "INFO").upper(),
            cors_origins=os.getenv("CAREFHIR_CORS_ORIGINS", "*").split(","),
        )

    def local_timezone(self) -> tzinfo:
        """Timezone used to combine and split appointment date/time values."""
        if self.timezone:
            return ZoneInfo(self.timezone)
        return datetime.now().astimezone().tzinfo


# Global config instance
_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config
