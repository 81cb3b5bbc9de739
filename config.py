"""
Runtime configuration

Everything comes from environment variables, read once when the app is built.
"""

import os
from pathlib import Path

from pydantic import BaseModel


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    port: int = 3012
    env: str = "development"
    platform_domain: str = "aivenapilot.com"
    data_dir: Path = Path("data")
    db_filename: str = "shops.json"
    dashboard_url: str = "http://localhost:3000"
    log_level: str = "INFO"
    reconcile_on_startup: bool = True

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @property
    def platform_name(self) -> str:
        # "aivenapilot.com" -> "aivenapilot"
        return self.platform_domain.split(".")[0]

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_filename

    def shop_url(self, slug: str) -> str:
        if self.is_production:
            return f"https://{slug}.{self.platform_domain}"
        return f"http://{slug}.localhost:{self.port}"


def get_settings() -> Settings:
    return Settings(
        port=int(os.getenv("PORT", 3012)),
        env=os.getenv("APP_ENV") or os.getenv("NODE_ENV") or "development",
        platform_domain=os.getenv("PLATFORM_DOMAIN", "aivenapilot.com"),
        data_dir=Path(os.getenv("DATA_DIR", "data")),
        db_filename=os.getenv("DB_FILENAME", "shops.json"),
        dashboard_url=os.getenv("DASHBOARD_URL", "http://localhost:3000"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        reconcile_on_startup=_env_bool("RECONCILE_ON_STARTUP", True),
    )
