"""Environment-backed application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

from career_matcher.errors import ConfigurationError

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_UPLOAD_FOLDER = PROJECT_ROOT / "uploads"

ENV_FILES = {
    "prod": ".env.prod",
    "production": ".env.prod",
    "staging": ".env.staging",
}

DEFAULT_PRICES: Dict[str, float] = {
    "analysis": 3.90,
    "improved": 6.90,
    "complete": 9.90,
}

REQUIRED_KEYS = ("OPENAI_API_KEY", "STRIPE_SECRET_KEY")


def load_environment(base_dir: Optional[Path] = None) -> str:
    """Load `.env` and then the environment-specific file on top of it.

    Returns the name of the environment-specific file that was considered.
    """
    base_dir = base_dir or PROJECT_ROOT
    app_env = os.getenv("APP_ENV", "dev").strip().lower()
    env_file = ENV_FILES.get(app_env, ".env.dev")

    load_dotenv(base_dir / ".env")
    load_dotenv(base_dir / env_file, override=True)
    return env_file


def _price(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def parse_coupon_codes(raw: Optional[str]) -> List[str]:
    """Split a comma-separated allow-list into normalized codes."""
    if not raw:
        return []
    return [code.strip().upper() for code in raw.split(",") if code.strip()]


@dataclass
class Settings:
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"
    stripe_secret_key: str = ""
    stripe_publishable_key: str = ""
    stripe_webhook_secret: str = ""
    payment_mode: str = "test"
    prices: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_PRICES))
    valid_coupon_codes: str = ""
    frontend_url: str = "http://localhost:3000"
    upload_folder: Path = DEFAULT_UPLOAD_FOLDER
    port: int = 5001
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4o"),
            stripe_secret_key=os.getenv("STRIPE_SECRET_KEY", ""),
            stripe_publishable_key=os.getenv("STRIPE_PUBLISHABLE_KEY", ""),
            stripe_webhook_secret=os.getenv("STRIPE_WEBHOOK_SECRET", ""),
            payment_mode=os.getenv("PAYMENT_MODE", "test").strip().lower() or "test",
            prices={
                "analysis": _price("PRICE_ANALYSIS_ONLY", DEFAULT_PRICES["analysis"]),
                "improved": _price("PRICE_IMPROVED_ONLY", DEFAULT_PRICES["improved"]),
                "complete": _price("PRICE_COMPLETE_PACKAGE", DEFAULT_PRICES["complete"]),
            },
            valid_coupon_codes=os.getenv("VALID_COUPON_CODES", ""),
            frontend_url=os.getenv("FRONTEND_URL", "http://localhost:3000").rstrip("/"),
            upload_folder=Path(os.getenv("UPLOAD_FOLDER", str(DEFAULT_UPLOAD_FOLDER))),
            port=int(os.getenv("PORT", "5001")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> None:
        """Raise if any setting needed to serve requests is missing."""
        values = {
            "OPENAI_API_KEY": self.openai_api_key,
            "STRIPE_SECRET_KEY": self.stripe_secret_key,
        }
        missing = [key for key in REQUIRED_KEYS if not values[key]]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )
        if self.payment_mode not in {"test", "live"}:
            raise ConfigurationError("PAYMENT_MODE must be 'test' or 'live'")
