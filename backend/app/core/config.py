"""Application configuration.

Environment variables override all defaults. One Settings instance is built at
import time and handed to components by reference (FastAPI dependency
`get_settings`). Generation-backend credentials are NOT required to boot:
their absence is reported as a ConfigError by `build_generation_client`
before any classification or synthesis call.
"""

import os
from pathlib import Path
from typing import List


# Load .env for local development (safe no-op if not installed)
try:
    from dotenv import load_dotenv  # type: ignore

    _BACKEND_DIR = Path(__file__).resolve().parents[2]
    load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)
except ImportError:
    pass


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    def __init__(self):
        self.ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

        # Database Configuration
        self.DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./storefront.db")
        # Bounded read time; applied as statement_timeout on PostgreSQL
        self.DB_STATEMENT_TIMEOUT_MS: int = int(os.getenv("DB_STATEMENT_TIMEOUT_MS", "5000"))

        # Generation backend: "groq" | "cloudflare"
        self.AI_PROVIDER: str = os.getenv("AI_PROVIDER", "groq").strip().lower()
        self.AI_TIMEOUT_SECONDS: float = float(os.getenv("AI_TIMEOUT_SECONDS", "15"))

        # Groq API Key (Must be set via .env, never in code)
        self.GROQ_API_KEY: str = os.getenv("GROQ_API_KEY", "")
        self.GROQ_MODEL: str = os.getenv("GROQ_MODEL", "llama-3.1-8b-instant")

        # Cloudflare Workers AI (token + account id are both required)
        self.CLOUDFLARE_API_TOKEN: str = os.getenv("CLOUDFLARE_API_TOKEN", "")
        self.CLOUDFLARE_ACCOUNT_ID: str = os.getenv("CLOUDFLARE_ACCOUNT_ID", "")
        self.CLOUDFLARE_MODEL: str = os.getenv("CLOUDFLARE_MODEL", "@cf/meta/llama-3.1-8b-instruct")

        # WhatsApp Cloud API
        self.VERIFY_TOKEN: str = os.getenv("VERIFY_TOKEN", "")
        self.WHATSAPP_API_VERSION: str = os.getenv("WHATSAPP_API_VERSION", "v21.0")
        self.WHATSAPP_TIMEOUT_SECONDS: float = float(os.getenv("WHATSAPP_TIMEOUT_SECONDS", "10"))

        # Skip inbound messages whose channel message id was already audited
        self.WEBHOOK_DEDUPLICATE: bool = _env_bool("WEBHOOK_DEDUPLICATE", True)
        # Restrict order context to the sender's own orders when the phone is known
        self.SCOPE_ORDERS_TO_CUSTOMER: bool = _env_bool("SCOPE_ORDERS_TO_CUSTOMER", False)

        # CORS (Restrictive - specific origins only, no wildcards)
        origins = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
        self.CORS_ORIGINS: List[str] = [o.strip() for o in origins.split(",") if o.strip()]

    def generation_configured(self) -> bool:
        """True when the selected generation backend has its credentials."""
        if self.AI_PROVIDER == "cloudflare":
            return bool(self.CLOUDFLARE_API_TOKEN and self.CLOUDFLARE_ACCOUNT_ID)
        return bool(self.GROQ_API_KEY)


settings = Settings()


def get_settings() -> Settings:
    return settings
