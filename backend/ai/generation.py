"""
Generation backend contract.

Request: model, optional system instruction, user prompt, max output tokens,
temperature, top-p. Response: {success, result?, error?, usage?}.

Backend clients NEVER raise on transport, HTTP or empty-result failures: they
return GenerationResult(success=False, error=...). Missing credentials are the
one exception; `build_generation_client` raises ConfigError before any client
exists, so no call is ever attempted without them.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from app.core.config import Settings
from app.core.exceptions import ConfigError


@dataclass(frozen=True)
class GenerationParams:
    """Model parameters for one generation call. `model=None` means the client default."""
    model: Optional[str] = None
    system_prompt: Optional[str] = None
    max_tokens: int = 500
    temperature: float = 0.7
    top_p: float = 0.9


@dataclass
class GenerationResult:
    success: bool
    result: Optional[str] = None
    error: Optional[str] = None
    usage: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def failed(cls, error: str) -> "GenerationResult":
        return cls(success=False, error=error)


# Deterministic, short: the classifier answer is a tiny JSON object
CLASSIFICATION_PARAMS = GenerationParams(max_tokens=100, temperature=0, top_p=1)
# Conversational reply
RESPONSE_PARAMS = GenerationParams(max_tokens=500, temperature=0.7, top_p=0.9)


class GenerationClient:
    """Base class for generation backends."""

    default_model: str = ""

    def generate(self, prompt: str, params: GenerationParams = RESPONSE_PARAMS) -> GenerationResult:
        raise NotImplementedError


ClientFactory = Callable[[Settings], GenerationClient]


def build_generation_client(settings: Settings) -> GenerationClient:
    """
    Create the client for the configured backend.

    Raises:
        ConfigError: unknown provider, or its credentials are absent
    """
    provider = settings.AI_PROVIDER

    if provider == "groq":
        if not settings.GROQ_API_KEY:
            raise ConfigError("Groq API configuration is missing")
        from .groq_client import GroqClient
        return GroqClient(
            api_key=settings.GROQ_API_KEY,
            model=settings.GROQ_MODEL,
            timeout=settings.AI_TIMEOUT_SECONDS,
        )

    if provider == "cloudflare":
        if not settings.CLOUDFLARE_API_TOKEN:
            raise ConfigError("Cloudflare API configuration is missing")
        if not settings.CLOUDFLARE_ACCOUNT_ID:
            raise ConfigError("Cloudflare account configuration is missing")
        from .cloudflare_client import CloudflareAIClient
        return CloudflareAIClient(
            api_token=settings.CLOUDFLARE_API_TOKEN,
            account_id=settings.CLOUDFLARE_ACCOUNT_ID,
            model=settings.CLOUDFLARE_MODEL,
            timeout=settings.AI_TIMEOUT_SECONDS,
        )

    raise ConfigError(f"Unknown AI provider: {provider}")
