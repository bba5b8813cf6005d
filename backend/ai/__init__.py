"""AI module: intent classification, prompt routing and reply synthesis.

The LLM is used twice per message: to pick an intent (fail-open to
general_chat) and to write the reply from an intent-specific prompt. It never
reads or writes the database and never sends messages.
"""

from .generation import GenerationClient, GenerationParams, GenerationResult, build_generation_client
from .intent_parser import classify_message
from .intent_schema import Intent, IntentResult
from .prompt_router import route_prompt
from .synthesizer import APOLOGY_MESSAGE, ResponseSynthesizer

__all__ = [
    "APOLOGY_MESSAGE",
    "GenerationClient",
    "GenerationParams",
    "GenerationResult",
    "Intent",
    "IntentResult",
    "ResponseSynthesizer",
    "build_generation_client",
    "classify_message",
    "route_prompt",
]
