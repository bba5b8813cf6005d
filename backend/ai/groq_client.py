"""
Groq API Client: wrapper for chat-completion calls.

Used twice per inbound message: once to classify intent (tiny JSON answer,
temperature 0) and once to write the customer-facing reply.

THIS CLIENT DOES NOT:
- Access the database
- Send any messages to customers
- Retry: one failed call is absorbed by the caller (fallback intent or apology)

Every failure comes back as GenerationResult(success=False); nothing raises.
"""

import logging
from typing import Optional

from groq import Groq, APIError, APIStatusError, APITimeoutError

from .generation import GenerationClient, GenerationParams, GenerationResult, RESPONSE_PARAMS

# Configure logging (NEVER log API keys)
logger = logging.getLogger(__name__)


class GroqClient(GenerationClient):
    """
    Minimal, secure wrapper for the Groq chat completions API.

    - Timeout: bounded per call (AI_TIMEOUT_SECONDS)
    - Retries: 0 (SDK retries disabled)
    """

    default_model = "llama-3.1-8b-instant"

    def __init__(self, api_key: str, model: Optional[str] = None, timeout: float = 15.0):
        self.model = model or self.default_model
        self.client = Groq(api_key=api_key, timeout=timeout, max_retries=0)
        logger.info(f"Groq client initialized (model={self.model})")

    def generate(self, prompt: str, params: GenerationParams = RESPONSE_PARAMS) -> GenerationResult:
        """
        Run one chat completion.

        Args:
            prompt: User prompt
            params: Model parameters; params.model overrides the client default

        Returns:
            GenerationResult with the completion text, or success=False
        """
        messages = []
        if params.system_prompt:
            messages.append({"role": "system", "content": params.system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            response = self.client.chat.completions.create(
                model=params.model or self.model,
                messages=messages,
                temperature=params.temperature,
                max_tokens=params.max_tokens,
                top_p=params.top_p,
                stream=False,  # No streaming - we need the complete answer
            )
        except APITimeoutError:
            logger.warning("Groq API timeout")
            return GenerationResult.failed("Groq API request timed out")
        except APIStatusError as e:
            logger.error(f"Groq API error ({e.status_code}): {e.message}")
            return GenerationResult.failed(f"Groq API error ({e.status_code})")
        except APIError as e:
            logger.error(f"Groq API error: {e}")
            return GenerationResult.failed(f"Groq API error: {e}")

        if not response.choices:
            logger.warning("Groq returned no choices")
            return GenerationResult.failed("No content received from Groq API.")

        content = response.choices[0].message.content
        if not content or not content.strip():
            logger.warning("Groq returned empty content")
            return GenerationResult.failed("No content received from Groq API.")

        usage = {}
        if response.usage is not None:
            usage = {
                "promptTokens": response.usage.prompt_tokens,
                "completionTokens": response.usage.completion_tokens,
                "totalTokens": response.usage.total_tokens,
            }

        logger.debug(f"Groq response received: {len(content)} chars")
        return GenerationResult(success=True, result=content, usage=usage)
