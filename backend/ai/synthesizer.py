"""ResponseSynthesizer: turn a routed prompt into reply text."""

import logging
from dataclasses import replace

from app.core.exceptions import UpstreamError

from .generation import GenerationClient, GenerationParams, RESPONSE_PARAMS
from .prompts import SYSTEM_PROMPT

logger = logging.getLogger(__name__)

APOLOGY_MESSAGE = "I'm sorry, I'm having trouble processing your request. How can I help you?"


class ResponseSynthesizer:

    def __init__(self, client: GenerationClient):
        self.client = client

    def synthesize(self, prompt: str, params: GenerationParams = RESPONSE_PARAMS) -> str:
        """
        Generate the reply for `prompt`.

        Raises:
            UpstreamError: backend unreachable, non-success, or empty result
        """
        if params.system_prompt is None:
            params = replace(params, system_prompt=SYSTEM_PROMPT)

        result = self.client.generate(prompt, params)

        if not result.success:
            raise UpstreamError(f"Failed to generate response: {result.error}")
        if not result.result or not result.result.strip():
            raise UpstreamError("No result returned from response generation")

        logger.debug(f"Synthesized {len(result.result)} chars (usage={result.usage})")
        return result.result.strip()
