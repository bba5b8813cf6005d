"""
Cloudflare Workers AI client: REST call to /accounts/{id}/ai/run/{model}.

Same contract as GroqClient: one request, no retries, every failure returned
as GenerationResult(success=False).
"""

import logging
from typing import Optional

import requests

from .generation import GenerationClient, GenerationParams, GenerationResult, RESPONSE_PARAMS

logger = logging.getLogger(__name__)

API_BASE = "https://api.cloudflare.com/client/v4"


class CloudflareAIClient(GenerationClient):

    default_model = "@cf/meta/llama-3.1-8b-instruct"

    def __init__(self, api_token: str, account_id: str, model: Optional[str] = None, timeout: float = 15.0):
        self.api_token = api_token
        self.account_id = account_id
        self.model = model or self.default_model
        self.timeout = timeout

    def _url(self, model: str) -> str:
        return f"{API_BASE}/accounts/{self.account_id}/ai/run/{model}"

    def generate(self, prompt: str, params: GenerationParams = RESPONSE_PARAMS) -> GenerationResult:
        model = params.model or self.model
        messages = []
        if params.system_prompt:
            messages.append({"role": "system", "content": params.system_prompt})
        messages.append({"role": "user", "content": prompt})

        body = {
            "messages": messages,
            "stream": False,
            "max_tokens": params.max_tokens,
            "temperature": params.temperature,
            "top_p": params.top_p,
        }
        headers = {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
        }

        try:
            response = requests.post(self._url(model), json=body, headers=headers, timeout=self.timeout)
        except requests.Timeout:
            logger.warning("Cloudflare AI request timed out")
            return GenerationResult.failed("Cloudflare AI request timed out")
        except requests.RequestException as e:
            logger.error(f"Cloudflare AI request failed: {e}")
            return GenerationResult.failed(f"Cloudflare AI request failed: {e}")

        if not response.ok:
            logger.error(f"Cloudflare AI API error ({response.status_code}): {response.text[:200]}")
            return GenerationResult.failed(f"Cloudflare AI API error ({response.status_code})")

        try:
            data = response.json()
        except ValueError:
            return GenerationResult.failed("Cloudflare AI returned a non-JSON body")

        result = data.get("result") or {}
        text = result.get("response") if isinstance(result, dict) else None
        if not text or not str(text).strip():
            logger.warning("Cloudflare AI returned empty content")
            return GenerationResult.failed("No content received from Cloudflare AI API.")

        usage = result.get("usage") or {}
        return GenerationResult(
            success=True,
            result=str(text),
            usage={
                "promptTokens": usage.get("prompt_tokens"),
                "completionTokens": usage.get("completion_tokens"),
                "totalTokens": usage.get("total_tokens"),
            } if usage else {},
        )
