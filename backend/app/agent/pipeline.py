"""
Message pipeline: classify -> load context -> route prompt -> synthesize.

ERROR POLICY:
- Missing backend credentials: ConfigError, reported before classification
- Classification failures: already absorbed by the classifier (general_chat)
- Unknown token: success=false envelope, after classification has run
- Synthesis failures: fixed apology text, still success=true
- Anything else: success=false with a generic message; nothing escapes run()
"""
import logging
from typing import Optional

from fastapi import status
from sqlalchemy.orm import Session

from ai import (
    APOLOGY_MESSAGE,
    ResponseSynthesizer,
    build_generation_client,
    classify_message,
    route_prompt,
)
from ai.generation import ClientFactory
from app.core.audit import PipelineAudit, mask_token
from app.core.config import Settings
from app.core.exceptions import PipelineError, UpstreamError
from app.schemas.ai import AIResponse, AIResponseData, ContextSummary
from app.services.context_loader import load_merchant_context

logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE = "Invalid API token - no merchant found"
INTERNAL_ERROR_MESSAGE = "An internal error occurred. Please try again later."


class PipelineOrchestrator:
    """Runs one inbound message through the pipeline. One instance per session."""

    def __init__(
        self,
        db: Session,
        settings: Settings,
        client_factory: ClientFactory = build_generation_client,
    ):
        self.db = db
        self.settings = settings
        self.client_factory = client_factory

    def run(self, message: str, access_token: str, customer_phone: Optional[str] = None) -> AIResponse:
        """
        Process one message for the merchant owning `access_token`.

        Returns:
            AIResponse; never raises
        """
        PipelineAudit.log_stage(
            "received",
            token=mask_token(access_token),
            message_length=len(message or ""),
        )
        try:
            return self._run(message, access_token, customer_phone)
        except PipelineError as e:
            PipelineAudit.log_stage("failed", reason=type(e).__name__, detail=e.message)
            return AIResponse.failure(e.message, status_code=e.status_code)
        except Exception as e:
            logger.error(f"AI processing error: {e}", exc_info=True)
            PipelineAudit.log_stage("failed", reason=type(e).__name__)
            return AIResponse.failure(INTERNAL_ERROR_MESSAGE, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    def _run(self, message: str, access_token: str, customer_phone: Optional[str]) -> AIResponse:
        # ConfigError surfaces here, before any backend call
        client = self.client_factory(self.settings)

        # Step 1: classify (does not need context, always runs)
        intent_result = classify_message(message, client)
        PipelineAudit.log_stage(
            "classified",
            intent=intent_result.intent.value,
            target_id=intent_result.target_id,
        )

        # Step 2: merchant context
        phone = customer_phone if self.settings.SCOPE_ORDERS_TO_CUSTOMER else None
        context = load_merchant_context(self.db, access_token, customer_phone=phone)
        if context is None:
            PipelineAudit.log_stage("failed", reason="invalid_token", token=mask_token(access_token))
            return AIResponse.failure(INVALID_TOKEN_MESSAGE, status_code=status.HTTP_401_UNAUTHORIZED)

        PipelineAudit.log_stage(
            "context_loaded",
            merchant_id=context.merchant.id,
            products_count=len(context.products),
            orders_count=len(context.orders),
        )

        # Step 3: prompt + reply
        prompt = route_prompt(intent_result.intent, message, context, intent_result.target_id)
        try:
            response_text = ResponseSynthesizer(client).synthesize(prompt)
            PipelineAudit.log_stage("synthesized", response_length=len(response_text))
        except UpstreamError as e:
            logger.warning(f"Response generation failed, sending apology: {e.message}")
            PipelineAudit.log_stage("synthesized", fallback="apology", detail=e.message)
            response_text = APOLOGY_MESSAGE

        return AIResponse(
            success=True,
            data=AIResponseData(
                response=response_text,
                intent=intent_result.intent.value,
                targetId=intent_result.target_id,
                context=ContextSummary(
                    productsCount=len(context.products),
                    ordersCount=len(context.orders),
                    businessName=context.merchant.name or "Unknown",
                ),
            ),
        )
