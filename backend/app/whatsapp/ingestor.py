"""
WhatsApp webhook ingestion.

Verification: echo hub.challenge iff hub.mode == "subscribe" and
hub.verify_token matches VERIFY_TOKEN.

Receipt: walk entry -> changes -> messages. Each message gets its own
session and is processed independently:

1. Resolve the merchant by metadata.phone_number_id (unknown: skip, no reply)
2. Skip duplicates already audited with the same channel message id
3. Append + commit the inbound audit event (always before any reply)
4. text: full pipeline; interactive: fixed acknowledgement; other: no reply
5. Send the reply and audit it as an outbound event

A failure in one message is logged and never stops its siblings; the sender
only ever sees a reply or a generic fallback, never an error.
"""
import logging
import secrets
from typing import Optional, Protocol

from pydantic import ValidationError as SchemaError
from sqlalchemy.orm import Session, sessionmaker

from ai import build_generation_client
from ai.generation import ClientFactory
from app.agent.pipeline import PipelineOrchestrator
from app.core.audit import PipelineAudit
from app.core.config import Settings
from app.core.exceptions import DeliveryError
from app.db.session import SessionLocal, session_scope
from app.models.merchant import Merchant
from app.schemas.whatsapp import Interactive, InboundMessage, WebhookPayload
from app.services import merchant_repository
from app.whatsapp.client import WhatsAppClient

logger = logging.getLogger(__name__)

BUSINESS_ACCOUNT_OBJECT = "whatsapp_business_account"
FALLBACK_REPLY = "Sorry, we couldn't process your message right now. Please try again in a moment."


class Messenger(Protocol):
    def send_text_message(self, phone_number_id: str, access_token: str, to: str, body: str) -> dict:
        ...


def verify_subscription(
    mode: Optional[str],
    token: Optional[str],
    challenge: Optional[str],
    verify_token: str,
) -> Optional[str]:
    """Return the challenge to echo back, or None when verification is forbidden."""
    if not verify_token:
        logger.warning("Webhook verification attempted but VERIFY_TOKEN is not configured")
        return None
    if mode != "subscribe" or token is None:
        return None
    if not secrets.compare_digest(token.encode(), verify_token.encode()):
        logger.warning("Webhook verification failed: token mismatch")
        return None
    logger.info("WEBHOOK VERIFIED")
    return challenge or ""


def interactive_acknowledgement(interactive: Optional[Interactive]) -> str:
    selection = interactive.selection if interactive else None
    label = (selection.title or selection.id) if selection else None
    if label:
        return f"Thanks! You selected: {label}"
    return "Thanks! We received your selection."


class WebhookIngestor:

    def __init__(
        self,
        settings: Settings,
        session_factory: sessionmaker = SessionLocal,
        messenger: Optional[Messenger] = None,
        client_factory: ClientFactory = build_generation_client,
    ):
        self.settings = settings
        self.session_factory = session_factory
        self.messenger = messenger or WhatsAppClient(
            api_version=settings.WHATSAPP_API_VERSION,
            timeout=settings.WHATSAPP_TIMEOUT_SECONDS,
        )
        self.client_factory = client_factory

    def handle_payload(self, payload: dict) -> int:
        """
        Process one webhook delivery.

        Returns:
            Number of inbound messages handled (skipped ones excluded)
        """
        try:
            body = WebhookPayload.model_validate(payload)
        except SchemaError as e:
            logger.warning(f"Ignoring malformed webhook payload: {e.error_count()} error(s)")
            return 0

        if body.object != BUSINESS_ACCOUNT_OBJECT:
            logger.info(f"Ignoring webhook for object={body.object!r}")
            return 0

        handled = 0
        for entry in body.entry or []:
            for change in entry.changes or []:
                if change.field != "messages" or change.value is None:
                    continue
                phone_number_id = change.value.metadata.phone_number_id if change.value.metadata else None
                for raw in change.value.messages or []:
                    message_id = raw.get("id") if isinstance(raw, dict) else None
                    try:
                        message = InboundMessage.model_validate(raw)
                        if self.process_message(phone_number_id, message):
                            handled += 1
                    except SchemaError as e:
                        logger.warning(f"Skipping malformed WhatsApp message {message_id}: {e.error_count()} error(s)")
                        PipelineAudit.log_stage("failed", reason="malformed_message", message_id=message_id)
                    except Exception as e:
                        logger.error(f"Error processing WhatsApp message {message_id}: {e}", exc_info=True)
                        PipelineAudit.log_stage("failed", reason=type(e).__name__, message_id=message_id)
        return handled

    def process_message(self, phone_number_id: Optional[str], message: InboundMessage) -> bool:
        """Handle one inbound message in its own session. False when skipped."""
        with session_scope(self.session_factory) as db:
            merchant = merchant_repository.get_merchant_by_phone_number_id(db, phone_number_id)
            if merchant is None:
                logger.info(f"No merchant found for phone number ID: {phone_number_id}")
                return False

            if self.settings.WEBHOOK_DEDUPLICATE and merchant_repository.webhook_message_seen(
                db, merchant.id, message.id
            ):
                logger.info(f"Duplicate WhatsApp message {message.id} for merchant {merchant.id}, skipping")
                return False

            merchant_repository.record_webhook_event(
                db,
                merchant.id,
                {
                    "type": "whatsapp_message_received",
                    "from": message.from_,
                    "message_type": message.type,
                    "timestamp": message.timestamp,
                    "message_data": message.model_dump(by_alias=True, exclude_none=True),
                },
                message_id=message.id,
            )
            db.commit()

            reply = self._reply_for(db, merchant, message)
            if reply is None or not message.from_:
                return True

            self._deliver(db, merchant, message.from_, reply)
            return True

    def _reply_for(self, db: Session, merchant: Merchant, message: InboundMessage) -> Optional[str]:
        if message.type == "text":
            text = message.text.body if message.text else ""
            logger.info(f"Processing text message from {message.from_} for merchant {merchant.id}")
            orchestrator = PipelineOrchestrator(db, self.settings, self.client_factory)
            result = orchestrator.run(text, merchant.api_token, customer_phone=message.from_)
            if not result.success or result.data is None:
                logger.warning(f"Pipeline failed for message {message.id}: {result.error}")
                return FALLBACK_REPLY
            return result.data.response

        if message.type == "interactive":
            logger.info(f"Processing interactive message from {message.from_}")
            return interactive_acknowledgement(message.interactive)

        logger.info(f"No reply for unsupported message type {message.type!r}")
        return None

    def _deliver(self, db: Session, merchant: Merchant, to: str, reply: str) -> None:
        if not merchant.phone_number_id or not merchant.whatsapp_access_token:
            logger.warning(f"WhatsApp not configured for merchant {merchant.id}, reply not sent")
            PipelineAudit.log_stage("failed", reason="whatsapp_not_configured", merchant_id=merchant.id)
            return

        try:
            result = self.messenger.send_text_message(
                merchant.phone_number_id, merchant.whatsapp_access_token, to, reply
            )
        except DeliveryError as e:
            logger.error(f"Reply delivery to {to} failed: {e.message}")
            PipelineAudit.log_stage("failed", reason="delivery", merchant_id=merchant.id, detail=e.message)
            return

        merchant_repository.record_webhook_event(
            db,
            merchant.id,
            {
                "type": "whatsapp_message_sent",
                "to": to,
                "message": reply,
                "whatsapp_response": result,
            },
        )
        db.commit()
        PipelineAudit.log_stage("delivered", merchant_id=merchant.id, response_length=len(reply))
