"""
WhatsApp Cloud API delivery client.

Sends plain text replies on behalf of a merchant using the merchant's own
phone_number_id and access token. One attempt per reply, no retries; a
failure raises DeliveryError for the caller to log.
"""
import logging

import requests

from app.core.exceptions import DeliveryError

logger = logging.getLogger(__name__)

GRAPH_API_BASE = "https://graph.facebook.com"


class WhatsAppClient:

    def __init__(self, api_version: str = "v21.0", timeout: float = 10.0):
        self.api_version = api_version
        self.timeout = timeout

    def _messages_url(self, phone_number_id: str) -> str:
        return f"{GRAPH_API_BASE}/{self.api_version}/{phone_number_id}/messages"

    def send_text_message(self, phone_number_id: str, access_token: str, to: str, body: str) -> dict:
        """
        Send a text message.

        Args:
            phone_number_id: Merchant's WhatsApp sender id
            access_token: Merchant's WhatsApp access token
            to: Recipient phone number (as received in the webhook)
            body: Message text

        Returns:
            Graph API response body

        Raises:
            DeliveryError: transport failure or non-2xx answer
        """
        payload = {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": to,
            "type": "text",
            "text": {"preview_url": True, "body": body},
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {access_token}",
        }

        try:
            response = requests.post(
                self._messages_url(phone_number_id),
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise DeliveryError(f"Failed to send WhatsApp message: {e}") from e

        try:
            result = response.json()
        except ValueError:
            result = {}

        if not response.ok:
            error = (result.get("error") or {}).get("message") if isinstance(result, dict) else None
            raise DeliveryError(error or f"Failed to send WhatsApp message ({response.status_code})")

        logger.debug(f"WhatsApp message sent via {phone_number_id}")
        return result
