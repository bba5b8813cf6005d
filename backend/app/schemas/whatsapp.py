"""WhatsApp Cloud API webhook payload (only the fields the ingestor reads)."""
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Loose(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class TextBody(_Loose):
    body: str = ""


class ReplySelection(_Loose):
    id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None


class Interactive(_Loose):
    type: Optional[str] = None  # button_reply | list_reply
    button_reply: Optional[ReplySelection] = None
    list_reply: Optional[ReplySelection] = None

    @property
    def selection(self) -> Optional[ReplySelection]:
        if self.type == "button_reply":
            return self.button_reply
        if self.type == "list_reply":
            return self.list_reply
        return None


class InboundMessage(_Loose):
    id: Optional[str] = None
    from_: Optional[str] = Field(default=None, alias="from")
    timestamp: Optional[str] = None
    type: Optional[str] = None
    text: Optional[TextBody] = None
    interactive: Optional[Interactive] = None

    @field_validator("timestamp", mode="before")
    @classmethod
    def timestamp_as_text(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class Metadata(_Loose):
    phone_number_id: Optional[str] = None
    display_phone_number: Optional[str] = None


class ChangeValue(_Loose):
    metadata: Optional[Metadata] = None
    # Raw dicts; each message is validated on its own by the ingestor
    messages: Optional[List[Any]] = None


class Change(_Loose):
    field: Optional[str] = None
    value: Optional[ChangeValue] = None


class Entry(_Loose):
    id: Optional[str] = None
    changes: Optional[List[Change]] = None


class WebhookPayload(_Loose):
    object: Optional[str] = None
    entry: Optional[List[Entry]] = None
