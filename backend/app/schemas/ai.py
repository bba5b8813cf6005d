from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class IntentRequest(BaseModel):
    message: Optional[str] = None
    phoneNumber: Optional[str] = None


class ContextSummary(BaseModel):
    productsCount: int
    ordersCount: int
    businessName: str


class AIResponseData(BaseModel):
    response: str
    intent: str
    targetId: Optional[str] = None
    context: ContextSummary


class AIResponse(BaseModel):
    """Terminal output of one pipeline run.

    status_code is the HTTP status the synchronous endpoint answers with; it
    is not part of the serialized envelope.
    """
    success: bool
    data: Optional[AIResponseData] = None
    error: Optional[str] = None
    status_code: int = Field(default=200, exclude=True)

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def failure(cls, error: str, status_code: int = 400) -> "AIResponse":
        return cls(success=False, error=error, status_code=status_code)

    def to_body(self) -> dict:
        return self.model_dump(exclude_none=True)
