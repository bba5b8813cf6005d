"""
Synchronous chat endpoint: one message in, one AIResponse out.
Status codes: 401 missing/unknown token, 400 missing or invalid message,
500 backend configuration missing, 200 otherwise.

The body is validated inside the handler, after the token check, so every
error uses the {"success": false, "error": ...} shape.
"""
import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from pydantic import ValidationError as SchemaError

from app.agent.pipeline import PipelineOrchestrator
from app.api.deps import get_access_token, get_orchestrator
from app.core.exceptions import AuthError, ValidationError
from app.schemas.ai import IntentRequest

logger = logging.getLogger(__name__)
router = APIRouter()


def parse_intent_request(body: Any) -> IntentRequest:
    """
    Validate the raw JSON body.

    Raises:
        ValidationError: body is not an object, message missing/blank or not text
    """
    if not isinstance(body, dict):
        raise ValidationError("message is required")
    try:
        request = IntentRequest.model_validate(body)
    except SchemaError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
        raise ValidationError(f"Invalid request body: {fields or 'malformed'}") from e
    if not (request.message or "").strip():
        raise ValidationError("message is required")
    return request


@router.post("/intent")
def process_intent_message(
    body: Any = Body(None),
    access_token: Optional[str] = Depends(get_access_token),
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
):
    """
    Classify the message, ground it in the merchant's context and reply.

    Request: {"message": "show me your products", "phoneNumber": "919876543210"}
    Response: {"success": true, "data": {"response", "intent", "targetId", "context"}}
    """
    if not access_token:
        raise AuthError("Authorization header with API token is required")

    request = parse_intent_request(body)
    result = orchestrator.run(request.message.strip(), access_token, customer_phone=request.phoneNumber)
    return JSONResponse(status_code=result.status_code, content=result.to_body())
