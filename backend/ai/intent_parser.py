"""
LLM-based Intent Classifier.

WHAT THE LLM DOES (INTENT PLANNER ONLY):
- Picks one of the nine storefront intents
- Copies a product/order id into targetId when the customer clearly names one
- NOTHING ELSE

FAIL-OPEN POLICY:
A chat endpoint must always produce SOME intent. Backend unavailability,
non-JSON output, an unknown intent or a wrong shape all degrade to
GENERAL_CHAT with no target id. Nothing raised here reaches the pipeline.

The classifier never guesses ids: targetId comes only from the backend's
answer, never from the message text.
"""

import json
import logging
from dataclasses import replace

from pydantic import ValidationError as SchemaError

from app.core.exceptions import ParseError, UpstreamError

from .generation import CLASSIFICATION_PARAMS, GenerationClient
from .intent_schema import ClassifierOutput, IntentResult
from .prompts import SYSTEM_PROMPT, build_classifier_prompt

logger = logging.getLogger(__name__)


def classify_message(message: str, client: GenerationClient) -> IntentResult:
    """
    Classify a customer message, failing open to GENERAL_CHAT.

    Args:
        message: Raw customer message
        client: Generation backend

    Returns:
        IntentResult; always a member of the nine-value Intent set
    """
    message = (message or "").strip()
    if not message:
        logger.debug("Empty message - returning general_chat")
        return IntentResult.general_chat()

    try:
        result = _classify(message, client)
    except (UpstreamError, ParseError) as e:
        logger.warning(f"Intent classification failed, falling back to general_chat: {e.message}")
        return IntentResult.general_chat()
    except Exception as e:
        logger.error(f"Unexpected error in intent classification: {e}", exc_info=True)
        return IntentResult.general_chat()

    logger.info(f"Intent classified: intent={result.intent.value}, target_id={result.target_id}")
    return result


def _classify(message: str, client: GenerationClient) -> IntentResult:
    prompt = build_classifier_prompt(message)
    params = replace(CLASSIFICATION_PARAMS, system_prompt=SYSTEM_PROMPT)

    response = client.generate(prompt, params)

    if not response.success:
        raise UpstreamError(f"Failed to classify intent: {response.error}")
    if not response.result:
        raise UpstreamError("No result returned from intent classification")

    return parse_classifier_output(response.result).to_result()


def parse_classifier_output(raw: str) -> ClassifierOutput:
    """Extract and validate the JSON object from a classifier answer.

    The LLM sometimes wraps JSON in markdown fences; those are stripped.
    Anything else around the object is a format violation.

    Raises:
        ParseError: not JSON, not an object, or no recognized intent
    """
    cleaned = _strip_code_fence(raw)

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.debug(f"Raw classifier result: {raw[:200]!r}")
        raise ParseError(f"Invalid JSON from classifier: {e}") from e

    if not isinstance(data, dict):
        raise ParseError("Classifier result is not a JSON object")

    try:
        return ClassifierOutput.model_validate(data)
    except SchemaError as e:
        raise ParseError(f"Classifier schema validation failed: {e.error_count()} error(s)") from e


def _strip_code_fence(text: str) -> str:
    # Handle cases like: ```json\n{...}\n``` or just {...}
    cleaned = text.strip()
    if not cleaned.startswith("```"):
        return cleaned

    lines = cleaned.split("\n")
    # Remove first line (```json or ```)
    lines = lines[1:]
    # Remove last line (```)
    if lines and lines[-1].strip() == "```":
        lines = lines[:-1]
    return "\n".join(lines).strip()

