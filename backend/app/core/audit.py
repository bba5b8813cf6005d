"""
Structured logging at pipeline boundaries.

Every message that enters the pipeline is logged at a fixed set of stages
(received, classified, context_loaded, synthesized, delivered, failed) as one
JSON line on the "audit" logger, so a single message can be followed end to
end without scattering prints through the control flow.

LOGGING SENSITIVE DATA: access tokens are masked to an 8-character prefix and
message bodies are never logged, only their length.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

# Separate logger for audit events (can be shipped to centralized logging)
audit_logger = logging.getLogger("audit")

STAGES = ("received", "classified", "context_loaded", "synthesized", "delivered", "failed")


def mask_token(token: Optional[str]) -> Optional[str]:
    if not token:
        return None
    return f"{token[:8]}..."


class PipelineAudit:
    """Central audit logging for pipeline stages."""

    @staticmethod
    def log_stage(stage: str, **fields: Any) -> None:
        """
        Log one pipeline stage.

        Usage:
            PipelineAudit.log_stage("classified", intent="view_products", target_id=None)
            PipelineAudit.log_stage("failed", reason="Invalid API token")
        """
        if stage not in STAGES:
            raise ValueError(f"Unknown pipeline stage: {stage}")

        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_type": f"pipeline.{stage}",
        }
        log_entry.update({k: v for k, v in fields.items() if v is not None})

        if stage == "failed":
            audit_logger.warning(json.dumps(log_entry, default=str))
        else:
            audit_logger.info(json.dumps(log_entry, default=str))
