"""FastAPI dependencies: DB session, settings, bearer token and pipeline wiring."""
from typing import Generator, Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ai import build_generation_client
from ai.generation import ClientFactory
from app.agent.pipeline import PipelineOrchestrator
from app.core.config import Settings, get_settings
from app.db.session import SessionLocal
from app.whatsapp.ingestor import WebhookIngestor

security = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_access_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """Bearer token from the Authorization header, or None. The route decides the 401."""
    if credentials is None or not credentials.credentials:
        return None
    return credentials.credentials.strip() or None


def get_client_factory() -> ClientFactory:
    return build_generation_client


def get_orchestrator(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    client_factory: ClientFactory = Depends(get_client_factory),
) -> PipelineOrchestrator:
    return PipelineOrchestrator(db, settings, client_factory)


def get_ingestor(
    settings: Settings = Depends(get_settings),
    client_factory: ClientFactory = Depends(get_client_factory),
) -> WebhookIngestor:
    # Sessions are opened per message inside the ingestor, not per request
    return WebhookIngestor(settings, SessionLocal, client_factory=client_factory)
