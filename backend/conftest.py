"""
Shared test fixtures.

- In-memory SQLite (StaticPool, so every session sees the same data)
- One seeded merchant with a small catalog and order history
- Scripted generation backend and a recording WhatsApp messenger
"""
import sys
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent))

from ai.generation import GenerationClient, GenerationResult  # noqa: E402
from app.core.config import Settings  # noqa: E402
from app.db.init_db import init_db  # noqa: E402
from app.models import Customer, Merchant, Order, Product  # noqa: E402

MERCHANT_TOKEN = "tok_merchant_123456"
PHONE_NUMBER_ID = "PNID-1001"
CUSTOMER_PHONE = "919876543210"


class FakeGenerationClient(GenerationClient):
    """Scripted backend: one answer for classification, one for replies."""

    def __init__(self, classification='{"intent": "general_chat"}', reply="Hello from the shop!"):
        self.classification = classification
        self.reply = reply
        self.calls = []

    @staticmethod
    def is_classification(prompt: str) -> bool:
        return prompt.startswith("You are an intent classifier")

    def generate(self, prompt, params=None):
        self.calls.append((prompt, params))
        answer = self.classification if self.is_classification(prompt) else self.reply
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, GenerationResult):
            return answer
        return GenerationResult(success=True, result=answer)

    @property
    def classification_calls(self):
        return [c for c in self.calls if self.is_classification(c[0])]

    @property
    def reply_calls(self):
        return [c for c in self.calls if not self.is_classification(c[0])]


class FakeMessenger:
    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)

    def send_text_message(self, phone_number_id, access_token, to, body):
        if to in self.fail_for:
            from app.core.exceptions import DeliveryError
            raise DeliveryError(f"recipient {to} unreachable")
        self.sent.append({"phone_number_id": phone_number_id, "to": to, "body": body})
        return {"messages": [{"id": f"wamid.out.{len(self.sent)}"}]}


class FakeResponse:
    """Minimal requests.Response stand-in; body=None means the body is not JSON."""

    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else str(body)

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._body is None:
            raise ValueError("No JSON object could be decoded")
        return self._body


@pytest.fixture
def settings():
    s = Settings()
    s.AI_PROVIDER = "groq"
    s.GROQ_API_KEY = "test-groq-key"
    s.VERIFY_TOKEN = "verify-me"
    s.WEBHOOK_DEDUPLICATE = True
    s.SCOPE_ORDERS_TO_CUSTOMER = False
    return s


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def merchant(db):
    """Merchant with two products, one customer and three orders."""
    merchant = Merchant(
        id="m1",
        api_token=MERCHANT_TOKEN,
        phone_number_id=PHONE_NUMBER_ID,
        whatsapp_access_token="wa-token",
        upi_number="shop@upi",
        website="https://shop.example",
        business_info={
            "name": "Acme Store",
            "category": "Retail",
            "description": "Everyday goods",
            "address": "12 MG Road, Pune",
            "phoneNumber": "+91 20 5555 0000",
        },
    )
    db.add(merchant)
    db.add_all([
        Product(id="p1", merchant_id="m1", name="Widget", price=Decimal("100"),
                description="A useful widget", created_at=datetime(2024, 1, 1)),
        Product(id="p2", merchant_id="m1", name="Gadget", price=Decimal("250.50"),
                description=None, created_at=datetime(2024, 1, 2)),
    ])
    db.add_all([
        Customer(id="c1", phone=CUSTOMER_PHONE),
        Customer(id="c2", phone="911111111111"),
    ])
    db.add_all([
        Order(id="o1", customer_id="c1", merchant_id="m1", product_id="p1", amount=Decimal("100"),
              status="CONFIRMED", txn_id="TXN-1", paid_at=datetime(2024, 2, 1, 10),
              created_at=datetime(2024, 2, 1, 9)),
        Order(id="o2", customer_id="c1", merchant_id="m1", product_id="p2", amount=Decimal("250.50"),
              status="PENDING", created_at=datetime(2024, 3, 1, 9)),
        Order(id="o3", customer_id="c2", merchant_id="m1", product_id="p1", amount=Decimal("100"),
              status="FAILED", created_at=datetime(2024, 1, 15, 9)),
    ])
    db.commit()
    return merchant


@pytest.fixture
def fake_client():
    return FakeGenerationClient()


@pytest.fixture
def messenger():
    return FakeMessenger()
