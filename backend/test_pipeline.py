"""
Pipeline orchestration tests.

Scenarios:
1. Happy path: classification, context and reply in one envelope
2. Unknown token: classification still runs, envelope reports the error
3. Synthesis failure: apology text, success stays true
4. Missing credentials: 500 before any backend call
"""
from ai.generation import GenerationResult
from ai.synthesizer import APOLOGY_MESSAGE
from app.agent.pipeline import INTERNAL_ERROR_MESSAGE, INVALID_TOKEN_MESSAGE, PipelineOrchestrator
from app.core.exceptions import ConfigError
from conftest import CUSTOMER_PHONE, MERCHANT_TOKEN, FakeGenerationClient


def make_orchestrator(db, settings, client):
    return PipelineOrchestrator(db, settings, client_factory=lambda s: client)


def test_product_question_end_to_end(db, settings, merchant):
    client = FakeGenerationClient(
        classification='{"intent": "product_info", "targetId": "p1"}',
        reply="The Widget costs ₹100.",
    )
    result = make_orchestrator(db, settings, client).run("how much is the widget?", MERCHANT_TOKEN)

    assert result.success is True
    assert result.status_code == 200
    assert result.data.response == "The Widget costs ₹100."
    assert result.data.intent == "product_info"
    assert result.data.targetId == "p1"
    assert result.data.context.productsCount == 2
    assert result.data.context.ordersCount == 3
    assert result.data.context.businessName == "Acme Store"

    assert len(client.classification_calls) == 1
    assert len(client.reply_calls) == 1
    reply_prompt, reply_params = client.reply_calls[0]
    assert "Widget" in reply_prompt
    assert "how much is the widget?" in reply_prompt
    assert reply_params.system_prompt


def test_envelope_body_shape(db, settings, merchant):
    client = FakeGenerationClient(classification='{"intent": "view_products"}')
    body = make_orchestrator(db, settings, client).run("menu?", MERCHANT_TOKEN).to_body()

    assert body["success"] is True
    assert "error" not in body
    assert "status_code" not in body
    assert "targetId" not in body["data"]
    assert set(body["data"]["context"]) == {"productsCount", "ordersCount", "businessName"}


def test_unknown_token_reports_invalid_token(db, settings, merchant):
    client = FakeGenerationClient(classification='{"intent": "view_products"}')
    result = make_orchestrator(db, settings, client).run("menu?", "tok_wrong")

    assert result.success is False
    assert result.status_code == 401
    assert result.error == INVALID_TOKEN_MESSAGE
    assert result.data is None
    # Classification runs before the context lookup; no reply is generated
    assert len(client.classification_calls) == 1
    assert client.reply_calls == []


def test_synthesis_failure_returns_apology(db, settings, merchant):
    client = FakeGenerationClient(
        classification='{"intent": "all_orders_info"}',
        reply=GenerationResult.failed("429 rate limited"),
    )
    result = make_orchestrator(db, settings, client).run("my orders", MERCHANT_TOKEN)

    assert result.success is True
    assert result.data.response == APOLOGY_MESSAGE
    assert result.data.intent == "all_orders_info"


def test_empty_reply_text_returns_apology(db, settings, merchant):
    client = FakeGenerationClient(reply="   ")
    result = make_orchestrator(db, settings, client).run("hello", MERCHANT_TOKEN)
    assert result.data.response == APOLOGY_MESSAGE


def test_classification_failure_still_answers(db, settings, merchant):
    client = FakeGenerationClient(classification="no idea", reply="Hi! How can I help?")
    result = make_orchestrator(db, settings, client).run("yo", MERCHANT_TOKEN)

    assert result.success is True
    assert result.data.intent == "general_chat"
    assert result.data.response == "Hi! How can I help?"


def test_missing_configuration_is_500_without_backend_calls(db, settings, merchant):
    def factory(s):
        raise ConfigError("Groq API configuration is missing")

    result = PipelineOrchestrator(db, settings, client_factory=factory).run("hello", MERCHANT_TOKEN)

    assert result.success is False
    assert result.status_code == 500
    assert result.error == "Groq API configuration is missing"


def test_missing_groq_key_through_real_factory(db, settings, merchant):
    settings.GROQ_API_KEY = None
    result = PipelineOrchestrator(db, settings).run("hello", MERCHANT_TOKEN)
    assert result.status_code == 500
    assert result.error == "Groq API configuration is missing"


def test_unexpected_error_is_generic_500(db, settings, merchant, monkeypatch):
    client = FakeGenerationClient()

    def explode(*args, **kwargs):
        raise KeyError("boom")

    monkeypatch.setattr("app.agent.pipeline.route_prompt", explode)
    result = make_orchestrator(db, settings, client).run("hello", MERCHANT_TOKEN)

    assert result.success is False
    assert result.status_code == 500
    assert result.error == INTERNAL_ERROR_MESSAGE


def test_business_name_defaults_to_unknown(db, settings, merchant):
    merchant.business_info = None
    db.commit()

    result = make_orchestrator(db, settings, FakeGenerationClient()).run("hello", MERCHANT_TOKEN)
    assert result.data.context.businessName == "Unknown"


def test_orders_unscoped_by_default(db, settings, merchant):
    result = make_orchestrator(db, settings, FakeGenerationClient()).run(
        "my orders", MERCHANT_TOKEN, customer_phone=CUSTOMER_PHONE
    )
    assert result.data.context.ordersCount == 3


def test_orders_scoped_to_customer_when_enabled(db, settings, merchant):
    settings.SCOPE_ORDERS_TO_CUSTOMER = True
    result = make_orchestrator(db, settings, FakeGenerationClient()).run(
        "my orders", MERCHANT_TOKEN, customer_phone=CUSTOMER_PHONE
    )
    assert result.data.context.ordersCount == 2


def test_malformed_business_info_still_answers(db, settings, merchant):
    merchant.business_info = "Acme Store"
    db.commit()

    result = make_orchestrator(db, settings, FakeGenerationClient()).run("hello", MERCHANT_TOKEN)

    assert result.success is True
    assert result.data.context.businessName == "Unknown"
