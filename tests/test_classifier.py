"""
Tests for the classification client's ordered model fallback.
"""
import asyncio

import pytest

from agents.classifier import build_messages
from agents.payloads import NormalizedPayload, PayloadKind
from core.exceptions import ClassificationUnavailable, ConfigurationError

TEXT_PAYLOAD = NormalizedPayload(kind=PayloadKind.TEXT, data="holes in cabbage leaves")
IMAGE_PAYLOAD = NormalizedPayload(kind=PayloadKind.IMAGE, data="aGVsbG8=", mime_type="image/png")


def test_first_success_short_circuits(make_client):
    client, factory = make_client({"model-a": "answer A", "model-b": "answer B"})

    text = asyncio.run(client.classify(TEXT_PAYLOAD, "instruction"))

    assert text == "answer A"
    assert factory.attempted == ["model-a"]


def test_fallback_order_is_respected(make_client):
    client, factory = make_client({
        "model-a": TimeoutError("timed out"),
        "model-b": ValueError("400 bad request"),
        "model-c": "answer C",
    })

    text = asyncio.run(client.classify(TEXT_PAYLOAD, "instruction"))

    assert text == "answer C"
    assert factory.attempted == ["model-a", "model-b", "model-c"]


def test_explicit_candidates_override_defaults(make_client):
    client, factory = make_client({"special": "ok"})

    assert asyncio.run(client.classify(TEXT_PAYLOAD, "i", ["special"])) == "ok"
    assert factory.attempted == ["special"]


def test_empty_reply_counts_as_failure(make_client):
    client, factory = make_client({"model-a": "   ", "model-b": "real answer"})

    assert asyncio.run(client.classify(TEXT_PAYLOAD, "i")) == "real answer"
    assert factory.attempted == ["model-a", "model-b"]


def test_all_candidates_fail(make_client):
    last = RuntimeError("quota exceeded")
    client, factory = make_client({
        "model-a": RuntimeError("boom"),
        "model-b": RuntimeError("boom"),
        "model-c": last,
    })

    with pytest.raises(ClassificationUnavailable) as exc_info:
        asyncio.run(client.classify(TEXT_PAYLOAD, "i"))

    assert exc_info.value.last_error is last
    assert exc_info.value.attempted == ["model-a", "model-b", "model-c"]
    # Each model is tried exactly once
    assert factory.attempted == ["model-a", "model-b", "model-c"]


def test_empty_candidates_is_configuration_error(make_client):
    client, factory = make_client({"model-a": "ok"})

    with pytest.raises(ConfigurationError):
        asyncio.run(client.classify(TEXT_PAYLOAD, "i", []))
    assert factory.attempted == []


def test_missing_api_key_is_configuration_error(make_client):
    client, factory = make_client({"model-a": "ok"}, api_key=None)

    with pytest.raises(ConfigurationError):
        asyncio.run(client.classify(TEXT_PAYLOAD, "i"))
    assert factory.attempted == []


def test_api_key_is_never_logged(make_client, caplog):
    client, _ = make_client({"model-a": RuntimeError("invalid key test-key")}, models=["model-a"])

    with pytest.raises(ClassificationUnavailable) as exc_info:
        asyncio.run(client.classify(TEXT_PAYLOAD, "i"))

    assert "test-key" not in caplog.text
    assert "test-key" not in str(exc_info.value)
    assert "model-a" in caplog.text


def test_cancellation_is_not_swallowed(make_client):
    client, factory = make_client({"model-a": asyncio.CancelledError(), "model-b": "ok"})

    with pytest.raises(asyncio.CancelledError):
        asyncio.run(client.classify(TEXT_PAYLOAD, "i"))
    assert factory.attempted == ["model-a"]


def test_list_content_reply_is_flattened(make_client):
    client, _ = make_client({"model-a": [{"type": "text", "text": "part one "}, {"type": "text", "text": "part two"}]})

    assert asyncio.run(client.classify(TEXT_PAYLOAD, "i")) == "part one part two"


class TestBuildMessages:

    def test_image_payload_is_inline_media(self):
        [message] = build_messages(IMAGE_PAYLOAD, "identify the weed")
        text_part, image_part = message.content
        assert text_part == {"type": "text", "text": "identify the weed"}
        assert image_part["image_url"]["url"] == "data:image/png;base64,aGVsbG8="

    def test_text_payload_follows_instruction(self):
        [message] = build_messages(TEXT_PAYLOAD, "identify the pest")
        assert message.content.startswith("identify the pest")
        assert message.content.endswith("Observation: holes in cabbage leaves")

    def test_no_payload_sends_instruction_only(self):
        [message] = build_messages(None, "soil report please")
        assert message.content == "soil report please"
