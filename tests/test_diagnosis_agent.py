"""
Tests for the diagnosis agent pipeline.
"""
import asyncio
import base64

import pytest

from agents.diagnosis import DiagnosisAgent
from agents.diagnosis.actions import build_suggestion, is_actionable, quick_plan_title
from agents.diagnosis.models import (
    DiagnosticRequest, DiagnosticResult, ObservationKind, PayloadKind, RequestContext, Severity
)
from core.exceptions import ConfigurationError, InputError


def _text_request(text="reddish stem weed with oval leaves", **kwargs):
    return DiagnosticRequest(payload_kind=PayloadKind.TEXT, payload=text, **kwargs)


class TestPipeline:

    def test_image_diagnosis_succeeds(self, make_client, weed_reply, sample_image_bytes):
        client, factory = make_client({"model-a": weed_reply()})
        agent = DiagnosisAgent(client=client)
        request = DiagnosticRequest(payload_kind=PayloadKind.IMAGE, payload=sample_image_bytes)

        response = asyncio.run(agent.diagnose(request))

        assert response.success is True
        assert response.data.entity_name == "Pigweed"
        assert response.data.confidence == 82
        assert response.data.severity == Severity.MEDIUM
        assert response.suggestion.text == "Remove Pigweed - Pull seedlings before they set seed"
        assert response.suggestion.plan_title == "Pigweed"

        [(_, messages)] = factory.calls
        image_part = messages[0].content[1]
        assert image_part["image_url"]["url"].startswith("data:image/png;base64,")

    def test_falls_through_to_later_model(self, make_client, weed_reply):
        client, factory = make_client({
            "model-a": RuntimeError("quota"),
            "model-b": RuntimeError("not found"),
            "model-c": weed_reply(),
        })
        agent = DiagnosisAgent(client=client)

        response = asyncio.run(agent.diagnose(_text_request()))

        assert response.success is True
        assert factory.attempted == ["model-a", "model-b", "model-c"]

    def test_all_models_failing_gives_unavailable_sentinel(self, make_client):
        client, _ = make_client({})
        agent = DiagnosisAgent(client=client)

        response = asyncio.run(agent.diagnose(_text_request()))

        assert response.success is False
        assert response.suggestion is None
        assert response.data.entity_name == "Service Unavailable"
        assert response.data.confidence == 0
        assert response.data.severity == Severity.UNKNOWN
        assert response.data.causes
        assert "model-a" in response.data.causes[0]

    def test_unreadable_reply_gives_analysis_error(self, make_client):
        client, _ = make_client({"model-a": "I think this is a weed of some kind."})
        agent = DiagnosisAgent(client=client)

        response = asyncio.run(agent.diagnose(_text_request()))

        assert response.success is False
        assert response.data.entity_name == "Analysis Error"
        assert response.data.confidence == 0
        assert response.data.causes

    def test_bad_input_propagates(self, make_client):
        client, factory = make_client({"model-a": "unused"})
        agent = DiagnosisAgent(client=client)

        with pytest.raises(InputError):
            asyncio.run(agent.diagnose(_text_request("   ")))
        assert factory.attempted == []

    def test_invalid_base64_image_propagates(self, make_client):
        client, _ = make_client({"model-a": "unused"})
        agent = DiagnosisAgent(client=client)
        request = DiagnosticRequest(payload_kind=PayloadKind.IMAGE, payload="data:image/png;base64,@@@")

        with pytest.raises(InputError):
            asyncio.run(agent.diagnose(request))

    def test_missing_key_propagates(self, make_client):
        client, _ = make_client({"model-a": "unused"}, api_key=None)
        agent = DiagnosisAgent(client=client)

        with pytest.raises(ConfigurationError):
            asyncio.run(agent.diagnose(_text_request()))

    def test_data_uri_image_is_accepted(self, make_client, weed_reply, sample_image_bytes):
        client, factory = make_client({"model-a": weed_reply()})
        agent = DiagnosisAgent(client=client)
        uri = "data:image/png;base64," + base64.b64encode(sample_image_bytes).decode("ascii")

        response = asyncio.run(agent.diagnose(DiagnosticRequest(payload_kind=PayloadKind.IMAGE, payload=uri)))

        assert response.success is True

    def test_context_reaches_the_instruction(self, make_client, weed_reply):
        client, factory = make_client({"model-a": weed_reply()})
        agent = DiagnosisAgent(client=client)
        request = _text_request(context=RequestContext(crop_hint="okra"))

        asyncio.run(agent.diagnose(request))

        [(_, messages)] = factory.calls
        assert "okra" in messages[0].content


class TestCaching:

    def test_repeat_request_is_served_from_cache(self, make_client, weed_reply, cache):
        client, factory = make_client({"model-a": weed_reply()})
        agent = DiagnosisAgent(client=client, cache=cache)

        first = asyncio.run(agent.execute(_text_request()))
        second = asyncio.run(agent.execute(_text_request()))

        assert first == second
        assert factory.attempted == ["model-a"]

    def test_fallbacks_are_not_cached(self, make_client, cache):
        client, factory = make_client({"model-a": "no json here"}, models=["model-a"])
        agent = DiagnosisAgent(client=client, cache=cache)

        asyncio.run(agent.execute(_text_request()))
        asyncio.run(agent.execute(_text_request()))

        assert factory.attempted == ["model-a", "model-a"]
        assert len(cache) == 0

    def test_different_context_is_a_different_entry(self, make_client, weed_reply):
        client, _ = make_client({"model-a": weed_reply()})
        agent = DiagnosisAgent(client=client)

        plain = agent.get_cache_key(_text_request())
        hinted = agent.get_cache_key(_text_request(context=RequestContext(crop_hint="okra")))

        assert plain != hinted


class TestSuggestion:

    def test_affected_crops_come_from_crop_plans(self, make_client, weed_reply, memory_store):
        memory_store.create("Tomato Plot", {"area": "0.1 acres"})
        memory_store.create("Rose Garden")
        client, _ = make_client({"model-a": weed_reply(name="Bermuda Grass")})
        agent = DiagnosisAgent(client=client)

        response = asyncio.run(agent.diagnose(_text_request(), store=memory_store))

        assert response.suggestion.text.startswith("Remove Bermuda Grass - ")
        assert response.suggestion.plan_title == "Bermuda"
        assert response.suggestion.affected_crops == ["tomato"]

    def test_pests_are_not_matched_against_weed_table(self, make_client, weed_reply, memory_store):
        memory_store.create("Tomato Plot")
        client, _ = make_client({"model-a": weed_reply(name="Bermuda Grass")})
        agent = DiagnosisAgent(client=client)

        response = asyncio.run(agent.diagnose(_text_request(observation=ObservationKind.PEST), store=memory_store))

        assert response.suggestion.text.startswith("Control Bermuda Grass")
        assert response.suggestion.affected_crops == []

    def test_nothing_found_has_no_suggestion(self, make_client, weed_reply):
        client, _ = make_client({"model-a": weed_reply(name="No weed detected", severity="None")})
        agent = DiagnosisAgent(client=client)

        response = asyncio.run(agent.diagnose(_text_request()))

        assert response.success is True
        assert response.suggestion is None

    def test_weed_crop_table(self, make_client):
        client, _ = make_client({})
        table = DiagnosisAgent(client=client).get_weed_crop_table()

        assert table["version"] == "1"
        assert "tomato" in table["weeds"]["bermuda grass"]


class TestActions:

    def _result(self, **fields):
        base = dict(entity_name="Aphid", confidence=70, severity=Severity.LOW, treatment="")
        base.update(fields)
        return DiagnosticResult(**base)

    def test_fallback_action_without_treatment(self):
        assert build_suggestion(self._result(), ObservationKind.PEST) == \
            "Control Aphid - Inspect plants and apply recommended control"

    def test_disease_verb(self):
        result = self._result(entity_name="Early Blight", treatment="Spray copper fungicide. Repeat weekly.")
        assert build_suggestion(result, ObservationKind.DISEASE) == "Treat Early Blight - Spray copper fungicide"

    @pytest.mark.parametrize("suggestion,title", [
        ("Remove Pigweed - Pull it", "Pigweed"),
        ("Remove", "My Plan"),
        ("", "My Plan"),
    ])
    def test_quick_plan_title(self, suggestion, title):
        assert quick_plan_title(suggestion) == title

    def test_unknown_zero_confidence_is_not_actionable(self):
        assert not is_actionable(self._result(confidence=0, severity=Severity.UNKNOWN))

    def test_unknown_with_confidence_is_actionable(self):
        assert is_actionable(self._result(confidence=40, severity=Severity.UNKNOWN))
