"""
Pytest fixtures for the FieldScan backend tests.
"""
import json
import os
import tempfile
from io import BytesIO

import pytest

# Set test environment variables BEFORE importing app modules
os.environ["GEMINI_API_KEY"] = "test-key"
os.environ["ENVIRONMENT"] = "testing"
os.environ["CLASSIFIER_MODELS"] = "model-a,model-b,model-c"
os.environ["STORE_PATH"] = os.path.join(tempfile.mkdtemp(), "store.json")

from langchain_core.messages import AIMessage

from agents.classifier import ClassificationClient
from core import config
from core.cache import CacheManager
from storage.backends import MemoryBackend
from storage.store import TaskPlanStore


class FakeChatModel:
    """Stands in for ChatGoogleGenerativeAI; replays a canned outcome"""

    def __init__(self, name, outcome, calls):
        self.name = name
        self.outcome = outcome
        self.calls = calls

    async def ainvoke(self, messages):
        self.calls.append((self.name, messages))
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return AIMessage(content=self.outcome)


class FakeModelFactory:
    """Builds FakeChatModels from a {model name: reply or exception} map"""

    def __init__(self, outcomes):
        self.outcomes = outcomes
        self.calls = []

    def __call__(self, model_name):
        outcome = self.outcomes.get(model_name, RuntimeError(f"unknown model {model_name}"))
        return FakeChatModel(model_name, outcome, self.calls)

    @property
    def attempted(self):
        return [name for name, _ in self.calls]


def _weed_reply(**overrides):
    record = {
        "name": "Pigweed",
        "confidence": 82,
        "severity": "Medium",
        "description": "- Broadleaf weed\n- Reddish taproot",
        "treatment": "Pull seedlings before they set seed. Apply mulch.",
        "prevention": "1. Mulch beds\n2. Rotate crops",
        "seasonalData": [{"month": "Jan", "occurrence": 10}, {"month": "Jun", "occurrence": 90}],
        "causes": ["Bare soil", "* Warm weather"],
    }
    record.update(overrides)
    return "Here is the result:\n```json\n" + json.dumps(record) + "\n```\nThanks!"


@pytest.fixture
def weed_reply():
    """Classifier reply wrapping a weed record in prose and a code fence"""
    return _weed_reply


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop cached settings so monkeypatched env vars take effect."""
    config.get_settings.cache_clear()
    yield
    config.get_settings.cache_clear()


@pytest.fixture
def make_client():
    def _make(outcomes, api_key="test-key", models=("model-a", "model-b", "model-c")):
        factory = FakeModelFactory(outcomes)
        client = ClassificationClient(api_key=api_key, model_factory=factory, default_models=models)
        return client, factory
    return _make


@pytest.fixture
def memory_store():
    return TaskPlanStore(MemoryBackend())


@pytest.fixture
def cache():
    return CacheManager(max_size=16, ttl=60)


@pytest.fixture
def sample_image_bytes():
    """Generate a minimal valid PNG image for testing."""
    from PIL import Image

    img = Image.new("RGB", (64, 64), color="green")
    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
