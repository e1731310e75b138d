import pytest
from fastapi.testclient import TestClient

from nutritrack.main import app
from nutritrack.services.chat_service import ChatService
from nutritrack.services.completion_service import CompletionService
from nutritrack.services.dataset_cache import DatasetCache
from tests.fakes import FakeChatModel, FakeFetcher


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.delenv("OPENAI_DATA_FILE_ID", raising=False)
    return "sk-test"


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def llm():
    return FakeChatModel()


@pytest.fixture
def client(fetcher, llm):
    """TestClient wired to fakes; app.state is restored afterwards."""
    cache = DatasetCache(fetcher=fetcher)
    app.state.dataset_cache = cache
    app.state.chat_service = ChatService(cache, completion_factory=lambda key: CompletionService(llm=llm))
    yield TestClient(app)
    app.state.dataset_cache = None
    app.state.chat_service = None
