from langchain_core.messages import HumanMessage, SystemMessage

from config import DATASET_CHAR_LIMIT, INLINE_DATASET_INTRO, NUTRITRACK_SYSTEM_PROMPT
from nutritrack.errors import CONFIGURATION_MESSAGE, EMPTY_REPLY_MESSAGE, PAYLOAD_MESSAGE, UPSTREAM_FALLBACK_MESSAGE
from nutritrack.main import app


BREAKFAST = {"messages": [{"sender": "user", "text": "What should I eat for breakfast?"}]}


def test_missing_api_key_returns_500_without_calls(client, fetcher, llm, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setenv("OPENAI_DATA_FILE_ID", "file-abc")

    response = client.post("/api/chat", json=BREAKFAST)

    assert response.status_code == 500
    assert response.json() == {"error": CONFIGURATION_MESSAGE}
    assert fetcher.calls == []
    assert llm.calls == []


def test_missing_api_key_checked_before_payload(client, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    response = client.post("/api/chat", content=b"{not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 500
    assert response.json() == {"error": CONFIGURATION_MESSAGE}


def test_single_user_message_without_dataset(client, api_key, fetcher, llm):
    response = client.post("/api/chat", json=BREAKFAST)

    assert response.status_code == 200
    assert response.json() == {"reply": "Try oatmeal with berries."}
    assert fetcher.calls == []
    assert len(llm.calls) == 1
    sent = llm.calls[0]
    assert len(sent) == 2
    assert isinstance(sent[0], SystemMessage)
    assert sent[0].content == NUTRITRACK_SYSTEM_PROMPT
    assert isinstance(sent[1], HumanMessage)
    assert sent[1].content == "What should I eat for breakfast?"


def test_inline_dataset_is_capped(client, api_key, llm):
    body = dict(BREAKFAST, dataset="A" * 20_000)

    response = client.post("/api/chat", json=body)

    assert response.status_code == 200
    inline_turn = llm.calls[0][1]
    assert isinstance(inline_turn, SystemMessage)
    assert inline_turn.content == INLINE_DATASET_INTRO + "\n\n" + "A" * DATASET_CHAR_LIMIT
    assert inline_turn.content.count("A") == 15_000


def test_blank_or_non_string_dataset_is_ignored(client, api_key, llm):
    client.post("/api/chat", json=dict(BREAKFAST, dataset="   "))
    client.post("/api/chat", json=dict(BREAKFAST, dataset=["rows"]))

    assert [len(call) for call in llm.calls] == [2, 2]


def test_upstream_rate_limit_is_passed_through(client, api_key, llm):
    class RateLimited(Exception):
        status = 429
        error = {"message": "rate limited"}

    llm.error = RateLimited()

    response = client.post("/api/chat", json=BREAKFAST)

    assert response.status_code == 429
    assert response.json() == {"error": "rate limited"}


def test_empty_reply_is_502(client, api_key, llm):
    llm.reply = "   "

    response = client.post("/api/chat", json=BREAKFAST)

    assert response.status_code == 502
    assert response.json() == {"error": EMPTY_REPLY_MESSAGE}


def test_invalid_json_is_400(client, api_key, llm):
    response = client.post("/api/chat", content=b"{not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json() == {"error": PAYLOAD_MESSAGE}
    assert llm.calls == []


def test_non_object_json_is_400(client, api_key):
    response = client.post("/api/chat", json=[{"sender": "user", "text": "hi"}])

    assert response.status_code == 400
    assert response.json() == {"error": PAYLOAD_MESSAGE}


def test_missing_messages_still_calls_with_persona(client, api_key, llm):
    response = client.post("/api/chat", json={"messages": "not a list"})

    assert response.status_code == 200
    assert len(llm.calls[0]) == 1


def test_reference_dataset_fetched_once_across_requests(client, api_key, fetcher, llm, monkeypatch):
    monkeypatch.setenv("OPENAI_DATA_FILE_ID", "file-abc")
    fetcher.files["file-abc"] = b"food,kcal\nbanana,89\n"

    for _ in range(3):
        assert client.post("/api/chat", json=BREAKFAST).status_code == 200

    assert fetcher.calls == ["file-abc"]
    for sent in llm.calls:
        assert len(sent) == 3
        assert sent[1].content.endswith("banana,89\n")


def test_reference_and_inline_dataset_order(client, api_key, fetcher, llm, monkeypatch):
    monkeypatch.setenv("OPENAI_DATA_FILE_ID", "file-abc")
    fetcher.files["file-abc"] = b"stored rows"

    client.post("/api/chat", json=dict(BREAKFAST, dataset="my rows"))

    sent = llm.calls[0]
    assert [type(m) for m in sent] == [SystemMessage, SystemMessage, SystemMessage, HumanMessage]
    assert sent[1].content.endswith("stored rows")
    assert sent[2].content.endswith("my rows")


def test_reference_dataset_failure_does_not_fail_request(client, api_key, fetcher, llm, monkeypatch):
    monkeypatch.setenv("OPENAI_DATA_FILE_ID", "file-missing")
    fetcher.files["file-missing"] = ConnectionError("404 not found")

    response = client.post("/api/chat", json=BREAKFAST)

    assert response.status_code == 200
    assert len(llm.calls[0]) == 2


def test_health_reports_configuration(client, api_key):
    data = client.get("/health").json()

    assert data["status"] == "healthy"
    assert data["chat_service"] is True
    assert data["api_key_configured"] is True
    assert data["dataset_configured"] is False


def test_deeply_nested_body_is_400(client, api_key, llm):
    body = b"[" * 100_000 + b"]" * 100_000

    response = client.post("/api/chat", content=body, headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json() == {"error": PAYLOAD_MESSAGE}
    assert llm.calls == []


def test_unexpected_failure_is_structured_500(client, api_key):
    def broken_factory(key):
        raise RuntimeError("factory exploded")

    app.state.chat_service.completion_factory = broken_factory

    response = client.post("/api/chat", json=BREAKFAST)

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("application/json")
    assert response.json() == {"error": UPSTREAM_FALLBACK_MESSAGE}
