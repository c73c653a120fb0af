from fastapi.testclient import TestClient

from clean_forward.main import app

client = TestClient(app)


def test_health() -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_clean_endpoint() -> None:
    response = client.post("/clean", json={"body": "Thanks!\n\nAlice wrote:\n> old"})
    assert response.status_code == 200
    assert response.json() == {"body": "Thanks!", "html": None}


def test_clean_endpoint_rejects_invalid_payloads() -> None:
    assert client.post("/clean", content=b"not json").status_code == 400
    assert client.post("/clean", json=["a", "b"]).status_code == 400
    assert client.post("/clean", json={"body": 7}).status_code == 400


def test_clean_forward_endpoint() -> None:
    payload = {
        "messages": [
            {"from": "Alice <alice@example.com>", "date": "2026-10-17T09:00:00Z", "subject": "Hi", "body": "Hello"},
        ]
    }
    response = client.post("/threads/clean-forward", json=payload)
    assert response.status_code == 200
    body = response.json()
    assert body["subject"] == "FWD: Hi"
    assert body["messages"][0]["body"] == "Hello"


def test_clean_forward_endpoint_rejects_bad_messages() -> None:
    assert client.post("/threads/clean-forward", json={"messages": []}).status_code == 400
    bad_date = {"messages": [{"from": "a@x.com", "date": "soon"}]}
    assert client.post("/threads/clean-forward", json=bad_date).status_code == 400
    bad_attachments = {"messages": [{"from": "a@x.com", "date": "2026-10-18T08:00:00Z", "attachments": 5}]}
    assert client.post("/threads/clean-forward", json=bad_attachments).status_code == 400
