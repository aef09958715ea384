"""End-to-end tests of the HTTP surface with fake providers."""

from __future__ import annotations

import base64

import httpx
import pytest
from fastapi.testclient import TestClient

from huddle_engine.api.app import create_app
from huddle_engine.generation.frames import FrameDecoder, MetaFrame, TokenFrame
from huddle_engine.ocr.vision_client import VisionOCRClient

from fakes import FakeEmbedder, FakeLLM


def vision_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"responses": [{"textAnnotations": [{"description": "Free Friday?"}]}]})


def build_client(settings, embedder=None, llm=None) -> TestClient:
    app = create_app(
        settings,
        embedder=embedder or FakeEmbedder(),
        llm=llm or FakeLLM(),
        ocr_client=VisionOCRClient(api_key="vision-key", transport=httpx.MockTransport(vision_handler)),
    )
    return TestClient(app)


def auth_headers(client: TestClient, api_key: str = "key-1") -> dict[str, str]:
    response = client.post("/auth/token", json={"api_key": api_key})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def save_payload(**overrides) -> dict:
    payload = {
        "screenshot_text": "Are you free for coffee on Friday?",
        "user_draft": "yeah coffee works",
        "generated_reply": "Friday works, coffee it is!",
        "selected_tone": "none",
    }
    payload.update(overrides)
    return payload


def decode(body: bytes):
    decoder = FrameDecoder(strict=True)
    return decoder.feed(body) + decoder.flush()


def test_health_is_public(settings):
    with build_client(settings) as client:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "interaction_count": 0, "chunk_count": 0}
        assert "X-Request-ID" in response.headers


def test_invalid_api_key_rejected(settings):
    with build_client(settings) as client:
        assert client.post("/auth/token", json={"api_key": "wrong"}).status_code == 401


def test_auth_not_configured(settings):
    settings.api_keys = ""
    with build_client(settings) as client:
        assert client.post("/auth/token", json={"api_key": "key-1"}).status_code == 503


def test_protected_routes_require_token(settings):
    with build_client(settings) as client:
        assert client.post("/retrieve", json={"query": "x"}).status_code in (401, 403)
        bad = {"Authorization": "Bearer not-a-jwt"}
        assert client.post("/retrieve", json={"query": "x"}, headers=bad).status_code == 401


def test_save_list_and_update_interactions(settings):
    with build_client(settings) as client:
        headers = auth_headers(client)
        saved = client.post("/interactions", json=save_payload(), headers=headers)
        assert saved.status_code == 201
        body = saved.json()
        assert body["id"]
        assert body["generated_reply"] == "Friday works, coffee it is!"

        listing = client.get("/interactions", headers=headers).json()
        assert [i["id"] for i in listing["items"]] == [body["id"]]
        assert listing["page_size"] == settings.interaction_page_size
        assert listing["has_more"] is False

        patch = client.patch(
            f"/interactions/{body['id']}/final-reply",
            json={"final_reply": "Friday at 10?", "selected_tone": "casual"},
            headers=headers,
        )
        assert patch.json() == {"updated": True}

        other_owner = auth_headers(client, "key-2")
        denied = client.patch(
            f"/interactions/{body['id']}/final-reply",
            json={"final_reply": "mine now"},
            headers=other_owner,
        )
        assert denied.status_code == 404
        assert client.get("/interactions", headers=other_owner).json()["items"] == []


def test_save_rejects_empty_generated_reply(settings):
    with build_client(settings) as client:
        response = client.post("/interactions", json=save_payload(generated_reply=""), headers=auth_headers(client))
        assert response.status_code == 422


def test_saved_interaction_is_retrievable(settings):
    with build_client(settings) as client:
        headers = auth_headers(client)
        client.post("/interactions", json=save_payload(), headers=headers)

        response = client.post("/retrieve", json={"query": "coffee?"}, headers=headers)

        interactions = response.json()["interactions"]
        assert len(interactions) == 1
        assert interactions[0]["similarity"] >= settings.retrieval_match_threshold


def test_save_survives_embedding_failure(settings):
    with build_client(settings, embedder=FakeEmbedder(fail=True)) as client:
        headers = auth_headers(client)
        assert client.post("/interactions", json=save_payload(), headers=headers).status_code == 201

        response = client.post("/retrieve", json={"query": "coffee Friday"}, headers=headers)

        interactions = response.json()["interactions"]
        assert len(interactions) == 1
        assert interactions[0]["similarity"] == settings.fallback_similarity


def test_reply_stream_emits_meta_then_tokens(settings):
    with build_client(settings) as client:
        headers = auth_headers(client)
        response = client.post(
            "/reply/stream",
            json={"screenshot_text": "", "user_draft": "Hey, want to grab coffee?"},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/x-ndjson")
        frames = decode(response.content)
        assert isinstance(frames[0], MetaFrame)
        assert all(isinstance(f, TokenFrame) for f in frames[1:])
        assert "".join(f.text for f in frames[1:]) == "Sounds good, see you there!"


def test_reply_stream_unconfigured_llm_is_503(settings):
    llm = FakeLLM()
    llm.configured = False
    with build_client(settings, llm=llm) as client:
        response = client.post("/reply/stream", json={"user_draft": "d"}, headers=auth_headers(client))
        assert response.status_code == 503


def test_tone_endpoint(settings):
    with build_client(settings, llm=FakeLLM(reply="Hey there!")) as client:
        headers = auth_headers(client)
        toned = client.post("/tone", json={"text": "Hello.", "tone": "friendly"}, headers=headers).json()
        untouched = client.post("/tone", json={"text": "Hello.", "tone": "none"}, headers=headers).json()

        assert toned == {"reply": "Hey there!", "adjusted": True}
        assert untouched == {"reply": "Hello.", "adjusted": False}


def test_documents_ingest_and_retrieve(settings):
    with build_client(settings) as client:
        headers = auth_headers(client)
        ingested = client.post(
            "/documents",
            json={"document_name": "playbook.txt", "text": "Suggest coffee before noon."},
            headers=headers,
        )
        assert ingested.json() == {"document_name": "playbook.txt", "chunks_created": 1, "status": "indexed"}

        documents = client.post("/retrieve", json={"query": "coffee"}, headers=headers).json()["documents"]
        assert [d["document_name"] for d in documents] == ["playbook.txt"]


def test_documents_ingest_embedding_failure_is_422(settings):
    with build_client(settings, embedder=FakeEmbedder(fail=True)) as client:
        response = client.post(
            "/documents",
            json={"document_name": "playbook.txt", "text": "text"},
            headers=auth_headers(client),
        )
        assert response.status_code == 422


def test_ocr_endpoint(settings):
    with build_client(settings) as client:
        image = base64.b64encode(b"fake-png").decode()
        response = client.post("/ocr", json={"image_data": image}, headers=auth_headers(client))

        body = response.json()
        assert body["success"] is True
        assert body["text"] == "Free Friday?"


def test_style_analyze_then_confirm(settings):
    with build_client(settings) as client:
        headers = auth_headers(client)
        client.post("/interactions", json=save_payload(user_draft="coffee soon, bro."), headers=headers)

        analysis = client.post("/style/analyze", headers=headers).json()
        assert analysis["huddle_count"] == 1
        assert analysis["address_terms"] == ["bro"]

        confirmed = client.put("/style", json=analysis, headers=headers)
        assert confirmed.status_code == 200
        assert confirmed.json()["common_topics"] == analysis["common_topics"]

        response = client.post("/reply/stream", json={"user_draft": "d"}, headers=headers)
        assert decode(response.content)[0].slang_address_terms == ["bro"]


@pytest.mark.parametrize("path", ["/retrieve", "/tone"])
def test_rate_limit(settings, path):
    settings.rate_limit_requests_per_minute = 2
    with build_client(settings) as client:
        headers = auth_headers(client)
        body = {"query": "x"} if path == "/retrieve" else {"text": "x"}
        statuses = [client.post(path, json=body, headers=headers).status_code for _ in range(3)]
        assert statuses == [200, 200, 429]
