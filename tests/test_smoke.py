"""Basic smoke tests for the FastAPI backend.

These tests exercise the session, generation, prompt and gallery endpoints
through the FastAPI TestClient. The studio director is built around a fake
Gen AI client and a gallery stored in a temporary directory, so no network
calls are made and no files leak outside ``tmp_path``.
"""

import pytest
from fastapi.testclient import TestClient

from library.config import Settings
from library.errors import ConfigurationError
from library.models import GalleryRecord, ImageSize, ModelId

from fakes import gemini_image_response, gemini_text_response, imagen_response, make_png


@pytest.fixture
def client(director):
    """Initialise the TestClient with the fake-backed director installed."""
    from main import app

    app.state.director = director
    with TestClient(app) as test_client:
        yield test_client
    app.state.director = None


def test_catalog_endpoints(client):
    models = client.get("/models").json()["models"]
    assert {m["id"]: m["edit"] for m in models} == {
        "gemini-2.5-flash-image": True,
        "imagen-4.0-generate-001": False,
    }
    assert client.get("/sizes").json()["sizes"] == ["256x256", "512x512", "1024x1024", "YouTube (16:9)"]
    prompts = client.get("/prompt-suggestions", params={"count": 4}).json()["prompts"]
    assert len(prompts) == 4 and len(set(prompts)) == 4


def test_generate_round_trip(client, fake_client):
    fake_client.models.content_responses.append(gemini_image_response())
    client.post("/prompt", data={"prompt": "a red fox in snow"})
    client.post("/size", data={"size": "512x512"})

    resp = client.post("/generate")
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["started"] is True
    state = body["state"]
    assert state["loading"] is False
    assert state["countdown"] is None
    assert state["error"] is None
    assert state["image"].startswith("data:image/png;base64,")
    assert state["prompt"] == ""

    images = client.get("/gallery").json()["images"]
    assert len(images) == 1
    assert images[0]["prompt"] == "a red fox in snow"
    assert images[0]["size"] == "512x512"
    assert images[0]["src"] == state["image"]


def test_generate_without_input_is_ignored(client, fake_client):
    body = client.post("/generate").json()
    assert body["started"] is False
    assert fake_client.models.calls == []


def test_upload_then_switch_model_clears_image(client):
    png = make_png()
    resp = client.post("/upload", files={"file": ("photo.png", png, "image/png")})
    assert resp.status_code == 200, resp.text
    assert resp.json()["uploaded_image"] is True

    state = client.post("/model", data={"model_id": "imagen-4.0-generate-001"}).json()
    assert state["model"] == "imagen-4.0-generate-001"
    assert state["uploaded_image"] is False
    assert state["image"] is None


def test_upload_rejects_non_images(client):
    resp = client.post("/upload", files={"file": ("notes.txt", b"hello", "text/plain")})
    assert resp.status_code == 400
    resp = client.post("/upload", files={"file": ("fake.png", b"not really a png", "image/png")})
    assert resp.status_code == 400
    assert client.get("/state").json()["uploaded_image"] is False


def test_upload_rejected_for_generate_only_model(client):
    client.post("/model", data={"model_id": "imagen-4.0-generate-001"})
    resp = client.post("/upload", files={"file": ("photo.png", make_png(), "image/png")})
    assert resp.status_code == 400


def test_bad_size_and_model(client):
    assert client.post("/size", data={"size": "2048x2048"}).status_code == 400
    assert client.post("/model", data={"model_id": "dall-e-3"}).status_code == 400


def test_generation_failure_is_reported_in_state(client, fake_client):
    fake_client.models.image_responses.append(imagen_response(data=b""))
    client.post("/model", data={"model_id": "imagen-4.0-generate-001"})
    client.post("/prompt", data={"prompt": "a castle"})
    state = client.post("/generate").json()["state"]
    assert state["error"].startswith("Failed to generate image. API Error (Imagen 4)")
    assert state["prompt"] == "a castle"

    cleared = client.delete("/image").json()
    assert cleared["error"] is None


def test_websocket_generation(client, fake_client):
    fake_client.models.content_responses.append(gemini_image_response())
    with client.websocket_connect("/ws/generate") as ws:
        ws.send_json({"prompt": "a lighthouse", "size": "YouTube (16:9)"})
        message = ws.receive_json()
        while message["status"] == "countdown":
            message = ws.receive_json()
    assert message["status"] == "complete"
    assert message["state"]["image"].startswith("data:image/png;base64,")
    sent = fake_client.models.calls[0][1]["contents"].parts[0].text
    assert "16:9" in sent


def test_websocket_without_prompt_is_ignored(client):
    with client.websocket_connect("/ws/generate") as ws:
        ws.send_json({})
        message = ws.receive_json()
    assert message["status"] == "ignored"


def test_websocket_rejects_malformed_message(client):
    client.post("/prompt", data={"prompt": "a fox"})
    for payload in ({"prompt": 123}, {"size": "2048x2048"}, []):
        with client.websocket_connect("/ws/generate") as ws:
            ws.send_json(payload)
            message = ws.receive_json()
        assert message["status"] == "error"

    state = client.get("/state")
    assert state.status_code == 200
    assert state.json()["prompt"] == "a fox"
    assert state.json()["loading"] is False


def test_refine_and_translate(client, fake_client):
    fake_client.models.content_responses.append(gemini_text_response('{"suggestions":["a","b","c"]}'))
    resp = client.post("/refine-prompt", data={"prompt": "cat"})
    assert resp.json() == {"suggestions": ["a", "b", "c"]}

    fake_client.models.content_responses.append(gemini_text_response('{"oops": 1}'))
    resp = client.post("/refine-prompt", data={"prompt": "cat"})
    assert resp.status_code == 502
    assert resp.json()["detail"].startswith("API Error (Refine)")

    fake_client.models.content_responses.append(gemini_text_response("A cat"))
    assert client.post("/translate", data={"prompt": "Um gato"}).json() == {"text": "A cat"}


def test_gallery_download_thumbnail_and_delete(client, director):
    png = make_png(size=(600, 300))
    record = GalleryRecord.from_bytes(png, prompt="wide", model=ModelId.imagen_4, size=ImageSize.widescreen)
    director.store.save([record])

    resp = client.get(f"/gallery/{record.id}/download")
    assert resp.status_code == 200
    assert resp.content == png
    assert f"pika-{record.id[:8]}.png" in resp.headers["content-disposition"]

    thumb = client.get(f"/gallery/{record.id}/thumbnail")
    assert thumb.status_code == 200
    assert thumb.headers["content-type"] == "image/jpeg"

    assert client.delete(f"/gallery/{record.id}").json() == {"images": []}
    assert client.delete(f"/gallery/{record.id}").json() == {"images": []}
    assert client.get(f"/gallery/{record.id}/download").status_code == 404


def test_undecodable_gallery_image(client, director):
    record = GalleryRecord(image="abc", prompt="broken", model=ModelId.imagen_4, size=ImageSize.square_256)
    director.store.save([record])

    assert client.get(f"/gallery/{record.id}/download").status_code == 422
    assert client.get(f"/gallery/{record.id}/thumbnail").status_code == 422


def test_gallery_reset(client, director):
    record = GalleryRecord.from_bytes(b"x", prompt="p", model=ModelId.imagen_4, size=ImageSize.square_256)
    director.store.save([record])
    assert client.delete("/gallery").json() == {"images": []}
    assert client.get("/gallery").json() == {"images": []}


def test_missing_api_key_is_fatal():
    with pytest.raises(ConfigurationError):
        Settings.from_env({})


def test_startup_without_api_key_fails(monkeypatch):
    from main import app

    monkeypatch.delenv("API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    app.state.director = None
    with pytest.raises(ConfigurationError):
        with TestClient(app):
            pass


def test_settings_from_env(tmp_path):
    settings = Settings.from_env(
        {
            "GEMINI_API_KEY": "secret",
            "PIKA_DATA_DIR": str(tmp_path),
            "PIKA_CLEAR_PROMPT_ON_SUCCESS": "false",
            "PIKA_COUNTDOWN_INTERVAL": "0.5",
            "LOG_LEVEL": "debug",
        }
    )
    assert settings.api_key == "secret"
    assert settings.data_dir == str(tmp_path)
    assert settings.clear_prompt_on_success is False
    assert settings.countdown_interval == 0.5
    assert settings.log_level == "DEBUG"
    assert settings.text_model == "gemini-2.5-flash"
    assert settings.imagen_safety_filter == "BLOCK_NONE"


def test_imagen_safety_filter_setting():
    relaxed = Settings.from_env({"API_KEY": "k", "PIKA_IMAGEN_SAFETY_FILTER": "block_low_and_above"})
    assert relaxed.imagen_safety_filter == "BLOCK_LOW_AND_ABOVE"
    omitted = Settings.from_env({"API_KEY": "k", "PIKA_IMAGEN_SAFETY_FILTER": ""})
    assert omitted.imagen_safety_filter is None
