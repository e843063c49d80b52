import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, File, Form, HTTPException, Response, UploadFile, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from google import genai
from pydantic import ValidationError

from agents.copywriter_agent import CopywriterAgent
from agents.creative_agent import CreativeAgent
from agents.creative_director_agent import CreativeDirector
from library import image_ops
from library.config import Settings
from library.errors import RefinementError, StudioError, TranslationError
from library.models import MODELS, GalleryRecord, GenerateMessage, ImageSize
from library.prompts import sample_prompts
from library.storage import GalleryStore

logger = logging.getLogger("pika")


def build_director(settings: Settings) -> CreativeDirector:
    """Wire the Gen AI client, agents and gallery store from ``settings``."""
    client = genai.Client(api_key=settings.api_key)
    return CreativeDirector(
        creative_agent=CreativeAgent(client, imagen_safety_filter_level=settings.imagen_safety_filter),
        copywriter_agent=CopywriterAgent(client, model_name=settings.text_model),
        store=GalleryStore(settings.data_dir),
        clear_prompt_on_success=settings.clear_prompt_on_success,
        countdown_interval=settings.countdown_interval,
    )


# --- Lifespan ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    # A director set beforehand (e.g. by tests) is used as is.
    if getattr(app.state, "director", None) is None:
        settings = Settings.from_env()
        logging.basicConfig(
            level=settings.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        app.state.director = build_director(settings)
        logger.info(f"[startup] Gallery stored in {settings.data_dir}; text model {settings.text_model}")
    try:
        yield
    finally:
        app.state.director.close()


# --- App Init ---
app = FastAPI(title="Pika Image Studio", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # adjust in prod
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _director() -> CreativeDirector:
    return app.state.director


def _state() -> dict:
    return _director().snapshot().model_dump(mode="json")


def _gallery_entry(record: GalleryRecord) -> dict:
    entry = record.model_dump(mode="json", exclude={"image"})
    entry["src"] = record.to_data_url()
    return entry


def _record_or_404(record_id: str) -> GalleryRecord:
    record = _director().gallery_record(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Image {record_id} not found.")
    return record


# --- Catalog Endpoints ---
@app.get("/models")
async def list_models():
    return {"models": [m.model_dump(mode="json") for m in MODELS.values()]}


@app.get("/sizes")
async def list_sizes():
    return {"sizes": [size.value for size in ImageSize]}


@app.get("/prompt-suggestions")
async def prompt_suggestions(count: int = 4):
    return {"prompts": sample_prompts(count)}


# --- Session Endpoints ---
@app.get("/state")
async def get_state():
    return _state()


@app.post("/prompt")
async def set_prompt(prompt: str = Form("")):
    _director().set_prompt(prompt)
    return _state()


@app.post("/size")
async def select_size(size: str = Form(...)):
    try:
        _director().select_size(size)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unsupported size '{size}'.")
    return _state()


@app.post("/model")
async def select_model(model_id: str = Form(...)):
    try:
        _director().select_model(model_id)
    except StudioError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _state()


@app.post("/upload")
async def upload_image(
    file: Optional[UploadFile] = File(None),
    data_url: Optional[str] = Form(None),
):
    try:
        if file is not None:
            image = image_ops.read_upload(await file.read(), file.content_type)
        elif data_url:
            image = image_ops.decode_data_url(data_url)
        else:
            raise HTTPException(status_code=400, detail="No image data provided.")
        _director().upload_image(image)
    except StudioError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _state()


@app.delete("/upload")
async def clear_upload():
    _director().clear_upload()
    return _state()


@app.delete("/image")
async def clear_image():
    _director().clear_image()
    return _state()


# --- Generation Endpoints ---
@app.post("/generate")
async def generate_endpoint():
    started = await _director().generate()
    return {"started": started, "state": _state()}


@app.websocket("/ws/generate")
async def generate_websocket(websocket: WebSocket):
    """Run a generation and stream countdown ticks until it finishes.

    The client may send ``{"prompt", "size", "model"}`` to update the session
    first; an empty object generates with the current session.
    """
    await websocket.accept()
    director = _director()
    try:
        message = GenerateMessage.model_validate(await websocket.receive_json())
        if message.model:
            director.select_model(message.model)
        if message.size:
            director.select_size(message.size)
        if message.prompt is not None:
            director.set_prompt(message.prompt)
    except (StudioError, ValidationError, ValueError) as e:
        await websocket.send_json({"status": "error", "message": str(e), "state": _state()})
        await websocket.close()
        return

    ticks: asyncio.Queue = asyncio.Queue()
    job = asyncio.create_task(director.generate(on_tick=ticks.put_nowait))
    while not job.done():
        getter = asyncio.create_task(ticks.get())
        done, _ = await asyncio.wait({job, getter}, return_when=asyncio.FIRST_COMPLETED)
        if getter in done:
            await websocket.send_json({"status": "countdown", "remaining": getter.result()})
        else:
            getter.cancel()

    if not job.result():
        status = "ignored"
    elif director.error:
        status = "error"
    else:
        status = "complete"
    await websocket.send_json({"status": status, "state": _state()})
    await websocket.close()


# --- Prompt Endpoints ---
@app.post("/refine-prompt")
async def refine_prompt_endpoint(prompt: Optional[str] = Form(None)):
    try:
        suggestions = await _director().refine_prompt(prompt)
    except RefinementError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"suggestions": suggestions}


@app.post("/translate")
async def translate_endpoint(prompt: str = Form("")):
    try:
        text = await _director().translate(prompt)
    except TranslationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"text": text}


# --- Gallery ---
@app.get("/gallery")
async def list_gallery():
    """List gallery images, most recent first."""
    return {"images": [_gallery_entry(r) for r in _director().gallery()]}


@app.delete("/gallery")
async def reset_gallery():
    _director().reset_gallery()
    return {"images": []}


@app.delete("/gallery/{record_id}")
async def delete_gallery_image(record_id: str):
    _director().delete_from_gallery(record_id)
    return {"images": [_gallery_entry(r) for r in _director().gallery()]}


@app.get("/gallery/{record_id}/download")
async def download_gallery_image(record_id: str):
    record = _record_or_404(record_id)
    try:
        data = record.image_bytes()
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Image {record_id} could not be decoded.")
    return Response(
        content=data,
        media_type=record.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{record.download_name}"'},
    )


@app.get("/gallery/{record_id}/thumbnail")
async def gallery_thumbnail(record_id: str):
    record = _record_or_404(record_id)
    try:
        thumb = image_ops.resize_image(record.image_bytes())
    except (OSError, ValueError):
        raise HTTPException(status_code=422, detail=f"Image {record_id} could not be decoded.")
    return Response(content=thumb, media_type="image/jpeg")


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(app, host=os.getenv("PIKA_HOST", "127.0.0.1"), port=int(os.getenv("PIKA_PORT", "8000")))
