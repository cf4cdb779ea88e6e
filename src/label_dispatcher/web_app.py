#!/usr/bin/env python3
"""Minimal web UI to upload an image and print it on the label printer."""

import base64
import logging
import os
from collections import deque
from io import BytesIO
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, File, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, JSONResponse
from PIL import Image

from .config import DispatchConfig, load_config
from .dispatcher import dispatch, is_vector_image, scoped_temp_file
from .errors import DispatchError
from .printer import check_printer_available

logger = logging.getLogger(__name__)

load_dotenv()
WEB_APP_HOST = os.getenv("WEB_APP_HOST", "127.0.0.1")
WEB_APP_PORT = int(os.getenv("WEB_APP_PORT", "8000"))
HISTORY_LIMIT = 10
_history = deque(maxlen=HISTORY_LIMIT)

INDEX_HTML = """<!doctype html>
<html>
<head><meta charset="utf-8"><title>Print a Label</title></head>
<body>
  <h1>Print a Label</h1>
  <form action="/print" method="post" enctype="multipart/form-data">
    <input type="file" name="file" accept=".svg,.png,image/svg+xml,image/png">
    <button type="submit">Print</button>
  </form>
</body>
</html>
"""

app = FastAPI()


@app.get("/", response_class=HTMLResponse)
def index():
    return HTMLResponse(INDEX_HTML)


def _to_grayscale_preview(image_bytes: bytes) -> Optional[str]:
    """Return a grayscale PNG data URI for raster uploads, or None."""
    try:
        with Image.open(BytesIO(image_bytes)) as im:
            gray = im.convert("L")
            buf = BytesIO()
            gray.save(buf, format="PNG")
    except (OSError, ValueError):
        logger.info("Could not build preview for upload", exc_info=True)
        return None
    encoded = base64.b64encode(buf.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def _next_history_id():
    return (_history[0]["id"] + 1) if _history else 1


def _dispatch_upload(data: bytes, suffix: str, config: DispatchConfig) -> int:
    with scoped_temp_file(suffix=suffix) as upload_path:
        upload_path.write_bytes(data)
        return dispatch(upload_path, config)


def _config_error(exc: DispatchError) -> JSONResponse:
    logger.error("Invalid configuration: %s", exc)
    return JSONResponse(
        {"success": False, "error": f"Invalid configuration: {exc}"},
        status_code=500,
    )


@app.post("/print")
async def handle_print(file: Optional[UploadFile] = File(default=None)):
    if file is None or not file.filename:
        return JSONResponse({"success": False, "error": "No file uploaded."}, status_code=400)

    data = await file.read()
    if not data:
        return JSONResponse({"success": False, "error": "Uploaded file is empty."}, status_code=400)

    try:
        config = load_config()
    except DispatchError as exc:
        return _config_error(exc)

    name = file.filename
    suffix = Path(name).suffix.lower() or ".png"

    exit_status = await run_in_threadpool(_dispatch_upload, data, suffix, config)
    if exit_status != 0:
        return JSONResponse(
            {"success": False, "exit_status": exit_status, "error": f"Failed to print {name}"},
            status_code=500,
        )

    # Only completed prints are kept in history.
    preview = None if is_vector_image(name) else _to_grayscale_preview(data)
    _history.appendleft({
        "id": _next_history_id(),
        "name": name,
        "exit_status": exit_status,
        "preview": preview,
    })

    return JSONResponse({"success": True, "exit_status": exit_status, "preview": preview})


@app.get("/history")
async def history():
    """Return recent print jobs."""
    return JSONResponse({"items": list(_history)})


@app.get("/health")
def health():
    try:
        config = load_config()
    except DispatchError as exc:
        return _config_error(exc)
    return JSONResponse(check_printer_available(config))


def main():
    """Run the development server via a script entry point."""
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host=WEB_APP_HOST, port=WEB_APP_PORT)


if __name__ == "__main__":
    main()
