import os
import uuid
from typing import Optional

import aiofiles
from fastapi import HTTPException, UploadFile, status
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers

from core.logger import get_logger

logger = get_logger("uploads")

ALLOWED_IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}
CHUNK_SIZE = 64 * 1024
# room for the text fields and multipart boundaries around the image itself
MULTIPART_OVERHEAD = 64 * 1024


def complaint_upload_dir(settings) -> str:
    return os.path.join(settings.UPLOAD_DIR, "complaints")


def _extension(filename: Optional[str]) -> str:
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower()


async def save_complaint_image(file: UploadFile, settings) -> str:
    """Stream an uploaded image to disk and return its stored path."""
    ext = _extension(file.filename)
    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        logger.warning("Rejected upload %r: extension not allowed", file.filename)
        raise HTTPException(status.HTTP_400_BAD_REQUEST, f"File type .{ext} not allowed" if ext else "Invalid file")

    upload_dir = complaint_upload_dir(settings)
    os.makedirs(upload_dir, exist_ok=True)
    file_path = os.path.join(upload_dir, f"image-{uuid.uuid4().hex}.{ext}")

    limit = settings.MAX_IMAGE_UPLOAD_BYTES
    written = 0
    async with aiofiles.open(file_path, "wb") as out_file:
        while chunk := await file.read(CHUNK_SIZE):
            written += len(chunk)
            if written > limit:
                break
            await out_file.write(chunk)

    if written > limit:
        remove_upload(file_path)
        logger.warning("Rejected upload %r: larger than %d bytes", file.filename, limit)
        raise HTTPException(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, "File too large")

    return file_path


def remove_upload(path: Optional[str]) -> None:
    if path and os.path.isfile(path):
        os.remove(path)


class UploadTooLarge(HTTPException):
    def __init__(self):
        super().__init__(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, "File too large")


class UploadSizeLimitMiddleware:
    """Caps the raw body of complaint uploads while it streams in.

    Declared lengths are refused up front; chunked bodies are counted message
    by message, so nothing past the cap is ever buffered.
    """

    def __init__(self, app, settings):
        self.app = app
        self.path = f"{settings.API_PREFIX}/complaints"
        self.max_body = settings.MAX_IMAGE_UPLOAD_BYTES + MULTIPART_OVERHEAD

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http" or scope["method"] != "POST" or scope["path"].rstrip("/") != self.path:
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        declared = headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > self.max_body:
            logger.warning("Rejected complaint upload: content-length %s", declared)
            await self._too_large(scope, receive, send)
            return

        received = 0
        started = False

        async def limited_receive():
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body:
                    logger.warning("Rejected complaint upload: body passed %d bytes", self.max_body)
                    raise UploadTooLarge()
            return message

        async def tracked_send(message):
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, tracked_send)
        except UploadTooLarge:
            if started:
                raise
            await self._too_large(scope, receive, send)

    async def _too_large(self, scope, receive, send):
        response = JSONResponse(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            content={"detail": "File too large"},
        )
        await response(scope, receive, send)
