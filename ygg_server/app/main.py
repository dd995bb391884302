"""FastAPI application exposing the texture endpoints."""
from __future__ import annotations

import asyncio
import logging
from typing import BinaryIO, Dict, Optional

from fastapi import FastAPI, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException

from .config import settings
from .errors import (
    MESSAGE_CANNOT_OPEN_FILE,
    MESSAGE_FILE_TOO_LARGE,
    IllegalArgumentError,
    InternalError,
    YggdrasilError,
    error_body,
    error_status,
)
from .gate import bind_set_texture_request, check_texture_path
from .mojang import ExternalProfileClient, MojangClient
from .resolver import MojangSkinResolver
from .schemas import ErrorResponse, HealthResponse, ModelType
from .storage import LocalTextureStore, TextureStore, utc_timestamp

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    status: {"model": ErrorResponse} for status in (400, 401, 403, 404, 500)
}


def create_app(
    store: Optional[TextureStore] = None,
    profile_client: Optional[ExternalProfileClient] = None,
) -> FastAPI:
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title="Yggdrasil Texture Service", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    texture_store = store if store is not None else LocalTextureStore()
    resolver = MojangSkinResolver(profile_client if profile_client is not None else MojangClient())

    async def run_blocking(func, *args):
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, func, *args)

    @app.exception_handler(YggdrasilError)
    async def handle_yggdrasil_error(request: Request, exc: YggdrasilError) -> JSONResponse:
        return JSONResponse(status_code=error_status(exc), content=error_body(exc))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=error_body(exc))

    @app.on_event("startup")
    async def ensure_directories() -> None:
        settings.data_root.mkdir(parents=True, exist_ok=True)

    @app.get("/healthz", response_model=HealthResponse)
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok", "timestamp": utc_timestamp()}

    @app.get("/texture/{hash}", responses=ERROR_RESPONSES)
    async def get_texture(hash: str) -> Response:
        data = await run_blocking(texture_store.get_texture, hash)
        return Response(
            content=data,
            media_type="image/png",
            headers={"Cache-Control": f"public, max-age={settings.texture_max_age}"},
        )

    @app.put("/texture/{uuid}/{textureType}", status_code=204, responses=ERROR_RESPONSES)
    async def set_texture(
        uuid: str,
        textureType: str,
        request: Request,
        authorization: Optional[str] = Header(None),
    ) -> Response:
        payload = bind_set_texture_request(await request.body())
        access_token, profile_id, texture_type = check_texture_path(
            authorization, uuid, textureType
        )
        url = await run_blocking(resolver.resolve, payload, profile_id)
        await run_blocking(
            texture_store.assign_url,
            access_token,
            profile_id,
            url,
            texture_type,
            payload.model.model_type,
        )
        return Response(status_code=204)

    @app.post("/texture/{uuid}/{textureType}", status_code=204, responses=ERROR_RESPONSES)
    async def upload_texture(
        uuid: str,
        textureType: str,
        request: Request,
        authorization: Optional[str] = Header(None),
    ) -> Response:
        access_token, profile_id, texture_type = check_texture_path(
            authorization, uuid, textureType
        )
        form = await _read_form(request)
        try:
            model = form.get("model")
            model_type = ModelType.from_form(model if isinstance(model, str) else None)
            upload = form.get("file")
            if not isinstance(upload, UploadFile):
                raise IllegalArgumentError("Missing file field.")
            stream = _open_upload(upload, settings.max_upload_bytes)
            await run_blocking(
                texture_store.assign_upload,
                access_token,
                profile_id,
                stream,
                texture_type,
                model_type,
            )
        finally:
            await form.close()
        return Response(status_code=204)

    @app.delete("/texture/{uuid}/{textureType}", status_code=204, responses=ERROR_RESPONSES)
    async def delete_texture(
        uuid: str,
        textureType: str,
        authorization: Optional[str] = Header(None),
    ) -> Response:
        access_token, profile_id, texture_type = check_texture_path(
            authorization, uuid, textureType
        )
        await run_blocking(texture_store.remove, access_token, profile_id, texture_type)
        return Response(status_code=204)

    return app


async def _read_form(request: Request) -> FormData:
    try:
        return await request.form()
    except (HTTPException, MultiPartException) as exc:
        message = exc.detail if isinstance(exc, HTTPException) else exc.message
        raise IllegalArgumentError(str(message)) from exc


def _open_upload(upload: UploadFile, max_bytes: int) -> BinaryIO:
    """Size-check an uploaded file and rewind it for reading."""
    try:
        size = upload.size
        if size is None:
            upload.file.seek(0, 2)
            size = upload.file.tell()
        if size > max_bytes:
            raise IllegalArgumentError(MESSAGE_FILE_TOO_LARGE)
        upload.file.seek(0)
    except (OSError, ValueError) as exc:
        raise InternalError(MESSAGE_CANNOT_OPEN_FILE) from exc
    return upload.file


app = create_app()
