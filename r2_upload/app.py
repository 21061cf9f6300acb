import logging
from functools import lru_cache

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, File, Form, Header, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from .datamodel import R2Config
from .errors import AuthenticationError, NoFileProvidedError, R2UploadError
from .uploader import R2Uploader
from .validation import validate_upload

logger = logging.getLogger(__name__)

CORS_ALLOWED_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]


@lru_cache(maxsize=1)
def get_uploader() -> R2Uploader:
    load_dotenv()
    return R2Uploader(R2Config.from_env())


async def _handle_upload_error(request: Request, exc: R2UploadError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("Error uploading file: %s", exc)
    return JSONResponse(
        {"error": exc.message or "Failed to upload file"},
        status_code=exc.http_status,
    )


def create_app() -> FastAPI:
    app = FastAPI(title="R2 Upload API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["POST", "OPTIONS"],
        allow_headers=CORS_ALLOWED_HEADERS,
    )
    app.add_exception_handler(R2UploadError, _handle_upload_error)

    @app.post("/upload")
    async def upload(
        file: UploadFile | None = File(None),
        folder: str | None = Form(None),
        authorization: str | None = Header(None),
        uploader: R2Uploader = Depends(get_uploader),
    ) -> dict:
        # Token verification is done by the platform gateway in front of us.
        if not authorization:
            raise AuthenticationError("Missing authorization header")
        if file is None:
            raise NoFileProvidedError()

        file_bytes = await file.read()
        validate_upload(len(file_bytes), file.content_type, folder)
        result = await run_in_threadpool(
            uploader.upload,
            file_bytes,
            file.filename or "",
            file.content_type,
            folder,
        )
        return result.to_dict()

    return app


app = create_app()
