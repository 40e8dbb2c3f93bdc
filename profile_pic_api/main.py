import sys
import time
from contextlib import asynccontextmanager
from uuid import uuid4

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from loguru import logger

from profile_pic_api.config import Settings, load_settings
from profile_pic_api.errors import ErrorKind, ProfilePicError
from profile_pic_api.routes.health import router as health_router
from profile_pic_api.routes.profile_pics import router as profile_pics_router
from profile_pic_api.routes.upload import router as upload_router
from profile_pic_api.services.storage import S3ObjectStorage
from profile_pic_api.validators.image import MAX_REQUEST_BYTES, TOO_LARGE_MESSAGE


def _configure_logging(app_settings: Settings) -> None:
    logger.configure(patcher=lambda record: record["extra"].setdefault("request_id", "-"))
    logger.remove()
    logger.add(
        sys.stderr,
        level=app_settings.log_level.upper(),
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | req={extra[request_id]} | {name}:{function}:{line} | {message}",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    app_settings = load_settings()
    _configure_logging(app_settings)
    app.state.settings = app_settings
    app.state.storage = S3ObjectStorage.from_settings(app_settings)
    logger.bind(request_id="-").info(
        "Starting app app_name={} bucket={} region={} prefix={} url_mode={}",
        app_settings.app_name,
        app_settings.bucket,
        app_settings.region,
        app_settings.profile_prefix,
        "static" if app_settings.static_base_url else "signed",
    )
    yield
    logger.bind(request_id="-").info("Shutting down app app_name={}", app_settings.app_name)


app = FastAPI(title="Profile Picture API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(upload_router)
app.include_router(profile_pics_router)


@app.exception_handler(ProfilePicError)
async def profile_pic_error_handler(request: Request, exc: ProfilePicError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = "; ".join(
        "{}: {}".format(".".join(str(part) for part in err["loc"]), err["msg"]) for err in exc.errors()
    )
    logger.warning("Request validation failed path={} errors={}", request.url.path, message)
    return JSONResponse(status_code=400, content={"error": message or "Invalid request"})


@app.middleware("http")
async def reject_oversized_upload(request: Request, call_next) -> Response:
    # Refuse before the multipart body is spooled when the client declares its size.
    content_length = request.headers.get("content-length")
    if request.method == "POST" and content_length and content_length.isdigit():
        if int(content_length) > MAX_REQUEST_BYTES:
            logger.warning(
                "Upload rejected before body read path={} content_length={}", request.url.path, content_length
            )
            return JSONResponse(
                status_code=ErrorKind.PAYLOAD_TOO_LARGE.status_code,
                content={"error": TOO_LARGE_MESSAGE},
            )
    return await call_next(request)


@app.middleware("http")
async def add_request_context(request: Request, call_next) -> Response:
    request_id = request.headers.get("x-request-id", str(uuid4()))
    bound_logger = logger.bind(request_id=request_id)
    start = time.perf_counter()
    bound_logger.info("Request start method={} path={}", request.method, request.url.path)
    with logger.contextualize(request_id=request_id):
        try:
            response = await call_next(request)
        except Exception:
            bound_logger.exception("Request failed method={} path={}", request.method, request.url.path)
            raise
    duration_ms = (time.perf_counter() - start) * 1000
    bound_logger.info(
        "Request finish method={} path={} status={} duration_ms={:.2f}",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    response.headers["X-Request-ID"] = request_id
    return response


def run() -> None:
    app_settings = load_settings()
    uvicorn.run(app, host=app_settings.host, port=app_settings.port)


if __name__ == "__main__":
    run()
