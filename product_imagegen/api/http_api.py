"""
HTTP API adapter for the product image generator.

Architectural role:
- Expose the upload and generation endpoints over FastAPI.
- Enforce adapter-level input validation and service selection parsing.
- Delegate provider selection/fallback to `GenerationOrchestrator`.
- Normalize results and failures into JSON response contracts.

Endpoint responsibilities:
- `GET /`: service metadata and configured-provider flags.
- `GET /health`: liveness plus configured-provider flags.
- `POST /upload`: validate and store one image (multipart field `image`).
- `POST /generate-simple`: text-to-image via Hugging Face only, no fallback.
- `POST /generate`: upload + full orchestration with default fallback.

Error handling strategy:
- `ValidationError` / malformed request body -> HTTP 400 `{error}`.
- `ConfigurationError` -> HTTP 500 `{error, details, setup}`.
- `GenerationFailed` -> HTTP 500 `{error, details, setup}`.
- `StorageError` -> HTTP 500 with a generic message.
- Anything else -> logged with traceback, HTTP 500 `{error}`.

Side effects:
- Creates the upload/generated directories when the app is built.
- Serves both directories as static assets under `/uploads` and `/generated`.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from product_imagegen import __version__
from product_imagegen.api.uploads.upload_validator import store_upload
from product_imagegen.core.engine import GenerationOrchestrator
from product_imagegen.core.errors import (
    ConfigurationError,
    GenerationFailed,
    ProviderError,
    StorageError,
    ValidationError,
)
from product_imagegen.core.generation_types import (
    GenerationRequest,
    GenerationResult,
    Provider,
    UploadedAsset,
)
from product_imagegen.core.storage import ensure_directories
from product_imagegen.image.provider_config import ProviderSettings


logger = logging.getLogger(__name__)

UPLOADS_PREFIX = "uploads"
GENERATED_PREFIX = "generated"
UPLOAD_FIELD = "image"


# ============================================================
# Request Schema
# ============================================================

class SimpleGenerateRequest(BaseModel):
    """JSON body for `POST /generate-simple`."""
    prompt: Optional[str] = None


# ============================================================
# Helpers
# ============================================================

def _public_url(request: Request, prefix: str, name: str) -> str:
    return f"{str(request.base_url).rstrip('/')}/{prefix}/{name}"


def _result_url(request: Request, result: GenerationResult) -> str:
    if result.used_provider is Provider.HUGGINGFACE:
        return _public_url(request, GENERATED_PREFIX, result.output_location)
    return result.output_location


async def _read_upload(image: UploadFile, settings: ProviderSettings) -> bytes:
    """Read at most one byte past the size ceiling so oversize files are caught."""
    return await image.read(settings.max_upload_bytes + 1)


async def _accept_upload(image: UploadFile, settings: ProviderSettings) -> UploadedAsset:
    payload = await _read_upload(image, settings)
    return store_upload(
        UPLOAD_FIELD,
        image.filename or "",
        image.content_type or "",
        payload,
        settings,
    )


# ============================================================
# App Factory
# ============================================================

def create_app(
    settings: Optional[ProviderSettings] = None,
    orchestrator: Optional[GenerationOrchestrator] = None,
) -> FastAPI:
    """Build the FastAPI application around one settings object.

    Args:
        settings: Startup configuration; read from the environment when omitted.
        orchestrator: Optional orchestrator override (tests inject fake clients).
    """
    settings = settings or ProviderSettings.from_env()
    orchestrator = orchestrator or GenerationOrchestrator(settings)

    ensure_directories(settings.upload_dir, settings.generated_dir)

    app = FastAPI(
        title="Product Image Generator API",
        description="Upload a garment image and generate product photos via external providers",
        version=__version__,
    )
    app.state.settings = settings
    app.state.orchestrator = orchestrator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.mount(f"/{UPLOADS_PREFIX}", StaticFiles(directory=settings.upload_dir), name=UPLOADS_PREFIX)
    app.mount(
        f"/{GENERATED_PREFIX}", StaticFiles(directory=settings.generated_dir), name=GENERATED_PREFIX
    )

    # ============================================================
    # Error translation
    # ============================================================

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        messages = [
            f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}"
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request: " + "; ".join(messages)},
        )

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError):
        logger.warning("Configuration error: %s", exc.message)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Image generation provider is not configured",
                "details": exc.message,
                "setup": settings.unconfigured_setup(),
            },
        )

    @app.exception_handler(GenerationFailed)
    async def handle_generation_failed(request: Request, exc: GenerationFailed):
        return JSONResponse(
            status_code=500,
            content={
                "error": "Failed to generate image",
                "details": [err.to_dict() for err in exc.errors],
                "setup": exc.setup,
            },
        )

    @app.exception_handler(ProviderError)
    async def handle_provider_error(request: Request, exc: ProviderError):
        return JSONResponse(
            status_code=500,
            content={
                "error": "Failed to generate image",
                "details": [exc.to_dict()],
                "setup": {},
            },
        )

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        logger.error("Storage error: %s", exc)
        return JSONResponse(status_code=500, content={"error": "Failed to store file"})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    # ============================================================
    # Metadata
    # ============================================================

    @app.get("/")
    async def root():
        return {
            "message": "Product Image Generator API",
            "version": __version__,
            "providers": settings.configured_providers(),
            "endpoints": {
                "upload": "POST /upload - Upload dress image",
                "generate": "POST /generate - Generate product image with model",
                "generateSimple": "POST /generate-simple - Generate image from text prompt",
                "health": "GET /health - Check API health",
            },
        }

    @app.get("/health")
    async def health():
        return {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **settings.configured_providers(),
        }

    # ============================================================
    # Upload
    # ============================================================

    @app.post("/upload")
    async def upload(request: Request, image: Optional[UploadFile] = File(None)):
        if image is None or not image.filename:
            return JSONResponse(status_code=400, content={"error": "No file uploaded"})

        asset = await _accept_upload(image, settings)
        return {
            "message": "File uploaded successfully",
            "file": {
                "filename": asset.storage_name,
                "path": f"{UPLOADS_PREFIX}/{asset.storage_name}",
                "size": asset.size_bytes,
                "mimetype": asset.declared_media_type,
                "url": _public_url(request, UPLOADS_PREFIX, asset.storage_name),
            },
        }

    # ============================================================
    # Generation
    # ============================================================

    @app.post("/generate-simple")
    async def generate_simple(request: Request, body: SimpleGenerateRequest):
        if not body.prompt or not body.prompt.strip():
            return JSONResponse(status_code=400, content={"error": "Prompt is required"})

        result = await orchestrator.generate(
            GenerationRequest(
                prompt=body.prompt,
                preferred_provider=Provider.HUGGINGFACE,
                allow_fallback=False,
            )
        )
        return {
            "generatedImage": _result_url(request, result),
            "prompt": result.prompt_used,
            "service": result.used_provider.label,
        }

    @app.post("/generate")
    async def generate(
        request: Request,
        image: Optional[UploadFile] = File(None),
        prompt: Optional[str] = Form(None),
        service: Optional[str] = Form(None),
    ):
        if image is None or not image.filename:
            return JSONResponse(status_code=400, content={"error": "No image file provided"})

        try:
            preferred = Provider.parse(service)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        orchestrator.ensure_configured(preferred)

        asset = await _accept_upload(image, settings)
        uploaded_url = _public_url(request, UPLOADS_PREFIX, asset.storage_name)
        logger.debug("Generate request: service=%r asset=%s", service, asset.storage_name)

        result = await orchestrator.generate(
            GenerationRequest(
                prompt=prompt,
                source_asset=asset,
                reference_image_url=uploaded_url,
                preferred_provider=preferred,
            )
        )

        response = {
            "message": "Image generated successfully",
            "uploadedImage": uploaded_url,
            "generatedImage": _result_url(request, result),
            "prompt": result.prompt_used,
            "service": result.used_provider.label,
            "status": result.status.value,
        }
        if result.descriptor is not None:
            response["job"] = result.descriptor
        return response

    return app
