"""FastAPI application for spreadsheet-pdf."""

import uuid
from datetime import UTC, datetime
from typing import Annotated, Any
from urllib.parse import quote

from fastapi import (
    FastAPI,
    File,
    HTTPException,
    Request,
    UploadFile,
    status,
)
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from spreadsheet_pdf.config import settings, validate_settings_on_startup
from spreadsheet_pdf.models import ErrorDetail, HealthResponse
from spreadsheet_pdf.services.converter import WorkbookConverter
from spreadsheet_pdf.utils.exceptions import (
    ConverterError,
    EmptyUploadError,
    ErrorCode,
    FileTooLargeError,
)
from spreadsheet_pdf.utils.logging import (
    clear_context,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)

API_VERSION = "0.1.0"

# Configure structured logging using settings
configure_logging(
    level=settings.log_level_int,
    use_structured_formatter=True,
)
logger = get_logger(__name__)


def download_headers(filename: str) -> dict[str, str]:
    """Headers for an attachment download that must not be cached.

    Non-ASCII names also get an RFC 5987 ``filename*`` parameter since HTTP
    header values are latin-1.
    """
    try:
        filename.encode("latin-1")
        disposition = f"attachment; filename={filename}"
    except UnicodeEncodeError:
        fallback = filename.encode("ascii", "replace").decode("ascii")
        disposition = (
            f"attachment; filename={fallback}; "
            f"filename*=UTF-8''{quote(filename)}"
        )
    return {
        "Content-Disposition": disposition,
        "Cache-Control": "no-cache, no-store, must-revalidate",
        "Pragma": "no-cache",
        "Expires": "0",
    }


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Spreadsheet PDF API",
        description=(
            "Converts XLSX workbooks into paginated PDF documents, rendering "
            "month calendars as weekly grids and other sheets as tables."
        ),
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Configure CORS using settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Request-ID"],
    )

    # Validate settings on startup
    validate_settings_on_startup(settings)

    app.state.converter = WorkbookConverter(settings.layout_options())

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next: Any) -> Any:
        """Middleware to assign and track request IDs.

        This middleware:
        1. Generates a unique request ID for each request
        2. Sets it in context for logging correlation
        3. Adds it to the response headers
        4. Clears context after request completes
        """
        # Generate or use existing request ID
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        set_request_id(request_id)

        # Store request ID in request state for access in handlers
        request.state.request_id = request_id

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            # Clean up context after request
            clear_context()

    @app.exception_handler(ConverterError)
    async def converter_exception_handler(
        request: Request, exc: ConverterError
    ) -> JSONResponse:
        """Return structured error responses for the application's exceptions."""
        request_id = getattr(request.state, "request_id", get_request_id())
        log = logger.warning if exc.http_status < 500 else logger.error
        log(
            f"Conversion error: {exc.message}",
            error_code=exc.error_code.value,
            http_status=exc.http_status,
        )
        return JSONResponse(
            status_code=exc.http_status,
            content=ErrorDetail.from_error_code(
                exc.error_code,
                exc.message,
                details=exc.details if exc.details else None,
                request_id=request_id,
            ).model_dump(exclude_none=True),
            headers={"X-Request-ID": request_id} if request_id else None,
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        """Custom exception handler for HTTP exceptions."""
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.warning(
            f"HTTP Error: {exc.detail}",
            status_code=exc.status_code,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorDetail(
                detail=str(exc.detail),
                request_id=request_id,
            ).model_dump(exclude_none=True),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all exception handler for unexpected errors.

        Logs the full exception and returns a generic error response
        to avoid leaking internal details.
        """
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.exception(
            f"Unexpected error: {type(exc).__name__}",
            error_type=type(exc).__name__,
        )
        # In debug mode, include more details
        if settings.debug:
            detail = f"Internal server error: {type(exc).__name__}: {exc}"
        else:
            detail = "Internal server error. Please try again later."

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorDetail.from_error_code(
                ErrorCode.INTERNAL_ERROR, detail, request_id=request_id
            ).model_dump(exclude_none=True),
            headers={"X-Request-ID": request_id} if request_id else None,
        )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(request: Request) -> dict[str, Any]:
        """Check the health status of the service.

        Returns:
            HealthResponse: Service status information including status,
                timestamp, and version.
        """
        request_id = getattr(request.state, "request_id", None)
        logger.debug("Health check requested", request_id=request_id)
        return {
            "status": "healthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "version": API_VERSION,
        }

    @app.post(
        "/convert-excel-to-pdf",
        response_class=Response,
        tags=["Conversion"],
        responses={
            200: {
                "content": {"application/pdf": {}},
                "description": "The converted PDF document",
            },
            400: {"model": ErrorDetail, "description": "Empty or unreadable file"},
            413: {"model": ErrorDetail, "description": "File too large"},
            500: {"model": ErrorDetail, "description": "Conversion failed"},
        },
    )
    async def convert_excel_to_pdf(
        request: Request,
        file: Annotated[UploadFile, File(description="XLSX workbook to convert")],
    ) -> Response:
        """Convert an uploaded XLSX workbook into a PDF download.

        The response is an attachment named after the upload with its
        ``.xlsx`` suffix swapped for ``.pdf``.

        Raises:
            EmptyUploadError: 400 if the upload has no content.
            FileTooLargeError: 413 if the upload exceeds the size limit.
            UnsupportedFormatError: 400 if the upload is not an XLSX file.
        """
        request_id = getattr(request.state, "request_id", None)

        content = await file.read()
        file_size = len(content)

        if file_size == 0:
            logger.warning("Empty upload", filename=file.filename)
            raise EmptyUploadError(filename=file.filename)

        if file_size > settings.max_file_size_bytes:
            logger.warning(
                "File too large",
                file_size=file_size,
                max_size=settings.max_file_size_bytes,
                request_id=request_id,
            )
            raise FileTooLargeError(
                file_size=file_size,
                max_size=settings.max_file_size_bytes,
                filename=file.filename,
            )

        converter: WorkbookConverter = request.app.state.converter
        result = await run_in_threadpool(converter.convert, content, file.filename)

        logger.info(
            "Conversion complete",
            filename=result.filename,
            size=result.size,
            request_id=request_id,
        )
        return Response(
            content=result.pdf,
            media_type=result.media_type,
            headers=download_headers(result.filename),
        )

    logger.info("FastAPI application created successfully")
    return app


# Create the application instance
app = create_app()
