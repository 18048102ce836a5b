"""
FastAPI routes for CSV analysis.
Thin transport layer: reads the CSV payload and returns the engine's result.
"""
import json

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from core.config import get_settings
from core.exceptions import ValidationError
from core.logger import setup_logger
from core.schema import AnalyzeRequest
from services.analysis_service import AnalysisService

logger = setup_logger(__name__)
settings = get_settings()

MISSING_CSV_MESSAGE = "Missing CSV. Upload a file or send { csv: string }."

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Turn bank and card CSV exports into spending insights",
    version="1.0.0"
)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.client_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Service instance
analysis_service = AnalysisService()


@app.middleware("http")
async def security_headers(request: Request, call_next):
    """Add basic security headers to every response."""
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "SAMEORIGIN"
    response.headers["Referrer-Policy"] = "no-referrer"
    return response


@app.get("/")
async def index():
    """Service banner."""
    return {"ok": True, "service": "SpendScope API"}


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"ok": True, "service": "spendscope-api"}


def _decode_upload(content: bytes) -> str:
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        raise ValidationError(
            "CSV upload must be UTF-8 encoded",
            details={"status_code": 400}
        )


async def read_csv_payload(request: Request) -> str:
    """
    Extract CSV text from a multipart upload or an inline JSON body.

    Multipart requests may carry the CSV as a `file` upload or a `csv` text
    field; other requests must send JSON `{"csv": "<text>"}`.

    Args:
        request: Incoming request

    Returns:
        Non-empty CSV text

    Raises:
        ValidationError: If the payload is missing, too large or not UTF-8
    """
    body = await request.body()
    if len(body) > settings.max_payload_bytes:
        raise ValidationError(
            f"Payload exceeds {settings.max_payload_mb} MB limit",
            details={"status_code": 413, "size": len(body)}
        )

    content_type = request.headers.get("content-type", "")
    csv_text = ""

    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        upload = form.get("file")
        if upload is not None and not isinstance(upload, str):
            csv_text = _decode_upload(await upload.read())
        elif isinstance(form.get("csv"), str):
            csv_text = form.get("csv")
    elif body:
        try:
            csv_text = AnalyzeRequest.model_validate(json.loads(body)).csv
        except (ValueError, PydanticValidationError):
            csv_text = ""

    if not csv_text:
        raise ValidationError(MISSING_CSV_MESSAGE, details={"status_code": 400})

    return csv_text


@app.post("/api/analyze")
async def analyze(request: Request):
    """
    Analyze an uploaded or inline CSV export.

    Returns:
        AnalysisResult JSON, 400/413 for bad payloads, 500 if analysis fails
    """
    try:
        csv_text = await read_csv_payload(request)
    except ValidationError as e:
        logger.warning(f"Rejected analyze request: {e.message}")
        return JSONResponse(
            status_code=e.details.get("status_code", 400),
            content={"error": e.message}
        )

    try:
        result = analysis_service.analyze_csv_text(csv_text)
    except Exception as e:
        logger.error(f"CSV analysis failed: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to analyze CSV", "message": getattr(e, "message", str(e))}
        )

    return JSONResponse(content=result.to_response())


@app.get("/api/demo")
async def demo():
    """Analyze the built-in sample export."""
    try:
        return JSONResponse(content=analysis_service.analyze_demo().to_response())
    except Exception as e:
        logger.error(f"Demo analysis failed: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": str(e) or "Failed demo"})


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
