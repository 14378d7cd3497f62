from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, HTTPException, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from purchase_records.routers import purchases
from purchase_records.database import init_db, dispose_db, masked_database_url
from purchase_records.config import settings
from purchase_records.exceptions import PurchaseRecordsError
from purchase_records.schemas.purchase import HealthResponse
from purchase_records.services.storage_service import StorageService, get_storage_service, storage_service
import logging
import sys

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("="*60)
    logger.info("Starting Purchase Records API")
    logger.info("="*60)
    logger.info(f"Store: {masked_database_url(settings.database_url)}")
    logger.info(f"Bill storage: {storage_service.backend_name}")
    logger.info("="*60)

    try:
        init_db()
    except Exception as e:
        # No degraded mode without the store
        logger.error(f"Store connection failed: {str(e)}")
        sys.exit(1)
    storage_service.ensure_storage()

    yield

    dispose_db()


app = FastAPI(
    title="Purchase Records API",
    description="Records purchase orders with line items and an optional bill image",
    version=API_VERSION,
    lifespan=lifespan,
)


def parse_cors_origins(origins_str: str) -> list:
    """Parse comma-separated CORS origins into a list"""
    return [origin.strip() for origin in origins_str.split(",") if origin.strip()]


app.add_middleware(
    CORSMiddleware,
    allow_origins=parse_cors_origins(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(purchases.router)


@app.get("/")
def root():
    return {"message": "Purchase Records API", "version": API_VERSION}


@app.get("/api/health", response_model=HealthResponse)
def health_check():
    return HealthResponse(status="OK", message="Server running", timestamp=datetime.now(timezone.utc))


@app.get(f"{settings.upload_url_prefix.rstrip('/')}/{{file_path:path}}")
def serve_upload(file_path: str, storage: StorageService = Depends(get_storage_service)):
    """
    Serve a stored bill image

    Args:
        file_path: Generated filename (e.g. "1718000000000-123456789.png")
    """
    try:
        file_content = storage.download_file(file_path)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="File not found")

    return Response(
        content=file_content,
        media_type=storage.get_content_type(file_path),
        headers={"Content-Disposition": f'inline; filename="{file_path.rsplit("/", 1)[-1]}"'}
    )


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(PurchaseRecordsError)
async def purchase_records_exception_handler(request: Request, exc: PurchaseRecordsError):
    if exc.status_code >= 500:
        logger.error(f"Error handling {request.method} {request.url.path}: {exc.message}")
    return _error_response(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return _error_response(500, str(exc))


def run():
    import uvicorn

    uvicorn.run("purchase_records.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
