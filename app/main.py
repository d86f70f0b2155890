from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from contextlib import asynccontextmanager
from sqlalchemy import text
from app.config import settings
from app.database.connection import close_db, engine
from app.controllers.real_estate.property_controller import router as property_router
from app.controllers.real_estate.listing_controller import router as listing_router
from app.controllers.real_estate.client_controller import router as client_router
from app.controllers.real_estate.showing_controller import router as showing_router
from app.controllers.real_estate.offer_controller import router as offer_router
from app.controllers.real_estate.transaction_controller import router as transaction_router
from app.controllers.real_estate.notification_controller import router as notification_router
from app.services.notification_service import get_dispatcher
from app.schemas.error import ErrorResponse
from app.utils.errors import PipelineError
import logging
import time

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# error kind -> HTTP status
ERROR_STATUS_CODES = {
    "not_found": 404,
    "invalid_state": 400,
    "conflict": 409,
    "timeout": 504,
    "internal": 500,
}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all incoming requests"""
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        client_ip = request.client.host if request.client else "unknown"

        logger.info(f"🌐 Request: {request.method} {request.url.path} from {client_ip}")
        if request.url.query:
            logger.debug(f"📍 Query: {request.url.query}")

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(f"✅ Response: {response.status_code} for {request.method} {request.url.path} ({process_time:.3f}s)")

        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Test database connection on startup (non-blocking - don't fail startup)
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("✅ Database connection successful")
    except Exception as e:
        logger.warning(f"⚠️ Database connection failed on startup: {str(e)}")
        logger.warning("⚠️ App will continue, but database-dependent features may not work")

    yield

    # Let in-flight notifications finish before the pool goes away
    await get_dispatcher().drain()
    try:
        await close_db()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error closing database: {str(e)}")


app = FastAPI(
    title="Realty Pipeline API",
    description="Listing, showing, offer and transaction lifecycle for real estate",
    version="1.0.0",
    lifespan=lifespan
)

# Add request logging middleware first (runs before CORS)
app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.CLIENT_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError):
    status_code = ERROR_STATUS_CODES.get(exc.kind, 500)
    if status_code >= 500:
        logger.error(f"❌ {exc.kind} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=status_code, content=ErrorResponse(detail=exc.message, kind=exc.kind).dict())


app.include_router(property_router)
app.include_router(listing_router)
app.include_router(client_router)
app.include_router(showing_router)
app.include_router(offer_router)
app.include_router(transaction_router)
app.include_router(notification_router)


@app.get("/")
async def root():
    return {"message": "Realty Pipeline API", "status": "running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
