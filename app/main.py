from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from app.core.config import settings
from app.core.errors import BookingError, ErrorKind
from app.api import bookings
from app.core.logger import setup_logging, logger
from contextlib import asynccontextmanager
from datetime import datetime

setup_logging()

ERROR_STATUS = {
    ErrorKind.CONFIGURATION: 503,
    ErrorKind.NOT_AUTHENTICATED: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.NETWORK: 502,
    ErrorKind.REJECTED: 409,
    ErrorKind.TRANSITION_REJECTED: 409,
}

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("🚀 Starting bookings dashboard backend")
    if not settings.BACKEND_URL:
        logger.warning("⚠️ BACKEND_URL is not set, every booking call will fail")
    yield
    # Shutdown
    logger.info("🛑 Shutting down backend")

app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan
)

@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    return JSONResponse(
        status_code=ERROR_STATUS.get(exc.kind, 502),
        content={"success": False, "message": exc.message, "kind": exc.kind.value}
    )

# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"🔥 UNHANDLED ERROR: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal Server Error", "detail": "An unexpected error occurred. Please contact support."}
    )

app.include_router(bookings.router, prefix=settings.API_PREFIX, tags=["Bookings"])

@app.get("/")
async def health_check():
    return {'status': 'active', 'time': datetime.now().isoformat()}

@app.get("/health")
async def health_check_std():
    return {"status": "ok", "environment": settings.ENVIRONMENT, "timestamp": datetime.now().isoformat()}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.PORT, reload=True)
