import logging
import traceback
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import settings
from core.middleware import RequestLoggingMiddleware
from core.exceptions import BaseCustomException, ValidationError
from core.response import error_response
from database.connection import init_db, close_db
from routers import auth, product, cart, wishlist, order, review

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the store before serving and release it on shutdown."""
    logger.info("Starting up EcoFinds Backend API...")
    try:
        init_db()
    except Exception as e:
        logger.error(f"Failed to start application: {str(e)}")
        raise
    logger.info("EcoFinds Backend API started successfully")

    yield

    close_db()
    logger.info("EcoFinds Backend API shut down")


app = FastAPI(
    title="EcoFinds Backend API",
    description="Backend API for the EcoFinds second-hand marketplace",
    version="1.0.0",
    lifespan=lifespan
)


def _stack_details(exc: BaseException) -> Optional[dict]:
    """Traceback for error responses, outside production only."""
    if settings.is_production:
        return None
    return {"stack": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))}


# Global exception handler for custom exceptions
@app.exception_handler(BaseCustomException)
async def custom_exception_handler(request: Request, exc: BaseCustomException):
    """Handle custom exceptions with standardized response format."""
    request_id = getattr(request.state, 'request_id', 'unknown')
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(level, f"Custom exception [{request_id}] on {request.method} {request.url.path}: {exc.message}")

    details = exc.details or None
    if exc.status_code >= 500:
        cause = exc.__cause__ or exc
        details = _stack_details(cause)

    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(
            message=exc.message,
            errors=exc.errors if isinstance(exc, ValidationError) else None,
            details=details
        )
    )


# Global exception handler for validation errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report every violated constraint in one response."""
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(f"Validation error [{request_id}] on {request.method} {request.url.path}: {exc.errors()}")

    error_details = []
    for error in exc.errors():
        field = '.'.join(str(x) for x in error['loc'])
        error_details.append({
            "field": field,
            "message": error['msg'],
            "type": error['type']
        })

    return JSONResponse(
        status_code=400,
        content=error_response(
            message="Validation failed",
            errors=error_details
        )
    )


# Global exception handler for HTTP exceptions (including unknown routes)
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    request_id = getattr(request.state, 'request_id', 'unknown')
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(level, f"HTTP exception [{request_id}] on {request.method} {request.url.path}: {exc.detail}")

    message = str(exc.detail) if isinstance(exc.detail, str) else "HTTP error occurred"
    if exc.status_code == 404 and message == "Not Found":
        message = "API endpoint not found"

    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(message=message),
        headers=getattr(exc, "headers", None)
    )


# Global exception handler for unexpected errors
@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(f"Unexpected error [{request_id}] on {request.method} {request.url.path}: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content=error_response(
            message="An unexpected error occurred. Please try again.",
            details=_stack_details(exc)
        )
    )


app.add_middleware(RequestLoggingMiddleware)


@app.get("/api/health")
async def health_check():
    """Simple health check endpoint."""
    return {"status": "OK", "message": "EcoFinds Backend is running!"}


# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(product.router, prefix="/api/products", tags=["Products"])
app.include_router(cart.router, prefix="/api/users", tags=["Cart"])
app.include_router(wishlist.router, prefix="/api/users", tags=["Wishlist"])
app.include_router(order.router, prefix="/api/users", tags=["Orders"])
app.include_router(review.router, prefix="/api/users", tags=["Reviews"])


def run():
    """Serve the API with uvicorn (``python main.py`` or ``uvicorn main:app``)."""
    import uvicorn
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
