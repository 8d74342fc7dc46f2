from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from controllers import auth_controller, event_controller, user_controller
from fastapi.middleware.cors import CORSMiddleware
from database import create_indexes
from middleware.rate_limiter import limiter
from slowapi.errors import RateLimitExceeded as SlowAPIRateLimitExceeded
from utils.logger import setup_logging
from utils.exceptions import (
    APIException,
    api_exception_handler,
    validation_exception_handler,
    model_validation_exception_handler,
    http_exception_handler,
    invalid_id_handler,
    general_exception_handler
)
from bson.errors import InvalidId
from pydantic import ValidationError
import os

# Setup logging
logger = setup_logging(log_level=os.getenv("LOG_LEVEL", "INFO"), log_file=os.getenv("LOG_FILE"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database indexes on application startup"""
    logger.info("Starting application...")
    await create_indexes()
    logger.info("Application started successfully")
    yield
    logger.info("Shutting down application...")


app = FastAPI(
    lifespan=lifespan,
    title="Event Hub API",
    description="API for event listing, registration and member profiles",
    version="1.0.0"
)

app.state.limiter = limiter

# Register exception handlers
app.add_exception_handler(APIException, api_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(ValidationError, model_validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(InvalidId, invalid_id_handler)
app.add_exception_handler(Exception, general_exception_handler)


# Rate limit exception handler
@app.exception_handler(SlowAPIRateLimitExceeded)
async def rate_limit_handler(request: Request, exc: SlowAPIRateLimitExceeded):
    """
    Custom handler for rate limit exceeded errors.
    Returns a JSON response with 429 status code.
    """
    logger.warning(f"Rate limit exceeded for IP: {request.client.host}")
    response = JSONResponse(
        status_code=429,
        content={
            "success": False,
            "message": f"Rate limit exceeded: {exc.detail}. Please try again later.",
            "error_code": "RATE_LIMIT_EXCEEDED",
        }
    )
    response = request.app.state.limiter._inject_headers(
        response, request.state.view_rate_limit
    )
    return response


prefix = "/api"

# Comma separated list of allowed frontend origins
origins = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers with prefix
app.include_router(auth_controller.router, prefix=prefix)
app.include_router(event_controller.router, prefix=prefix)
app.include_router(user_controller.router, prefix=prefix)


@app.get(f"{prefix}/health")
async def health():
    return {"success": True, "message": "Event Hub API is running"}
