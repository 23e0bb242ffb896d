import os
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from catalog.config import logger
from catalog.data.repositories import close_db, init_db, redis_cache
from catalog.errors import register_exception_handlers
from catalog.presentation.routes import health_router, problem_router


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        client = request.client.host if request.client else "unknown"
        logger.info(
            f"Request started: {request.method} {request.url.path} - "
            f"ID: {request_id} - Client: {client}"
        )
        start_time = time.time()
        try:
            response = await call_next(request)
            process_time = time.time() - start_time
            logger.info(
                f"Request completed: {request.method} {request.url.path} - "
                f"ID: {request_id} - Status: {response.status_code} - "
                f"Time: {process_time:.4f}s"
            )
            return response
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"Request failed: {request.method} {request.url.path} - "
                f"ID: {request_id} - Error: {e} - "
                f"Time: {process_time:.4f}s"
            )
            raise


@asynccontextmanager
async def life_span(app: FastAPI):
    logger.info("Server is starting...")
    if os.environ.get("TESTING") != "True":
        try:
            await init_db()
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            raise
        if await redis_cache.connect():
            logger.info("Redis cache connected")
        else:
            logger.warning("Redis cache unavailable, serving reads from the database")
    else:
        logger.info("Skipping database and cache initialization for tests")
    yield
    if os.environ.get("TESTING") != "True":
        await redis_cache.close()
        await close_db()
    logger.info("Server has been stopped")


version = "v1"

app = FastAPI(
    title="Problem Catalog API",
    description="A catalog of coding-interview problems with a read-through Redis cache",
    version=version,
    lifespan=life_span,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(LoggingMiddleware)

register_exception_handlers(app)

app.include_router(health_router)
app.include_router(problem_router, prefix=f"/api/{version}", tags=["problem"])

logger.info(f"Application startup complete - API version: {version}")
