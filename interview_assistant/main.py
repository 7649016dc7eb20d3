import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from interview_assistant.api.v1.chat import chat_router
from interview_assistant.api.v1.pdf import pdf_router
from interview_assistant.core.config import settings
from interview_assistant.core.exceptions import (
    AppError,
    app_error_handler,
    global_exception_handler,
    http_exception_handler,
)
from interview_assistant.core.logger import setup_logger

setup_logger(
    log_level=logging.DEBUG if settings.DEBUG_MODE else logging.INFO,
    use_json=settings.LOG_JSON,
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Application startup: Interview Assistant (provider={settings.AI_PROVIDER}, model={settings.AI_MODEL})")
    yield
    logger.info("Application shutdown")

app = FastAPI(
    title="Interview Assistant",
    description="AI mock-interview backend: document ingestion, streamed interview turns and feedback reports.",
    version="1.0.0",
    lifespan=lifespan
)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins for simplicity in development
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Session-Id", "Content-Disposition"],
)

# Include routers
app.include_router(chat_router, prefix="/api/chat", tags=["chat"])
app.include_router(pdf_router, prefix="/api/pdf", tags=["pdf"])


@app.get("/health")
async def health():
    return {"status": "ok"}


def run():
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
