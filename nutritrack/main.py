"""
NUTRITRACK CHAT API
===================

This module defines the FastAPI application and its HTTP endpoints. The
server is stateless apart from the reference dataset cache: the UI sends the
whole transcript with every request.

ENDPOINTS:
  GET  /          - Returns API name and list of endpoints.
  GET  /health    - Returns whether services are initialized and configuration is present.
  POST /api/chat  - Body {"messages": [{"sender", "text"}, ...], "dataset": optional str}.
                    Returns {"reply": str} or {"error": str} with 400/500/502/upstream status.

STARTUP:
  The lifespan function builds one DatasetCache and one ChatService and keeps
  them on app.state; every request uses those same instances.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from config import ASSISTANT_NAME, SERVER_HOST, SERVER_PORT, get_data_file_id, get_openai_api_key
from nutritrack.errors import UPSTREAM_FALLBACK_MESSAGE, NutriTrackError, normalize_error
from nutritrack.models import ChatResponse, ErrorResponse
from nutritrack.services.chat_service import ChatService
from nutritrack.services.dataset_cache import DatasetCache


# -----------------------------------------------------------------------------
# LOGGING
# -----------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger("NutriTrack")


# -------------------------------------------------------------------------
# LIFESPAN (STARTUP / SHUTDOWN)
# -------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Build the process-wide services once:
      1. DatasetCache: holds the reference dataset (fetched lazily on first request)
      2. ChatService: runs each chat request against that cache

    Services already placed on app.state (e.g. by tests) are left alone.
    """
    logger.info("=" * 60)
    logger.info("%s chat API - Starting Up...", ASSISTANT_NAME)
    logger.info("=" * 60)

    if getattr(app.state, "dataset_cache", None) is None:
        app.state.dataset_cache = DatasetCache()
    if getattr(app.state, "chat_service", None) is None:
        app.state.chat_service = ChatService(app.state.dataset_cache)

    if not get_openai_api_key():
        logger.warning("OPENAI_API_KEY not set. Chat requests will fail until it is configured.")
    if get_data_file_id():
        logger.info("Reference dataset configured: %s", get_data_file_id())
    else:
        logger.info("OPENAI_DATA_FILE_ID not set. Answers will use no reference dataset.")

    logger.info("%s is online and ready!", ASSISTANT_NAME)
    logger.info("API: http://localhost:%s", SERVER_PORT)
    logger.info("=" * 60)

    yield

    logger.info("Shutting down %s chat API. Goodbye!", ASSISTANT_NAME)


# -------------------------------------------------------------------------
# FASTAPI APP AND CORS
# -------------------------------------------------------------------------
app = FastAPI(
    title="NutriTrack Chat API",
    description="Nutrition assistant backed by OpenAI chat completions",
    lifespan=lifespan
)

# The UI is served separately, so allow any origin.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NutriTrackError)
async def nutritrack_error_handler(request: Request, exc: NutriTrackError):
    """Every chat failure leaves as {"error": message} with its normalized status."""
    failure = normalize_error(exc)
    return JSONResponse(
        status_code=failure.status_code,
        content=ErrorResponse(error=failure.message).model_dump(),
    )


# =========================================================================
# API ENDPOINTS
# =========================================================================

@app.get("/")
async def root():
    """Return the API name and a short description of each endpoint."""
    return {
        "message": "NutriTrack Chat API",
        "endpoints": {
            "/api/chat": "Chat with the nutrition assistant (POST)",
            "/health": "System health check"
        }
    }


@app.get("/health")
async def health(request: Request):
    """Report initialized services and which settings are present (never their values)."""
    return {
        "status": "healthy",
        "chat_service": getattr(request.app.state, "chat_service", None) is not None,
        "dataset_cache": getattr(request.app.state, "dataset_cache", None) is not None,
        "api_key_configured": bool(get_openai_api_key()),
        "dataset_configured": get_data_file_id() is not None,
    }


@app.post(
    "/api/chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def chat(request: Request):
    """
    Chat endpoint - send the transcript, get the assistant's next reply.

    The body is read raw so that malformed JSON is reported as
    {"error": "Invalid JSON payload."} with status 400 rather than a
    validation error. The dataset fetch and OpenAI call block, so they run
    in the thread pool.

    REQUEST BODY:
    {
        "messages": [{"sender": "user", "text": "What should I eat for breakfast?"}],
        "dataset": "optional text, e.g. a spreadsheet preview"
    }

    RESPONSE:
    {
        "reply": "A balanced breakfast could be..."
    }
    """
    body = await request.body()
    chat_service: ChatService = request.app.state.chat_service
    try:
        return await run_in_threadpool(chat_service.process_request, body)
    except NutriTrackError:
        raise
    except Exception as e:
        # Anything unexpected still leaves as a single {"error": ...} body.
        logger.error(f"Error processing chat: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error=UPSTREAM_FALLBACK_MESSAGE).model_dump(),
        )


# -------------------------------------------------------------------------
# STANDALONE RUN (python -m nutritrack.main)
# -------------------------------------------------------------------------
def run():
    """Start the uvicorn server (same as run.py)."""
    uvicorn.run(
        "nutritrack.main:app",
        host=SERVER_HOST,
        port=SERVER_PORT,
        reload=True,
        log_level="info"
    )

if __name__ == "__main__":
    run()
