import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from clean_forward.config import get_settings
from clean_forward.handlers.thread_handler import handle_clean_forward, handle_clean_request
from clean_forward.services.logging_config import configure_logging

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Clean Forward", version="0.1.0")


async def _json_object(request: Request, event: str) -> dict[str, Any]:
    try:
        payload = await request.json()
    except Exception as exc:
        logger.warning("Invalid JSON payload", extra={"event": event})
        raise HTTPException(status_code=400, detail="invalid JSON payload") from exc
    if not isinstance(payload, dict):
        logger.warning("JSON payload is not an object", extra={"event": event})
        raise HTTPException(status_code=400, detail="JSON payload must be an object")
    return payload


def _message_count(payload: dict[str, Any]) -> int:
    messages = payload.get("messages")
    return len(messages) if isinstance(messages, list) else 0


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "env": settings.app_env}


@app.post("/clean")
async def clean(request: Request) -> JSONResponse:
    payload = await _json_object(request, "clean_invalid_json")
    try:
        result = await handle_clean_request(payload, settings)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("Unhandled exception while cleaning body", extra={"event": "clean_processing_error"})
        raise HTTPException(status_code=500, detail="clean processing error") from exc
    return JSONResponse(result)


@app.post("/threads/clean-forward")
async def clean_forward(request: Request) -> JSONResponse:
    payload = await _json_object(request, "clean_forward_invalid_json")
    logger.info(
        "Received clean forward request",
        extra={"event": "clean_forward_received", "message_count": _message_count(payload)},
    )
    try:
        result = await handle_clean_forward(payload, settings)
    except ValueError as exc:
        logger.warning(
            "Rejected clean forward request",
            extra={"event": "clean_forward_invalid", "error": str(exc)},
        )
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(
            "Unhandled exception while assembling clean forward",
            extra={"event": "clean_forward_processing_error"},
        )
        raise HTTPException(status_code=500, detail="clean forward processing error") from exc
    return JSONResponse(result)
