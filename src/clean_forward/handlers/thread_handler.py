from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from clean_forward.services.email_parser import clean_body
from clean_forward.services.renderer import text_to_html
from clean_forward.services.thread_builder import (
    Attachment,
    CleanForward,
    ThreadMessage,
    assemble_forward,
    render_forward_html,
)

if TYPE_CHECKING:
    from clean_forward.config import Settings

logger = logging.getLogger(__name__)


def _parse_timestamp(value: Any) -> datetime:
    if not isinstance(value, str) or not value.strip():
        raise ValueError("message date must be an ISO-8601 string")
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_attachment(raw: Any) -> Attachment:
    if not isinstance(raw, dict) or not raw.get("name"):
        raise ValueError("attachment must be an object with a name")
    try:
        size = int(raw.get("size") or 0)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid attachment size for {raw['name']!r}") from exc
    return Attachment(name=str(raw["name"]), size=max(0, size))


def _parse_attachments(raw: Any) -> list[Attachment]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError("attachments must be a list")
    return [_parse_attachment(item) for item in raw]


def parse_thread_message(raw: Any) -> ThreadMessage:
    if not isinstance(raw, dict):
        raise ValueError("message must be an object")
    return ThreadMessage(
        sender=str(raw.get("from") or ""),
        sent_at=_parse_timestamp(raw.get("date")),
        subject=str(raw.get("subject") or ""),
        body=str(raw.get("body") or ""),
        attachments=_parse_attachments(raw.get("attachments")),
    )


async def clean_with_timeout(body: str, settings: "Settings") -> Optional[str]:
    """Clean one body off the event loop; ``None`` when it misses the deadline."""
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(
                clean_body,
                body,
                settings.detector_limits,
                settings.reflow_short_line_max_chars,
            ),
            timeout=settings.message_clean_timeout_seconds,
        )
    except asyncio.TimeoutError:
        logger.warning(
            "Message body cleaning timed out",
            extra={
                "event": "message_clean_timeout",
                "timeout_seconds": settings.message_clean_timeout_seconds,
            },
        )
        return None


def _forward_payload(forward: CleanForward) -> dict[str, Any]:
    return {
        "subject": forward.subject,
        "participants": forward.participants,
        "messages": [
            {
                "from": message.sender_display,
                "date": message.sent_at.isoformat(),
                "date_label": message.date_label,
                "body": message.body,
                "is_latest": message.is_latest,
                "attachments": [{"name": item.name, "size": item.size} for item in message.attachments],
            }
            for message in forward.messages
        ],
        "attachments": [{"name": item.name, "size": item.size} for item in forward.attachments],
        "html": render_forward_html(forward),
    }


async def handle_clean_request(payload: dict[str, Any], settings: "Settings") -> dict[str, Any]:
    raw_body = payload.get("body")
    if raw_body is not None and not isinstance(raw_body, str):
        raise ValueError("body must be a string or null")

    cleaned = await clean_with_timeout(raw_body or "", settings)
    html = text_to_html(cleaned) if payload.get("html") and cleaned is not None else None
    return {"body": cleaned, "html": html}


async def handle_clean_forward(
    payload: dict[str, Any],
    settings: "Settings",
    now: datetime | None = None,
) -> dict[str, Any]:
    raw_messages = payload.get("messages")
    if not isinstance(raw_messages, list) or not raw_messages:
        raise ValueError("messages must be a non-empty list")

    messages = [parse_thread_message(raw) for raw in raw_messages]
    cleaned_bodies = await asyncio.gather(*(clean_with_timeout(message.body, settings) for message in messages))

    forward = assemble_forward(
        messages,
        list(cleaned_bodies),
        now=now or datetime.now(settings.display_tzinfo),
        subject_prefix=settings.forward_subject_prefix,
        default_subject=settings.forward_default_subject,
    )
    logger.info(
        "Assembled clean forward",
        extra={
            "event": "clean_forward_assembled",
            "message_count": len(forward.messages),
            "attachment_count": len(forward.attachments),
            "timed_out": sum(1 for body in cleaned_bodies if body is None),
        },
    )
    return _forward_payload(forward)
