from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from clean_forward.services.renderer import escape_html, text_to_html

SENDER_RE = re.compile(r"^(.+?)\s*<(.+?)>$")
NO_TEXT_WITH_ATTACHMENTS = "(no new text; see attachments)"
NO_TEXT = "(forwarded without adding new content)"


@dataclass(frozen=True)
class Attachment:
    name: str
    size: int

    @property
    def size_kb(self) -> int:
        return max(1, round(self.size / 1024))


@dataclass
class ThreadMessage:
    sender: str
    sent_at: datetime
    subject: str = ""
    body: str = ""
    attachments: list[Attachment] = field(default_factory=list)


@dataclass
class CleanedMessage:
    sender_display: str
    sent_at: datetime
    date_label: str
    body: Optional[str]
    attachments: list[Attachment]
    is_latest: bool = False


@dataclass
class CleanForward:
    subject: str
    participants: list[str]
    messages: list[CleanedMessage]
    attachments: list[Attachment]


def parse_sender(value: str | None) -> tuple[str, str]:
    if not value:
        return "", ""

    match = SENDER_RE.match(value)
    if match:
        name = re.sub(r"^[\"']|[\"']$", "", match.group(1).strip())
        return name, match.group(2).strip()

    plain = value.strip()
    return plain, plain


def display_name(sender: str | None) -> str:
    name, email = parse_sender(sender)
    return name or email


def extract_participants(messages: list[ThreadMessage]) -> list[str]:
    seen: set[str] = set()
    participants: list[str] = []
    for message in messages:
        name = display_name(message.sender)
        if name not in seen:
            seen.add(name)
            participants.append(name)
    return participants


def dedupe_attachments(messages: list[ThreadMessage]) -> list[Attachment]:
    seen: set[tuple[str, int]] = set()
    unique: list[Attachment] = []
    for message in messages:
        for attachment in message.attachments:
            key = (attachment.name, attachment.size)
            if key not in seen:
                seen.add(key)
                unique.append(attachment)
    return unique


def _time_label(value: datetime) -> str:
    return value.strftime("%I:%M %p").lstrip("0")


def format_message_date(sent_at: datetime, now: datetime) -> str:
    """Human-friendly timestamp relative to ``now``.

    ``Today 2:30 PM``, ``Yesterday 2:30 PM``, ``Wed 2:30 PM`` within a week,
    otherwise ``Dec 15 2:30 PM`` (with the year when it differs from ``now``).
    """
    if sent_at.tzinfo is not None and now.tzinfo is not None:
        sent_at = sent_at.astimezone(now.tzinfo)

    time_label = _time_label(sent_at)
    diff_days = (now.date() - sent_at.date()).days

    if diff_days == 0:
        return f"Today {time_label}"
    if diff_days == 1:
        return f"Yesterday {time_label}"
    if 1 < diff_days < 7:
        return f"{sent_at.strftime('%a')} {time_label}"

    date_label = f"{sent_at.strftime('%b')} {sent_at.day}"
    if sent_at.year != now.year:
        date_label = f"{date_label}, {sent_at.year}"
    return f"{date_label} {time_label}"


def assemble_forward(
    messages: list[ThreadMessage],
    cleaned_bodies: list[Optional[str]],
    *,
    now: datetime,
    subject_prefix: str = "FWD:",
    default_subject: str = "Forwarded Conversation",
) -> CleanForward:
    if len(messages) != len(cleaned_bodies):
        raise ValueError("cleaned_bodies must line up with messages")
    if not messages:
        raise ValueError("thread has no messages")

    ordered = sorted(zip(messages, cleaned_bodies), key=lambda pair: pair[0].sent_at)
    last_index = len(ordered) - 1

    cleaned = [
        CleanedMessage(
            sender_display=display_name(message.sender),
            sent_at=message.sent_at,
            date_label=format_message_date(message.sent_at, now),
            body=body,
            attachments=list(message.attachments),
            is_latest=index == last_index,
        )
        for index, (message, body) in enumerate(ordered)
    ]

    sorted_messages = [message for message, _ in ordered]
    thread_subject = sorted_messages[0].subject or default_subject
    return CleanForward(
        subject=f"{subject_prefix} {thread_subject}",
        participants=extract_participants(sorted_messages),
        messages=cleaned,
        attachments=dedupe_attachments(sorted_messages),
    )


def _attachments_html(attachments: list[Attachment]) -> str:
    if not attachments:
        return ""
    items = "".join(
        f'<li style="margin:4px 0;">{escape_html(attachment.name)}'
        f' <span style="color:#6b7280;font-size:11px;">({attachment.size_kb} KB)</span></li>'
        for attachment in attachments
    )
    label = "file" if len(attachments) == 1 else "files"
    return (
        '<div style="margin-top:12px;padding:10px 12px;border-radius:8px;'
        'border:1px solid #dbeafe;background:#eff6ff;">'
        f'<div style="font-size:12px;font-weight:700;color:#1e40af;">'
        f"[ATTACHMENTS] ({len(attachments)} {label})</div>"
        f'<ul style="margin:0 0 0 20px;padding:0;font-size:13px;">{items}</ul>'
        "</div>"
    )


def _message_html(message: CleanedMessage) -> str:
    body_html = text_to_html(message.body)
    if not body_html:
        placeholder = NO_TEXT_WITH_ATTACHMENTS if message.attachments else NO_TEXT
        body_html = f'<span style="color:#9ca3af;font-style:italic;">{placeholder}</span>'

    dot_color = "#2563eb" if message.is_latest else "#9ca3af"
    border_color = "#dbeafe" if message.is_latest else "#f3f4f6"
    return (
        '<div style="display:flex;align-items:flex-start;margin-bottom:16px;">'
        f'<div style="width:12px;height:12px;margin-top:10px;border-radius:999px;background:{dot_color};"></div>'
        '<div style="flex:1;margin-left:12px;">'
        f'<div style="background:#ffffff;border-radius:10px;padding:14px 16px;border:1px solid {border_color};">'
        '<div style="display:flex;justify-content:space-between;margin-bottom:8px;">'
        f'<div style="font-size:14px;font-weight:600;color:#111827;">{escape_html(message.sender_display)}</div>'
        f'<div style="font-size:11px;color:#9ca3af;white-space:nowrap;">{escape_html(message.date_label)}</div>'
        "</div>"
        f'<div style="font-size:14px;color:#374151;line-height:1.6;">{body_html}</div>'
        f"{_attachments_html(message.attachments)}"
        "</div></div></div>"
    )


def render_forward_html(forward: CleanForward) -> str:
    participants_html = ""
    if len(forward.participants) > 1:
        participants_html = (
            '<p style="margin:4px 0 0 0;font-size:12px;color:#6b7280;">'
            f"Participants: {escape_html(', '.join(forward.participants))}"
            f" ({len(forward.participants)} people)</p>"
        )

    parts = [
        '<div style="font-family:-apple-system,BlinkMacSystemFont,\'Segoe UI\',Roboto,Helvetica,Arial,sans-serif;'
        'background:#f8fafc;padding:24px 16px;line-height:1.5;">'
        '<div style="max-width:760px;margin:0 auto;">'
        '<div style="background:#ffffff;border-radius:12px;padding:20px 24px;margin-bottom:20px;">'
        '<h2 style="margin:0 0 4px 0;font-size:22px;color:#111827;">Conversation Summary</h2>'
        '<p style="margin:0;font-size:14px;color:#6b7280;">'
        "Chronological view of this email thread (oldest to newest).</p>"
        f"{participants_html}"
        "</div>"
    ]
    parts.extend(_message_html(message) for message in forward.messages)
    parts.append("</div></div>")
    return "".join(parts)
