"""Forward-scanning classifier that keeps only the newly written part of a body.

Lines are evaluated in order against ``RULES``; the first matching rule decides
what happens to the line. A ``STOP`` rule ends the scan for good, so the
retained lines are always a prefix of the input (minus skipped quote lines).
"""

import enum
import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Optional

logger = logging.getLogger(__name__)

REPLY_HEADER_DATE_RE = re.compile(r"^on\s+\w+,?\s+\w+\s+\d+,?\s+\d{4}", re.IGNORECASE)
REPLY_HEADER_ALT_RE = re.compile(r"^on\s+(\w+\s+\d+,?\s+\d{4}|\d+/\d+/\d+)", re.IGNORECASE)
GMAIL_FORWARD_RE = re.compile(r"^-{10}\s*forwarded message\s*-{10}$", re.IGNORECASE)
IOS_FORWARD_RE = re.compile(r"^begin forwarded message:$", re.IGNORECASE)
ORIGINAL_MESSAGE_RE = re.compile(r"^-{5,}\s*original message\s*-{5,}$", re.IGNORECASE)
UNDERSCORE_SEPARATOR_RE = re.compile(r"^_{20,}$")
LONG_SEPARATOR_RE = re.compile(r"^[-_]{10,}$")
COLLAPSED_QUOTE_RE = re.compile(r"^(\.{3}|…)$")
WROTE_ALONE_RE = re.compile(r"^.*wrote:\s*$", re.IGNORECASE)
EMAIL_LINE_RE = re.compile(r"^[^<]+<[^@]+@[^>]+>\s*(wrote|said|replied)?\s*:?\s*$", re.IGNORECASE)
DISCLAIMER_RE = re.compile(
    r"^(for intended recipients only"
    r"|confidentiality notice"
    r"|this message \(including any attachments\)"
    r"|this e-mail and any attachments)",
    re.IGNORECASE,
)
SIGNATURE_SEPARATOR_RE = re.compile(r"^(--|__|---|\*\*\*|___|-- )$")
MOBILE_SIGNATURE_RE = re.compile(r"^(sent from my |get outlook for |sent via |download outlook)", re.IGNORECASE)

FROM_HEADER_RE = re.compile(r"^from:\s*.+@", re.IGNORECASE)
TO_HEADER_RE = re.compile(r"^to:\s*.+@", re.IGNORECASE)
CC_HEADER_RE = re.compile(r"^cc:\s*.+@", re.IGNORECASE)
SUBJECT_HEADER_RE = re.compile(r"^subject:\s*", re.IGNORECASE)
DATE_HEADER_RE = re.compile(r"^date:\s*", re.IGNORECASE)
SENT_HEADER_RE = re.compile(r"^sent:\s*", re.IGNORECASE)

HEADER_PATTERNS = (FROM_HEADER_RE, TO_HEADER_RE, CC_HEADER_RE, SUBJECT_HEADER_RE, DATE_HEADER_RE)
SENT_NEIGHBOUR_PATTERNS = (FROM_HEADER_RE, TO_HEADER_RE, SUBJECT_HEADER_RE)


@dataclass(frozen=True)
class DetectorLimits:
    min_lines_before_signature: int = 5
    min_lines_before_headers: int = 3
    wrote_line_max_chars: int = 100
    reply_wrote_lookahead: int = 3
    reply_from_lookahead: int = 2


DEFAULT_LIMITS = DetectorLimits()


@dataclass(frozen=True)
class LineRecord:
    content: str
    trimmed: str
    lower: str
    indent: int

    @classmethod
    def from_line(cls, line: str) -> "LineRecord":
        trimmed = line.strip()
        return cls(
            content=line,
            trimmed=trimmed,
            lower=trimmed.lower(),
            indent=len(line) - len(line.lstrip()),
        )

    @property
    def is_blank(self) -> bool:
        return self.trimmed == ""


@dataclass
class DetectionState:
    retained: list[LineRecord] = field(default_factory=list)
    header_count: int = 0


@dataclass(frozen=True)
class LineContext:
    records: list[LineRecord]
    index: int
    state: DetectionState
    limits: DetectorLimits

    @property
    def record(self) -> LineRecord:
        return self.records[self.index]

    @property
    def retained_count(self) -> int:
        return len(self.state.retained)

    def neighbour(self, offset: int) -> str:
        position = self.index + offset
        if 0 <= position < len(self.records):
            return self.records[position].lower
        return ""


class Action(enum.Enum):
    KEEP = "keep"
    STOP = "stop"
    SKIP = "skip"
    HEADER = "header"


@dataclass(frozen=True)
class Rule:
    name: str
    action: Action
    predicate: Callable[[LineContext], bool]
    retract: Optional[Callable[[LineContext], bool]] = None


def is_header_line(text: str) -> bool:
    return any(pattern.match(text) for pattern in HEADER_PATTERNS)


def _past_signature_threshold(ctx: LineContext) -> bool:
    return ctx.retained_count > ctx.limits.min_lines_before_signature


def _past_header_threshold(ctx: LineContext) -> bool:
    return ctx.retained_count > ctx.limits.min_lines_before_headers


def _disclaimer(ctx: LineContext) -> bool:
    return _past_signature_threshold(ctx) and bool(DISCLAIMER_RE.match(ctx.record.lower))


def _collapsed_quote(ctx: LineContext) -> bool:
    return bool(COLLAPSED_QUOTE_RE.match(ctx.record.trimmed))


def _forward_banner(ctx: LineContext) -> bool:
    trimmed = ctx.record.trimmed
    return any(
        pattern.match(trimmed)
        for pattern in (GMAIL_FORWARD_RE, IOS_FORWARD_RE, ORIGINAL_MESSAGE_RE, UNDERSCORE_SEPARATOR_RE)
    )


def _long_separator(ctx: LineContext) -> bool:
    return _past_signature_threshold(ctx) and bool(LONG_SEPARATOR_RE.match(ctx.record.trimmed))


def _wrote_line(ctx: LineContext) -> bool:
    record = ctx.record
    return bool(WROTE_ALONE_RE.match(record.lower)) and len(record.trimmed) < ctx.limits.wrote_line_max_chars


def _name_email_line(ctx: LineContext) -> bool:
    return bool(EMAIL_LINE_RE.match(ctx.record.trimmed))


def _reply_header(ctx: LineContext) -> bool:
    lower = ctx.record.lower
    if not (REPLY_HEADER_DATE_RE.match(lower) or REPLY_HEADER_ALT_RE.match(lower)):
        return False
    if "wrote:" in lower:
        return True
    if any("wrote:" in ctx.neighbour(offset) for offset in range(1, ctx.limits.reply_wrote_lookahead + 1)):
        return True
    return any(
        FROM_HEADER_RE.match(ctx.neighbour(offset)) for offset in range(1, ctx.limits.reply_from_lookahead + 1)
    )


def _consecutive_headers(ctx: LineContext) -> bool:
    return _past_header_threshold(ctx) and ctx.state.header_count >= 1 and is_header_line(ctx.record.trimmed)


def _sent_header_block(ctx: LineContext) -> bool:
    if not _past_header_threshold(ctx) or not SENT_HEADER_RE.match(ctx.record.trimmed):
        return False
    if FROM_HEADER_RE.match(ctx.neighbour(-1)):
        return True
    following = ctx.neighbour(1)
    return any(pattern.match(following) for pattern in SENT_NEIGHBOUR_PATTERNS)


def _previous_is_from_header(ctx: LineContext) -> bool:
    return bool(FROM_HEADER_RE.match(ctx.neighbour(-1)))


def _signature(ctx: LineContext) -> bool:
    trimmed = ctx.record.trimmed
    return _past_signature_threshold(ctx) and bool(
        SIGNATURE_SEPARATOR_RE.match(trimmed) or MOBILE_SIGNATURE_RE.match(trimmed)
    )


def _single_header(ctx: LineContext) -> bool:
    return _past_header_threshold(ctx) and is_header_line(ctx.record.trimmed)


RULES: tuple[Rule, ...] = (
    Rule("blank", Action.KEEP, lambda ctx: ctx.record.is_blank),
    Rule("disclaimer", Action.STOP, _disclaimer),
    Rule("collapsed_quote", Action.STOP, _collapsed_quote),
    Rule("forward_banner", Action.STOP, _forward_banner),
    Rule("long_separator", Action.STOP, _long_separator),
    Rule("wrote_line", Action.STOP, _wrote_line),
    Rule("name_email_line", Action.STOP, _name_email_line),
    Rule("reply_header", Action.STOP, _reply_header),
    Rule("consecutive_headers", Action.STOP, _consecutive_headers, retract=lambda ctx: True),
    Rule("sent_header_block", Action.STOP, _sent_header_block, retract=_previous_is_from_header),
    Rule("signature", Action.STOP, _signature),
    Rule("quoted_line", Action.SKIP, lambda ctx: ctx.record.trimmed.startswith(">")),
    Rule("header_line", Action.HEADER, _single_header),
    Rule("content", Action.KEEP, lambda ctx: True),
)


def match_rule(ctx: LineContext, rules: tuple[Rule, ...] = RULES) -> Rule:
    for rule in rules:
        if rule.predicate(ctx):
            return rule
    raise LookupError(f"no rule matched line {ctx.index}")


def detect_new_content(lines: list[str], limits: DetectorLimits | None = None) -> list[str]:
    """Return the retained prefix of ``lines`` with trailing blank lines removed."""
    limits = limits or DEFAULT_LIMITS
    records = [LineRecord.from_line(line) for line in lines]
    state = DetectionState()

    for index in range(len(records)):
        ctx = LineContext(records=records, index=index, state=state, limits=limits)
        rule = match_rule(ctx)

        if rule.action is Action.STOP:
            if rule.retract is not None and rule.retract(ctx) and state.retained:
                state.retained.pop()
            logger.debug(
                "Quote boundary detected",
                extra={"event": "quote_boundary_detected", "rule": rule.name, "line_index": index},
            )
            break
        if rule.action is Action.SKIP:
            continue
        if rule.action is Action.HEADER:
            state.header_count += 1
        else:
            state.header_count = 0
        state.retained.append(ctx.record)

    retained = state.retained
    while retained and retained[-1].is_blank:
        retained.pop()
    return [record.content for record in retained]
