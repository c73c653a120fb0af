import re

LIST_MARKER_RE = re.compile(r"^(\s*[-*+•]\s+|\s*\d+[.)]\s+)")
SHORT_LINE_MAX_CHARS = 40
SIGNIFICANT_INDENT = 3


def _has_significant_indent(line: str) -> bool:
    return line.startswith(" ") and len(line) - len(line.lstrip()) >= SIGNIFICANT_INDENT


def collapse_soft_line_breaks(text: str | None, short_line_max_chars: int = SHORT_LINE_MAX_CHARS) -> str:
    """Join soft-wrapped lines into paragraphs, keeping lists, indented blocks
    and runs of short lines as they were written.

    Paragraphs are separated by a single blank line in the result.
    """
    if not text:
        return ""

    lines = text.replace("\r\n", "\n").split("\n")
    paragraphs: list[str] = []
    current: list[str] = []
    structured = False

    for index, line in enumerate(lines):
        trimmed = line.strip()

        if not trimmed:
            if current:
                paragraphs.append(("\n" if structured else " ").join(current))
                current = []
                structured = False
            continue

        is_list_item = bool(LIST_MARKER_RE.match(trimmed))
        is_short = len(trimmed) < short_line_max_chars and 0 < index < len(lines) - 1

        if (is_list_item or _has_significant_indent(line)) and not structured:
            if current:
                paragraphs.append(" ".join(current))
                current = []
            structured = True

        # Two short lines in a row read as deliberate formatting (addresses, sign-offs).
        if is_short and current and len(current[-1].strip()) < short_line_max_chars:
            structured = True

        current.append(line if structured else trimmed)

    if current:
        paragraphs.append(("\n" if structured else " ").join(current))

    return "\n\n".join(paragraphs)
