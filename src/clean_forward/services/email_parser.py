from clean_forward.services.artifact_cleaner import clean_plain_text_artifacts
from clean_forward.services.quote_detector import DetectorLimits, detect_new_content
from clean_forward.services.reflow import SHORT_LINE_MAX_CHARS, collapse_soft_line_breaks
from clean_forward.services.unicode_normalizer import normalize_unicode


def split_lines(text: str) -> list[str]:
    return text.replace("\r\n", "\n").replace("\r", "\n").split("\n")


def clean_body(
    raw_text: str | None,
    limits: DetectorLimits | None = None,
    short_line_max_chars: int = SHORT_LINE_MAX_CHARS,
) -> str:
    """Reduce a plain-text message body to the content its sender actually wrote.

    Never raises on odd input; an empty or missing body gives an empty string.
    """
    text = normalize_unicode(raw_text)
    text = clean_plain_text_artifacts(text)
    if not text:
        return ""

    kept = detect_new_content(split_lines(text), limits)
    return collapse_soft_line_breaks("\n".join(kept), short_line_max_chars).strip()
