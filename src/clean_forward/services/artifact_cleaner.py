import re

ENTITIES = (
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&amp;", "&"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&nbsp;", " "),
)

# "573-442-1838 <5734421838>" or "<tel:5734421838>"
PHONE_DUPLICATE_RE = re.compile(r"(\d{3}[-.]?\d{3}[-.]?\d{4})\s*<(?:tel:)?(\d+)>")
# "example.com <https://example.com/page>"
LINK_DUPLICATE_RE = re.compile(r"([a-zA-Z0-9.-]+\.[a-zA-Z]{2,})\s*<(https?://[^>]+)>")
# Only collapsed when the bracketed address repeats the displayed one exactly.
MAILTO_DUPLICATE_RE = re.compile(r"([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})\s*<mailto:\1>")
BARE_URL_RE = re.compile(r"<(https?://[^>]+)>")
ESCAPED_FRAGMENT_RE = re.compile(r"\s*<[^>]*&[gl]t;[^>]*>")


def decode_entities(text: str) -> str:
    for entity, literal in ENTITIES:
        text = text.replace(entity, literal)
    return text


def clean_plain_text_artifacts(text: str | None) -> str:
    """Undo the link and entity noise left behind by HTML-to-text conversion."""
    if not text:
        return ""

    text = decode_entities(text)
    text = PHONE_DUPLICATE_RE.sub(r"\1", text)
    text = LINK_DUPLICATE_RE.sub(r"\2", text)
    text = MAILTO_DUPLICATE_RE.sub(r"\1", text)
    text = BARE_URL_RE.sub(r"\1", text)
    return ESCAPED_FRAGMENT_RE.sub("", text)
