import re

HTML_ESCAPES = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#39;",
    }
)

URL_RE = re.compile(r"https?://[^\s<]+")
TRAILING_PUNCTUATION_RE = re.compile(r"[.,;!?]+$")
LINK_STYLE = "color:#2563eb;text-decoration:underline;"


def escape_html(value: object) -> str:
    if value is None or value == "":
        return ""
    return str(value).translate(HTML_ESCAPES)


def _link(match: re.Match) -> str:
    url = match.group(0)
    clean_url = TRAILING_PUNCTUATION_RE.sub("", url)
    trailing = url[len(clean_url):]
    return f'<a href="{clean_url}" style="{LINK_STYLE}">{clean_url}</a>{trailing}'


def linkify_urls(text: str | None) -> str:
    if not text:
        return ""
    return URL_RE.sub(_link, text)


def text_to_html(text: str | None) -> str:
    if not text:
        return ""
    return linkify_urls(escape_html(text)).replace("\n", "<br>")
