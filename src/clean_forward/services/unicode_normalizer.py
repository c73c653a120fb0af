import re

PUNCTUATION_TABLE = {
    0x2018: "'",
    0x2019: "'",
    0x2032: "'",
    0x02BC: "'",
    0x201C: '"',
    0x201D: '"',
    0x2013: "-",
    0x2014: "-",
    0x00A0: " ",
    0xFFFD: None,
    0x200B: None,
    0x200C: None,
    0x200D: None,
    0xFEFF: None,
    # variation selector-16
    0xFE0F: None,
}

PRESERVED_SYMBOLS = frozenset(
    "•‣⁃◦"  # bullets
    "→←↑↓"  # arrows
    "✓✔✗✘"  # check and cross marks
    "★☆"  # stars
)

# Astral-plane characters are UTF-16 surrogate pairs in mail clients; lone
# surrogates only survive a lossy decode.
_ASTRAL_RE = re.compile(r"[\U00010000-\U0010FFFF\ud800-\udfff]")
_SYMBOL_RE = re.compile(r"[\u2600-\u26ff\u2700-\u27bf]")


def _redecode(text: str) -> str:
    try:
        return text.encode("utf-8", "surrogateescape").decode("utf-8")
    except UnicodeError:
        return text


def _prune_symbol(match: re.Match) -> str:
    symbol = match.group(0)
    return symbol if symbol in PRESERVED_SYMBOLS else ""


def normalize_unicode(text: str | None) -> str:
    if not text:
        return ""

    text = _redecode(text)
    text = text.translate(PUNCTUATION_TABLE)
    text = _ASTRAL_RE.sub("", text)
    return _SYMBOL_RE.sub(_prune_symbol, text)
