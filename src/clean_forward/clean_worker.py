from __future__ import annotations

import argparse
import json
import sys

from clean_forward.config import get_settings
from clean_forward.services.email_parser import clean_body
from clean_forward.services.logging_config import configure_logging
from clean_forward.services.renderer import text_to_html


def _read_sources(paths: list[str]) -> list[tuple[str, str]]:
    if not paths:
        return [("<stdin>", sys.stdin.buffer.read().decode("utf-8", "surrogateescape"))]
    sources = []
    for path in paths:
        with open(path, encoding="utf-8", errors="surrogateescape") as handle:
            sources.append((path, handle.read()))
    return sources


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Strip quoted history and signatures from plain-text email bodies.")
    parser.add_argument("paths", nargs="*", help="Files holding raw message bodies; reads stdin when omitted.")
    parser.add_argument("--html", action="store_true", help="Print the cleaned body rendered as HTML.")
    parser.add_argument("--json", action="store_true", help="Print one JSON document per input.")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        sources = _read_sources(args.paths)
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    for source, raw in sources:
        cleaned = clean_body(raw, settings.detector_limits, settings.reflow_short_line_max_chars)
        if args.json:
            payload = {"source": source, "body": cleaned}
            if args.html:
                payload["html"] = text_to_html(cleaned)
            print(json.dumps(payload, indent=2, sort_keys=True))
        elif args.html:
            print(text_to_html(cleaned))
        else:
            print(cleaned)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
