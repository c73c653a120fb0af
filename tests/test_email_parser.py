from clean_forward.services.email_parser import clean_body, split_lines
from clean_forward.services.quote_detector import DetectorLimits


def test_empty_or_missing_body() -> None:
    assert clean_body("") == ""
    assert clean_body(None) == ""


def test_reply_cut_at_on_wrote_line() -> None:
    raw = "Hi Bob,\n\nThanks!\n\nOn Mon, Jan 5, 2026 at 3:00 PM Alice <alice@x.com> wrote:\n> old content"
    assert clean_body(raw) == "Hi Bob,\n\nThanks!"


def test_signature_removed_after_six_lines() -> None:
    raw = (
        "Hi team,\n"
        "\n"
        "The quarterly report is attached for your review before Friday.\n"
        "Please send any comments to me directly.\n"
        "\n"
        "Best,\n"
        "--\n"
        "John Doe\n"
        "Sent from my iPhone"
    )
    cleaned = clean_body(raw)
    assert cleaned == (
        "Hi team,\n"
        "\n"
        "The quarterly report is attached for your review before Friday. "
        "Please send any comments to me directly.\n"
        "\n"
        "Best,"
    )
    assert "John Doe" not in cleaned
    assert "iPhone" not in cleaned


def test_list_block_is_preserved() -> None:
    raw = "Shopping list:\n- Eggs\n- Milk\n- Bread\n\nThanks"
    cleaned = clean_body(raw)
    assert "- Eggs\n- Milk\n- Bread" in cleaned
    assert cleaned.endswith("\n\nThanks")


def test_duplicate_link_artifact_collapses() -> None:
    assert clean_body("Check example.com <https://example.com/page> today") == (
        "Check https://example.com/page today"
    )


def test_emoji_removed_and_result_trimmed() -> None:
    assert clean_body("Great job! ✓ \U0001F389") == "Great job! ✓"


def test_keeps_new_content() -> None:
    raw = "Thanks, approved.\n\n- Paul"
    assert clean_body(raw) == "Thanks, approved.\n\n- Paul"


def test_outlook_header_block_is_cut() -> None:
    raw = (
        "Approved, go ahead.\n"
        "\n"
        "Thanks,\n"
        "Paul\n"
        "\n"
        "From: Alice <alice@example.com>\n"
        "Sent: Monday, January 5, 2026 3:00 PM\n"
        "To: Paul <paul@example.com>\n"
        "Subject: Budget\n"
        "\n"
        "Can you approve the budget?"
    )
    assert clean_body(raw) == "Approved, go ahead.\n\nThanks, Paul"


def test_forwarded_message_banner_is_cut() -> None:
    raw = "FYI, see below.\n\n---------- Forwarded message ----------\nFrom: Alice <alice@x.com>\nHello"
    assert clean_body(raw) == "FYI, see below."


def test_crlf_body() -> None:
    raw = "Hello there\r\n\r\nOn Tue, Feb 3, 2026 at 9:00 AM Bob <bob@x.com> wrote:\r\n> hi"
    assert clean_body(raw) == "Hello there"


def test_entity_escaped_quote_lines_are_dropped() -> None:
    assert clean_body("Sure thing.\n\n&gt; previous message\n&gt; more") == "Sure thing."


def test_nothing_after_the_cut_survives() -> None:
    raw = "Short note.\n...\nNew text after the marker"
    cleaned = clean_body(raw)
    assert cleaned == "Short note."
    assert "New text" not in cleaned


def test_limits_can_be_overridden() -> None:
    raw = "One\nTwo\n--\nSignature"
    assert clean_body(raw) == "One\nTwo\n--\nSignature"
    assert clean_body(raw, DetectorLimits(min_lines_before_signature=1)) == "One Two"


def test_split_lines_normalizes_terminators() -> None:
    assert split_lines("a\r\nb\rc\nd") == ["a", "b", "c", "d"]
