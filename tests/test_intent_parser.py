from __future__ import annotations

from lumen_engine.chat.intent_parser import parse_intent


def test_plain_text_is_a_prompt_draft() -> None:
    intent = parse_intent("  a quiet forest  ")
    assert intent.action == "draft"
    assert intent.prompt == "a quiet forest"


def test_empty_line_is_blur() -> None:
    assert parse_intent("   ").action == "blur"


def test_ref_accepts_quoted_path() -> None:
    intent = parse_intent('/ref "/tmp/my refs/cat.png"')
    assert intent.action == "set_reference"
    assert intent.command_args["path"] == "/tmp/my refs/cat.png"


def test_raw_arguments_are_passed_through() -> None:
    intent = parse_intent("/quality HD")
    assert intent.action == "set_quality"
    assert intent.command_args["arg"] == "HD"
    assert parse_intent("/ratio 16:9").command_args["arg"] == "16:9"


def test_commands_without_args() -> None:
    assert parse_intent("/undo").action == "undo"
    assert parse_intent("/clear_ref").action == "clear_reference"
    assert parse_intent("/QUIT").action == "quit"


def test_unknown_command() -> None:
    intent = parse_intent("/teleport now")
    assert intent.action == "unknown"
    assert intent.command_args == {"command": "teleport"}
