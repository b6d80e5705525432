"""Console helpers: tool-call echo, catalog listing, answer collection."""

from types import SimpleNamespace

import main
from conftest import run
from core.catalog import tool_names


def _event(*parts):
    return SimpleNamespace(content=SimpleNamespace(parts=list(parts)))


def _text(text):
    return SimpleNamespace(text=text, function_call=None)


def _call(name, args):
    return SimpleNamespace(text=None, function_call=SimpleNamespace(name=name, args=args))


async def _stream(*events):
    for event in events:
        yield event


def test_tool_call_line_shows_set_arguments_only():
    line = main.describe_tool_call("get_deals", {"status": "won", "stageId": None})
    assert line == "  ↳ get_deals(status='won')"
    assert main.describe_tool_call("get_users", None) == "  ↳ get_users()"


def test_catalog_listing_names_every_tool():
    listing = main.describe_catalog()
    for name in tool_names():
        assert f"  {name}(" in listing
    assert "get_stages(pipelineId)" in listing


def test_collect_answer_keeps_last_text_and_echoes_calls(capsys):
    events = _stream(
        _event(_call("get_deal_details", {"id": 42})),
        SimpleNamespace(content=None),
        _event(_text("Deal 42 belongs to Grace Hopper.")),
    )

    answer = run(main.collect_answer(events))

    assert answer == "Deal 42 belongs to Grace Hopper."
    assert "  ↳ get_deal_details(id=42)" in capsys.readouterr().out


def test_collect_answer_is_empty_without_text():
    assert run(main.collect_answer(_stream(_event(_call("get_users", {}))))) == ""


def test_exit_and_tools_commands_do_not_overlap():
    assert main.TOOLS_COMMAND not in main.EXIT_COMMANDS
    assert "q" in main.EXIT_COMMANDS
