# =============================================================================
# main.py  —  Interactive Console for the Pipedrive CRM Assistant
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py
#
# WHAT HAPPENS:
#   1. Loads .env (PIPEDRIVE_API_KEY, the model provider key, ...)
#   2. Creates the ADK agent (agent/crm_agent.py), which launches the MCP
#      server (tools/mcp_server.py) as a stdio subprocess
#   3. Reads questions at the crm> prompt and prints one answer per
#      question, listing each CRM tool call (with its arguments) first
#
# Typing "tools" shows the catalog; "quit", "exit" or "q" leaves.
#
# To serve the tools to some other MCP client instead, run the server on
# its own:  python -m tools.mcp_server
# =============================================================================

import asyncio
import sys
from typing import Optional

from dotenv import load_dotenv

# LiteLlm and the MCP subprocess both read their keys from the environment.
load_dotenv()

from google.adk.runners import Runner
from google.adk.sessions import InMemorySessionService
from google.genai import types

from agent.crm_agent import create_agent
from core.catalog import list_tools
from core.config import ConfigurationError, load_settings


APP_NAME = "pipedrive_assistant"
USER_ID = "console_user"

EXIT_COMMANDS = ("quit", "exit", "q")
TOOLS_COMMAND = "tools"

EXAMPLE_QUESTIONS = (
    "Which deals are open in the Sales pipeline?",
    "Who is the contact person on deal 42?",
    "What activities are planned for deal 42?",
    "How many leads does each user own?",
)

_RULE = "─" * 70


def describe_tool_call(name: str, args: Optional[dict] = None) -> str:
    """One console line for a tool call the agent made, e.g. get_deals(status='won')."""
    shown = ", ".join(f"{k}={v!r}" for k, v in (args or {}).items() if v is not None)
    return f"  ↳ {name}({shown})"


def describe_catalog() -> str:
    lines = ["CRM tools available to the assistant:"]
    for tool in list_tools():
        params = ", ".join(p.name for p in tool.parameters)
        lines.append(f"  {tool.name}({params}): {tool.description}")
    return "\n".join(lines)


async def collect_answer(events) -> str:
    """Drain one turn's event stream, echoing tool calls as they happen.

    Returns the last text the agent produced, or "" if it produced none.
    """
    answer = ""
    async for event in events:
        if not (event.content and event.content.parts):
            continue
        for part in event.content.parts:
            call = getattr(part, "function_call", None)
            if call:
                print(describe_tool_call(call.name, call.args))
            if getattr(part, "text", None):
                answer = part.text
    return answer


def _print_banner() -> None:
    print(_RULE)
    print("  Pipedrive CRM assistant  (read-only)")
    print(_RULE)
    print("Try asking:")
    for question in EXAMPLE_QUESTIONS:
        print(f"  - {question}")
    print(f"\n'{TOOLS_COMMAND}' lists the CRM tools; 'quit' leaves.\n")


async def run_agent():
    """Answer CRM questions from the terminal until the user quits."""
    print("Starting the CRM tool server...")
    agent = create_agent()

    session_service = InMemorySessionService()
    runner = Runner(agent=agent, app_name=APP_NAME, session_service=session_service)
    session = await session_service.create_session(app_name=APP_NAME, user_id=USER_ID)

    _print_banner()

    while True:
        try:
            question = input("crm> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if question.lower() in EXIT_COMMANDS:
            break
        if not question:
            continue
        if question.lower() == TOOLS_COMMAND:
            print(describe_catalog() + "\n")
            continue

        message = types.Content(role="user", parts=[types.Part(text=question)])
        answer = await collect_answer(
            runner.run_async(user_id=USER_ID, session_id=session.id, new_message=message)
        )

        print(_RULE)
        print(answer or "(no answer: the model returned nothing for this question)")
        print(_RULE + "\n")


if __name__ == "__main__":
    # A missing key would otherwise only surface inside the MCP subprocess.
    try:
        load_settings()
    except ConfigurationError as exc:
        sys.stderr.write(f"{exc}\n")
        sys.exit(1)
    asyncio.run(run_agent())
