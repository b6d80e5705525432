# =============================================================================
# core/dispatcher.py  —  The Dispatcher (single entry point for every call)
# =============================================================================
#
# HOW A CALL FLOWS:
#   1. Look the tool name up in the catalog   → "Unknown tool: <name>" if absent
#   2. Validate the arguments                 → validation message on mismatch
#   3. Run the handler (provider calls)       → the fault's message on error
#   4. Wrap the payload in a ToolResult
#
# Steps 2-4 sit inside one failure boundary: any Exception raised there is
# turned into a failure ToolResult, so dispatch() always returns exactly one
# result and never raises to the transport.
# =============================================================================

import logging
import time
from typing import Iterable, Optional

from core.catalog import TOOL_CATALOG
from core.handlers import CrmToolHandlers
from core.models import ToolDescriptor, ToolInvocation, ToolResult
from core.provider import CrmDataProvider
from core.validation import validate_arguments


logger = logging.getLogger(__name__)


def _describe_fault(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


class Dispatcher:
    """Routes tool invocations to handlers and builds the result envelope."""

    def __init__(
        self,
        provider: CrmDataProvider,
        catalog: Iterable[ToolDescriptor] = TOOL_CATALOG,
    ):
        self._catalog = tuple(catalog)
        self._descriptors = {tool.name: tool for tool in self._catalog}
        self._handlers = CrmToolHandlers(provider)

        missing = [name for name in self._descriptors if self._handlers.handler_for(name) is None]
        if missing:
            raise ValueError(f"No handler for catalog tool(s): {', '.join(missing)}")

    def list_tools(self) -> list[ToolDescriptor]:
        return list(self._catalog)

    async def dispatch(self, invocation: ToolInvocation) -> ToolResult:
        started = time.perf_counter()
        result = await self._run(invocation)
        elapsed_ms = (time.perf_counter() - started) * 1000

        if result.is_error:
            logger.warning("%s failed after %.0f ms: %s", invocation.name, elapsed_ms, result.text)
        else:
            logger.info("%s succeeded in %.0f ms", invocation.name, elapsed_ms)
        return result

    async def call_tool(self, name: str, arguments: Optional[dict] = None) -> ToolResult:
        return await self.dispatch(ToolInvocation(name=name, arguments=arguments or {}))

    async def _run(self, invocation: ToolInvocation) -> ToolResult:
        descriptor = self._descriptors.get(invocation.name)
        if descriptor is None:
            return ToolResult.failure(f"Unknown tool: {invocation.name}")

        try:
            arguments = validate_arguments(descriptor, invocation.arguments)
            handler = self._handlers.handler_for(descriptor.name)
            payload = await handler(arguments)
            return ToolResult.success(payload)
        except Exception as exc:
            logger.debug("%s raised", invocation.name, exc_info=True)
            return ToolResult.failure(_describe_fault(exc))
