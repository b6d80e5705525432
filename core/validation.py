# =============================================================================
# core/validation.py  —  Argument Validation
# =============================================================================
#
# Checks a caller's arguments against the tool's catalog entry before any
# provider call is made.  Rejects unknown names, missing required values,
# wrong primitive types, non-finite or fractional ids and values outside
# an enum.
#
# None is treated as "not provided": MCP clients often send explicit nulls
# for optional filters.
# =============================================================================

import math
from typing import Any

from core.models import ToolDescriptor, ToolParameter


class InvalidArgumentsError(ValueError):
    """Raised when arguments do not match a tool's declared parameters."""


def _check_number(tool: str, param: ToolParameter, value: Any) -> Any:
    # bool is an int subclass; a True filter is never what the caller meant.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidArgumentsError(
            f"Argument '{param.name}' for {tool} must be a number, got {value!r}"
        )
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidArgumentsError(
                f"Argument '{param.name}' for {tool} must be a finite number, got {value!r}"
            )
        if value.is_integer():
            return int(value)
        if param.integer:
            raise InvalidArgumentsError(
                f"Argument '{param.name}' for {tool} must be a whole number, got {value!r}"
            )
    return value


def _check_string(tool: str, param: ToolParameter, value: Any) -> Any:
    if not isinstance(value, str):
        raise InvalidArgumentsError(
            f"Argument '{param.name}' for {tool} must be a string, got {value!r}"
        )
    if param.enum and value not in param.enum:
        allowed = ", ".join(param.enum)
        raise InvalidArgumentsError(
            f"Argument '{param.name}' for {tool} must be one of: {allowed} (got {value!r})"
        )
    return value


_CHECKS = {
    "number": _check_number,
    "string": _check_string,
}


def validate_arguments(descriptor: ToolDescriptor, arguments: Any) -> dict:
    """Return a cleaned copy of ``arguments`` or raise InvalidArgumentsError.

    Args:
        descriptor: The catalog entry for the tool being called.
        arguments: The raw argument mapping from the caller (None means {}).

    Returns:
        A new dict with unset values removed and integral floats narrowed
        to int.
    """
    tool = descriptor.name
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise InvalidArgumentsError(
            f"Arguments for {tool} must be an object, got {type(arguments).__name__}"
        )

    provided = {key: value for key, value in arguments.items() if value is not None}

    unknown = sorted(key for key in provided if descriptor.parameter(key) is None)
    if unknown:
        raise InvalidArgumentsError(
            f"Unknown argument(s) for {tool}: {', '.join(unknown)}"
        )

    missing = [name for name in descriptor.required if name not in provided]
    if missing:
        raise InvalidArgumentsError(
            f"Missing required argument(s) for {tool}: {', '.join(missing)}"
        )

    cleaned = {}
    for key, value in provided.items():
        param = descriptor.parameter(key)
        cleaned[key] = _CHECKS[param.type](tool, param, value)
    return cleaned
