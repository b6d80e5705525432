# =============================================================================
# core/models.py  —  Data Models (the "nouns" of the system)
# =============================================================================
#
# These dataclasses define the shape of everything that flows between the
# catalog, the dispatcher, the handlers and the CRM data provider.
#
#   - ToolParameter / ToolDescriptor  →  the catalog entries callers see
#   - ToolInvocation                  →  one incoming request
#   - ToolResult / TextContent        →  the success/failure envelope
#   - Unresolved / Resolved           →  a deal's person/organization link
#   - DealFilter, DealLookup, ...     →  typed arguments, one per tool
#
# CRM entities themselves (deals, persons, organizations, ...) are NOT
# modelled here.  They are plain dicts owned by the provider; the core reads
# them and nests them into results but never changes them.
# =============================================================================

from dataclasses import dataclass, field
import json
from typing import Any, Optional, Union


# -----------------------------------------------------------------------------
# Catalog entries
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ToolParameter:
    """One named argument a tool accepts."""

    name: str                          # As the caller spells it, e.g. "pipelineId"
    type: str                          # "number" or "string"
    description: str
    required: bool = False
    enum: Optional[tuple[str, ...]] = None
    integer: bool = False              # Whole numbers only (ids); schema stays "number"

    def to_schema(self) -> dict:
        schema: dict[str, Any] = {"type": self.type, "description": self.description}
        if self.enum:
            schema["enum"] = list(self.enum)
        return schema


@dataclass(frozen=True)
class ToolDescriptor:
    """An immutable catalog entry: name, description and argument schema."""

    name: str
    description: str
    parameters: tuple[ToolParameter, ...] = ()

    def parameter(self, name: str) -> Optional[ToolParameter]:
        for param in self.parameters:
            if param.name == name:
                return param
        return None

    @property
    def required(self) -> list[str]:
        return [p.name for p in self.parameters if p.required]

    def input_schema(self) -> dict:
        """Render the parameters as a JSON-Schema object."""
        schema: dict[str, Any] = {
            "type": "object",
            "properties": {p.name: p.to_schema() for p in self.parameters},
        }
        if self.required:
            schema["required"] = self.required
        return schema

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema(),
        }


# -----------------------------------------------------------------------------
# Invocation and result envelope
# -----------------------------------------------------------------------------
@dataclass
class ToolInvocation:
    """A single request to run a named tool."""

    name: str
    arguments: dict = field(default_factory=dict)


@dataclass
class TextContent:
    text: str
    type: str = "text"


@dataclass
class ToolResult:
    """The envelope returned for every invocation.

    Exactly one of two shapes:
      - success: one text block holding the JSON-encoded payload
      - failure: one text block holding the error message, is_error=True
    """

    content: list[TextContent] = field(default_factory=list)
    is_error: bool = False

    @classmethod
    def success(cls, payload: Any) -> "ToolResult":
        text = json.dumps(payload, indent=2, default=str)
        return cls(content=[TextContent(text=text)])

    @classmethod
    def failure(cls, message: str) -> "ToolResult":
        return cls(content=[TextContent(text=message)], is_error=True)

    @property
    def text(self) -> str:
        return "\n".join(block.text for block in self.content)

    def payload(self) -> Any:
        """Decode the JSON payload of a success result."""
        if self.is_error:
            raise ValueError("Failure results carry no payload")
        return json.loads(self.text)

    def to_dict(self) -> dict:
        return {
            "content": [{"type": block.type, "text": block.text} for block in self.content],
            "isError": self.is_error,
        }


# -----------------------------------------------------------------------------
# Entity references (person_id / org_id on a deal)
# -----------------------------------------------------------------------------
# The provider sometimes inlines the related entity and sometimes only hands
# back its id.  The two cases are kept apart as distinct types so the
# enrichment handler branches on type, not on ad-hoc checks.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Unresolved:
    """A bare id that still needs a lookup."""

    id: int


@dataclass(frozen=True)
class Resolved:
    """An entity the provider already embedded."""

    entity: dict


EntityRef = Union[Unresolved, Resolved]


def parse_reference(value: Any) -> Optional[EntityRef]:
    """Classify a raw person_id / org_id value from a deal payload.

    Returns None when the reference is absent (None, 0, "", {}).
    """
    if not value:
        return None
    if isinstance(value, dict):
        return Resolved(entity=value)
    if isinstance(value, bool):
        raise ValueError(f"Unrecognised entity reference: {value!r}")
    if isinstance(value, int):
        return Unresolved(id=value)
    if isinstance(value, str) and value.strip().isdigit():
        return Unresolved(id=int(value.strip()))
    raise ValueError(f"Unrecognised entity reference: {value!r}")


# -----------------------------------------------------------------------------
# Typed tool arguments
# -----------------------------------------------------------------------------
# Callers use the catalog's camelCase names; these records carry snake_case
# fields and know how to turn themselves into Pipedrive query parameters.
# Arguments are assumed already validated (see core/validation.py).
# -----------------------------------------------------------------------------
def _drop_unset(params: dict) -> dict:
    return {key: value for key, value in params.items() if value is not None}


@dataclass(frozen=True)
class DealFilter:
    pipeline_id: Optional[int] = None
    stage_id: Optional[int] = None
    status: Optional[str] = None

    @classmethod
    def from_arguments(cls, arguments: dict) -> "DealFilter":
        return cls(
            pipeline_id=arguments.get("pipelineId"),
            stage_id=arguments.get("stageId"),
            status=arguments.get("status"),
        )

    def to_query(self) -> dict:
        return _drop_unset({
            "pipeline_id": self.pipeline_id,
            "stage_id": self.stage_id,
            "status": self.status,
        })


@dataclass(frozen=True)
class DealLookup:
    id: int

    @classmethod
    def from_arguments(cls, arguments: dict) -> "DealLookup":
        return cls(id=arguments["id"])


@dataclass(frozen=True)
class ActivityFilter:
    deal_id: Optional[int] = None
    user_id: Optional[int] = None
    type: Optional[str] = None

    @classmethod
    def from_arguments(cls, arguments: dict) -> "ActivityFilter":
        return cls(
            deal_id=arguments.get("dealId"),
            user_id=arguments.get("userId"),
            type=arguments.get("type"),
        )

    def to_query(self) -> dict:
        # Activities are owned by users; Pipedrive calls the filter owner_id.
        return _drop_unset({
            "deal_id": self.deal_id,
            "owner_id": self.user_id,
            "type": self.type,
        })


@dataclass(frozen=True)
class LeadFilter:
    owner_id: Optional[int] = None

    @classmethod
    def from_arguments(cls, arguments: dict) -> "LeadFilter":
        return cls(owner_id=arguments.get("ownerId"))

    def to_query(self) -> dict:
        return _drop_unset({"owner_id": self.owner_id})


@dataclass(frozen=True)
class StageFilter:
    pipeline_id: int

    @classmethod
    def from_arguments(cls, arguments: dict) -> "StageFilter":
        return cls(pipeline_id=arguments["pipelineId"])

    def to_query(self) -> dict:
        return {"pipeline_id": self.pipeline_id}
