# tools.py
# Tool registry: function tools the oracle may call for data it needs
# (synthetic identities for sign-up forms and the like).
# The loop hands the registry an oracle response and never calls handlers
# directly.

from typing import Any, Callable, Iterable

from faker import Faker
from pydantic import BaseModel, ConfigDict, Field

from page_pilot import display
from page_pilot.models import ToolCall, ToolResult

_faker = Faker()


class ToolDefinition(BaseModel):
    """A named zero-argument tool and the schema advertised to the oracle."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    description: str
    parameters: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )
    result_type: str = Field(default="string", description="JSON type of the handler's output.")
    handler: Callable[[], str] = Field(..., exclude=True)

    def as_function_tool(self) -> dict[str, Any]:
        return {
            "type": "function",
            "name": self.name,
            "strict": False,
            "description": self.description,
            "parameters": self.parameters,
        }


BUILTIN_TOOLS: list[ToolDefinition] = [
    ToolDefinition(
        name="get_email",
        description="Generates an email address.",
        handler=lambda: _faker.email(),
    ),
    ToolDefinition(
        name="get_name",
        description="Generates a person's full name.",
        handler=lambda: _faker.name(),
    ),
    ToolDefinition(
        name="get_phone_number",
        description="Generates a phone number.",
        handler=lambda: _faker.phone_number(),
    ),
    ToolDefinition(
        name="get_address",
        description="Generates a postal address on a single line.",
        handler=lambda: _faker.address().replace("\n", ", "),
    ),
    ToolDefinition(
        name="get_company",
        description="Generates a company name.",
        handler=lambda: _faker.company(),
    ),
    ToolDefinition(
        name="get_password",
        description="Generates a strong password with letters, digits and symbols.",
        handler=lambda: _faker.password(length=14),
    ),
]


def _function_calls(response: Any) -> list[ToolCall]:
    calls: list[ToolCall] = []
    for item in getattr(response, "output", None) or []:
        if getattr(item, "type", None) != "function_call":
            continue
        calls.append(
            ToolCall(
                call_id=item.call_id,
                name=item.name,
                arguments=getattr(item, "arguments", None) or "{}",
            )
        )
    return calls


class ToolRegistry:
    """Maps tool names to handlers and formats their outputs for the oracle."""

    def __init__(self, tools: Iterable[ToolDefinition] = ()) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: ToolDefinition) -> None:
        """Add a tool; a later registration replaces an earlier one of the same name."""
        self._tools[tool.name] = tool

    def get(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def manifest(self) -> list[dict[str, Any]]:
        return [tool.as_function_tool() for tool in self._tools.values()]

    def call(self, call: ToolCall) -> ToolResult:
        tool = self._tools.get(call.name)
        output = tool.handler() if tool is not None else f"Unknown function: {call.name}"
        display.tool_call(call.name, output)
        return ToolResult(call_id=call.call_id, output=output)

    def resolve(self, response: Any) -> list[ToolResult]:
        """Answer every function call in an oracle turn, in order."""
        return [self.call(call) for call in _function_calls(response)]


def default_registry(extra: Iterable[ToolDefinition] = ()) -> ToolRegistry:
    """Builtin tools plus caller-supplied ones (which win on name clashes)."""
    return ToolRegistry([*BUILTIN_TOOLS, *extra])
