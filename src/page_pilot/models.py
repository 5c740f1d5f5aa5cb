# models.py
# Data contracts for the page_pilot harness.
# No business logic lives here: pure schema and validation.

from collections.abc import Mapping
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


class Point(BaseModel):
    x: int
    y: int


class ClickAction(BaseModel):
    type: Literal["click"] = "click"
    x: int
    y: int
    button: str = "left"


class DoubleClickAction(BaseModel):
    type: Literal["double_click"] = "double_click"
    x: int
    y: int


class DragAction(BaseModel):
    type: Literal["drag"] = "drag"
    path: list[Point] = Field(..., min_length=1)


class KeypressAction(BaseModel):
    type: Literal["keypress"] = "keypress"
    keys: list[str]


class MoveAction(BaseModel):
    type: Literal["move"] = "move"
    x: int
    y: int


class ScrollAction(BaseModel):
    type: Literal["scroll"] = "scroll"
    x: int
    y: int
    scroll_x: int = 0
    scroll_y: int = 0


class TypeAction(BaseModel):
    type: Literal["type"] = "type"
    text: str


class WaitAction(BaseModel):
    type: Literal["wait"] = "wait"


class ScreenshotAction(BaseModel):
    type: Literal["screenshot"] = "screenshot"


class UnknownAction(BaseModel):
    """Default arm for action kinds the executor does not recognize."""

    model_config = ConfigDict(extra="allow")

    type: str = "unknown"


Action = Union[
    ClickAction,
    DoubleClickAction,
    DragAction,
    KeypressAction,
    MoveAction,
    ScrollAction,
    TypeAction,
    WaitAction,
    ScreenshotAction,
    UnknownAction,
]

ACTION_TYPES: dict[str, type[BaseModel]] = {
    "click": ClickAction,
    "double_click": DoubleClickAction,
    "drag": DragAction,
    "keypress": KeypressAction,
    "move": MoveAction,
    "scroll": ScrollAction,
    "type": TypeAction,
    "wait": WaitAction,
    "screenshot": ScreenshotAction,
}


def parse_action(data: Any) -> Action:
    """
    Build the Action variant named by ``data["type"]``.

    Accepts a dict or any object exposing ``model_dump()`` (oracle SDK
    objects). Unknown tags and payloads that fail validation fall through
    to UnknownAction. Anything that is not a mapping raises ValueError.
    """
    if isinstance(data, BaseModel) and type(data) in (*ACTION_TYPES.values(), UnknownAction):
        return data
    if hasattr(data, "model_dump"):
        data = data.model_dump()
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ValueError(f"Action payload must be a mapping, got {type(data).__name__}")
    payload = dict(data)

    cls = ACTION_TYPES.get(str(payload.get("type", "")))
    if cls is not None:
        try:
            return cls.model_validate(payload)
        except ValidationError:
            pass

    payload.setdefault("type", "unknown")
    payload["type"] = str(payload["type"])
    return UnknownAction.model_validate(payload)


# ---------------------------------------------------------------------------
# Oracle turn records
# ---------------------------------------------------------------------------


class SafetyCheck(BaseModel):
    """A pending safety check the oracle attached to a computer call."""

    id: str
    code: str | None = None
    message: str | None = None


class StepRecord(BaseModel):
    """One honored computer call: the unit replayed without the oracle."""

    call_id: str
    action: Action | None = None
    pending_safety_checks: list[SafetyCheck] = Field(default_factory=list)

    @field_validator("action", mode="before")
    @classmethod
    def _coerce_action(cls, value: Any) -> Any:
        if value is None:
            return None
        return parse_action(value)


class ToolCall(BaseModel):
    """A function call requested by the oracle."""

    call_id: str
    name: str
    arguments: str = "{}"


class ToolResult(BaseModel):
    call_id: str
    output: str

    def to_input(self) -> dict[str, Any]:
        """Render as a ``function_call_output`` input item."""
        return {
            "type": "function_call_output",
            "call_id": self.call_id,
            "output": self.output,
        }


class ReplayRecord(BaseModel):
    """Persisted form of one successful fresh run."""

    model_config = ConfigDict(populate_by_name=True)

    location: str
    goal: str
    action_sequence: list[StepRecord] = Field(default_factory=list, alias="actionSequence")


class LoopResult(BaseModel):
    """Final oracle response plus the ordered actions dispatched to reach it."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    response: Any
    action_sequence: list[StepRecord] = Field(default_factory=list)
