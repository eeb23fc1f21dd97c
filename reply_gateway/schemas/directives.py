from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class DirectiveDescriptor(BaseModel):
    """Names a registered directive and the arguments to construct it with."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(description="Registry key, e.g. 'alexaCard' or 'List'.")
    args: List[Any] = Field(
        default_factory=list,
        description="Positional constructor arguments (view path, content, token...).",
    )
    kwargs: Dict[str, Any] = Field(
        default_factory=dict, description="Keyword constructor arguments."
    )
    platform: Optional[str] = Field(
        default=None,
        description="Restrict the descriptor to one platform. None means any platform.",
    )

    @model_validator(mode="before")
    @classmethod
    def _expand_shorthand(cls, data: Any) -> Any:
        # {"alexaHint": "Hint.Welcome"} -> key + single positional argument,
        # {"alexaStopAudio": None} -> key with no arguments
        if isinstance(data, dict) and len(data) == 1 and "key" not in data:
            ((key, value),) = data.items()
            return {"key": key, "args": [] if value is None else [value]}
        return data


class TransitionPayload(BaseModel):
    """Dialog engine decision for a turn, as posted over HTTP."""

    directives: List[DirectiveDescriptor] = Field(
        default_factory=list,
        description="Ordered directives to apply to the reply.",
    )
    say: List[str] = Field(
        default_factory=list, description="View paths rendered into speech."
    )
    reprompt: List[str] = Field(
        default_factory=list, description="View paths rendered into the reprompt."
    )
    to: Optional[str] = Field(
        default=None, description="Next dialog state, informational only."
    )
    flow: Literal["continue", "yield", "terminate"] = Field(
        default="continue",
        description="'terminate' ends the session after this reply.",
    )
