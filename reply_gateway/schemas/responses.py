from typing import Any, Dict

from pydantic import BaseModel, Field


class TurnResponse(BaseModel):
    """Platform reply produced for a turn."""

    platform: str = Field(description="Platform the payload was built for.")
    directives_applied: int = Field(
        default=0,
        description="Number of directives that fired for this platform.",
    )
    payload: Dict[str, Any] = Field(
        default_factory=dict,
        description="Platform wire JSON to hand back to the assistant.",
    )


class ErrorResponse(BaseModel):
    """Descriptive failure returned when a turn cannot be completed."""

    error: str = Field(description="Machine-readable error kind.")
    detail: str = Field(description="Human-readable explanation.")
