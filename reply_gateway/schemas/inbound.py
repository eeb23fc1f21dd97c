from typing import Any, Dict

from pydantic import BaseModel, Field

from reply_gateway.schemas.directives import TransitionPayload


class TurnRequest(BaseModel):
    """Inbound payload: the raw platform request plus the dialog engine's decision."""

    event: Dict[str, Any] = Field(
        description="Raw request body as sent by the assistant platform."
    )
    transition: TransitionPayload = Field(
        default_factory=TransitionPayload,
        description="Transition selected by the dialog engine for this turn.",
    )
