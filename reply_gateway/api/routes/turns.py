from fastapi import APIRouter, Depends, status

from reply_gateway.api.deps import get_orchestrator
from reply_gateway.schemas.inbound import TurnRequest
from reply_gateway.schemas.responses import ErrorResponse, TurnResponse
from reply_gateway.services.orchestrator import TurnOrchestrator

router = APIRouter()


@router.post(
    "/{platform}/turn",
    status_code=status.HTTP_200_OK,
    response_model=TurnResponse,
    responses={
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Apply a dialog transition and return the platform reply",
)
async def process_turn(
    platform: str,
    payload: TurnRequest,
    orchestrator: TurnOrchestrator = Depends(get_orchestrator),
) -> TurnResponse:
    """
    Primary ingress for a conversational turn.

    The caller posts the raw platform request together with the transition
    chosen by the dialog engine. Directives are applied in order and the
    resulting platform JSON is returned under ``payload``.
    """
    return await orchestrator.handle_turn(platform, payload)
