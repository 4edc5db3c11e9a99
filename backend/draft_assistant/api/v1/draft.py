import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from draft_assistant.config import settings
from draft_assistant.dependencies import get_draft_agent, get_player_catalog
from draft_assistant.exceptions import UpstreamError, ValidationError
from draft_assistant.schemas.recommendation import AgentStatusResponse, RecommendationResponse
from draft_assistant.services.draft_agent import DraftAgent
from draft_assistant.services.player_catalog import PlayerCatalog

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_CONFIGURED = "Draft agent not available. Set OPENAI_API_KEY to enable AI recommendations."


@router.post(
    "/recommend",
    response_model=RecommendationResponse,
    response_model_by_alias=True,
)
async def recommend(
    draft_state: Dict[str, Any] = Body(...),
    agent: Optional[DraftAgent] = Depends(get_draft_agent),
):
    """
    Get an AI draft recommendation for the supplied draft state.

    The body is the camelCase draft state: draftedPlayers, currentPick,
    userTeam and optional leagueSettings.
    """
    if agent is None:
        raise HTTPException(status_code=503, detail=NOT_CONFIGURED)

    try:
        recommendation = await agent.get_recommendation(draft_state)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail={"field": e.field, "message": e.message})
    except UpstreamError as e:
        status_code = 504 if e.is_timeout else 502
        raise HTTPException(status_code=status_code, detail=str(e))

    return recommendation.to_response()


@router.get(
    "/agent-status",
    response_model=AgentStatusResponse,
    response_model_by_alias=True,
)
async def agent_status(
    agent: Optional[DraftAgent] = Depends(get_draft_agent),
    catalog: PlayerCatalog = Depends(get_player_catalog),
):
    """Report whether recommendations are available and which tools the agent can call."""
    if agent is None:
        return AgentStatusResponse(
            available=False,
            players_loaded=len(catalog),
            requirements=["OPENAI_API_KEY environment variable"],
        )

    return AgentStatusResponse(
        available=True,
        model=getattr(agent.reasoning_service, "model", settings.reasoning_model),
        tools=agent.tool_names(),
        players_loaded=len(catalog),
    )
