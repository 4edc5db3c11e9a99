from draft_assistant.schemas.player import (
    Player,
    Position,
    ScoringFormat,
)
from draft_assistant.schemas.draft import (
    DraftedPick,
    LeagueSettings,
    DraftState,
)
from draft_assistant.schemas.recommendation import (
    RecommendationResponse,
    AgentStatusResponse,
    ToolCallRecord,
)

__all__ = [
    "Player",
    "Position",
    "ScoringFormat",
    "DraftedPick",
    "LeagueSettings",
    "DraftState",
    "RecommendationResponse",
    "AgentStatusResponse",
    "ToolCallRecord",
]
