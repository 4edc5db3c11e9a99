from datetime import datetime
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field


class ToolCallRecord(BaseModel):
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None


class RecommendationResponse(BaseModel):
    """Final recommendation returned to callers of the draft agent."""
    recommendation: str
    tools_used: List[str] = Field(default_factory=list, serialization_alias="toolsUsed")
    reasoning: str
    draft_phase: Optional[str] = Field(None, serialization_alias="draftPhase")
    tool_calls: List[ToolCallRecord] = Field(default_factory=list, serialization_alias="toolCalls")
    generated_at: datetime = Field(..., serialization_alias="generatedAt")


class AgentStatusResponse(BaseModel):
    available: bool
    model: Optional[str] = None
    tools: List[str] = Field(default_factory=list)
    players_loaded: int = Field(0, serialization_alias="playersLoaded")
    requirements: List[str] = Field(default_factory=list)
