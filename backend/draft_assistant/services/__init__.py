# Services module
from draft_assistant.services.player_catalog import PlayerCatalog
from draft_assistant.services.draft_state import DraftStateCalculator
from draft_assistant.services.positional_analytics import PositionalAnalytics
from draft_assistant.services.tool_executor import ToolExecutor
from draft_assistant.services.reasoning_service import OpenAIReasoningService
from draft_assistant.services.draft_agent import DraftAgent

__all__ = [
    "PlayerCatalog",
    "DraftStateCalculator",
    "PositionalAnalytics",
    "ToolExecutor",
    "OpenAIReasoningService",
    "DraftAgent",
]
