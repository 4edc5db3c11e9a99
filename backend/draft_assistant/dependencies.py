"""
FastAPI Dependency Injection Container

Provides singleton instances of the engine's collaborators so the player
snapshot is loaded once and shared read-only across requests.
"""
import logging
from pathlib import Path
from typing import Optional

from draft_assistant.config import settings
from draft_assistant.services.draft_agent import DraftAgent
from draft_assistant.services.player_catalog import PlayerCatalog
from draft_assistant.services.reasoning_service import OpenAIReasoningService

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Container for singleton service instances.
    Services are lazily initialized on first access.
    """

    _player_catalog: Optional[PlayerCatalog] = None
    _draft_agent: Optional[DraftAgent] = None

    @classmethod
    def load_player_catalog(cls, path: Optional[str] = None) -> PlayerCatalog:
        """Load the player snapshot from disk, falling back to an empty catalog."""
        data_path = Path(path or settings.player_data_path)
        if not data_path.exists():
            logger.warning(f"Player data file not found at {data_path}; starting with an empty catalog")
            cls._player_catalog = PlayerCatalog()
        else:
            cls._player_catalog = PlayerCatalog.load_json(data_path)
        # The agent holds a catalog reference, rebuild it on next access
        cls._draft_agent = None
        return cls._player_catalog

    @classmethod
    def get_player_catalog(cls) -> PlayerCatalog:
        """Get or load the PlayerCatalog singleton."""
        if cls._player_catalog is None:
            cls.load_player_catalog()
        return cls._player_catalog

    @classmethod
    def get_draft_agent(cls) -> Optional[DraftAgent]:
        """Get or create the DraftAgent singleton. None when no API key is configured."""
        if cls._draft_agent is None:
            if not settings.openai_api_key:
                return None
            cls._draft_agent = DraftAgent(
                reasoning_service=OpenAIReasoningService(),
                catalog=cls.get_player_catalog(),
            )
        return cls._draft_agent

    @classmethod
    async def close(cls) -> None:
        """Close the reasoning service client, if one was created, and reset."""
        if cls._draft_agent is not None:
            close = getattr(cls._draft_agent.reasoning_service, "close", None)
            if close is not None:
                await close()
        cls.reset()

    @classmethod
    def reset(cls) -> None:
        """Reset all singleton instances. Useful for testing."""
        cls._player_catalog = None
        cls._draft_agent = None


# FastAPI dependency functions
def get_player_catalog() -> PlayerCatalog:
    """
    FastAPI dependency for PlayerCatalog.

    Usage:
        @router.get("/agent-status")
        async def status(catalog: PlayerCatalog = Depends(get_player_catalog)):
            ...
    """
    return ServiceContainer.get_player_catalog()


def get_draft_agent() -> Optional[DraftAgent]:
    return ServiceContainer.get_draft_agent()
