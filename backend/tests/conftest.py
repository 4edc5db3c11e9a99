"""
Pytest fixtures for Fantasy Football Draft Assistant tests.
"""
import asyncio
import pytest
from typing import Any, Dict, List, Optional

from draft_assistant.schemas.draft import DraftedPick
from draft_assistant.schemas.player import Player
from draft_assistant.services.player_catalog import PlayerCatalog
from draft_assistant.services.reasoning_service import ServiceReply
from draft_assistant.services.tool_executor import ToolCallRequest


_id_counter = 0


def make_player(name: str = "Test Player", position: str = "WR", **kwargs) -> Player:
    """Build a Player with a unique id and sensible defaults."""
    global _id_counter
    _id_counter += 1
    kwargs.setdefault("id", str(_id_counter))
    return Player(name=name, position=position, **kwargs)


def make_pick(
    pick_number: int,
    player_name: str,
    position: str,
    drafted_by_team: str,
    player_team: Optional[str] = None,
) -> DraftedPick:
    return DraftedPick(
        pickNumber=pick_number,
        playerName=player_name,
        position=position,
        draftedByTeam=drafted_by_team,
        playerTeam=player_team,
    )


class FakeReasoningService:
    """
    Scripted stand-in for the reasoning service.

    Each converse() call pops the next scripted reply. A scripted exception is
    raised instead of returned. Every call is recorded for assertions.
    """

    def __init__(self, replies: List[Any], delay: float = 0.0, model: str = "fake-model"):
        self.replies = list(replies)
        self.delay = delay
        self.model = model
        self.calls: List[Dict[str, Any]] = []

    async def converse(self, system_prompt, messages, tool_schemas=None) -> ServiceReply:
        self.calls.append({
            "system_prompt": system_prompt,
            "messages": list(messages),
            "tool_schemas": tool_schemas,
        })
        if self.delay:
            await asyncio.sleep(self.delay)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def tool_reply(*calls: ToolCallRequest, text: Optional[str] = None) -> ServiceReply:
    return ServiceReply(text=text, tool_calls=list(calls))


def text_reply(text: Optional[str]) -> ServiceReply:
    return ServiceReply(text=text, tool_calls=[])


@pytest.fixture
def player_factory():
    """Factory fixture for creating players with custom attributes."""
    return make_player


@pytest.fixture
def sample_players() -> List[Player]:
    """Small cross-position pool with realistic ADP/projection shapes."""
    return [
        make_player("Christian McCaffrey", "RB", team="SF", adp=1.0, projected_points=350.0,
                    age=28, injury_status="Healthy", depth_chart_order=1),
        make_player("CeeDee Lamb", "WR", team="DAL", adp=2.0, projected_points=330.0,
                    age=25, injury_status="Healthy", depth_chart_order=1),
        make_player("Bijan Robinson", "RB", team="ATL", adp=3.0, projected_points=320.0,
                    age=22, injury_status="Healthy", depth_chart_order=1,
                    trending_add_rank=5, net_interest=1200),
        make_player("Ja'Marr Chase", "WR", team="CIN", adp=4.0, projected_points=325.0,
                    age=24, injury_status="Questionable", depth_chart_order=1),
        make_player("Breece Hall", "RB", team="NYJ", adp=6.0, projected_points=290.0,
                    age=23, injury_status="Healthy", depth_chart_order=1),
        make_player("Amon-Ra St. Brown", "WR", team="DET", adp=7.0, projected_points=300.0,
                    age=25, injury_status="Healthy", depth_chart_order=1),
        make_player("Josh Allen", "QB", team="BUF", adp=20.0, projected_points=380.0,
                    age=28, injury_status="Healthy", depth_chart_order=1,
                    college="Wyoming", height="6'5\"", weight="237"),
        make_player("Jalen Hurts", "QB", team="PHI", adp=25.0, projected_points=370.0,
                    age=26, injury_status="Healthy", depth_chart_order=1),
        make_player("Travis Kelce", "TE", team="KC", adp=30.0, projected_points=220.0,
                    age=35, injury_status="Healthy", depth_chart_order=1,
                    trending_drop_rank=3),
        make_player("Justin Tucker", "K", team="BAL", adp=150.0, projected_points=140.0,
                    age=35, injury_status="Healthy"),
        make_player("Jaylen Warren", "RB", team="PIT", adp=110.0, projected_points=160.0,
                    age=26, injury_status="Healthy", depth_chart_order=2),
        make_player("Undrafted Rookie", "WR", team="FA", age=21),
    ]


@pytest.fixture
def catalog(sample_players) -> PlayerCatalog:
    return PlayerCatalog(sample_players)


@pytest.fixture
def draft_state_payload() -> Dict[str, Any]:
    """Raw camelCase draft state, as a UI would send it."""
    return {
        "draftedPlayers": [
            {"pickNumber": 1, "playerName": "Christian McCaffrey", "position": "RB",
             "playerTeam": "SF", "draftedByTeam": "Team 1"},
            {"pickNumber": 2, "playerName": "CeeDee Lamb", "position": "WR",
             "playerTeam": "DAL", "draftedByTeam": "Team 2"},
        ],
        "currentPick": 3,
        "userTeam": "Team 3",
        "leagueSettings": {"teamCount": 12, "scoringFormat": "ppr"},
    }
