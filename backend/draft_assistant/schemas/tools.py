"""
Argument contracts for the reasoning-service tools.

Each model validates the arguments of one tool and doubles as the JSON
schema advertised to the reasoning service (camelCase, as the service sees it).
"""
from typing import Optional, List
from pydantic import BaseModel, Field, AliasChoices, field_validator

from draft_assistant.schemas.draft import DraftedPick, LeagueSettings
from draft_assistant.schemas.player import Position, ScoringFormat


class ToolArguments(BaseModel):
    class Config:
        populate_by_name = True
        extra = "ignore"


def _upper_or_none(value):
    if isinstance(value, str):
        return value.strip().upper() or None
    return value


class AvailablePlayersArgs(ToolArguments):
    position: Optional[Position] = Field(None, description="Player position (QB, RB, WR, TE, K, DEF)")
    team: Optional[str] = Field(None, description="NFL team abbreviation")
    min_adp: Optional[float] = Field(
        None, alias="minADP", validation_alias=AliasChoices("minADP", "min_adp"),
        description="Minimum average draft position",
    )
    max_adp: Optional[float] = Field(
        None, alias="maxADP", validation_alias=AliasChoices("maxADP", "max_adp"),
        description="Maximum average draft position",
    )
    limit: int = Field(50, ge=1, le=500, description="Maximum number of players to return (default: 50)")

    @field_validator("position", "team", mode="before")
    @classmethod
    def _upper_codes(cls, value):
        return _upper_or_none(value)


class PlayerDetailsArgs(ToolArguments):
    player_name: str = Field(
        ..., min_length=1, alias="playerName",
        validation_alias=AliasChoices("playerName", "player_name"),
        description="Full player name (e.g., 'Josh Allen', 'Christian McCaffrey')",
    )


class AnalyzeDraftStateArgs(ToolArguments):
    drafted_players: List[DraftedPick] = Field(
        default_factory=list, alias="draftedPlayers",
        validation_alias=AliasChoices("draftedPlayers", "drafted_players"),
        description="List of already drafted players with their details",
    )
    current_pick: int = Field(
        ..., ge=1, alias="currentPick",
        validation_alias=AliasChoices("currentPick", "current_pick"),
        description="Current draft pick number",
    )
    user_team: str = Field(
        ..., min_length=1, alias="userTeam",
        validation_alias=AliasChoices("userTeam", "user_team"),
        description="Name/identifier of the user's fantasy team",
    )
    league_settings: Optional[LeagueSettings] = Field(
        None, alias="leagueSettings",
        validation_alias=AliasChoices("leagueSettings", "league_settings"),
        description="League size, scoring format, rounds and roster spots",
    )


class PositionalAnalysisArgs(ToolArguments):
    position: Position = Field(..., description="Position to analyze (QB, RB, WR, TE, K, DEF)")
    format: Optional[ScoringFormat] = Field(None, description="Scoring format for analysis")

    @field_validator("position", mode="before")
    @classmethod
    def _upper_position(cls, value):
        return _upper_or_none(value)

    @field_validator("format", mode="before")
    @classmethod
    def _lower_format(cls, value):
        if isinstance(value, str):
            return value.strip().lower() or None
        return value


class ADPRange(BaseModel):
    min: Optional[float] = None
    max: Optional[float] = None


class FindSleepersArgs(ToolArguments):
    position: Optional[Position] = Field(None, description="Position to find sleepers for")
    adp_range: Optional[ADPRange] = Field(
        None, alias="adpRange", validation_alias=AliasChoices("adpRange", "adp_range"),
        description="ADP range to search within",
    )
    limit: int = Field(10, ge=1, le=100, description="Maximum number of sleepers to return")

    @field_validator("position", mode="before")
    @classmethod
    def _upper_position(cls, value):
        return _upper_or_none(value)
