from typing import Optional, List, Dict
from pydantic import BaseModel, Field, AliasChoices, field_validator

from draft_assistant.config import settings
from draft_assistant.schemas.player import ScoringFormat, POSITION_ALIASES


class DraftedPick(BaseModel):
    """One entry of the append-only pick history."""
    pick_number: int = Field(
        ..., ge=1, validation_alias=AliasChoices("pickNumber", "pick_number"),
        serialization_alias="pickNumber",
    )
    round: Optional[int] = Field(None, ge=1)
    player_name: str = Field(
        ..., validation_alias=AliasChoices("playerName", "player_name"),
        serialization_alias="playerName",
    )
    player_team: Optional[str] = Field(
        None, validation_alias=AliasChoices("playerTeam", "player_team", "team"),
        serialization_alias="playerTeam",
    )
    position: str
    drafted_by_team: str = Field(
        ..., validation_alias=AliasChoices("draftedByTeam", "drafted_by_team"),
        serialization_alias="draftedByTeam",
    )

    class Config:
        frozen = True

    @field_validator("position", mode="before")
    @classmethod
    def _upper_position(cls, value):
        if isinstance(value, str):
            value = value.strip().upper()
            return POSITION_ALIASES.get(value, value)
        return value


class LeagueSettings(BaseModel):
    team_count: int = Field(
        default_factory=lambda: settings.default_team_count, ge=2,
        validation_alias=AliasChoices("teamCount", "teams", "team_count"),
        serialization_alias="teamCount",
    )
    scoring_format: ScoringFormat = Field(
        default_factory=lambda: ScoringFormat(settings.default_scoring_format),
        validation_alias=AliasChoices("scoringFormat", "format", "scoring_format"),
        serialization_alias="scoringFormat",
    )
    total_rounds: Optional[int] = Field(
        None, ge=1,
        validation_alias=AliasChoices("totalRounds", "rounds", "total_rounds"),
        serialization_alias="totalRounds",
    )
    roster_spots: Dict[str, int] = Field(
        default_factory=lambda: dict(settings.default_roster_spots),
        validation_alias=AliasChoices("rosterSpots", "roster_spots"),
        serialization_alias="rosterSpots",
    )

    class Config:
        frozen = True

    @field_validator("roster_spots", mode="before")
    @classmethod
    def _normalize_slots(cls, value):
        if isinstance(value, dict):
            return {str(k).upper(): v for k, v in value.items() if v is not None}
        return value

    @property
    def draft_rounds(self) -> int:
        """Rounds in the draft; full-roster leagues draft one player per roster spot."""
        if self.total_rounds:
            return self.total_rounds
        return max(1, sum(self.roster_spots.values()))


class DraftState(BaseModel):
    """Per-recommendation input."""
    drafted_players: List[DraftedPick] = Field(
        default_factory=list,
        validation_alias=AliasChoices("draftedPlayers", "drafted_players"),
        serialization_alias="draftedPlayers",
    )
    current_pick: int = Field(
        ..., ge=1,
        validation_alias=AliasChoices("currentPick", "current_pick"),
        serialization_alias="currentPick",
    )
    user_team: str = Field(
        ..., min_length=1,
        validation_alias=AliasChoices("userTeam", "user_team"),
        serialization_alias="userTeam",
    )
    league_settings: LeagueSettings = Field(
        default_factory=LeagueSettings,
        validation_alias=AliasChoices("leagueSettings", "league_settings"),
        serialization_alias="leagueSettings",
    )

    class Config:
        frozen = True

    @field_validator("league_settings", mode="before")
    @classmethod
    def _default_league(cls, value):
        return {} if value is None else value

    def to_context(self) -> dict:
        """camelCase JSON-ready view sent to the reasoning service."""
        return self.model_dump(mode="json", by_alias=True)
