from enum import Enum
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field, field_validator


class Position(str, Enum):
    QB = "QB"
    RB = "RB"
    WR = "WR"
    TE = "TE"
    K = "K"
    DEF = "DEF"


class ScoringFormat(str, Enum):
    STANDARD = "standard"
    HALF_PPR = "half_ppr"
    PPR = "ppr"


# Provider spellings that map onto our position codes
POSITION_ALIASES = {"DST": "DEF", "D/ST": "DEF", "PK": "K"}

# Trending ranks at or under this count as a hot pickup / cold drop
TRENDING_RANK_CUTOFF = 20


class Player(BaseModel):
    """Read-only snapshot of a single player record owned by the catalog."""
    id: str
    name: str
    position: Position
    team: Optional[str] = None  # None = free agent
    age: Optional[int] = None
    years_experience: Optional[int] = None
    adp: Optional[float] = None
    projected_points: Optional[float] = None
    injury_status: Optional[str] = None
    depth_chart_order: Optional[int] = None
    trending_add_rank: Optional[int] = None
    trending_drop_rank: Optional[int] = None
    net_interest: int = 0
    college: Optional[str] = None
    height: Optional[str] = None
    weight: Optional[str] = None
    # Format-specific overrides, keyed by ScoringFormat value
    adp_by_format: Dict[str, float] = Field(default_factory=dict)
    projected_points_by_format: Dict[str, float] = Field(default_factory=dict)

    class Config:
        frozen = True

    @field_validator("position", mode="before")
    @classmethod
    def _upper_position(cls, value):
        if isinstance(value, str):
            value = value.strip().upper()
            return POSITION_ALIASES.get(value, value)
        return value

    @field_validator("team", mode="before")
    @classmethod
    def _upper_team(cls, value):
        if isinstance(value, str):
            return value.strip().upper() or None
        return value

    def adp_for(self, scoring_format: Optional[str] = None) -> Optional[float]:
        """ADP in the given scoring format, falling back to the base ADP."""
        if scoring_format and scoring_format in self.adp_by_format:
            return self.adp_by_format[scoring_format]
        return self.adp

    def projected_points_for(self, scoring_format: Optional[str] = None) -> Optional[float]:
        """Projected points in the given scoring format, falling back to the base projection."""
        if scoring_format and scoring_format in self.projected_points_by_format:
            return self.projected_points_by_format[scoring_format]
        return self.projected_points

    @property
    def is_healthy(self) -> bool:
        return (self.injury_status or "").strip().lower() == "healthy"

    @property
    def hot_pickup(self) -> bool:
        return self.trending_add_rank is not None and self.trending_add_rank <= TRENDING_RANK_CUTOFF

    @property
    def cold_drop(self) -> bool:
        return self.trending_drop_rank is not None and self.trending_drop_rank <= TRENDING_RANK_CUTOFF

    @classmethod
    def from_record(cls, record: Dict[str, Any], player_id: Optional[str] = None) -> "Player":
        """
        Build a Player from a unified player-data record.

        Accepts the snake_case keys written by the data-fetch subsystem
        (full_name, years_exp, projected_points, depth_chart_position and a
        nested trending block).
        """
        trending = record.get("trending") or {}
        adds = trending.get("adds") or {}
        drops = trending.get("drops") or {}
        depth = record.get("depth_chart_order", record.get("depth_chart_position"))

        return cls(
            id=str(
                player_id or record.get("player_id") or record.get("id")
                or record.get("full_name") or record.get("name") or ""
            ),
            name=record.get("full_name") or record.get("name") or "",
            position=record.get("position"),
            team=record.get("team"),
            age=_int_or_none(record.get("age")),
            years_experience=_int_or_none(record.get("years_exp", record.get("years_experience"))),
            adp=_float_or_none(record.get("adp")),
            projected_points=_float_or_none(record.get("projected_points")),
            injury_status=record.get("injury_status"),
            depth_chart_order=_int_or_none(depth),
            trending_add_rank=_int_or_none(adds.get("rank")),
            trending_drop_rank=_int_or_none(drops.get("rank")),
            net_interest=_int_or_none(trending.get("net_interest")) or 0,
            college=record.get("college"),
            height=_str_or_none(record.get("height")),
            weight=_str_or_none(record.get("weight")),
            adp_by_format=_float_map(record.get("adp_by_format")),
            projected_points_by_format=_float_map(record.get("projected_points_by_format")),
        )


def _int_or_none(value) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _float_or_none(value) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _str_or_none(value) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _float_map(values) -> Dict[str, float]:
    if not isinstance(values, dict):
        return {}
    parsed = {str(k).lower(): _float_or_none(v) for k, v in values.items()}
    return {k: v for k, v in parsed.items() if v is not None}
