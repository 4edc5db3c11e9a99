"""
Positional Analytics

Tiers, scarcity and sleeper scores over a position's player pool.

The heuristic weights live in a ScoringPolicy so they can be swapped without
touching the tool layer or the draft agent. DefaultScoringPolicy carries the
reference weights; keep them unchanged so scores stay comparable across runs.
"""
import logging
import statistics
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence

from draft_assistant.config import settings
from draft_assistant.schemas.player import Player
from draft_assistant.services.player_catalog import adp_sort_key

logger = logging.getLogger(__name__)


# ==================== SCORING POLICY ====================

class ScoringPolicy(Protocol):
    """Pluggable heuristics used by PositionalAnalytics."""

    def sleeper_score(self, player: Player, scoring_format: Optional[str] = None) -> float:
        ...

    def is_sleeper_candidate(self, player: Player) -> bool:
        ...

    def sleeper_reasons(self, player: Player, scoring_format: Optional[str] = None) -> List[str]:
        ...

    def scarcity_score(self, players: Sequence[Player], scoring_format: Optional[str] = None) -> float:
        ...


class DefaultScoringPolicy:
    """
    Additive sleeper heuristic and top-12 vs next-12 scarcity cliff.

    Intentionally simple and tunable, not a statistically validated model.
    """

    # Offenses that tend to lift every skill player on the roster
    HIGH_OFFENSE_TEAMS = frozenset({"BUF", "KC", "SF", "PHI", "DAL", "MIA"})

    YOUNG_AGE = 25
    YOUNG_BONUS = 2
    VERY_YOUNG_AGE = 23
    VERY_YOUNG_BONUS = 1
    HEALTHY_BONUS = 1
    DEPTH_CHART_MAX = 2
    DEPTH_CHART_BONUS = 2
    HIGH_OFFENSE_BONUS = 1
    PROJECTION_ADP_RATIO = 0.1
    PROJECTION_BONUS = 2

    SLEEPER_CANDIDATE_MAX_AGE = 26  # exclusive

    SCARCITY_GROUP_SIZE = 12

    def _is_young(self, player: Player, cutoff: int) -> bool:
        return player.age is not None and player.age < cutoff

    def _high_on_depth_chart(self, player: Player) -> bool:
        return player.depth_chart_order is not None and player.depth_chart_order <= self.DEPTH_CHART_MAX

    def _in_high_offense(self, player: Player) -> bool:
        return player.team in self.HIGH_OFFENSE_TEAMS

    def _projection_beats_adp(self, player: Player, scoring_format: Optional[str]) -> bool:
        projected = player.projected_points_for(scoring_format)
        if projected is None:
            return False
        adp = player.adp_for(scoring_format) or 0
        return projected > adp * self.PROJECTION_ADP_RATIO

    def sleeper_score(self, player: Player, scoring_format: Optional[str] = None) -> float:
        score = 0
        if self._is_young(player, self.YOUNG_AGE):
            score += self.YOUNG_BONUS
        if self._is_young(player, self.VERY_YOUNG_AGE):
            score += self.VERY_YOUNG_BONUS
        if player.is_healthy:
            score += self.HEALTHY_BONUS
        if self._high_on_depth_chart(player):
            score += self.DEPTH_CHART_BONUS
        if self._in_high_offense(player):
            score += self.HIGH_OFFENSE_BONUS
        if self._projection_beats_adp(player, scoring_format):
            score += self.PROJECTION_BONUS
        return score

    def is_sleeper_candidate(self, player: Player) -> bool:
        return (
            self._is_young(player, self.SLEEPER_CANDIDATE_MAX_AGE)
            or player.is_healthy
            or self._high_on_depth_chart(player)
            or self._in_high_offense(player)
        )

    def sleeper_reasons(self, player: Player, scoring_format: Optional[str] = None) -> List[str]:
        reasons = []
        if self._is_young(player, self.YOUNG_AGE):
            reasons.append("Young player with upside")
        if player.is_healthy:
            reasons.append("Healthy status")
        if self._high_on_depth_chart(player):
            reasons.append("High on depth chart")
        if self._in_high_offense(player):
            reasons.append("Strong offensive system")
        if self._projection_beats_adp(player, scoring_format):
            reasons.append("Projection outpaces draft cost")
        return reasons

    def scarcity_score(self, players: Sequence[Player], scoring_format: Optional[str] = None) -> float:
        """
        Mean projection of the top 12 minus mean projection of the next 12, by ADP.

        Higher = bigger cliff after the top group = scarcer position.
        Returns 0 when fewer than 24 players are available.
        """
        group = self.SCARCITY_GROUP_SIZE
        if len(players) < group * 2:
            return 0.0

        ranked = sorted(players, key=lambda p: adp_sort_key(p, scoring_format))
        top = [p.projected_points_for(scoring_format) or 0 for p in ranked[:group]]
        nxt = [p.projected_points_for(scoring_format) or 0 for p in ranked[group:group * 2]]
        return statistics.mean(top) - statistics.mean(nxt)


# ==================== RESULTS ====================

@dataclass
class TierMember:
    name: str
    adp: Optional[float]
    projected_points: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "adp": self.adp, "projectedPoints": self.projected_points}


@dataclass
class Tier:
    """Cluster of players of roughly equal value."""
    tier_number: int
    players: List[TierMember]
    average_adp: Optional[float]
    dropoff_to_next: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tierNumber": self.tier_number,
            "players": [m.to_dict() for m in self.players],
            "averageADP": _round(self.average_adp),
            "dropoffToNext": _round(self.dropoff_to_next),
        }


@dataclass
class SleeperPick:
    player: Player
    sleeper_score: float
    reasons: List[str] = field(default_factory=list)
    scoring_format: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.player.name,
            "position": self.player.position.value,
            "team": self.player.team,
            "adp": self.player.adp_for(self.scoring_format),
            "projectedPoints": self.player.projected_points_for(self.scoring_format),
            "age": self.player.age,
            "sleeperScore": self.sleeper_score,
            "reasons": self.reasons,
        }


@dataclass
class PositionalAnalysis:
    position: str
    scoring_format: Optional[str]
    total_players: int
    tiers: List[Tier]
    scarcity_score: float
    recommended_draft_range: Dict[str, str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": self.position,
            "format": self.scoring_format,
            "totalPlayers": self.total_players,
            "tiers": [t.to_dict() for t in self.tiers],
            "scarcityScore": round(self.scarcity_score, 2),
            "recommendedDraftRange": self.recommended_draft_range,
        }


def _round(value: Optional[float], digits: int = 2) -> Optional[float]:
    return round(value, digits) if value is not None else None


def _format_pick(value: float) -> str:
    return f"{value:g}"


# ==================== ANALYTICS ====================

class PositionalAnalytics:
    """Tiering, scarcity and sleeper discovery over a player pool."""

    def __init__(
        self,
        policy: Optional[ScoringPolicy] = None,
        gap_threshold: Optional[float] = None,
        max_players: Optional[int] = None,
    ):
        self.policy = policy or DefaultScoringPolicy()
        self.gap_threshold = gap_threshold if gap_threshold is not None else settings.tier_gap_threshold
        self.max_players = max_players if max_players is not None else settings.tier_max_players

    def tier_players(
        self,
        players: Sequence[Player],
        scoring_format: Optional[str] = None,
        max_players: Optional[int] = None,
    ) -> List[Tier]:
        """
        Group players into tiers by ADP gaps.

        Players are ordered by ascending ADP (missing ADP last) and only the
        top max_players are considered. A new tier starts whenever the ADP gap
        to the previous player exceeds the gap threshold.

        A tier's average_adp is the mean over members that have an ADP, and
        None when no member has one.
        """
        limit = max_players if max_players is not None else self.max_players
        ranked = sorted(players, key=lambda p: adp_sort_key(p, scoring_format))[:limit]
        if not ranked:
            return []

        groups: List[List[Player]] = []
        current: List[Player] = []
        last_adp = None
        for player in ranked:
            adp = adp_sort_key(player, scoring_format)
            if current and adp - last_adp > self.gap_threshold:
                groups.append(current)
                current = []
            current.append(player)
            last_adp = adp
        groups.append(current)

        tiers = []
        for index, group in enumerate(groups):
            known_adps = [
                p.adp_for(scoring_format) for p in group if p.adp_for(scoring_format) is not None
            ]
            tiers.append(Tier(
                tier_number=index + 1,
                players=[
                    TierMember(
                        name=p.name,
                        adp=p.adp_for(scoring_format),
                        projected_points=p.projected_points_for(scoring_format),
                    )
                    for p in group
                ],
                average_adp=statistics.mean(known_adps) if known_adps else None,
            ))

        for current_tier, next_tier in zip(tiers, tiers[1:]):
            current_tier.dropoff_to_next = self._tier_dropoff(current_tier, next_tier)

        return tiers

    def _tier_dropoff(self, current: Tier, nxt: Tier) -> Optional[float]:
        members = current.players + nxt.players
        if all(m.projected_points is None for m in members):
            return None
        current_avg = statistics.mean(m.projected_points or 0 for m in current.players)
        next_avg = statistics.mean(m.projected_points or 0 for m in nxt.players)
        return current_avg - next_avg

    def scarcity_score(self, players: Sequence[Player], scoring_format: Optional[str] = None) -> float:
        return self.policy.scarcity_score(players, scoring_format)

    def sleeper_score(self, player: Player, scoring_format: Optional[str] = None) -> float:
        return self.policy.sleeper_score(player, scoring_format)

    def find_sleepers(
        self,
        players: Sequence[Player],
        position: Optional[str] = None,
        adp_range: Optional[Dict[str, Optional[float]]] = None,
        limit: Optional[int] = None,
        scoring_format: Optional[str] = None,
    ) -> List[SleeperPick]:
        """
        Sleeper candidates sorted by descending sleeper score.

        adp_range is {"min": ..., "max": ...}; missing bounds default to 0 and
        300, and players without ADP are left out when a range is given.
        """
        limit = limit if limit is not None else settings.sleeper_limit
        pool = list(players)

        if position:
            pool = [p for p in pool if p.position.value == position.upper()]

        if adp_range is not None:
            low = adp_range.get("min")
            high = adp_range.get("max")
            low = 0 if low is None else low
            high = 300 if high is None else high
            pool = [
                p for p in pool
                if p.adp_for(scoring_format) is not None and low <= p.adp_for(scoring_format) <= high
            ]

        scored = [
            SleeperPick(
                player=p,
                sleeper_score=self.policy.sleeper_score(p, scoring_format),
                reasons=self.policy.sleeper_reasons(p, scoring_format),
                scoring_format=scoring_format,
            )
            for p in pool
            if self.policy.is_sleeper_candidate(p)
        ]
        # Stable sort keeps ADP order among equal scores
        scored.sort(key=lambda s: s.sleeper_score, reverse=True)
        return scored[:limit]

    def recommended_draft_range(
        self, players: Sequence[Player], scoring_format: Optional[str] = None
    ) -> Dict[str, str]:
        """Pick windows for the elite (top 3) and tier-1 (top 12) players."""
        ranked = sorted(players, key=lambda p: adp_sort_key(p, scoring_format))
        elite = [p.adp_for(scoring_format) or 0 for p in ranked[:3]]
        tier1 = [p.adp_for(scoring_format) or 0 for p in ranked[:12]]
        return {
            "elite": f"Picks 1-{_format_pick(max(elite))}" if elite else "None",
            "tier1": (
                f"Picks {_format_pick(min(tier1))}-{_format_pick(max(tier1))}" if tier1 else "None"
            ),
        }

    def analyze_position(
        self,
        players: Sequence[Player],
        position: str,
        scoring_format: Optional[str] = None,
    ) -> PositionalAnalysis:
        """Tiers, scarcity and draft range for one position's pool."""
        pool = [p for p in players if p.position.value == position.upper()]
        pool.sort(key=lambda p: adp_sort_key(p, scoring_format))

        tiers = self.tier_players(pool, scoring_format)
        scarcity = self.scarcity_score(pool, scoring_format)
        logger.debug(
            f"{position} analysis: {len(pool)} players, {len(tiers)} tiers, scarcity {scarcity:.2f}"
        )
        return PositionalAnalysis(
            position=position.upper(),
            scoring_format=scoring_format,
            total_players=len(pool),
            tiers=tiers,
            scarcity_score=scarcity,
            recommended_draft_range=self.recommended_draft_range(pool, scoring_format),
        )
