"""
Draft State Calculator

Derives whose turn it is, which phase the draft is in and what a team still
needs from a (possibly partial) snake-draft pick history.

Snake drafts reverse direction each round:
    Round 1: 1, 2, 3, ..., N
    Round 2: N, ..., 3, 2, 1
    Round 3: 1, 2, 3, ..., N
"""
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Any

from draft_assistant.config import settings
from draft_assistant.schemas.draft import DraftedPick, LeagueSettings
from draft_assistant.schemas.player import Position
from draft_assistant.utils import parse_team_slot

logger = logging.getLogger(__name__)

# Phase boundaries (inclusive last round of each phase). Fixed for every league size.
EARLY_PHASE_LAST_ROUND = 3
MIDDLE_PHASE_LAST_ROUND = 8

# Positions whose surplus picks can fill a FLEX slot
FLEX_ELIGIBLE = ("RB", "WR")

NEED_POSITIONS = tuple(p.value for p in Position)


# ==================== PICK ARITHMETIC ====================

def _check_pick(current_pick: int, team_count: int) -> None:
    if current_pick < 1:
        raise ValueError("Pick number must be >= 1")
    if team_count < 1:
        raise ValueError("Team count must be >= 1")


def compute_round(current_pick: int, team_count: int) -> int:
    """1-based round an overall pick falls in."""
    _check_pick(current_pick, team_count)
    return (current_pick - 1) // team_count + 1


def compute_turn(current_pick: int, team_count: int) -> int:
    """
    Draft slot (1-based position in the first-round order) that makes a pick.

    Odd rounds run 1..N, even rounds run N..1.
    """
    _check_pick(current_pick, team_count)
    round_number = (current_pick - 1) // team_count + 1
    slot = (current_pick - 1) % team_count + 1
    if round_number % 2 == 1:
        return slot
    return team_count - slot + 1


def compute_draft_phase(current_pick: int, team_count: int) -> str:
    """Classify a pick as "early", "middle" or "late" by its round."""
    round_number = compute_round(current_pick, team_count)
    if round_number <= EARLY_PHASE_LAST_ROUND:
        return "early"
    if round_number <= MIDDLE_PHASE_LAST_ROUND:
        return "middle"
    return "late"


def pick_for_slot_in_round(round_number: int, slot: int, team_count: int) -> int:
    """Overall pick number at which a slot selects in a given round."""
    offset = slot if round_number % 2 == 1 else team_count - slot + 1
    return (round_number - 1) * team_count + offset


def compute_upcoming_picks(
    current_pick: int,
    user_slot: int,
    team_count: int,
    lookahead: int = 3,
    total_rounds: Optional[int] = None,
) -> List[int]:
    """
    Next `lookahead` overall picks, strictly after current_pick, at which
    user_slot selects.

    Walks forward round by round because the direction alternates. Stops early
    when total_rounds is given and the draft runs out.
    """
    _check_pick(current_pick, team_count)
    if not 1 <= user_slot <= team_count:
        raise ValueError(f"User slot must be between 1 and {team_count}")

    picks: List[int] = []
    round_number = compute_round(current_pick, team_count)
    while len(picks) < lookahead:
        if total_rounds is not None and round_number > total_rounds:
            break
        pick = pick_for_slot_in_round(round_number, user_slot, team_count)
        if pick > current_pick:
            picks.append(pick)
        round_number += 1
    return picks


# ==================== ROSTER NEEDS ====================

def _same_team(a: Optional[str], b: Optional[str]) -> bool:
    return (a or "").strip().lower() == (b or "").strip().lower()


def picks_for_team(drafted_players: Sequence[DraftedPick], team: str) -> List[DraftedPick]:
    return [p for p in drafted_players if _same_team(p.drafted_by_team, team)]


def compute_roster_needs(
    drafted_players: Sequence[DraftedPick],
    user_team: str,
    roster_spots: Dict[str, int],
) -> Dict[str, int]:
    """
    Remaining roster need per position for user_team.

    Dedicated slots fill first. RB/WR picks beyond their dedicated slots fill
    FLEX, and anything left over lands on BENCH. Counts never go below zero.
    """
    counts = Counter(p.position for p in picks_for_team(drafted_players, user_team))
    slots = {k.upper(): int(v) for k, v in roster_spots.items()}

    needs: Dict[str, int] = {}
    for position in NEED_POSITIONS:
        needs[position] = max(0, slots.get(position, 0) - counts.get(position, 0))

    flex_slots = slots.get("FLEX", 0)
    flex_surplus = sum(max(0, counts.get(p, 0) - slots.get(p, 0)) for p in FLEX_ELIGIBLE)
    if "FLEX" in slots:
        needs["FLEX"] = max(0, flex_slots - flex_surplus)

    if "BENCH" in slots:
        other_surplus = sum(
            max(0, count - slots.get(position, 0))
            for position, count in counts.items()
            if position not in FLEX_ELIGIBLE
        )
        bench_used = max(0, flex_surplus - flex_slots) + other_surplus
        needs["BENCH"] = max(0, slots["BENCH"] - bench_used)

    return needs


# ==================== ANALYSIS ====================

@dataclass
class DraftAnalysis:
    """Derived view of a draft at one point in time."""
    current_pick: int
    current_round: int
    draft_phase: str
    on_the_clock_slot: Optional[int]
    user_slot: int
    picks_until_next_turn: Optional[int]
    user_roster: List[Dict[str, Any]]
    user_positional_needs: Dict[str, int]
    league_positional_trends: Dict[str, int]
    team_roster_counts: Dict[str, Dict[str, int]]
    upcoming_picks: List[Dict[str, int]] = field(default_factory=list)

    @property
    def user_on_the_clock(self) -> bool:
        return self.on_the_clock_slot is not None and self.on_the_clock_slot == self.user_slot

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentPick": self.current_pick,
            "currentRound": self.current_round,
            "draftPhase": self.draft_phase,
            "onTheClockSlot": self.on_the_clock_slot,
            "userSlot": self.user_slot,
            "userOnTheClock": self.user_on_the_clock,
            "picksUntilNextTurn": self.picks_until_next_turn,
            "userRoster": self.user_roster,
            "userPositionalNeeds": self.user_positional_needs,
            "leaguePositionalTrends": self.league_positional_trends,
            "teamRosterCounts": self.team_roster_counts,
            "upcomingPicks": self.upcoming_picks,
        }


class DraftStateCalculator:
    """
    Computes turn order, draft phase and positional needs from a pick history.

    Stateless: every method is a pure function of its arguments.
    """

    def __init__(self, lookahead: Optional[int] = None):
        self.lookahead = lookahead if lookahead is not None else settings.upcoming_picks_lookahead

    def effective_current_pick(
        self, drafted_players: Sequence[DraftedPick], supplied_pick: int
    ) -> int:
        """
        Current pick recomputed from the history when there is one.

        An empty history leaves the supplied pick untouched.
        """
        if not drafted_players:
            return supplied_pick
        derived = len(drafted_players) + 1
        if derived != supplied_pick:
            logger.warning(
                f"Supplied currentPick {supplied_pick} disagrees with pick history "
                f"({len(drafted_players)} picks made); using {derived}"
            )
        return derived

    def resolve_user_slot(
        self,
        drafted_players: Sequence[DraftedPick],
        user_team: str,
        current_pick: int,
        team_count: int,
    ) -> int:
        """
        Draft slot held by user_team.

        Priority:
        1) Inverse of the snake rule on the team's own earlier picks
        2) A numeric team identifier such as "3" or "Team 3"
        3) The slot currently on the clock
        """
        own_picks = sorted(p.pick_number for p in picks_for_team(drafted_players, user_team))
        if own_picks:
            return compute_turn(own_picks[0], team_count)

        parsed = parse_team_slot(user_team, team_count)
        if parsed is not None:
            return parsed

        return compute_turn(current_pick, team_count)

    def position_tallies(self, drafted_players: Sequence[DraftedPick]) -> Dict[str, int]:
        """League-wide count of drafted players per position."""
        return dict(Counter(p.position for p in drafted_players))

    def team_roster_counts(self, drafted_players: Sequence[DraftedPick]) -> Dict[str, Dict[str, int]]:
        """Per-team count of drafted players per position."""
        by_team: Dict[str, Counter] = {}
        for pick in drafted_players:
            by_team.setdefault(pick.drafted_by_team, Counter())[pick.position] += 1
        return {team: dict(counter) for team, counter in by_team.items()}

    def analyze(
        self,
        drafted_players: Sequence[DraftedPick],
        current_pick: int,
        user_team: str,
        league_settings: Optional[LeagueSettings] = None,
    ) -> DraftAnalysis:
        """Full draft-state analysis for one team."""
        league = league_settings or LeagueSettings()
        team_count = league.team_count

        pick = self.effective_current_pick(drafted_players, current_pick)
        user_slot = self.resolve_user_slot(drafted_players, user_team, pick, team_count)
        # Nobody is on the clock once every round has been drafted
        draft_complete = compute_round(pick, team_count) > league.draft_rounds
        on_the_clock = None if draft_complete else compute_turn(pick, team_count)

        upcoming = compute_upcoming_picks(
            pick, user_slot, team_count,
            lookahead=self.lookahead,
            total_rounds=league.draft_rounds,
        )
        if draft_complete:
            picks_until = None
        elif on_the_clock == user_slot:
            picks_until = 0
        elif upcoming:
            picks_until = upcoming[0] - pick
        else:
            picks_until = None  # Draft over for this team

        user_roster = [
            {
                "name": p.player_name,
                "position": p.position,
                "team": p.player_team,
                "pickNumber": p.pick_number,
                "round": p.round or compute_round(p.pick_number, team_count),
            }
            for p in sorted(picks_for_team(drafted_players, user_team), key=lambda p: p.pick_number)
        ]

        return DraftAnalysis(
            current_pick=pick,
            current_round=compute_round(pick, team_count),
            draft_phase=compute_draft_phase(pick, team_count),
            on_the_clock_slot=on_the_clock,
            user_slot=user_slot,
            picks_until_next_turn=picks_until,
            user_roster=user_roster,
            user_positional_needs=compute_roster_needs(
                drafted_players, user_team, league.roster_spots
            ),
            league_positional_trends=self.position_tallies(drafted_players),
            team_roster_counts=self.team_roster_counts(drafted_players),
            upcoming_picks=[
                {"pickNumber": n, "round": compute_round(n, team_count)} for n in upcoming
            ],
        )
