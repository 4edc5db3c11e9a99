"""
Tool Executor

Fixed registry of the tools the reasoning service may call. Every tool is a
pure function of its arguments plus the read-only catalog snapshot, and every
call returns either a JSON-serializable payload or {"error": "..."}; nothing
raises back to the caller.
"""
import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Type, Union

from pydantic import ValidationError as PydanticValidationError

from draft_assistant.config import settings
from draft_assistant.exceptions import ToolExecutionError
from draft_assistant.schemas.draft import DraftedPick, LeagueSettings
from draft_assistant.schemas.player import Player
from draft_assistant.schemas.tools import (
    ToolArguments,
    AvailablePlayersArgs,
    PlayerDetailsArgs,
    AnalyzeDraftStateArgs,
    PositionalAnalysisArgs,
    FindSleepersArgs,
)
from draft_assistant.services.draft_state import DraftStateCalculator
from draft_assistant.services.player_catalog import PlayerCatalogProtocol, PlayerFilters
from draft_assistant.services.positional_analytics import PositionalAnalytics
from draft_assistant.utils import normalize_name, sanitize_error_message

logger = logging.getLogger(__name__)


class ToolName(str, Enum):
    GET_AVAILABLE_PLAYERS = "getAvailablePlayers"
    GET_PLAYER_DETAILS = "getPlayerDetails"
    ANALYZE_DRAFT_STATE = "analyzeDraftState"
    GET_POSITIONAL_ANALYSIS = "getPositionalAnalysis"
    FIND_SLEEPERS = "findSleepers"

    @classmethod
    def lookup(cls, name: str) -> Optional["ToolName"]:
        try:
            return cls(name)
        except ValueError:
            return None


@dataclass(frozen=True)
class ToolCallRequest:
    """One tool invocation requested by the reasoning service."""
    name: str
    arguments: Union[str, Dict[str, Any], None] = None
    id: Optional[str] = None


@dataclass
class ToolCallResult:
    """Outcome of one tool invocation, in request order."""
    request: ToolCallRequest
    arguments: Dict[str, Any] = field(default_factory=dict)
    result: Any = None
    known_tool: bool = True
    duration_ms: float = 0.0

    @property
    def name(self) -> str:
        return self.request.name

    @property
    def error(self) -> Optional[str]:
        if isinstance(self.result, dict) and set(self.result) == {"error"}:
            return self.result["error"]
        return None

    def content(self) -> str:
        """JSON text fed back to the reasoning service."""
        return json.dumps(self.result, default=str)


@dataclass(frozen=True)
class ToolSpec:
    name: ToolName
    description: str
    args_model: Type[ToolArguments]
    handler: Callable[["ToolExecutor", Any], Any]

    def json_schema(self) -> Dict[str, Any]:
        parameters = self.args_model.model_json_schema(by_alias=True)
        parameters.pop("title", None)
        return {
            "name": self.name.value,
            "description": self.description,
            "parameters": parameters,
        }


# ==================== SERIALIZERS ====================

def _trending(player: Player) -> Dict[str, Any]:
    return {
        "hotPickup": player.hot_pickup,
        "coldDrop": player.cold_drop,
        "netInterest": player.net_interest,
    }


def _player_summary(player: Player, scoring_format: Optional[str]) -> Dict[str, Any]:
    return {
        "name": player.name,
        "position": player.position.value,
        "team": player.team,
        "adp": player.adp_for(scoring_format),
        "projectedPoints": player.projected_points_for(scoring_format),
        "age": player.age,
        "experience": player.years_experience,
        "injuryStatus": player.injury_status,
        "trending": _trending(player),
    }


# ==================== HANDLERS ====================

def _get_available_players(executor: "ToolExecutor", args: AvailablePlayersArgs) -> List[Dict[str, Any]]:
    players = executor.catalog.query_players(PlayerFilters(
        position=args.position.value if args.position else None,
        team=args.team,
        min_adp=args.min_adp,
        max_adp=args.max_adp,
        scoring_format=executor.scoring_format,
        exclude_names=executor.drafted_names,
        limit=args.limit,
    ))
    return [_player_summary(p, executor.scoring_format) for p in players]


def _get_player_details(executor: "ToolExecutor", args: PlayerDetailsArgs) -> Dict[str, Any]:
    player = executor.catalog.get_player_by_fuzzy_name(args.player_name)
    if player is None:
        raise ToolExecutionError(ToolName.GET_PLAYER_DETAILS.value, f"Player '{args.player_name}' not found")

    fmt = executor.scoring_format
    details = _player_summary(player, fmt)
    details.update({
        "height": player.height,
        "weight": player.weight,
        "college": player.college,
        "depthChartOrder": player.depth_chart_order,
        "sleeperScore": executor.analytics.sleeper_score(player, fmt),
        "isDrafted": normalize_name(player.name) in executor.drafted_names,
    })
    details["trending"].update({
        "addsRank": player.trending_add_rank,
        "dropsRank": player.trending_drop_rank,
    })
    return details


def _analyze_draft_state(executor: "ToolExecutor", args: AnalyzeDraftStateArgs) -> Dict[str, Any]:
    analysis = executor.calculator.analyze(
        args.drafted_players,
        args.current_pick,
        args.user_team,
        args.league_settings or executor.league_settings,
    )
    return analysis.to_dict()


def _get_positional_analysis(executor: "ToolExecutor", args: PositionalAnalysisArgs) -> Dict[str, Any]:
    fmt = args.format.value if args.format else executor.scoring_format
    pool = executor.available_players(position=args.position.value, scoring_format=fmt)
    return executor.analytics.analyze_position(pool, args.position.value, fmt).to_dict()


def _find_sleepers(executor: "ToolExecutor", args: FindSleepersArgs) -> List[Dict[str, Any]]:
    sleepers = executor.analytics.find_sleepers(
        executor.available_players(),
        position=args.position.value if args.position else None,
        adp_range=args.adp_range.model_dump() if args.adp_range else None,
        limit=args.limit,
        scoring_format=executor.scoring_format,
    )
    return [s.to_dict() for s in sleepers]


TOOL_REGISTRY: Dict[ToolName, ToolSpec] = {
    ToolName.GET_AVAILABLE_PLAYERS: ToolSpec(
        name=ToolName.GET_AVAILABLE_PLAYERS,
        description="Get available players filtered by position, team, or other criteria",
        args_model=AvailablePlayersArgs,
        handler=_get_available_players,
    ),
    ToolName.GET_PLAYER_DETAILS: ToolSpec(
        name=ToolName.GET_PLAYER_DETAILS,
        description=(
            "Get detailed information about a specific player including stats, "
            "projections, and analysis"
        ),
        args_model=PlayerDetailsArgs,
        handler=_get_player_details,
    ),
    ToolName.ANALYZE_DRAFT_STATE: ToolSpec(
        name=ToolName.ANALYZE_DRAFT_STATE,
        description=(
            "Analyze the current draft state including team rosters, positional needs, "
            "and draft trends"
        ),
        args_model=AnalyzeDraftStateArgs,
        handler=_analyze_draft_state,
    ),
    ToolName.GET_POSITIONAL_ANALYSIS: ToolSpec(
        name=ToolName.GET_POSITIONAL_ANALYSIS,
        description="Get positional scarcity analysis, depth charts, and tier rankings",
        args_model=PositionalAnalysisArgs,
        handler=_get_positional_analysis,
    ),
    ToolName.FIND_SLEEPERS: ToolSpec(
        name=ToolName.FIND_SLEEPERS,
        description="Find potential sleeper picks and value players based on ADP vs projected value",
        args_model=FindSleepersArgs,
        handler=_find_sleepers,
    ),
}


def tool_schemas() -> List[Dict[str, Any]]:
    """Schemas for every registered tool, in registry order."""
    return [spec.json_schema() for spec in TOOL_REGISTRY.values()]


def _describe_validation_error(error: PydanticValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "arguments"
    return f"{location}: {first.get('msg', 'invalid value')}"


# ==================== EXECUTOR ====================

class ToolExecutor:
    """
    Runs registered tools against one catalog snapshot and one draft.

    Built per recommendation request: drafted players are removed from the
    pools the player tools search.
    """

    def __init__(
        self,
        catalog: PlayerCatalogProtocol,
        drafted_players: Sequence[DraftedPick] = (),
        league_settings: Optional[LeagueSettings] = None,
        analytics: Optional[PositionalAnalytics] = None,
        calculator: Optional[DraftStateCalculator] = None,
    ):
        self.catalog = catalog
        self.league_settings = league_settings
        self.scoring_format = (
            league_settings.scoring_format.value if league_settings
            else settings.default_scoring_format
        )
        self.analytics = analytics or PositionalAnalytics()
        self.calculator = calculator or DraftStateCalculator()
        self.drafted_names = frozenset(normalize_name(p.player_name) for p in drafted_players)

    def available_players(
        self, position: Optional[str] = None, scoring_format: Optional[str] = None
    ) -> List[Player]:
        """Undrafted players, optionally at one position, sorted by ADP."""
        return self.catalog.query_players(PlayerFilters(
            position=position,
            scoring_format=scoring_format or self.scoring_format,
            exclude_names=self.drafted_names,
        ))

    @staticmethod
    def _parse_arguments(tool_name: str, arguments: Union[str, Dict[str, Any], None]) -> Dict[str, Any]:
        if arguments is None or arguments == "":
            return {}
        if isinstance(arguments, str):
            try:
                arguments = json.loads(arguments)
            except json.JSONDecodeError as e:
                raise ToolExecutionError(
                    tool_name, f"Invalid arguments for {tool_name}: not valid JSON ({e.msg})"
                )
        if not isinstance(arguments, dict):
            raise ToolExecutionError(tool_name, f"Invalid arguments for {tool_name}: expected a JSON object")
        return arguments

    def execute(self, name: str, arguments: Union[str, Dict[str, Any], None] = None) -> Any:
        """Run one tool by name. Returns the payload or {"error": message}."""
        return self.run(ToolCallRequest(name=name, arguments=arguments)).result

    def run(self, request: ToolCallRequest) -> ToolCallResult:
        started = time.perf_counter()
        outcome = ToolCallResult(request=request)

        tool = ToolName.lookup(request.name)
        if tool is None:
            logger.warning(f"Reasoning service requested unknown tool '{request.name}'")
            outcome.known_tool = False
            outcome.result = {"error": f"unknown tool: {request.name}"}
            return outcome

        spec = TOOL_REGISTRY[tool]
        try:
            outcome.arguments = self._parse_arguments(tool.value, request.arguments)
            args = spec.args_model.model_validate(outcome.arguments)
            outcome.result = spec.handler(self, args)
        except PydanticValidationError as e:
            message = f"Invalid arguments for {tool.value}: {_describe_validation_error(e)}"
            logger.warning(message)
            outcome.result = {"error": message}
        except ToolExecutionError as e:
            logger.warning(f"Tool {tool.value} failed: {e.message}")
            outcome.result = {"error": e.message}
        except Exception as e:
            logger.exception(f"Unexpected error in tool {tool.value}")
            outcome.result = {"error": f"Failed to execute {tool.value}: {sanitize_error_message(e)}"}

        outcome.duration_ms = (time.perf_counter() - started) * 1000
        logger.debug(f"Tool {tool.value} finished in {outcome.duration_ms:.1f}ms")
        return outcome

    async def execute_many(self, requests: Sequence[ToolCallRequest]) -> List[ToolCallResult]:
        """
        Run a batch of tool calls concurrently.

        Results come back in request order so they can be correlated with the
        service's call ids.
        """
        if not requests:
            return []
        return list(await asyncio.gather(
            *(asyncio.to_thread(self.run, request) for request in requests)
        ))
