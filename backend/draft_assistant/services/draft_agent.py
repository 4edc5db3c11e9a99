"""
Draft Agent

Drives one bounded conversation with the reasoning service per recommendation
request:

    DRAFTING      send the draft context plus tool schemas
    TOOL_ROUND    run every requested tool call (at most one round)
    SYNTHESIZING  send the tool results back, expect free text
    DONE          return the Recommendation

A reply without tool calls skips straight from DRAFTING to DONE.
"""
import asyncio
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from draft_assistant.config import settings
from draft_assistant.exceptions import UpstreamError, ValidationError
from draft_assistant.schemas.draft import DraftState
from draft_assistant.schemas.recommendation import RecommendationResponse, ToolCallRecord
from draft_assistant.services.draft_state import DraftStateCalculator, compute_draft_phase
from draft_assistant.services.player_catalog import PlayerCatalogProtocol
from draft_assistant.services.positional_analytics import PositionalAnalytics
from draft_assistant.services.reasoning_service import ReasoningService, ServiceReply
from draft_assistant.services.tool_executor import (
    TOOL_REGISTRY,
    ToolCallRequest,
    ToolCallResult,
    ToolExecutor,
    tool_schemas,
)
from draft_assistant.utils import sanitize_error_message

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are an expert fantasy football draft assistant with access to comprehensive NFL player data and analytics tools.

Your role is to:
1. Analyze the current draft state and the user's team needs
2. Use the available tools to gather relevant player data and insights
3. Provide 3-5 specific player recommendations with detailed reasoning
4. Consider positional scarcity, value over replacement, and draft strategy
5. Adapt recommendations to the league format and settings

Always use the provided tools to gather current data before making recommendations. Be specific about why each pick makes sense given the draft context."""

SYNTHESIS_PROMPT = "Based on the tool results, provide specific draft recommendations with detailed reasoning."

TOOL_REASONING = "Analysis based on current player data and draft state"
GENERAL_REASONING = "General draft guidance"


class AgentState(str, Enum):
    DRAFTING = "drafting"
    TOOL_ROUND = "tool_round"
    SYNTHESIZING = "synthesizing"
    DONE = "done"


@dataclass
class Recommendation:
    """Final answer for one request. Never persisted by the engine."""
    text: str
    tools_used: List[str] = field(default_factory=list)
    reasoning: str = GENERAL_REASONING
    draft_phase: Optional[str] = None
    tool_calls: List[ToolCallResult] = field(default_factory=list)
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_response(self) -> RecommendationResponse:
        return RecommendationResponse(
            recommendation=self.text,
            tools_used=self.tools_used,
            reasoning=self.reasoning,
            draft_phase=self.draft_phase,
            tool_calls=[
                ToolCallRecord(name=call.name, arguments=call.arguments, error=call.error)
                for call in self.tool_calls
            ],
            generated_at=self.generated_at,
        )


def _first_present(raw: Mapping, *keys: str) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def validate_draft_state(raw: Union[DraftState, Mapping]) -> DraftState:
    """
    Check a raw draft state and parse it into a DraftState.

    Raises ValidationError naming the first offending field. Nothing here
    touches the network.
    """
    if isinstance(raw, DraftState):
        return raw
    if not isinstance(raw, Mapping):
        raise ValidationError("draftState", "must be an object")

    drafted = _first_present(raw, "draftedPlayers", "drafted_players")
    if not isinstance(drafted, list):
        raise ValidationError("draftedPlayers", "must be an array")

    current_pick = _first_present(raw, "currentPick", "current_pick")
    if isinstance(current_pick, bool) or not isinstance(current_pick, int) or current_pick < 1:
        raise ValidationError("currentPick", "must be a positive integer")

    user_team = _first_present(raw, "userTeam", "user_team")
    if not isinstance(user_team, str) or not user_team.strip():
        raise ValidationError("userTeam", "must be a non-empty string")

    try:
        return DraftState.model_validate(dict(raw))
    except PydanticValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ())) or "draftState"
        raise ValidationError(location, first.get("msg", "invalid value")) from e


class DraftAgent:
    """
    Recommendation orchestrator.

    Holds only read-only collaborators, so one instance can serve concurrent
    requests; all per-request state lives inside get_recommendation.
    """

    def __init__(
        self,
        reasoning_service: ReasoningService,
        catalog: PlayerCatalogProtocol,
        analytics: Optional[PositionalAnalytics] = None,
        calculator: Optional[DraftStateCalculator] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self.reasoning_service = reasoning_service
        self.catalog = catalog
        self.analytics = analytics or PositionalAnalytics()
        self.calculator = calculator or DraftStateCalculator()
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else settings.reasoning_timeout_seconds
        )

    @staticmethod
    def tool_names() -> List[str]:
        return [name.value for name in TOOL_REGISTRY]

    async def _converse(
        self,
        system_prompt: str,
        messages: List[Dict[str, Any]],
        schemas: Optional[List[Dict[str, Any]]],
    ) -> ServiceReply:
        try:
            return await asyncio.wait_for(
                self.reasoning_service.converse(system_prompt, messages, schemas),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"Reasoning service timed out after {self.timeout_seconds}s")
            raise UpstreamError(
                UpstreamError.TIMEOUT, f"no response within {self.timeout_seconds}s"
            ) from e
        except UpstreamError as e:
            logger.error(f"Reasoning service failed: {e}")
            raise
        except Exception as e:
            message = sanitize_error_message(e)
            logger.error(f"Reasoning service failed: {message}")
            raise UpstreamError(UpstreamError.TRANSPORT, message) from e

    @staticmethod
    def _user_message(context: Dict[str, Any]) -> str:
        return (
            "Analyze this draft situation and provide recommendations:\n\n"
            f"Draft State: {json.dumps(context, indent=2)}\n\n"
            "Please use your tools to analyze the current draft state, evaluate available "
            "players, and provide 3-5 specific recommendations with reasoning."
        )

    @staticmethod
    def _with_call_ids(calls: List[ToolCallRequest]) -> List[ToolCallRequest]:
        return [
            call if call.id else ToolCallRequest(name=call.name, arguments=call.arguments, id=f"call_{i}")
            for i, call in enumerate(calls)
        ]

    @staticmethod
    def _tools_used(results: List[ToolCallResult]) -> List[str]:
        used: List[str] = []
        for result in results:
            if result.known_tool and result.name not in used:
                used.append(result.name)
        return used

    async def get_recommendation(self, draft_state: Union[DraftState, Mapping]) -> Recommendation:
        """
        Produce a recommendation for one draft state.

        Raises:
            ValidationError: malformed input, before the reasoning service is contacted
            UpstreamError: the reasoning service timed out, failed, or returned no text
        """
        state = validate_draft_state(draft_state)
        league = state.league_settings
        current_pick = self.calculator.effective_current_pick(state.drafted_players, state.current_pick)
        draft_phase = compute_draft_phase(current_pick, league.team_count)

        logger.info(
            f"Getting draft recommendation for {state.user_team} at pick {current_pick} "
            f"({draft_phase} phase, {len(state.drafted_players)} players drafted)"
        )

        context = state.to_context()
        context["draftPhase"] = draft_phase
        messages: List[Dict[str, Any]] = [{"role": "user", "content": self._user_message(context)}]

        agent_state = AgentState.DRAFTING
        logger.debug(f"Agent state: {agent_state.value}")
        reply = await self._converse(SYSTEM_PROMPT, messages, tool_schemas())

        results: List[ToolCallResult] = []
        if not reply.tool_calls:
            text = reply.text
        else:
            agent_state = AgentState.TOOL_ROUND
            requests = self._with_call_ids(reply.tool_calls)
            logger.info(f"Reasoning service requested tools: {[r.name for r in requests]}")
            logger.debug(f"Agent state: {agent_state.value}")

            executor = ToolExecutor(
                self.catalog,
                drafted_players=state.drafted_players,
                league_settings=league,
                analytics=self.analytics,
                calculator=self.calculator,
            )
            results = await executor.execute_many(requests)

            agent_state = AgentState.SYNTHESIZING
            logger.debug(f"Agent state: {agent_state.value}")
            messages.append({"role": "assistant", "content": reply.text, "tool_calls": requests})
            for result in results:
                messages.append({
                    "role": "tool",
                    "tool_call_id": result.request.id,
                    "name": result.name,
                    "content": result.content(),
                })

            final = await self._converse(SYNTHESIS_PROMPT, messages, None)
            if final.tool_calls:
                logger.warning(
                    f"Ignoring {len(final.tool_calls)} tool calls requested during synthesis"
                )
            text = final.text

        if not text or not text.strip():
            logger.error(f"Reasoning service returned no text in state {agent_state.value}")
            raise UpstreamError(UpstreamError.MALFORMED, "reasoning service returned no recommendation text")

        agent_state = AgentState.DONE
        logger.debug(f"Agent state: {agent_state.value}")

        tools_used = self._tools_used(results)
        recommendation = Recommendation(
            text=text.strip(),
            tools_used=tools_used,
            reasoning=TOOL_REASONING if tools_used else GENERAL_REASONING,
            draft_phase=draft_phase,
            tool_calls=results,
        )
        logger.info(f"Recommendation produced using {len(tools_used)} tools")
        return recommendation

    def get_recommendation_sync(self, draft_state: Union[DraftState, Mapping]) -> Recommendation:
        """Blocking wrapper for callers without an event loop."""
        return asyncio.run(self.get_recommendation(draft_state))
