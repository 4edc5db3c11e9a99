"""
Tests for the DraftAgent recommendation orchestrator.

The reasoning service is replaced by FakeReasoningService, which replays
scripted replies and records every request it receives.
"""
import asyncio
import json

import pytest

from draft_assistant.exceptions import UpstreamError, ValidationError
from draft_assistant.services.draft_agent import (
    GENERAL_REASONING,
    SYNTHESIS_PROMPT,
    SYSTEM_PROMPT,
    TOOL_REASONING,
    DraftAgent,
    validate_draft_state,
)
from draft_assistant.services.tool_executor import ToolCallRequest
from conftest import FakeReasoningService, text_reply, tool_reply


def _agent(catalog, replies, **kwargs):
    service = FakeReasoningService(replies, delay=kwargs.pop("delay", 0.0))
    return DraftAgent(reasoning_service=service, catalog=catalog, **kwargs), service


# ==================== VALIDATION ====================


class TestValidation:
    """Malformed input is rejected before the reasoning service is contacted."""

    @pytest.mark.parametrize("patch_fields,field", [
        ({"draftedPlayers": "McCaffrey"}, "draftedPlayers"),
        ({"draftedPlayers": None}, "draftedPlayers"),
        ({"currentPick": 0}, "currentPick"),
        ({"currentPick": -4}, "currentPick"),
        ({"currentPick": "3"}, "currentPick"),
        ({"currentPick": True}, "currentPick"),
        ({"currentPick": 2.5}, "currentPick"),
        ({"userTeam": ""}, "userTeam"),
        ({"userTeam": "   "}, "userTeam"),
        ({"userTeam": 3}, "userTeam"),
    ])
    async def test_invalid_fields(self, catalog, draft_state_payload, patch_fields, field):
        agent, service = _agent(catalog, [text_reply("unused")])
        draft_state_payload.update(patch_fields)

        with pytest.raises(ValidationError) as exc_info:
            await agent.get_recommendation(draft_state_payload)

        assert exc_info.value.field == field
        assert service.calls == []

    async def test_missing_field(self, catalog, draft_state_payload):
        agent, service = _agent(catalog, [text_reply("unused")])
        del draft_state_payload["userTeam"]
        with pytest.raises(ValidationError) as exc_info:
            await agent.get_recommendation(draft_state_payload)
        assert exc_info.value.field == "userTeam"
        assert service.calls == []

    async def test_malformed_pick_entry(self, catalog, draft_state_payload):
        agent, service = _agent(catalog, [text_reply("unused")])
        draft_state_payload["draftedPlayers"].append({"pickNumber": 3})
        with pytest.raises(ValidationError) as exc_info:
            await agent.get_recommendation(draft_state_payload)
        assert exc_info.value.field.startswith("draftedPlayers")
        assert service.calls == []

    def test_not_an_object(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_draft_state(["not", "a", "dict"])
        assert exc_info.value.field == "draftState"

    def test_snake_case_accepted(self):
        state = validate_draft_state({
            "drafted_players": [], "current_pick": 1, "user_team": "Team 1",
        })
        assert state.current_pick == 1
        assert state.league_settings.team_count == 12


# ==================== CONVERSATION ====================


class TestConversation:
    """State machine transitions."""

    async def test_no_tool_calls_goes_straight_to_done(self, catalog, draft_state_payload):
        agent, service = _agent(catalog, [text_reply("Take Bijan Robinson.")])
        recommendation = await agent.get_recommendation(draft_state_payload)

        assert recommendation.text == "Take Bijan Robinson."
        assert recommendation.tools_used == []
        assert recommendation.reasoning == GENERAL_REASONING
        assert recommendation.draft_phase == "early"
        assert len(service.calls) == 1

        first = service.calls[0]
        assert first["system_prompt"] == SYSTEM_PROMPT
        assert [s["name"] for s in first["tool_schemas"]] == agent.tool_names()
        assert '"userTeam": "Team 3"' in first["messages"][0]["content"]
        assert '"draftPhase": "early"' in first["messages"][0]["content"]

    async def test_unknown_tool_in_batch(self, catalog, draft_state_payload):
        """One real and one unknown tool: Done with one tool used, error visible to synthesis."""
        agent, service = _agent(catalog, [
            tool_reply(
                ToolCallRequest(name="findSleepers", arguments='{"position": "RB"}', id="call_1"),
                ToolCallRequest(name="pickForMe", arguments="{}", id="call_2"),
            ),
            text_reply("Draft Bijan Robinson; Breece Hall is the fallback."),
        ])
        recommendation = await agent.get_recommendation(draft_state_payload)

        assert recommendation.tools_used == ["findSleepers"]
        assert recommendation.reasoning == TOOL_REASONING
        assert recommendation.text.startswith("Draft Bijan Robinson")
        assert [c.error for c in recommendation.tool_calls] == [None, "unknown tool: pickForMe"]

        synthesis = service.calls[1]
        assert synthesis["system_prompt"] == SYNTHESIS_PROMPT
        assert synthesis["tool_schemas"] is None
        tool_messages = [m for m in synthesis["messages"] if m["role"] == "tool"]
        assert [m["tool_call_id"] for m in tool_messages] == ["call_1", "call_2"]
        assert json.loads(tool_messages[1]["content"]) == {"error": "unknown tool: pickForMe"}

    async def test_tool_results_exclude_drafted_players(self, catalog, draft_state_payload):
        agent, service = _agent(catalog, [
            tool_reply(ToolCallRequest(name="getAvailablePlayers", arguments="{}", id="call_1")),
            text_reply("Take the best available."),
        ])
        await agent.get_recommendation(draft_state_payload)

        tool_message = service.calls[1]["messages"][-1]
        names = [p["name"] for p in json.loads(tool_message["content"])]
        assert "Christian McCaffrey" not in names
        assert "CeeDee Lamb" not in names
        assert names[0] == "Bijan Robinson"

    async def test_tools_used_deduplicated_in_order(self, catalog, draft_state_payload):
        agent, _ = _agent(catalog, [
            tool_reply(
                ToolCallRequest(name="getPlayerDetails", arguments='{"playerName": "Josh Allen"}'),
                ToolCallRequest(name="findSleepers", arguments="{}"),
                ToolCallRequest(name="getPlayerDetails", arguments='{"playerName": "Jalen Hurts"}'),
            ),
            text_reply("Wait on quarterback."),
        ])
        recommendation = await agent.get_recommendation(draft_state_payload)
        assert recommendation.tools_used == ["getPlayerDetails", "findSleepers"]

    async def test_missing_call_ids_are_assigned(self, catalog, draft_state_payload):
        agent, service = _agent(catalog, [
            tool_reply(
                ToolCallRequest(name="findSleepers"),
                ToolCallRequest(name="getAvailablePlayers"),
            ),
            text_reply("Done."),
        ])
        await agent.get_recommendation(draft_state_payload)

        assistant = service.calls[1]["messages"][1]
        assert [c.id for c in assistant["tool_calls"]] == ["call_0", "call_1"]

    async def test_only_unknown_tools(self, catalog, draft_state_payload):
        agent, _ = _agent(catalog, [
            tool_reply(ToolCallRequest(name="mystery", id="call_1")),
            text_reply("Go best player available."),
        ])
        recommendation = await agent.get_recommendation(draft_state_payload)
        assert recommendation.tools_used == []
        assert recommendation.reasoning == GENERAL_REASONING

    async def test_synthesis_tool_calls_are_ignored(self, catalog, draft_state_payload):
        agent, service = _agent(catalog, [
            tool_reply(ToolCallRequest(name="findSleepers", id="call_1")),
            tool_reply(ToolCallRequest(name="getAvailablePlayers", id="call_2"), text="Take Breece Hall."),
        ])
        recommendation = await agent.get_recommendation(draft_state_payload)
        assert recommendation.text == "Take Breece Hall."
        assert recommendation.tools_used == ["findSleepers"]
        assert len(service.calls) == 2

    async def test_response_model(self, catalog, draft_state_payload):
        agent, _ = _agent(catalog, [
            tool_reply(ToolCallRequest(name="findSleepers", id="call_1")),
            text_reply("Take Bijan Robinson."),
        ])
        recommendation = await agent.get_recommendation(draft_state_payload)
        payload = recommendation.to_response().model_dump(mode="json", by_alias=True)

        assert payload["recommendation"] == "Take Bijan Robinson."
        assert payload["toolsUsed"] == ["findSleepers"]
        assert payload["draftPhase"] == "early"
        assert payload["toolCalls"][0]["name"] == "findSleepers"
        assert "generatedAt" in payload

    async def test_concurrent_requests_are_independent(self, catalog, draft_state_payload):
        agent, service = _agent(catalog, [text_reply("One."), text_reply("Two.")])
        results = await asyncio.gather(
            agent.get_recommendation(draft_state_payload),
            agent.get_recommendation(draft_state_payload),
        )
        assert sorted(r.text for r in results) == ["One.", "Two."]
        assert len(service.calls) == 2

    def test_sync_entry_point(self, catalog, draft_state_payload):
        agent, _ = _agent(catalog, [text_reply("Take Bijan Robinson.")])
        recommendation = agent.get_recommendation_sync(draft_state_payload)
        assert recommendation.text == "Take Bijan Robinson."


# ==================== UPSTREAM FAILURES ====================


class TestUpstreamFailures:
    """Reasoning service failures surface as UpstreamError."""

    async def test_timeout(self, catalog, draft_state_payload):
        agent, _ = _agent(catalog, [text_reply("too late")], delay=0.5, timeout_seconds=0.01)
        with pytest.raises(UpstreamError) as exc_info:
            await agent.get_recommendation(draft_state_payload)
        assert exc_info.value.is_timeout

    async def test_upstream_error_propagates(self, catalog, draft_state_payload):
        agent, _ = _agent(catalog, [UpstreamError(UpstreamError.TRANSPORT, "HTTP 500: server error")])
        with pytest.raises(UpstreamError) as exc_info:
            await agent.get_recommendation(draft_state_payload)
        assert exc_info.value.kind == UpstreamError.TRANSPORT

    async def test_unexpected_error_is_wrapped_and_sanitized(self, catalog, draft_state_payload):
        agent, _ = _agent(catalog, [RuntimeError("bad key sk-live-123abc")])
        with pytest.raises(UpstreamError) as exc_info:
            await agent.get_recommendation(draft_state_payload)
        assert exc_info.value.kind == UpstreamError.TRANSPORT
        assert "sk-live-123abc" not in exc_info.value.message

    async def test_empty_first_reply_is_malformed(self, catalog, draft_state_payload):
        agent, _ = _agent(catalog, [text_reply("")])
        with pytest.raises(UpstreamError) as exc_info:
            await agent.get_recommendation(draft_state_payload)
        assert exc_info.value.kind == UpstreamError.MALFORMED

    async def test_empty_synthesis_is_malformed(self, catalog, draft_state_payload):
        agent, _ = _agent(catalog, [
            tool_reply(ToolCallRequest(name="findSleepers", id="call_1")),
            text_reply("   "),
        ])
        with pytest.raises(UpstreamError) as exc_info:
            await agent.get_recommendation(draft_state_payload)
        assert exc_info.value.kind == UpstreamError.MALFORMED

    async def test_synthesis_failure_is_fatal(self, catalog, draft_state_payload):
        agent, _ = _agent(catalog, [
            tool_reply(ToolCallRequest(name="findSleepers", id="call_1")),
            UpstreamError(UpstreamError.TIMEOUT, "read timed out"),
        ])
        with pytest.raises(UpstreamError) as exc_info:
            await agent.get_recommendation(draft_state_payload)
        assert exc_info.value.is_timeout
