"""
Reasoning service interface and the OpenAI-compatible implementation.

The draft agent only needs one call: send a system prompt, a message history
and (optionally) tool schemas, and get back free text and/or tool-call
requests. Messages use a small provider-neutral shape:

    {"role": "user", "content": "..."}
    {"role": "assistant", "content": "...", "tool_calls": [ToolCallRequest, ...]}
    {"role": "tool", "tool_call_id": "...", "name": "...", "content": "<json>"}
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

import httpx
import openai

from draft_assistant.config import settings
from draft_assistant.exceptions import UpstreamError
from draft_assistant.services.tool_executor import ToolCallRequest
from draft_assistant.utils import sanitize_error_message

logger = logging.getLogger(__name__)


@dataclass
class ServiceReply:
    text: Optional[str] = None
    tool_calls: List[ToolCallRequest] = field(default_factory=list)


class ReasoningService(Protocol):
    model: str

    async def converse(
        self,
        system_prompt: str,
        messages: List[Dict[str, Any]],
        tool_schemas: Optional[List[Dict[str, Any]]] = None,
    ) -> ServiceReply:
        ...


class OpenAIReasoningService:
    """
    Chat-completions client with function calling.

    No automatic retries: a failed call surfaces as UpstreamError and retry
    policy is left to the caller.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        client: Optional[openai.AsyncOpenAI] = None,
    ):
        self.model = model or settings.reasoning_model
        self.temperature = temperature if temperature is not None else settings.reasoning_temperature

        if client is not None:
            self._client = client
            return

        api_key = api_key or settings.openai_api_key
        if not api_key:
            raise ValueError("OpenAI API key is required. Set OPENAI_API_KEY environment variable.")

        timeout = timeout_seconds or settings.reasoning_timeout_seconds
        self._client = openai.AsyncOpenAI(
            api_key=api_key,
            base_url=base_url or settings.reasoning_base_url,
            timeout=httpx.Timeout(timeout, connect=10.0),
            max_retries=0,
        )

    async def close(self) -> None:
        await self._client.close()

    @staticmethod
    def _to_openai_messages(system_prompt: str, messages: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        converted: List[Dict[str, Any]] = [{"role": "system", "content": system_prompt}]
        for message in messages:
            role = message["role"]
            if role == "assistant" and message.get("tool_calls"):
                converted.append({
                    "role": "assistant",
                    "content": message.get("content") or "",
                    "tool_calls": [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {
                                "name": call.name,
                                "arguments": (
                                    call.arguments if isinstance(call.arguments, str)
                                    else json.dumps(call.arguments or {})
                                ),
                            },
                        }
                        for call in message["tool_calls"]
                    ],
                })
            elif role == "tool":
                converted.append({
                    "role": "tool",
                    "tool_call_id": message["tool_call_id"],
                    "content": message["content"],
                })
            else:
                converted.append({"role": role, "content": message.get("content") or ""})
        return converted

    async def converse(
        self,
        system_prompt: str,
        messages: List[Dict[str, Any]],
        tool_schemas: Optional[List[Dict[str, Any]]] = None,
    ) -> ServiceReply:
        request: Dict[str, Any] = {
            "model": self.model,
            "messages": self._to_openai_messages(system_prompt, messages),
            "temperature": self.temperature,
        }
        if tool_schemas:
            request["tools"] = [{"type": "function", "function": schema} for schema in tool_schemas]
            request["tool_choice"] = "auto"

        try:
            response = await self._client.chat.completions.create(**request)
        except openai.APITimeoutError as e:
            raise UpstreamError(UpstreamError.TIMEOUT, sanitize_error_message(e)) from e
        except openai.APIStatusError as e:
            raise UpstreamError(
                UpstreamError.TRANSPORT,
                f"HTTP {e.status_code}: {sanitize_error_message(e)}",
                status_code=e.status_code,
            ) from e
        except openai.APIConnectionError as e:
            raise UpstreamError(UpstreamError.TRANSPORT, sanitize_error_message(e)) from e
        except openai.OpenAIError as e:
            raise UpstreamError(UpstreamError.TRANSPORT, sanitize_error_message(e)) from e

        choices = getattr(response, "choices", None)
        if not choices or getattr(choices[0], "message", None) is None:
            raise UpstreamError(UpstreamError.MALFORMED, "response contained no choices")

        message = choices[0].message
        tool_calls = []
        for call in message.tool_calls or []:
            function = getattr(call, "function", None)
            if function is None or not function.name:
                raise UpstreamError(UpstreamError.MALFORMED, "tool call without a function name")
            tool_calls.append(ToolCallRequest(
                id=call.id, name=function.name, arguments=function.arguments,
            ))

        logger.debug(f"{self.model} replied with {len(tool_calls)} tool calls")
        return ServiceReply(text=message.content, tool_calls=tool_calls)
