"""Language-model clients that return a structured task document."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from src.errors import TaskParseError

TASK_TOOL_NAME = "store_parsed_task"

# Tool definition for Claude structured output
TASK_TOOL: dict[str, Any] = {
    "name": TASK_TOOL_NAME,
    "description": (
        "Store the structured task parsed from the user's request. "
        "Call this exactly once."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "taskName": {
                "type": "string",
                "description": "A clear, concise title (max 200 characters).",
            },
            "description": {
                "type": "string",
                "description": "Detailed task description.",
            },
            "priority": {
                "type": "string",
                "enum": ["P1", "P2", "P3", "P4"],
                "description": "P1 is the highest priority, P4 the lowest.",
            },
            "dueDate": {
                "type": ["string", "null"],
                "description": "ISO 8601 due date in UTC, or null if none was mentioned.",
            },
            "assignee": {
                "type": "string",
                "description": 'Person assigned to the task, or "Unassigned".',
            },
            "tags": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Short relevant tags (at most 5, 20 characters each).",
            },
        },
        "required": ["taskName", "description", "priority", "dueDate", "assignee", "tags"],
    },
}


@dataclass
class Completion:
    """Raw collaborator output plus the tokens it cost."""

    document: dict[str, Any] | str
    total_tokens: int = 0


class LanguageModelClient(Protocol):
    async def complete(self, *, system: str, user: str) -> Completion: ...


class AnthropicTaskClient:
    """Claude tool-use client; the tool input is the task document."""

    def __init__(
        self,
        api_key: str,
        model: str,
        timeout: float = 30.0,
        client: AsyncAnthropic | None = None,
    ) -> None:
        self._client = client or AsyncAnthropic(api_key=api_key, timeout=timeout)
        self._model = model

    async def complete(self, *, system: str, user: str) -> Completion:
        response = await self._client.messages.create(
            model=self._model,
            max_tokens=1024,
            system=system,
            tools=[TASK_TOOL],
            tool_choice={"type": "tool", "name": TASK_TOOL_NAME},
            messages=[{"role": "user", "content": user}],
        )

        tokens = response.usage.input_tokens + response.usage.output_tokens
        for block in response.content:
            if block.type == "tool_use" and block.name == TASK_TOOL_NAME:
                return Completion(document=block.input, total_tokens=tokens)

        raise TaskParseError("Claude response contained no task tool call")


class OpenAITaskClient:
    """Chat-completions client forced into JSON-object mode."""

    def __init__(
        self,
        api_key: str,
        model: str,
        timeout: float = 30.0,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._client = client or AsyncOpenAI(api_key=api_key, timeout=timeout)
        self._model = model

    async def complete(self, *, system: str, user: str) -> Completion:
        completion = await self._client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            temperature=0.1,
            max_tokens=1000,
            response_format={"type": "json_object"},
        )

        content = completion.choices[0].message.content
        if not content:
            raise TaskParseError("OpenAI returned empty response")

        tokens = completion.usage.total_tokens if completion.usage else 0
        return Completion(document=content, total_tokens=tokens)
