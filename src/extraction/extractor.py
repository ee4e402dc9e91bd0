"""LLM-powered structured extraction of a single task from free-form text."""

from __future__ import annotations

import asyncio
import json
import logging
import re
from collections.abc import Awaitable, Callable
from datetime import UTC
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from src.errors import EmptyInputError, InputTooLongError, TaskParseError
from src.extraction.llm import LanguageModelClient
from src.extraction.models import ParsedTask
from src.extraction.temporal import Clock, resolve_due_date, utc_now
from src.pipeline_config import RetryPolicy
from src.retry import retry_async

if TYPE_CHECKING:
    from src.monitoring.usage import UsageTracker

logger = logging.getLogger(__name__)

TASK_PARSING_PROMPT = """\
You are a task parser that converts natural language into structured JSON data.
Parse the natural language input into a structured JSON task with the following fields:
- taskName: A clear, concise title
- description: Detailed task description
- priority: One of [P1, P2, P3, P4] where P1 is highest
- dueDate: ISO date string if specified (must be in the future), null if not specified
- assignee: The person assigned to the task, or "Unassigned"
- tags: Array of relevant tags

For dates:
- If "tomorrow" is mentioned, set to tomorrow at 11:59 PM
- If "next week" is mentioned, set to 7 days from now at 11:59 PM
- If "next Friday" or similar is mentioned, set to the next occurrence of that day at 11:59 PM
- If no specific date is mentioned, set dueDate to null

Return the response in valid JSON format.
Example format:
{
  "taskName": "Example Task",
  "description": "Detailed description",
  "priority": "P1",
  "dueDate": "2024-03-20T23:59:00.000Z",
  "assignee": "John Doe",
  "tags": ["important", "meeting"]
}"""

_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def parse_task_document(content: dict[str, Any] | str) -> dict[str, Any]:
    """Turn collaborator output into a task document with the required fields.

    Raises:
        TaskParseError: Not a JSON object, or taskName/description missing.
    """
    if isinstance(content, str):
        text = content.strip()
        fenced = _CODE_FENCE_RE.match(text)
        if fenced:
            text = fenced.group(1)
        try:
            content = json.loads(text)
        except json.JSONDecodeError as exc:
            raise TaskParseError("Failed to parse task from natural language") from exc

    if not isinstance(content, dict):
        raise TaskParseError("Structured task document must be a JSON object")

    for field in ("taskName", "description"):
        value = content.get(field)
        if not isinstance(value, str) or not value.strip():
            raise TaskParseError("Missing required fields in parsed task")

    return content


class StructuredExtractor:
    """Sends text to a language model and validates the task it returns."""

    def __init__(
        self,
        llm: LanguageModelClient,
        retry_policy: RetryPolicy | None = None,
        *,
        max_input_chars: int = 2000,
        clock: Clock = utc_now,
        usage_tracker: UsageTracker | None = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._llm = llm
        self._retry_policy = retry_policy or RetryPolicy()
        self._max_input_chars = max_input_chars
        self._clock = clock
        self._usage_tracker = usage_tracker
        self._sleep = sleep

    async def extract(self, text: str) -> ParsedTask:
        """Parse ``text`` into a validated ``ParsedTask``.

        The collaborator call, parsing and validation run together under the
        retry policy, so a malformed document is retried like a network error.

        Raises:
            EmptyInputError: ``text`` is blank.
            InputTooLongError: ``text`` exceeds the character limit.
            TaskParseError: Every attempt returned an unusable document.
        """
        text = (text or "").strip()
        if not text:
            raise EmptyInputError("Task input cannot be empty")
        if len(text) > self._max_input_chars:
            raise InputTooLongError(
                f"Task input cannot exceed {self._max_input_chars} characters"
            )

        tokens_used = 0

        async def attempt() -> ParsedTask:
            nonlocal tokens_used
            now = self._clock()
            completion = await self._llm.complete(
                system=TASK_PARSING_PROMPT,
                user=(
                    f"Current date and time (UTC): {now.isoformat()}\n\n"
                    f"Parse this task into JSON: {text}"
                ),
            )
            tokens_used = completion.total_tokens
            return self._validate(completion.document, text)

        task = await retry_async(attempt, self._retry_policy, sleep=self._sleep)
        self._report_usage(tokens_used)
        return task

    def _validate(self, content: dict[str, Any] | str, text: str) -> ParsedTask:
        document = parse_task_document(content)
        try:
            task = ParsedTask.model_validate(document)
        except ValidationError as exc:
            logger.warning("Structured task failed validation: %s", exc)
            raise TaskParseError(f"Invalid task document: {exc}") from exc

        now = self._clock()
        due_date = resolve_due_date(task.due_date, text, now)
        if due_date is not None and due_date <= now:
            logger.warning(
                "Dropping past due date %s for task %r", due_date.isoformat(), task.task_name
            )
            due_date = None
        if due_date is not None:
            due_date = due_date.astimezone(UTC)
        return task.model_copy(update={"due_date": due_date})

    def _report_usage(self, tokens: int) -> None:
        if self._usage_tracker is None:
            return
        try:
            self._usage_tracker.record(tokens)
        except Exception:
            logger.exception("Failed to record LLM usage")
