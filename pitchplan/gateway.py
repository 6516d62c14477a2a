"""Model Gateway — single chat-completion calls to the OpenAI provider.

Owns the retry/backoff policy and maps provider failures onto the error
taxonomy. The report path requests JSON mode and hands the raw text to the
Report Extractor; markdown is always rendered from the validated object.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from langchain_openai import ChatOpenAI

from pitchplan.config import get_api_key, get_config
from pitchplan.errors import ConfigurationError, TransientProviderError
from pitchplan.schemas import StructuredReport
from pitchplan.state import ConversationMessage
from pitchplan.utils.formatter import render_markdown
from pitchplan.utils.parsing import extract_report
from pitchplan.utils.prompts import REPORT_SYSTEM_INSTRUCTION, REPORT_USER_INSTRUCTION
from pitchplan.utils.retry import call_with_retry, classify_provider_error

logger = logging.getLogger(__name__)

ChatInput = ConversationMessage | Mapping[str, str]


@dataclass(frozen=True)
class GeneratedReport:
    markdown: str
    report: StructuredReport


def _to_chat(messages: Iterable[ChatInput]) -> list[dict]:
    chat = []
    for msg in messages:
        if isinstance(msg, ConversationMessage):
            chat.append(msg.as_chat())
        else:
            chat.append({"role": msg["role"], "content": msg["content"]})
    return chat


class ModelGateway:
    """Wraps the provider client with retry and error classification.

    Args:
        api_key: Provider credential. Falls back to OPENAI_API_KEY.
        model: Chat model id. Falls back to config ``model``.
        max_retries: Retries after the first attempt. Falls back to config.
        retry_delay: Base backoff delay in milliseconds. Falls back to config.
        sleep: Awaitable sleep used between attempts (tests inject a mock).
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        max_retries: int | None = None,
        retry_delay: int | None = None,
        sleep=None,
    ):
        config = get_config()
        self.api_key = api_key if api_key is not None else get_api_key()
        self.model = model or config.get("model", "gpt-4")
        self.max_retries = max_retries if max_retries is not None else config.get("max_retries", 3)
        self.retry_delay = retry_delay if retry_delay is not None else config.get("retry_delay_ms", 1000)
        self.chat_temperature = config.get("chat_temperature", 0.7)
        self.report_temperature = config.get("report_temperature", 0.3)
        self._sleep = sleep

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _require_credential(self) -> None:
        if not self.is_configured:
            raise ConfigurationError(
                "OpenAI API key not configured. Please set the OPENAI_API_KEY environment variable."
            )

    def _client(self, temperature: float) -> ChatOpenAI:
        # Library-level retries off: call_with_retry is the only retry policy.
        return ChatOpenAI(
            model=self.model,
            api_key=self.api_key,
            temperature=temperature,
            max_retries=0,
        )

    async def _invoke(self, llm, messages: list[dict]) -> str:
        try:
            response = await llm.ainvoke(messages)
        except Exception as exc:
            classified = classify_provider_error(exc)
            if classified is exc:
                raise
            raise classified from exc

        content = response.content
        if not content:
            raise TransientProviderError("Empty response from model")
        return content

    async def _with_retry(self, fn):
        return await call_with_retry(
            fn,
            max_retries=self.max_retries,
            retry_delay_ms=self.retry_delay,
            sleep=self._sleep,
        )

    async def chat(self, messages: Iterable[ChatInput]) -> str:
        """Send a chat completion and return the assistant text."""
        self._require_credential()
        payload = _to_chat(messages)
        llm = self._client(self.chat_temperature)
        logger.debug("Chat request: model=%s messages=%d", self.model, len(payload))

        async def _call() -> str:
            return await self._invoke(llm, payload)

        return await self._with_retry(_call)

    async def generate_report(self, history: Iterable[ChatInput]) -> GeneratedReport:
        """Request the report in JSON mode and return it validated, with markdown."""
        self._require_credential()
        payload = _to_chat(history) + [
            {"role": "system", "content": REPORT_SYSTEM_INSTRUCTION},
            {"role": "user", "content": REPORT_USER_INSTRUCTION},
        ]
        llm = self._client(self.report_temperature).bind(
            response_format={"type": "json_object"}
        )
        logger.debug("Report request: model=%s messages=%d", self.model, len(payload))

        async def _call() -> GeneratedReport:
            raw = await self._invoke(llm, payload)
            report = extract_report(raw)
            return GeneratedReport(markdown=render_markdown(report), report=report)

        result = await self._with_retry(_call)
        logger.info("Report generated: %s", result.report.pitch.title)
        return result
