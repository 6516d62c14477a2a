"""Shared fixtures for the pitchplan test suite."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from pitchplan.gateway import GeneratedReport
from pitchplan.schemas import StructuredReport
from pitchplan.state import ConversationMessage, ConversationState
from pitchplan.utils.formatter import render_markdown
from pitchplan.utils.parsing import extract_report

DATA_DIR = Path(__file__).parent / "data"


def mock_llm_response(content: str):
    """Create a mock LLM response object."""
    response = MagicMock()
    response.content = content
    return response


class FakeGateway:
    """Deterministic stand-in for ModelGateway that records every request."""

    def __init__(self, reply: str = "Who is the target user?", report_text: str = ""):
        self.reply = reply
        self.report_text = report_text
        self.chat_calls: list[list[dict]] = []
        self.report_calls: list[list[dict]] = []

    async def chat(self, messages):
        self.chat_calls.append(list(messages))
        return self.reply

    async def generate_report(self, history):
        self.report_calls.append(list(history))
        report = extract_report(self.report_text)
        return GeneratedReport(markdown=render_markdown(report), report=report)


@pytest.fixture
def report_dict():
    """Complete valid report in wire (camelCase) form."""
    return json.loads((DATA_DIR / "habit_report.json").read_text(encoding="utf-8"))


@pytest.fixture
def report(report_dict):
    return StructuredReport.model_validate(report_dict)


@pytest.fixture
def golden_markdown():
    return (DATA_DIR / "habit_report.md").read_text(encoding="utf-8")


@pytest.fixture
def fenced_report_text(report_dict):
    """Model output with the report wrapped in prose and a ```json fence."""
    return (
        "Here is the report you asked for.\n\n"
        f"```json\n{json.dumps(report_dict, indent=2)}\n```\n\n"
        "## Markdown version\n\n# Habit Hero\n"
    )


@pytest.fixture
def empty_state():
    return ConversationState(conversation_id="idea-1")


@pytest.fixture
def six_message_state():
    """Three completed turns."""
    state = ConversationState(conversation_id="idea-1")
    turns = [
        ("user", "A tool for tracking habits"),
        ("assistant", "Who is it for?"),
        ("user", "Busy parents"),
        ("assistant", "What stops them today?"),
        ("user", "They forget and lose streaks"),
        ("assistant", "What would the MVP include?"),
    ]
    for role, content in turns:
        state = state.append(ConversationMessage.new("idea-1", role, content))
    return state


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def mock_config():
    """Patch the config singleton with test-friendly values."""
    test_config = {
        "model": "gpt-test",
        "max_retries": 3,
        "retry_delay_ms": 1000,
        "chat_temperature": 0.7,
        "report_temperature": 0.3,
        "context_window": 5,
        "database_url": "sqlite+aiosqlite:///:memory:",
        "export_dir": "./output",
        "log_level": "INFO",
    }
    with patch("pitchplan.config._config", test_config):
        yield test_config


@pytest.fixture
def sleep():
    """Injectable backoff sleep that records requested delays."""
    return AsyncMock()


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'pitchplan-test.db'}"
