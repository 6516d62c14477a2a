"""Conversation state — immutable values passed into and returned by the orchestrator."""

import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Literal

Role = Literal["user", "assistant", "system"]
VALID_ROLES = ("user", "assistant", "system")


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ConversationMessage:
    id: str
    conversation_id: str
    role: Role
    content: str
    timestamp: str

    @classmethod
    def new(cls, conversation_id: str, role: Role, content: str) -> "ConversationMessage":
        """Create a message with a fresh id and the current UTC timestamp."""
        if role not in VALID_ROLES:
            raise ValueError(f"Unsupported message role: {role!r}")
        return cls(
            id=str(uuid.uuid4()),
            conversation_id=conversation_id,
            role=role,
            content=content,
            timestamp=now_iso(),
        )

    def as_chat(self) -> dict:
        """Return the ``{"role", "content"}`` pair sent to the model."""
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class ConversationState:
    conversation_id: str
    messages: tuple[ConversationMessage, ...] = ()
    is_complete: bool = False
    title: str | None = None  # Idea title, used only for prompt context.

    def append(self, message: ConversationMessage) -> "ConversationState":
        """Return a new state with ``message`` appended."""
        return replace(self, messages=self.messages + (message,))

    def completed(self) -> "ConversationState":
        """Return the terminal state, reached after a report is generated."""
        return replace(self, is_complete=True)

    def history(self) -> list[dict]:
        return [m.as_chat() for m in self.messages]


@dataclass(frozen=True)
class TurnResult:
    """Assistant reply for one interview turn plus the advanced state."""

    response: str
    state: ConversationState
