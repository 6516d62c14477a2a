"""Interview Orchestrator — drives one conversation from first answer to final report.

States: Active (any number of turns) -> Complete (terminal, after a report).
Each call takes a state snapshot and returns a new one; a failed call leaves
the caller's snapshot untouched so the same turn can be retried.
"""

import logging

from pitchplan.config import get_config
from pitchplan.errors import StateError
from pitchplan.gateway import ModelGateway
from pitchplan.schemas import StructuredReport
from pitchplan.state import ConversationMessage, ConversationState, TurnResult
from pitchplan.utils.prompts import InterviewContext, build_interview_prompt, build_report_prompt
from pitchplan.utils.validator import validate_input

logger = logging.getLogger(__name__)


def _ensure_active(state: ConversationState) -> None:
    if state.is_complete:
        raise StateError(
            f"Conversation {state.conversation_id} is complete; start a new one to continue."
        )


class InterviewOrchestrator:
    def __init__(self, gateway: ModelGateway, context_window: int | None = None):
        self.gateway = gateway
        self.context_window = (
            context_window if context_window is not None else get_config().get("context_window", 5)
        )

    async def process_message(self, state: ConversationState, user_text: str) -> TurnResult:
        """Run one interview turn.

        The system prompt is built from the full history; only the most recent
        ``context_window`` messages are sent alongside it. The user text is
        stored as given; blank input raises ValueError.
        """
        _ensure_active(state)
        validate_input(user_text)

        user_msg = ConversationMessage.new(state.conversation_id, "user", user_text)
        updated = state.append(user_msg)

        prompt = build_interview_prompt(
            InterviewContext(idea_title=state.title, previous_messages=updated.messages)
        )
        recent = updated.messages[-self.context_window:] if self.context_window > 0 else ()
        response = await self.gateway.chat(
            [{"role": "system", "content": prompt}] + [m.as_chat() for m in recent]
        )

        assistant_msg = ConversationMessage.new(state.conversation_id, "assistant", response)
        logger.info(
            "Turn complete for %s (%d messages)",
            state.conversation_id,
            len(updated.messages) + 1,
        )
        return TurnResult(response=response, state=updated.append(assistant_msg))

    async def generate_report(self, state: ConversationState) -> StructuredReport:
        """Generate the validated report for the whole conversation.

        An empty history is allowed: the model still gets called and returns
        a mostly-placeholder report. Marking the state complete is left to the
        caller (``state.completed()``).
        """
        _ensure_active(state)
        history = state.history()
        if not history:
            logger.warning("Generating report for %s with empty history", state.conversation_id)

        prompt = build_report_prompt(history)
        result = await self.gateway.generate_report(
            [{"role": "system", "content": prompt}] + history
        )
        return result.report
