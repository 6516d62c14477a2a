"""Interview session — runs the orchestrator against the local store."""

import logging
from dataclasses import replace

from pitchplan.agents.interviewer import InterviewOrchestrator
from pitchplan.errors import StateError
from pitchplan.schemas import StructuredReport
from pitchplan.state import ConversationState, TurnResult
from pitchplan.store.repositories import ChatMessageRepository, IdeaRepository
from pitchplan.utils.formatter import render_markdown

logger = logging.getLogger(__name__)

NEW_IDEA_TITLE = "New Idea"
TITLE_MAX_CHARS = 50


def title_from_first_message(text: str) -> str:
    if len(text) > TITLE_MAX_CHARS:
        return text[:TITLE_MAX_CHARS] + "..."
    return text


class InterviewSession:
    """Loads or creates an idea, persists each turn, and stores the final report.

    The caller owns the current ConversationState and must not run two calls
    for the same conversation concurrently.
    """

    def __init__(
        self,
        orchestrator: InterviewOrchestrator,
        ideas: IdeaRepository,
        messages: ChatMessageRepository,
    ):
        self.orchestrator = orchestrator
        self.ideas = ideas
        self.messages = messages

    async def start(self, idea_id: str | None = None) -> ConversationState:
        if idea_id is None:
            idea = await self.ideas.create(NEW_IDEA_TITLE)
            logger.info("Started new idea %s", idea.id)
            return ConversationState(conversation_id=idea.id)

        idea = await self.ideas.find_by_id(idea_id)
        if idea is None:
            raise StateError(f"Idea with id {idea_id} not found")
        history = await self.messages.find_by_conversation(idea_id)
        title = None if idea.title == NEW_IDEA_TITLE else idea.title
        return ConversationState(conversation_id=idea_id, messages=tuple(history), title=title)

    async def send(self, state: ConversationState, text: str) -> TurnResult:
        """Run one turn and persist both new messages."""
        is_first_turn = not state.messages
        result = await self.orchestrator.process_message(state, text)

        for message in result.state.messages[len(state.messages):]:
            await self.messages.create(message)

        if is_first_turn:
            user_text = result.state.messages[0].content.strip()
            title = title_from_first_message(user_text)
            await self.ideas.update(state.conversation_id, title=title)
            return TurnResult(response=result.response, state=replace(result.state, title=title))
        return result

    async def finish(self, state: ConversationState) -> tuple[StructuredReport, ConversationState]:
        """Generate the report, store it on the idea, and complete the conversation.

        If generation fails nothing is written and the caller keeps ``state``.
        """
        report = await self.orchestrator.generate_report(state)
        await self.ideas.update(
            state.conversation_id,
            status="refined",
            report_json=report,
            report_md=render_markdown(report),
            summary=report.pitch.one_liner,
        )
        logger.info("Idea %s refined", state.conversation_id)
        return report, state.completed()
