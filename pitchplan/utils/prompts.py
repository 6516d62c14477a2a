"""Prompt builders for the interview and the final report.

Both builders are pure: identical input yields byte-identical output, which
the golden-prompt tests rely on.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from pitchplan.state import ConversationMessage

DEFAULT_IDEA_TITLE = "a new idea"

INTERVIEW_TOPICS = (
    "problem statement",
    "target audience",
    "solution approach",
    "MVP scope",
    "constraints",
    "risks",
)

REPORT_OUTLINE = """\
1. Pitch: title and one-liner
2. Problem: statement and why now
3. Audience: personas with descriptions and pain points
4. Solution: description and differentiators
5. Features: MVP features vs later features
6. Architecture: overview and components
7. Data Model: entities with fields and relations
8. Roadmap: phases with duration and deliverables
9. Risks: items with mitigations
10. Checklist: security, privacy, and cost considerations"""

# Appended by the gateway on the report path, after the conversation.
REPORT_SYSTEM_INSTRUCTION = (
    "You are a product strategist. Generate a structured report in JSON format "
    "matching the IdeaReport schema. Also provide a markdown version of the report."
)
REPORT_USER_INSTRUCTION = (
    "Generate the final report in JSON format. The JSON must match the IdeaReport "
    "schema exactly. Also provide a markdown version."
)

Message = ConversationMessage | Mapping[str, str]


@dataclass(frozen=True)
class InterviewContext:
    idea_title: str | None = None
    previous_messages: tuple[Message, ...] = field(default_factory=tuple)


def _role_and_content(message: Message) -> tuple[str, str]:
    if isinstance(message, ConversationMessage):
        return message.role, message.content
    return message.get("role", ""), message.get("content", "")


def render_turns(messages: Iterable[Message], separator: str = "\n") -> str:
    """Render messages as ``role: content`` lines in the given order."""
    return separator.join(
        f"{role}: {content}" for role, content in map(_role_and_content, messages)
    )


def build_interview_prompt(context: InterviewContext) -> str:
    idea_title = context.idea_title or DEFAULT_IDEA_TITLE
    topics = ", ".join(INTERVIEW_TOPICS[:-1]) + f", and {INTERVIEW_TOPICS[-1]}"

    return f"""You are a product strategist helping to refine an idea. Your goal is to ask clarifying questions and challenge assumptions to help the user develop a well-thought-out product plan.

The user is working on: {idea_title}

Guidelines:
- Ask one question at a time
- Be concise and focused
- Challenge assumptions when appropriate
- Cover these areas: {topics}
- Be conversational and helpful, not interrogative
- Build on previous answers to go deeper

Previous conversation:
{render_turns(context.previous_messages)}

Ask your next question to help refine this idea."""


def build_report_prompt(history: Iterable[Message]) -> str:
    turns = render_turns(history, separator="\n\n")

    return f"""You are a product strategist. Based on the following conversation, generate a comprehensive structured report.

The report should include:
{REPORT_OUTLINE}

Conversation history:
{turns}

Generate a complete, actionable report in JSON format matching the IdeaReport schema. Be specific and practical."""
