"""Idea and chat message repositories over the local store.

Rows are mapped strictly: stored JSON that no longer matches the schema
raises instead of being passed through.
"""

import json
import uuid
from typing import Any

from sqlalchemy import delete, func, or_, select

from pitchplan.errors import ReportValidationError, StateError
from pitchplan.schemas import Idea, StructuredReport
from pitchplan.state import ConversationMessage, now_iso
from pitchplan.store.database import ChatMessageRow, Database, IdeaRow
from pitchplan.utils.validator import validate_report

_UPDATABLE_FIELDS = {"title", "tags", "status", "summary", "report_md", "report_json", "synced_at"}


def _load_column(raw: str, column: str, idea_id: str):
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ReportValidationError(
            f"Idea {idea_id} has malformed {column} column.",
            errors=[f"{column}: invalid JSON ({exc.msg})"],
        ) from exc


def _decode_tags(raw: str | None, idea_id: str) -> list[str]:
    if not raw:
        return []
    tags = _load_column(raw, "tags", idea_id)
    if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
        raise ReportValidationError(
            f"Idea {idea_id} has malformed tags column.", errors=["tags: expected list of strings"]
        )
    return tags


def _decode_report(raw: str | None, idea_id: str) -> StructuredReport | None:
    if not raw:
        return None
    return validate_report(_load_column(raw, "report_json", idea_id))


def _encode_report(report: StructuredReport | None) -> str | None:
    return json.dumps(report.to_wire(), ensure_ascii=False) if report else None


def _row_to_idea(row: IdeaRow) -> Idea:
    return Idea(
        id=row.id,
        title=row.title,
        created_at=row.created_at,
        updated_at=row.updated_at,
        tags=_decode_tags(row.tags, row.id),
        status=row.status,
        summary=row.summary or "",
        report_md=row.report_md or "",
        report_json=_decode_report(row.report_json, row.id),
        synced_at=row.synced_at or None,
    )


def _row_to_message(row: ChatMessageRow) -> ConversationMessage:
    return ConversationMessage(
        id=row.id,
        conversation_id=row.idea_id,
        role=row.role,
        content=row.content,
        timestamp=row.timestamp,
    )


class IdeaRepository:
    def __init__(self, db: Database):
        self.db = db

    async def create(
        self,
        title: str,
        *,
        tags: list[str] | None = None,
        status: str = "draft",
        summary: str = "",
        report_md: str = "",
        report_json: StructuredReport | None = None,
        synced_at: str | None = None,
    ) -> Idea:
        now = now_iso()
        idea = Idea(
            id=str(uuid.uuid4()),
            title=title,
            created_at=now,
            updated_at=now,
            tags=tags or [],
            status=status,
            summary=summary,
            report_md=report_md,
            report_json=report_json,
            synced_at=synced_at,
        )
        async with self.db.session() as session:
            session.add(
                IdeaRow(
                    id=idea.id,
                    title=idea.title,
                    created_at=idea.created_at,
                    updated_at=idea.updated_at,
                    tags=json.dumps(idea.tags),
                    status=idea.status,
                    summary=idea.summary,
                    report_md=idea.report_md,
                    report_json=_encode_report(idea.report_json),
                    synced_at=idea.synced_at,
                )
            )
            await session.commit()
        return idea

    async def find_all(self) -> list[Idea]:
        async with self.db.session() as session:
            result = await session.execute(select(IdeaRow).order_by(IdeaRow.created_at.desc()))
            return [_row_to_idea(row) for row in result.scalars()]

    async def find_by_id(self, idea_id: str) -> Idea | None:
        async with self.db.session() as session:
            row = await session.get(IdeaRow, idea_id)
            return _row_to_idea(row) if row else None

    async def update(self, idea_id: str, **updates: Any) -> Idea:
        """Apply a partial update and return the stored idea.

        Raises StateError if the idea does not exist.
        """
        unknown = set(updates) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update idea fields: {sorted(unknown)}")

        async with self.db.session() as session:
            row = await session.get(IdeaRow, idea_id)
            if row is None:
                raise StateError(f"Idea with id {idea_id} not found")

            for name, value in updates.items():
                if name == "tags":
                    value = json.dumps(value)
                elif name == "report_json":
                    value = _encode_report(value)
                setattr(row, name, value)
            row.updated_at = now_iso()

            idea = _row_to_idea(row)
            await session.commit()
        return idea

    async def delete(self, idea_id: str) -> None:
        async with self.db.session() as session:
            await session.execute(delete(ChatMessageRow).where(ChatMessageRow.idea_id == idea_id))
            await session.execute(delete(IdeaRow).where(IdeaRow.id == idea_id))
            await session.commit()

    async def search(self, query: str) -> list[Idea]:
        """Case-insensitive substring match on title or summary, newest first."""
        term = f"%{query.lower()}%"
        stmt = (
            select(IdeaRow)
            .where(or_(func.lower(IdeaRow.title).like(term), func.lower(IdeaRow.summary).like(term)))
            .order_by(IdeaRow.created_at.desc())
        )
        async with self.db.session() as session:
            result = await session.execute(stmt)
            return [_row_to_idea(row) for row in result.scalars()]


class ChatMessageRepository:
    def __init__(self, db: Database):
        self.db = db

    async def create(self, message: ConversationMessage) -> ConversationMessage:
        async with self.db.session() as session:
            session.add(
                ChatMessageRow(
                    id=message.id,
                    idea_id=message.conversation_id,
                    role=message.role,
                    content=message.content,
                    timestamp=message.timestamp,
                )
            )
            await session.commit()
        return message

    async def find_by_conversation(self, conversation_id: str) -> list[ConversationMessage]:
        stmt = (
            select(ChatMessageRow)
            .where(ChatMessageRow.idea_id == conversation_id)
            .order_by(ChatMessageRow.timestamp.asc())
        )
        async with self.db.session() as session:
            result = await session.execute(stmt)
            return [_row_to_message(row) for row in result.scalars()]

    async def delete_by_conversation(self, conversation_id: str) -> None:
        async with self.db.session() as session:
            await session.execute(
                delete(ChatMessageRow).where(ChatMessageRow.idea_id == conversation_id)
            )
            await session.commit()
