"""Entry point: terminal interview loop over the local idea store."""

import asyncio
import logging
import sys
from pathlib import Path

from pitchplan.agents.interviewer import InterviewOrchestrator
from pitchplan.config import get_config
from pitchplan.errors import PitchPlanError
from pitchplan.gateway import ModelGateway
from pitchplan.session import InterviewSession
from pitchplan.store.database import Database
from pitchplan.store.repositories import ChatMessageRepository, IdeaRepository
from pitchplan.utils.formatter import export_idea, render_markdown

DONE_COMMAND = "/done"
QUIT_COMMAND = "/quit"


def _pop_option(args: list[str], name: str) -> str | None:
    if name not in args:
        return None
    index = args.index(name)
    if index + 1 >= len(args):
        raise SystemExit(f"{name} requires a value.")
    value = args[index + 1]
    del args[index:index + 2]
    return value


async def run(idea_id: str | None = None, database_url: str | None = None) -> None:
    """Run an interactive interview until the user finishes or quits."""
    config = get_config()
    gateway = ModelGateway()
    if not gateway.is_configured:
        raise SystemExit("OPENAI_API_KEY is not set. Add it to your environment or .env file.")

    db = await Database(database_url or config["database_url"]).init()
    try:
        ideas = IdeaRepository(db)
        session = InterviewSession(
            InterviewOrchestrator(gateway), ideas, ChatMessageRepository(db)
        )
        state = await session.start(idea_id)
        print(f"[pitchplan] Idea {state.conversation_id}")
        print(f"[pitchplan] Describe your idea. {DONE_COMMAND} generates the report, {QUIT_COMMAND} exits.")

        at_eof = False
        while True:
            try:
                text = (await asyncio.to_thread(input, "you> ")).strip()
            except EOFError:
                text, at_eof = DONE_COMMAND, True
            if not text:
                continue
            if text == QUIT_COMMAND:
                return

            try:
                if text == DONE_COMMAND:
                    report, state = await session.finish(state)
                    break
                result = await session.send(state, text)
            except PitchPlanError as exc:
                print(f"[pitchplan] {exc}\n[pitchplan] {exc.user_hint}", file=sys.stderr)
                if at_eof:
                    return
                continue
            state = result.state
            print(f"assistant> {result.response}\n")

        print(render_markdown(report))
        idea = await ideas.find_by_id(state.conversation_id)
        output_path = export_idea(idea, Path(config.get("export_dir", "./output")))
        print(f"[pitchplan] Report written to: {output_path}")
    finally:
        await db.close()


def main() -> None:
    """CLI entry point — ``pitchplan [--idea ID] [--db URL]``."""
    config = get_config()
    logging.basicConfig(
        level=config.get("log_level", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args = sys.argv[1:]
    idea_id = _pop_option(args, "--idea")
    database_url = _pop_option(args, "--db")
    if args:
        raise SystemExit(f"Unexpected arguments: {' '.join(args)}")

    asyncio.run(run(idea_id, database_url))


if __name__ == "__main__":
    main()
