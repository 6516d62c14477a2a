"""Output Formatter — renders validated reports and ideas as Markdown/JSON documents."""

import json
import re
from collections.abc import Sequence
from pathlib import Path
from typing import Literal

from pitchplan.schemas import Idea, StructuredReport

_UNSAFE_FILENAME_RE = re.compile(r"[^a-z0-9]", re.IGNORECASE)


def _bullets(items: Sequence[str], prefix: str = "- ") -> list[str]:
    return [f"{prefix}{item}" for item in items]


def render_markdown(report: StructuredReport) -> str:
    """Convert a validated report into its canonical Markdown view.

    Section order, headings and bullet prefixes are a compatibility contract
    for downstream tooling: keep them byte-stable.
    """
    lines = [
        f"# {report.pitch.title}",
        "",
        f"**{report.pitch.one_liner}**",
        "",
        "## Problem",
        "",
        report.problem.statement,
        "",
        f"**Why Now:** {report.problem.why_now}",
        "",
    ]

    lines += ["## Audience", ""]
    for persona in report.audience.personas:
        lines += [f"### {persona.name}", "", persona.description, "", "**Pain Points:**"]
        lines += _bullets(persona.pain_points)
        lines.append("")

    lines += ["## Solution", "", report.solution.description, "", "**Differentiators:**"]
    lines += _bullets(report.solution.differentiators)
    lines.append("")

    lines += ["## Features", "", "### MVP"]
    lines += _bullets(report.features.mvp)
    lines += ["", "### Later"]
    lines += _bullets(report.features.later)
    lines.append("")

    lines += ["## Architecture", "", report.architecture.overview, "", "**Components:**"]
    lines += _bullets(report.architecture.components)
    lines.append("")

    # Relations are part of the schema but not of the rendered view
    lines += ["## Data Model", ""]
    for entity in report.data_model.entities:
        lines.append(f"### {entity.name}")
        lines += [f"- {field.name}: {field.type}" for field in entity.fields]
        lines.append("")

    lines += ["## Roadmap", ""]
    for phase in report.roadmap.phases:
        lines.append(f"### {phase.name} ({phase.duration})")
        lines += _bullets(phase.deliverables)
        lines.append("")

    lines += ["## Risks", ""]
    for item in report.risks.items:
        lines += [f"### {item.risk}", f"**Mitigation:** {item.mitigation}", ""]

    lines += ["## Checklist", "", "### Security"]
    lines += _bullets(report.checklist.security, prefix="- [ ] ")
    lines += ["", "### Privacy"]
    lines += _bullets(report.checklist.privacy, prefix="- [ ] ")
    lines += ["", "### Cost"]
    lines += _bullets(report.checklist.cost, prefix="- [ ] ")
    lines.append("")

    return "\n".join(lines)


def render_idea_markdown(idea: Idea) -> str:
    """Render an idea record, including its report, as a standalone Markdown document."""
    content = (
        f"# {idea.title}\n\n"
        f"**Status:** {idea.status}\n"
        f"**Created:** {idea.created_at}\n"
        f"**Updated:** {idea.updated_at}\n\n"
    )
    if idea.tags:
        content += f"**Tags:** {', '.join(idea.tags)}\n\n"
    if idea.summary:
        content += f"## Summary\n\n{idea.summary}\n\n"
    if idea.report_md:
        content += f"## Report\n\n{idea.report_md}\n"
    return content


def render_idea_json(idea: Idea) -> str:
    return json.dumps(idea.model_dump(by_alias=True), indent=2, ensure_ascii=False)


def export_idea(idea: Idea, output_dir: Path, fmt: Literal["md", "json"] = "md") -> Path:
    """Write an idea as Markdown or JSON into ``output_dir``.

    The filename is derived from the title; an existing file is never
    overwritten, a numbered suffix is chosen instead.

    Returns the Path to the written file.
    """
    if fmt == "md":
        content = render_idea_markdown(idea)
    elif fmt == "json":
        content = render_idea_json(idea)
    else:
        raise ValueError(f"Unsupported export format: {fmt!r}")

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    stem = _UNSAFE_FILENAME_RE.sub("_", idea.title) or "idea"

    # Find a non-conflicting filename
    output_path = output_dir / f"{stem}.{fmt}"
    counter = 1
    while output_path.exists():
        counter += 1
        output_path = output_dir / f"{stem} ({counter}).{fmt}"

    output_path.write_text(content, encoding="utf-8")
    return output_path
