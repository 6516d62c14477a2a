"""Report and idea schemas — the wire contract shared with the model and the store.

Field names on the wire are camelCase, matching the IdeaReport JSON the model
is asked to produce. Python attributes are snake_case with aliases.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Pitch(_Frozen):
    title: StrictStr
    one_liner: StrictStr = Field(alias="oneLiner")


class Problem(_Frozen):
    statement: StrictStr
    why_now: StrictStr = Field(alias="whyNow")


class Persona(_Frozen):
    name: StrictStr
    description: StrictStr
    pain_points: tuple[StrictStr, ...] = Field(alias="painPoints")


class Audience(_Frozen):
    personas: tuple[Persona, ...]


class Solution(_Frozen):
    description: StrictStr
    differentiators: tuple[StrictStr, ...]


class Features(_Frozen):
    mvp: tuple[StrictStr, ...]
    later: tuple[StrictStr, ...]


class Architecture(_Frozen):
    overview: StrictStr
    components: tuple[StrictStr, ...]


class EntityField(_Frozen):
    name: StrictStr
    type: StrictStr


class Entity(_Frozen):
    name: StrictStr
    fields: tuple[EntityField, ...]


class DataModel(_Frozen):
    entities: tuple[Entity, ...]
    relations: tuple[StrictStr, ...]


class Phase(_Frozen):
    name: StrictStr
    duration: StrictStr
    deliverables: tuple[StrictStr, ...]


class Roadmap(_Frozen):
    phases: tuple[Phase, ...]


class RiskItem(_Frozen):
    risk: StrictStr
    mitigation: StrictStr


class Risks(_Frozen):
    items: tuple[RiskItem, ...]


class Checklist(_Frozen):
    security: tuple[StrictStr, ...]
    privacy: tuple[StrictStr, ...]
    cost: tuple[StrictStr, ...]


class StructuredReport(_Frozen):
    """Validated, immutable summary of an idea."""

    pitch: Pitch
    problem: Problem
    audience: Audience
    solution: Solution
    features: Features
    architecture: Architecture
    data_model: DataModel = Field(alias="dataModel")
    roadmap: Roadmap
    risks: Risks
    checklist: Checklist

    def to_wire(self) -> dict:
        """Return the camelCase JSON-ready dict."""
        return self.model_dump(by_alias=True, mode="json")


REPORT_SECTIONS = (
    "pitch",
    "problem",
    "audience",
    "solution",
    "features",
    "architecture",
    "dataModel",
    "roadmap",
    "risks",
    "checklist",
)

IdeaStatus = Literal["draft", "refined", "archived"]


class Idea(BaseModel):
    """A persisted idea record."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str = Field(min_length=1)
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")
    tags: list[str] = Field(default_factory=list)
    status: IdeaStatus = "draft"
    summary: str = ""
    report_md: str = Field(default="", alias="reportMd")
    report_json: StructuredReport | None = Field(default=None, alias="reportJson")
    synced_at: str | None = Field(default=None, alias="syncedAt")
