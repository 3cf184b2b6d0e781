"""Pydantic models for document store endpoints, objects and copy results."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, JsonValue

JsonObject = dict[str, JsonValue]


# -- Endpoints and stored objects ---------------------------------------


class ClusterEndpoint(BaseModel):
    """One document store deployment plus the index holding the objects."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(..., min_length=1)
    port: int = Field(..., ge=1, le=65535)
    index: str = Field(..., min_length=1)

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def describe(self) -> str:
        return f"{self.host}:{self.port}/{self.index}"


class ObjectType(str, Enum):
    dashboard = "dashboard"
    visualization = "visualization"
    search = "search"


class StoredObject(BaseModel):
    id: str
    type: str
    body: JsonObject = Field(default_factory=dict)


# -- Write results ------------------------------------------------------


class WriteOutcome(str, Enum):
    created = "created"
    updated = "updated"
    failed = "failed"
    skipped = "skipped"
    missing = "missing"


SUCCESS = {WriteOutcome.created, WriteOutcome.updated}


class WriteResult(BaseModel):
    outcome: WriteOutcome
    status_code: Optional[int] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome in SUCCESS


class ObjectReport(BaseModel):
    type: str
    id: str
    outcome: WriteOutcome
    status_code: Optional[int] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome in SUCCESS


class CopyReport(BaseModel):
    """Per-object outcomes of one dashboard copy."""

    dashboard_id: str
    objects: list[ObjectReport] = Field(default_factory=list)

    def add(self, report: ObjectReport) -> None:
        self.objects.append(report)

    @property
    def succeeded(self) -> list[ObjectReport]:
        return [o for o in self.objects if o.ok]

    @property
    def failed(self) -> list[ObjectReport]:
        # A saved search missing at the source is tolerated.
        return [
            o for o in self.objects
            if not o.ok and not (o.outcome == WriteOutcome.missing and o.type == ObjectType.search.value)
        ]

    @property
    def ok(self) -> bool:
        return not self.failed

    def ids_written(self, object_type: str) -> list[str]:
        return [o.id for o in self.succeeded if o.type == object_type]

    def summary(self) -> str:
        return f"{len(self.succeeded)} objects copied, {len(self.failed)} failures"


class ImportSummary(BaseModel):
    """Counters for one CSV import run."""

    lines: int = 0
    created: int = 0
    failures: int = 0

    def summary(self) -> str:
        return f"{self.lines} lines read. {self.created} documents created.  {self.failures} failures"
