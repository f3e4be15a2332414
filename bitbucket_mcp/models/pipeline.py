"""Pipeline runs: the raw record and the public, correlated shape."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class PipelineState(str, Enum):
    """States a caller may filter pipelines by."""

    IN_PROGRESS = "IN_PROGRESS"
    SUCCESSFUL = "SUCCESSFUL"
    FAILED = "FAILED"
    STOPPED = "STOPPED"
    SKIPPED = "SKIPPED"
    PENDING = "PENDING"
    ERROR = "ERROR"


class PipelineTarget(BaseModel):
    """What the pipeline ran against: ref and triggering commit."""

    ref_type: str | None = None
    ref_name: str | None = None
    commit_hash: str | None = None
    commit_message: str | None = None

    def to_payload(self) -> dict:
        return {
            "ref_type": self.ref_type,
            "ref_name": self.ref_name,
            "commit": {"hash": self.commit_hash, "message": self.commit_message},
        }


class Pipeline(BaseModel):
    """Public pipeline shape.

    pr_id is inferred from the first "#<digits>" token of the triggering
    commit message. It is advisory: it can be missing when the message names
    no pull request and wrong when the number refers to something else.
    """

    state: str
    created_on: datetime | None = None
    completed_on: datetime | None = None
    run_number: int | None = None
    duration_in_seconds: int | None = None
    target: PipelineTarget = Field(default_factory=PipelineTarget)
    pr_id: int | None = None

    def to_payload(self) -> dict:
        return {
            "pr_id": self.pr_id,
            "state": self.state,
            "created_on": self.created_on.isoformat() if self.created_on else None,
            "completed_on": self.completed_on.isoformat() if self.completed_on else None,
            "run_number": self.run_number,
            "duration_in_seconds": self.duration_in_seconds,
            "target": self.target.to_payload(),
        }


class RawPipeline(BaseModel):
    """Pipeline as listed by Bitbucket, including fields callers never see."""

    uuid: str | None = None
    build_number: int | None = None
    state: str
    created_on: datetime | None = None
    completed_on: datetime | None = None
    run_number: int | None = None
    duration_in_seconds: int | None = None
    target: PipelineTarget = Field(default_factory=PipelineTarget)
    trigger: dict[str, Any] | None = None
    links: dict[str, Any] | None = None

    def to_public(self, commit_message: str | None, pr_id: int | None) -> Pipeline:
        """Strip internal fields and attach the resolved message and pr_id."""
        target = self.target.model_copy(update={"commit_message": commit_message})
        return Pipeline(
            state=self.state,
            created_on=self.created_on,
            completed_on=self.completed_on,
            run_number=self.run_number,
            duration_in_seconds=self.duration_in_seconds,
            target=target,
            pr_id=pr_id,
        )
