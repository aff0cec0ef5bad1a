"""Pydantic schemas for projects, milestones, tasks and comments."""

from datetime import datetime

from pydantic import Field, model_validator

from tutsin.db.enums import MilestoneStatus, Priority, ProjectStatus, TaskStatus
from tutsin.schemas.common import CamelModel, UTCDatetime


# =============================================================================
# Projects
# =============================================================================

class ProjectCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    client_id: str
    status: ProjectStatus = ProjectStatus.ACTIVE
    priority: Priority = Priority.MEDIUM
    budget: int | None = Field(None, ge=0, description="Budget in cents")
    start_date: UTCDatetime | None = None
    end_date: UTCDatetime | None = None


class ProjectUpdate(CamelModel):
    """Partial update; ``completed_at`` follows ``status`` and is not writable."""
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    client_id: str | None = None
    status: ProjectStatus | None = None
    priority: Priority | None = None
    budget: int | None = Field(None, ge=0)
    start_date: UTCDatetime | None = None
    end_date: UTCDatetime | None = None


class ProjectRead(CamelModel):
    id: str
    title: str
    description: str | None = None
    client_id: str
    status: ProjectStatus
    priority: Priority
    budget: int | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    completed_at: datetime | None = None
    progress: int = 0
    created_at: datetime
    updated_at: datetime


# =============================================================================
# Milestones
# =============================================================================

class MilestoneCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    status: MilestoneStatus = MilestoneStatus.PENDING
    due_date: UTCDatetime | None = None
    order: int = Field(0, ge=0)


class MilestoneUpdate(CamelModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    status: MilestoneStatus | None = None
    due_date: UTCDatetime | None = None
    order: int | None = Field(None, ge=0)


class MilestoneRead(CamelModel):
    id: str
    project_id: str
    title: str
    description: str | None = None
    status: MilestoneStatus
    due_date: datetime | None = None
    completed_at: datetime | None = None
    order: int
    created_at: datetime
    updated_at: datetime


# =============================================================================
# Tasks
# =============================================================================

class TaskCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    milestone_id: str | None = None
    status: TaskStatus = TaskStatus.TODO
    priority: Priority = Priority.MEDIUM
    estimated_hours: int | None = Field(None, ge=0)
    actual_hours: int | None = Field(None, ge=0)
    due_date: UTCDatetime | None = None
    order: int = Field(0, ge=0)


class TaskUpdate(CamelModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    milestone_id: str | None = None
    status: TaskStatus | None = None
    priority: Priority | None = None
    estimated_hours: int | None = Field(None, ge=0)
    actual_hours: int | None = Field(None, ge=0)
    due_date: UTCDatetime | None = None
    order: int | None = Field(None, ge=0)


class TaskRead(CamelModel):
    id: str
    project_id: str
    milestone_id: str | None = None
    title: str
    description: str | None = None
    status: TaskStatus
    priority: Priority
    estimated_hours: int | None = None
    actual_hours: int | None = None
    due_date: datetime | None = None
    completed_at: datetime | None = None
    order: int
    created_at: datetime
    updated_at: datetime


# =============================================================================
# Comments
# =============================================================================

class CommentCreate(CamelModel):
    """Author is taken from the session, never from the body."""
    content: str = Field(..., min_length=1, max_length=10000)
    task_id: str | None = None
    milestone_id: str | None = None
    is_internal: bool = False

    @model_validator(mode="after")
    def single_target(self) -> "CommentCreate":
        # A comment hangs off the project, one task or one milestone.
        if self.task_id is not None and self.milestone_id is not None:
            raise ValueError("A comment can target a task or a milestone, not both")
        return self


class CommentUpdate(CamelModel):
    content: str | None = Field(None, min_length=1, max_length=10000)
    is_internal: bool | None = None


class CommentRead(CamelModel):
    id: str
    project_id: str
    task_id: str | None = None
    milestone_id: str | None = None
    author_id: str
    author_type: str
    content: str
    is_internal: bool
    created_at: datetime
    updated_at: datetime


class ProjectDetail(ProjectRead):
    milestones: list[MilestoneRead] = []
    tasks: list[TaskRead] = []
    comments: list[CommentRead] = []
