"""Project service - projects, milestones, tasks, comments and progress."""

import logging
from datetime import datetime
from typing import Iterable

from tutsin.db.enums import COMPLETED_STATUS, PrincipalType
from tutsin.db.models import Project, ProjectComment, ProjectMilestone, ProjectTask
from tutsin.db.types import utcnow
from tutsin.schemas.project import (
    CommentCreate,
    CommentUpdate,
    MilestoneCreate,
    MilestoneUpdate,
    ProjectCreate,
    ProjectUpdate,
    TaskCreate,
    TaskUpdate,
)
from tutsin.storage.base import Storage

logger = logging.getLogger(__name__)


# =============================================================================
# Derived values
# =============================================================================

def _percent(done: int, total: int) -> int:
    """Integer percentage rounded half-up."""
    return (done * 200 + total) // (2 * total)


def calculate_progress(
    tasks: Iterable[ProjectTask],
    milestones: Iterable[ProjectMilestone],
) -> int:
    """
    Completion percentage of a project.

    Task completion wins when the project has tasks; otherwise milestone
    completion; otherwise 0.
    """
    tasks = list(tasks)
    if tasks:
        done = sum(1 for t in tasks if t.status == COMPLETED_STATUS)
        return _percent(done, len(tasks))
    milestones = list(milestones)
    if milestones:
        done = sum(1 for m in milestones if m.status == COMPLETED_STATUS)
        return _percent(done, len(milestones))
    return 0


def project_progress(storage: Storage, project_id: str) -> int:
    return calculate_progress(storage.list_tasks(project_id), storage.list_milestones(project_id))


def apply_status_transition(
    current_status: str | None,
    changes: dict,
    now: datetime | None = None,
) -> dict:
    """
    Keep ``completed_at`` in step with ``status`` inside a change set.

    Moving into completed stamps the time, staying completed keeps the
    existing stamp, and moving out clears it.
    """
    if "status" not in changes or changes["status"] is None:
        return changes
    new_status = changes["status"]
    if new_status == COMPLETED_STATUS:
        if current_status != COMPLETED_STATUS:
            changes["completed_at"] = now or utcnow()
    else:
        changes["completed_at"] = None
    return changes


def _changes(data, required: tuple[str, ...] = ()) -> dict:
    """Unset fields stay untouched; explicit nulls on required columns are dropped."""
    changes = data.model_dump(exclude_unset=True)
    for field in required:
        if field in changes and changes[field] is None:
            del changes[field]
    return changes


# =============================================================================
# Projects
# =============================================================================

def create_project(storage: Storage, data: ProjectCreate) -> Project:
    """
    Raises:
        ValueError: If the client does not exist
    """
    if storage.get_client(data.client_id) is None:
        raise ValueError("Client not found")
    fields = apply_status_transition(None, data.model_dump())
    project = storage.create_project(fields)
    logger.info("Created project %s for client %s", project.id, project.client_id)
    return project


def update_project(storage: Storage, project: Project, data: ProjectUpdate) -> Project | None:
    changes = _changes(data, required=("title", "client_id", "status", "priority"))
    if "client_id" in changes and storage.get_client(changes["client_id"]) is None:
        raise ValueError("Client not found")
    apply_status_transition(project.status, changes)
    return storage.update_project(project.id, changes)


# =============================================================================
# Milestones
# =============================================================================

def create_milestone(storage: Storage, project: Project, data: MilestoneCreate) -> ProjectMilestone:
    fields = apply_status_transition(None, data.model_dump())
    fields["project_id"] = project.id
    return storage.create_milestone(fields)


def update_milestone(
    storage: Storage, milestone: ProjectMilestone, data: MilestoneUpdate
) -> ProjectMilestone | None:
    changes = _changes(data, required=("title", "status", "order"))
    apply_status_transition(milestone.status, changes)
    return storage.update_milestone(milestone.id, changes)


# =============================================================================
# Tasks
# =============================================================================

def _check_milestone(storage: Storage, project_id: str, milestone_id: str | None) -> None:
    if milestone_id is None:
        return
    milestone = storage.get_milestone(milestone_id)
    if milestone is None or milestone.project_id != project_id:
        raise ValueError("Milestone does not belong to this project")


def create_task(storage: Storage, project: Project, data: TaskCreate) -> ProjectTask:
    """
    Raises:
        ValueError: If milestone_id belongs to another project
    """
    _check_milestone(storage, project.id, data.milestone_id)
    fields = apply_status_transition(None, data.model_dump())
    fields["project_id"] = project.id
    return storage.create_task(fields)


def update_task(storage: Storage, task: ProjectTask, data: TaskUpdate) -> ProjectTask | None:
    changes = _changes(data, required=("title", "status", "priority", "order"))
    if "milestone_id" in changes:
        _check_milestone(storage, task.project_id, changes["milestone_id"])
    previous_status = task.status
    apply_status_transition(previous_status, changes)
    updated = storage.update_task(task.id, changes)
    if updated is not None and "status" in changes and changes["status"] != previous_status:
        logger.info("Task %s moved from %s to %s", task.id, previous_status, updated.status)
    return updated


# =============================================================================
# Comments
# =============================================================================

def create_comment(
    storage: Storage,
    project: Project,
    data: CommentCreate,
    author_id: str,
    author_type: PrincipalType,
) -> ProjectComment:
    """
    Record a comment from the given author.

    Client comments are never internal.

    Raises:
        ValueError: If task/milestone belongs to another project
    """
    if data.task_id is not None:
        task = storage.get_task(data.task_id)
        if task is None or task.project_id != project.id:
            raise ValueError("Task does not belong to this project")
    _check_milestone(storage, project.id, data.milestone_id)

    fields = data.model_dump()
    fields.update(
        project_id=project.id,
        author_id=author_id,
        author_type=author_type.value,
    )
    if author_type == PrincipalType.CLIENT:
        fields["is_internal"] = False
    return storage.create_comment(fields)


def update_comment(
    storage: Storage,
    comment: ProjectComment,
    data: CommentUpdate,
    author_type: PrincipalType,
) -> ProjectComment | None:
    changes = _changes(data, required=("content", "is_internal"))
    if author_type == PrincipalType.CLIENT:
        changes.pop("is_internal", None)
    return storage.update_comment(comment.id, changes)


# =============================================================================
# Reads
# =============================================================================

def get_project_detail(storage: Storage, project: Project, include_internal: bool) -> dict:
    """Project with its children and derived progress, ready for ProjectDetail."""
    milestones = storage.list_milestones(project.id)
    tasks = storage.list_tasks(project.id)
    comments = storage.list_comments(project.id, include_internal=include_internal)
    return {
        "project": project,
        "milestones": milestones,
        "tasks": tasks,
        "comments": comments,
        "progress": calculate_progress(tasks, milestones),
    }
