"""Project endpoints shared by the client portal and the admin dashboard.

Mixed paths: /projects/{id}/... for collection scopes, /milestones/{id},
/tasks/{id} and /comments/{id} for single records.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from tutsin.core.deps import Actor, get_current_actor
from tutsin.core.project_access import (
    can_see_internal,
    get_project_with_access,
    require_project_manager,
)
from tutsin.db.enums import PrincipalType
from tutsin.schemas.project import (
    CommentCreate,
    CommentRead,
    CommentUpdate,
    MilestoneCreate,
    MilestoneRead,
    MilestoneUpdate,
    ProjectCreate,
    ProjectDetail,
    ProjectRead,
    ProjectUpdate,
    TaskCreate,
    TaskRead,
    TaskUpdate,
)
from tutsin.services import project_service
from tutsin.storage import get_storage
from tutsin.storage.base import Storage

router = APIRouter()


def _project_read(storage: Storage, project) -> ProjectRead:
    progress = project_service.project_progress(storage, project.id)
    return ProjectRead.model_validate(project).model_copy(update={"progress": progress})


# =============================================================================
# Projects
# =============================================================================

@router.get("/projects", response_model=list[ProjectRead])
def list_projects(
    client_id: str | None = Query(None, alias="clientId"),
    actor: Actor = Depends(get_current_actor),
    storage: Storage = Depends(get_storage),
):
    """
    List projects, newest first.

    Clients always get their own projects; ``clientId`` filters for admins.
    """
    if actor.is_client:
        projects = storage.list_projects(client_id=actor.id)
    else:
        require_project_manager(actor)
        projects = storage.list_projects(client_id=client_id)
    return [_project_read(storage, p) for p in projects]


@router.post("/projects", response_model=ProjectRead, status_code=201)
def create_project(
    data: ProjectCreate,
    actor: Actor = Depends(get_current_actor),
    storage: Storage = Depends(get_storage),
):
    require_project_manager(actor)
    try:
        project = project_service.create_project(storage, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _project_read(storage, project)


@router.get("/projects/{project_id}", response_model=ProjectDetail)
def get_project(
    project_id: str,
    include_internal: bool = Query(True, alias="includeInternal"),
    actor: Actor = Depends(get_current_actor),
    storage: Storage = Depends(get_storage),
):
    """Project with milestones, tasks, comments and computed progress."""
    project = get_project_with_access(storage, project_id, actor)
    detail = project_service.get_project_detail(
        storage, project, include_internal=can_see_internal(actor, include_internal)
    )
    return ProjectDetail(
        **ProjectRead.model_validate(project).model_dump(exclude={"progress"}),
        progress=detail["progress"],
        milestones=[MilestoneRead.model_validate(m) for m in detail["milestones"]],
        tasks=[TaskRead.model_validate(t) for t in detail["tasks"]],
        comments=[CommentRead.model_validate(c) for c in detail["comments"]],
    )


@router.put("/projects/{project_id}", response_model=ProjectRead)
def update_project(
    project_id: str,
    data: ProjectUpdate,
    actor: Actor = Depends(get_current_actor),
    storage: Storage = Depends(get_storage),
):
    require_project_manager(actor)
    project = get_project_with_access(storage, project_id, actor)
    try:
        updated = project_service.update_project(storage, project, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if updated is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return _project_read(storage, updated)


@router.delete("/projects/{project_id}", status_code=204)
def delete_project(
    project_id: str,
    actor: Actor = Depends(get_current_actor),
    storage: Storage = Depends(get_storage),
):
    require_project_manager(actor)
    if not storage.delete_project(project_id):
        raise HTTPException(status_code=404, detail="Project not found")
    return Response(status_code=204)


# =============================================================================
# Milestones
# =============================================================================

@router.get("/projects/{project_id}/milestones", response_model=list[MilestoneRead])
def list_milestones(
    project_id: str,
    actor: Actor = Depends(get_current_actor),
    storage: Storage = Depends(get_storage),
):
    get_project_with_access(storage, project_id, actor)
    return storage.list_milestones(project_id)


@router.post("/projects/{project_id}/milestones", response_model=MilestoneRead, status_code=201)
def create_milestone(
    project_id: str,
    data: MilestoneCreate,
    actor: Actor = Depends(get_current_actor),
    storage: Storage = Depends(get_storage),
):
    require_project_manager(actor)
    project = get_project_with_access(storage, project_id, actor)
    return project_service.create_milestone(storage, project, data)


def _milestone_with_access(storage: Storage, milestone_id: str, actor: Actor):
    milestone = storage.get_milestone(milestone_id)
    if milestone is None:
        raise HTTPException(status_code=404, detail="Milestone not found")
    get_project_with_access(storage, milestone.project_id, actor)
    return milestone


@router.get("/milestones/{milestone_id}", response_model=MilestoneRead)
def get_milestone(
    milestone_id: str,
    actor: Actor = Depends(get_current_actor),
    storage: Storage = Depends(get_storage),
):
    return _milestone_with_access(storage, milestone_id, actor)


@router.put("/milestones/{milestone_id}", response_model=MilestoneRead)
def update_milestone(
    milestone_id: str,
    data: MilestoneUpdate,
    actor: Actor = Depends(get_current_actor),
    storage: Storage = Depends(get_storage),
):
    require_project_manager(actor)
    milestone = _milestone_with_access(storage, milestone_id, actor)
    updated = project_service.update_milestone(storage, milestone, data)
    if updated is None:
        raise HTTPException(status_code=404, detail="Milestone not found")
    return updated


@router.delete("/milestones/{milestone_id}", status_code=204)
def delete_milestone(
    milestone_id: str,
    actor: Actor = Depends(get_current_actor),
    storage: Storage = Depends(get_storage),
):
    require_project_manager(actor)
    if not storage.delete_milestone(milestone_id):
        raise HTTPException(status_code=404, detail="Milestone not found")
    return Response(status_code=204)


# =============================================================================
# Tasks
# =============================================================================

@router.get("/projects/{project_id}/tasks", response_model=list[TaskRead])
def list_tasks(
    project_id: str,
    milestone_id: str | None = Query(None, alias="milestoneId"),
    actor: Actor = Depends(get_current_actor),
    storage: Storage = Depends(get_storage),
):
    get_project_with_access(storage, project_id, actor)
    return storage.list_tasks(project_id, milestone_id=milestone_id)


@router.post("/projects/{project_id}/tasks", response_model=TaskRead, status_code=201)
def create_task(
    project_id: str,
    data: TaskCreate,
    actor: Actor = Depends(get_current_actor),
    storage: Storage = Depends(get_storage),
):
    require_project_manager(actor)
    project = get_project_with_access(storage, project_id, actor)
    try:
        return project_service.create_task(storage, project, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _task_with_access(storage: Storage, task_id: str, actor: Actor):
    task = storage.get_task(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    get_project_with_access(storage, task.project_id, actor)
    return task


@router.get("/tasks/{task_id}", response_model=TaskRead)
def get_task(
    task_id: str,
    actor: Actor = Depends(get_current_actor),
    storage: Storage = Depends(get_storage),
):
    return _task_with_access(storage, task_id, actor)


@router.put("/tasks/{task_id}", response_model=TaskRead)
def update_task(
    task_id: str,
    data: TaskUpdate,
    actor: Actor = Depends(get_current_actor),
    storage: Storage = Depends(get_storage),
):
    """Clients may update tasks on their own projects; admins on any."""
    task = _task_with_access(storage, task_id, actor)
    try:
        updated = project_service.update_task(storage, task, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if updated is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return updated


@router.delete("/tasks/{task_id}", status_code=204)
def delete_task(
    task_id: str,
    actor: Actor = Depends(get_current_actor),
    storage: Storage = Depends(get_storage),
):
    require_project_manager(actor)
    if not storage.delete_task(task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    return Response(status_code=204)


# =============================================================================
# Comments
# =============================================================================

@router.get("/projects/{project_id}/comments", response_model=list[CommentRead])
def list_comments(
    project_id: str,
    include_internal: bool = Query(True, alias="includeInternal"),
    task_id: str | None = Query(None, alias="taskId"),
    milestone_id: str | None = Query(None, alias="milestoneId"),
    actor: Actor = Depends(get_current_actor),
    storage: Storage = Depends(get_storage),
):
    """Oldest first. Internal comments are never returned to clients."""
    get_project_with_access(storage, project_id, actor)
    return storage.list_comments(
        project_id,
        task_id=task_id,
        milestone_id=milestone_id,
        include_internal=can_see_internal(actor, include_internal),
    )


@router.post("/projects/{project_id}/comments", response_model=CommentRead, status_code=201)
def create_comment(
    project_id: str,
    data: CommentCreate,
    actor: Actor = Depends(get_current_actor),
    storage: Storage = Depends(get_storage),
):
    project = get_project_with_access(storage, project_id, actor)
    try:
        return project_service.create_comment(
            storage, project, data, author_id=actor.id, author_type=actor.principal
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _comment_for_edit(storage: Storage, comment_id: str, actor: Actor):
    comment = storage.get_comment(comment_id)
    if comment is None:
        raise HTTPException(status_code=404, detail="Comment not found")
    get_project_with_access(storage, comment.project_id, actor)
    if actor.is_client:
        if comment.is_internal:
            raise HTTPException(status_code=404, detail="Comment not found")
        if comment.author_type != PrincipalType.CLIENT.value or comment.author_id != actor.id:
            raise HTTPException(status_code=403, detail="Not authorized to modify this comment")
    return comment


@router.put("/comments/{comment_id}", response_model=CommentRead)
def update_comment(
    comment_id: str,
    data: CommentUpdate,
    actor: Actor = Depends(get_current_actor),
    storage: Storage = Depends(get_storage),
):
    comment = _comment_for_edit(storage, comment_id, actor)
    updated = project_service.update_comment(storage, comment, data, actor.principal)
    if updated is None:
        raise HTTPException(status_code=404, detail="Comment not found")
    return updated


@router.delete("/comments/{comment_id}", status_code=204)
def delete_comment(
    comment_id: str,
    actor: Actor = Depends(get_current_actor),
    storage: Storage = Depends(get_storage),
):
    comment = _comment_for_edit(storage, comment_id, actor)
    storage.delete_comment(comment.id)
    return Response(status_code=204)
