"""Project access control.

Clients reach only their own projects and never see internal comments.
Admins need manage_projects for any project route.

Returns 404 rather than 403 for another client's project, so project ids
cannot be probed.
"""

from fastapi import HTTPException

from tutsin.core.deps import Actor
from tutsin.db.models import Project
from tutsin.storage.base import Storage


def check_project_access(project: Project, actor: Actor) -> None:
    """
    Raises:
        HTTPException 404: Client does not own the project
        HTTPException 403: Admin lacks manage_projects
    """
    if actor.is_client:
        if project.client_id != actor.id:
            raise HTTPException(status_code=404, detail="Project not found")
        return
    if not actor.can_manage_projects:
        raise HTTPException(status_code=403, detail="Insufficient permissions")


def require_project_manager(actor: Actor) -> None:
    """Admin-only mutations (create/delete projects, milestones, tasks)."""
    if not actor.can_manage_projects:
        raise HTTPException(status_code=403, detail="Insufficient permissions")


def get_project_with_access(storage: Storage, project_id: str, actor: Actor) -> Project:
    project = storage.get_project(project_id)
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    check_project_access(project, actor)
    return project


def can_see_internal(actor: Actor, requested: bool) -> bool:
    """Clients never see internal comments, whatever they ask for."""
    return requested and not actor.is_client
