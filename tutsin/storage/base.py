"""Storage interface shared by the in-memory and database backends.

Every method is synchronous and atomic on its own; nothing spans calls.
Records are ORM model instances. Create assigns ``id`` and timestamps,
update merges the given fields and refreshes ``updated_at``, delete reports
whether a record existed. Session lookups never raise for an expired or
missing token; they return None. Writes that would duplicate a unique
column raise StorageConflictError on every backend.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from tutsin.db.models import (
    Admin,
    AdminRole,
    AdminSession,
    BlogPost,
    Client,
    ClientSession,
    ContactSubmission,
    FileUpload,
    Notification,
    PageView,
    Project,
    ProjectComment,
    ProjectMilestone,
    ProjectTask,
    WebsiteMetrics,
)

Fields = dict[str, Any]

# Per-day cap on distinct pages and referrers tracked in a metrics row.
MAX_RANKED_ENTRIES = 50


class StorageConflictError(ValueError):
    """A write collided with a unique column of an existing record."""


def bump_ranked(entries: list, key: str, count_key: str, name: str) -> list[dict]:
    """
    Return a copy of ``entries`` with ``name`` counted once more, highest
    count first. Bare string entries count as one. Once the list holds
    MAX_RANKED_ENTRIES names, unseen names are dropped.
    """
    counts: dict[str, int] = {}
    for item in entries or []:
        if isinstance(item, str):
            counts[item] = counts.get(item, 0) + 1
        elif item.get(key):
            counts[item[key]] = counts.get(item[key], 0) + int(item.get(count_key) or 1)
    if name in counts or len(counts) < MAX_RANKED_ENTRIES:
        counts[name] = counts.get(name, 0) + 1
    ranked = sorted(counts.items(), key=lambda kv: -kv[1])
    return [{key: n, count_key: c} for n, c in ranked]


class Storage(ABC):
    """Persistence contract for every entity in the system."""

    name: str = "abstract"

    # -------------------------------------------------------------------------
    # Clients
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_client(self, client_id: str) -> Client | None: ...

    @abstractmethod
    def get_client_by_email(self, email: str) -> Client | None: ...

    @abstractmethod
    def list_clients(self) -> list[Client]: ...

    @abstractmethod
    def create_client(self, data: Fields) -> Client: ...

    @abstractmethod
    def update_client(self, client_id: str, data: Fields) -> Client | None: ...

    @abstractmethod
    def delete_client(self, client_id: str) -> bool:
        """Remove a client with its sessions, projects and notifications."""

    # -------------------------------------------------------------------------
    # Client sessions
    # -------------------------------------------------------------------------

    @abstractmethod
    def create_client_session(self, data: Fields) -> ClientSession: ...

    @abstractmethod
    def get_client_session(self, token_hash: str) -> ClientSession | None:
        """Return the session only while it has not expired."""

    @abstractmethod
    def delete_client_session(self, token_hash: str) -> bool: ...

    @abstractmethod
    def clean_expired_client_sessions(self) -> int: ...

    # -------------------------------------------------------------------------
    # Admins & roles
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_admin(self, admin_id: str) -> Admin | None: ...

    @abstractmethod
    def get_admin_by_email(self, email: str) -> Admin | None: ...

    @abstractmethod
    def list_admins(self) -> list[Admin]: ...

    @abstractmethod
    def count_admins_with_role(self, role_id: str) -> int: ...

    @abstractmethod
    def create_admin(self, data: Fields) -> Admin: ...

    @abstractmethod
    def update_admin(self, admin_id: str, data: Fields) -> Admin | None: ...

    @abstractmethod
    def delete_admin(self, admin_id: str) -> bool: ...

    @abstractmethod
    def get_admin_role(self, role_id: str) -> AdminRole | None: ...

    @abstractmethod
    def get_admin_role_by_name(self, name: str) -> AdminRole | None: ...

    @abstractmethod
    def list_admin_roles(self) -> list[AdminRole]: ...

    @abstractmethod
    def create_admin_role(self, data: Fields) -> AdminRole: ...

    @abstractmethod
    def update_admin_role(self, role_id: str, data: Fields) -> AdminRole | None: ...

    @abstractmethod
    def delete_admin_role(self, role_id: str) -> bool: ...

    # -------------------------------------------------------------------------
    # Admin sessions
    # -------------------------------------------------------------------------

    @abstractmethod
    def create_admin_session(self, data: Fields) -> AdminSession: ...

    @abstractmethod
    def get_admin_session(self, token_hash: str) -> AdminSession | None: ...

    @abstractmethod
    def delete_admin_session(self, token_hash: str) -> bool: ...

    @abstractmethod
    def clean_expired_admin_sessions(self) -> int: ...

    # -------------------------------------------------------------------------
    # Blog & contact
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_blog_post(self, post_id: str) -> BlogPost | None: ...

    @abstractmethod
    def list_blog_posts(self, published_only: bool = False) -> list[BlogPost]:
        """Newest first."""

    @abstractmethod
    def create_blog_post(self, data: Fields) -> BlogPost: ...

    @abstractmethod
    def update_blog_post(self, post_id: str, data: Fields) -> BlogPost | None: ...

    @abstractmethod
    def delete_blog_post(self, post_id: str) -> bool: ...

    @abstractmethod
    def create_contact_submission(self, data: Fields) -> ContactSubmission: ...

    @abstractmethod
    def list_contact_submissions(self) -> list[ContactSubmission]:
        """Newest first."""

    # -------------------------------------------------------------------------
    # Analytics
    # -------------------------------------------------------------------------

    @abstractmethod
    def create_page_view(self, data: Fields) -> PageView: ...

    @abstractmethod
    def has_page_view_from(self, ip: str, since: datetime) -> bool: ...

    @abstractmethod
    def purge_page_views(self, before: datetime) -> int:
        """Delete page views recorded before ``before``; returns how many."""

    @abstractmethod
    def record_daily_view(
        self, date: str, page: str, referrer: str, new_visitor: bool
    ) -> WebsiteMetrics:
        """
        Count one view into the metrics row for ``date``, creating the row on
        first use. Concurrent calls for the same date all land in one row.
        """

    @abstractmethod
    def get_website_metrics(self, date: str) -> WebsiteMetrics | None: ...

    @abstractmethod
    def list_website_metrics(self, start_date: str, end_date: str) -> list[WebsiteMetrics]:
        """Inclusive date range, oldest first."""

    @abstractmethod
    def create_website_metrics(self, data: Fields) -> WebsiteMetrics: ...

    # -------------------------------------------------------------------------
    # Projects
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_project(self, project_id: str) -> Project | None: ...

    @abstractmethod
    def list_projects(self, client_id: str | None = None) -> list[Project]:
        """Newest first, optionally restricted to one client."""

    @abstractmethod
    def create_project(self, data: Fields) -> Project: ...

    @abstractmethod
    def update_project(self, project_id: str, data: Fields) -> Project | None: ...

    @abstractmethod
    def delete_project(self, project_id: str) -> bool:
        """Remove a project with its milestones, tasks and comments."""

    @abstractmethod
    def get_milestone(self, milestone_id: str) -> ProjectMilestone | None: ...

    @abstractmethod
    def list_milestones(self, project_id: str) -> list[ProjectMilestone]:
        """Ordered by ``order``."""

    @abstractmethod
    def create_milestone(self, data: Fields) -> ProjectMilestone: ...

    @abstractmethod
    def update_milestone(self, milestone_id: str, data: Fields) -> ProjectMilestone | None: ...

    @abstractmethod
    def delete_milestone(self, milestone_id: str) -> bool:
        """Detach the milestone's tasks and remove its comments."""

    @abstractmethod
    def get_task(self, task_id: str) -> ProjectTask | None: ...

    @abstractmethod
    def list_tasks(self, project_id: str, milestone_id: str | None = None) -> list[ProjectTask]:
        """Ordered by ``order``."""

    @abstractmethod
    def create_task(self, data: Fields) -> ProjectTask: ...

    @abstractmethod
    def update_task(self, task_id: str, data: Fields) -> ProjectTask | None: ...

    @abstractmethod
    def delete_task(self, task_id: str) -> bool: ...

    @abstractmethod
    def get_comment(self, comment_id: str) -> ProjectComment | None: ...

    @abstractmethod
    def list_comments(
        self,
        project_id: str,
        task_id: str | None = None,
        milestone_id: str | None = None,
        include_internal: bool = True,
    ) -> list[ProjectComment]:
        """Oldest first. Internal comments are filtered here, not by callers."""

    @abstractmethod
    def create_comment(self, data: Fields) -> ProjectComment: ...

    @abstractmethod
    def update_comment(self, comment_id: str, data: Fields) -> ProjectComment | None: ...

    @abstractmethod
    def delete_comment(self, comment_id: str) -> bool: ...

    # -------------------------------------------------------------------------
    # Notifications & files
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_notification(self, notification_id: str) -> Notification | None: ...

    @abstractmethod
    def list_notifications(
        self, recipient_type: str | None = None, recipient_id: str | None = None
    ) -> list[Notification]:
        """Newest first."""

    @abstractmethod
    def create_notification(self, data: Fields) -> Notification: ...

    @abstractmethod
    def mark_notification_read(self, notification_id: str) -> Notification | None: ...

    @abstractmethod
    def delete_notification(self, notification_id: str) -> bool: ...

    @abstractmethod
    def get_file_upload(self, file_id: str) -> FileUpload | None: ...

    @abstractmethod
    def list_file_uploads(self) -> list[FileUpload]:
        """Newest first."""

    @abstractmethod
    def create_file_upload(self, data: Fields) -> FileUpload: ...

    @abstractmethod
    def delete_file_upload(self, file_id: str) -> bool: ...

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    def ping(self) -> bool:
        """Return True when the backend can serve requests."""
        return True
