"""Process-local storage backend.

State lives in per-entity dicts guarded by one lock, so concurrent request
threads see each operation as atomic. Nothing survives a restart.
"""

import threading
from typing import Any, TypeVar

from tutsin.db.base import Base
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
from tutsin.db.types import utcnow
from tutsin.storage.base import Fields, Storage, StorageConflictError, bump_ranked

M = TypeVar("M", bound=Base)


def _build(model: type[M], data: Fields) -> M:
    """Instantiate a detached model, filling column defaults the ORM would apply on flush."""
    obj = model(**data)
    for column in model.__table__.columns:
        if column.key in data or column.default is None:
            continue
        if getattr(obj, column.key) is not None:
            continue
        default = column.default
        value = default.arg if default.is_scalar else default.arg(None)
        setattr(obj, column.key, value)
    if hasattr(model, "updated_at") and "updated_at" not in data:
        obj.updated_at = obj.created_at
    return obj


def _newest_first(records: list) -> list:
    # Reverse insertion order first so equal timestamps still list newest first.
    return sorted(reversed(records), key=lambda r: r.created_at, reverse=True)


def _oldest_first(records: list) -> list:
    return sorted(records, key=lambda r: r.created_at)


def _by_order(records: list) -> list:
    return sorted(records, key=lambda r: (r.order, r.created_at))


class MemStorage(Storage):
    """Dict-backed storage for development and tests."""

    name = "memory"

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._tables: dict[type, dict[str, Any]] = {
            model: {}
            for model in (
                Client, ClientSession, Admin, AdminRole, AdminSession,
                BlogPost, ContactSubmission, PageView, WebsiteMetrics,
                Project, ProjectMilestone, ProjectTask, ProjectComment,
                Notification, FileUpload,
            )
        }

    # -------------------------------------------------------------------------
    # Generic helpers (callers hold no lock)
    # -------------------------------------------------------------------------

    def _rows(self, model: type[M]) -> dict[str, M]:
        return self._tables[model]

    def _get(self, model: type[M], record_id: str) -> M | None:
        with self._lock:
            return self._rows(model).get(record_id)

    def _find(self, model: type[M], **criteria) -> M | None:
        with self._lock:
            for record in self._rows(model).values():
                if all(getattr(record, k) == v for k, v in criteria.items()):
                    return record
        return None

    def _exists(self, model: type, predicate) -> bool:
        with self._lock:
            return any(predicate(r) for r in self._rows(model).values())

    def _filter(self, model: type[M], predicate=None) -> list[M]:
        with self._lock:
            records = list(self._rows(model).values())
        if predicate is None:
            return records
        return [r for r in records if predicate(r)]

    def _check_unique(self, model: type[M], obj, data: Fields) -> None:
        # Caller holds the lock.
        for column in model.__table__.columns:
            if not column.unique or column.key not in data:
                continue
            value = data[column.key]
            for other in self._rows(model).values():
                if other is not obj and getattr(other, column.key) == value:
                    raise StorageConflictError(
                        f"{model.__tablename__}.{column.key} already exists"
                    )

    def _insert(self, model: type[M], data: Fields) -> M:
        obj = _build(model, data)
        with self._lock:
            values = {c.key: getattr(obj, c.key) for c in model.__table__.columns}
            self._check_unique(model, obj, values)
            self._rows(model)[obj.id] = obj
        return obj

    def _patch(self, model: type[M], record_id: str, data: Fields) -> M | None:
        with self._lock:
            obj = self._rows(model).get(record_id)
            if obj is None:
                return None
            self._check_unique(model, obj, data)
            for key, value in data.items():
                if key in ("id", "created_at"):
                    continue
                setattr(obj, key, value)
            if hasattr(obj, "updated_at"):
                obj.updated_at = utcnow()
            return obj

    def _remove(self, model: type, record_id: str) -> bool:
        with self._lock:
            return self._rows(model).pop(record_id, None) is not None

    def _remove_where(self, model: type, predicate) -> int:
        with self._lock:
            rows = self._rows(model)
            doomed = [k for k, r in rows.items() if predicate(r)]
            for key in doomed:
                del rows[key]
            return len(doomed)

    @staticmethod
    def _live(session, now) -> bool:
        return session.expires_at > now

    # -------------------------------------------------------------------------
    # Clients
    # -------------------------------------------------------------------------

    def get_client(self, client_id):
        return self._get(Client, client_id)

    def get_client_by_email(self, email):
        return self._find(Client, email=email)

    def list_clients(self):
        return _oldest_first(self._filter(Client))

    def create_client(self, data):
        return self._insert(Client, data)

    def update_client(self, client_id, data):
        return self._patch(Client, client_id, data)

    def delete_client(self, client_id):
        with self._lock:
            if client_id not in self._rows(Client):
                return False
            self._remove_where(ClientSession, lambda s: s.client_id == client_id)
            for project in self._filter(Project, lambda p: p.client_id == client_id):
                self.delete_project(project.id)
            self._remove_where(
                Notification,
                lambda n: n.recipient_type == "client" and n.recipient_id == client_id,
            )
            return self._remove(Client, client_id)

    # -------------------------------------------------------------------------
    # Client sessions
    # -------------------------------------------------------------------------

    def create_client_session(self, data):
        return self._insert(ClientSession, data)

    def get_client_session(self, token_hash):
        session = self._find(ClientSession, token_hash=token_hash)
        if session is None or not self._live(session, utcnow()):
            return None
        return session

    def delete_client_session(self, token_hash):
        return self._remove_where(ClientSession, lambda s: s.token_hash == token_hash) > 0

    def clean_expired_client_sessions(self):
        now = utcnow()
        return self._remove_where(ClientSession, lambda s: not self._live(s, now))

    # -------------------------------------------------------------------------
    # Admins & roles
    # -------------------------------------------------------------------------

    def get_admin(self, admin_id):
        return self._get(Admin, admin_id)

    def get_admin_by_email(self, email):
        return self._find(Admin, email=email)

    def list_admins(self):
        return _oldest_first(self._filter(Admin))

    def count_admins_with_role(self, role_id):
        return len(self._filter(Admin, lambda a: a.role_id == role_id))

    def create_admin(self, data):
        return self._insert(Admin, data)

    def update_admin(self, admin_id, data):
        return self._patch(Admin, admin_id, data)

    def delete_admin(self, admin_id):
        with self._lock:
            self._remove_where(AdminSession, lambda s: s.admin_id == admin_id)
            return self._remove(Admin, admin_id)

    def get_admin_role(self, role_id):
        return self._get(AdminRole, role_id)

    def get_admin_role_by_name(self, name):
        return self._find(AdminRole, name=name)

    def list_admin_roles(self):
        return _oldest_first(self._filter(AdminRole))

    def create_admin_role(self, data):
        return self._insert(AdminRole, data)

    def update_admin_role(self, role_id, data):
        return self._patch(AdminRole, role_id, data)

    def delete_admin_role(self, role_id):
        return self._remove(AdminRole, role_id)

    # -------------------------------------------------------------------------
    # Admin sessions
    # -------------------------------------------------------------------------

    def create_admin_session(self, data):
        return self._insert(AdminSession, data)

    def get_admin_session(self, token_hash):
        session = self._find(AdminSession, token_hash=token_hash)
        if session is None or not self._live(session, utcnow()):
            return None
        return session

    def delete_admin_session(self, token_hash):
        return self._remove_where(AdminSession, lambda s: s.token_hash == token_hash) > 0

    def clean_expired_admin_sessions(self):
        now = utcnow()
        return self._remove_where(AdminSession, lambda s: not self._live(s, now))

    # -------------------------------------------------------------------------
    # Blog & contact
    # -------------------------------------------------------------------------

    def get_blog_post(self, post_id):
        return self._get(BlogPost, post_id)

    def list_blog_posts(self, published_only=False):
        predicate = (lambda p: p.published) if published_only else None
        return _newest_first(self._filter(BlogPost, predicate))

    def create_blog_post(self, data):
        return self._insert(BlogPost, data)

    def update_blog_post(self, post_id, data):
        return self._patch(BlogPost, post_id, data)

    def delete_blog_post(self, post_id):
        return self._remove(BlogPost, post_id)

    def create_contact_submission(self, data):
        return self._insert(ContactSubmission, data)

    def list_contact_submissions(self):
        return _newest_first(self._filter(ContactSubmission))

    # -------------------------------------------------------------------------
    # Analytics
    # -------------------------------------------------------------------------

    def create_page_view(self, data):
        return self._insert(PageView, data)

    def has_page_view_from(self, ip, since):
        return self._exists(PageView, lambda v: v.ip == ip and v.timestamp >= since)

    def purge_page_views(self, before):
        return self._remove_where(PageView, lambda v: v.timestamp < before)

    def record_daily_view(self, date, page, referrer, new_visitor):
        with self._lock:
            metrics = self._find(WebsiteMetrics, date=date)
            if metrics is None:
                metrics = self._insert(WebsiteMetrics, {"date": date})
            return self._patch(
                WebsiteMetrics,
                metrics.id,
                {
                    "total_views": metrics.total_views + 1,
                    "unique_visitors": metrics.unique_visitors + int(new_visitor),
                    "top_pages": bump_ranked(metrics.top_pages, "page", "views", page),
                    "top_referrers": bump_ranked(
                        metrics.top_referrers, "referrer", "visits", referrer
                    ),
                },
            )

    def get_website_metrics(self, date):
        return self._find(WebsiteMetrics, date=date)

    def list_website_metrics(self, start_date, end_date):
        records = self._filter(WebsiteMetrics, lambda m: start_date <= m.date <= end_date)
        return sorted(records, key=lambda m: m.date)

    def create_website_metrics(self, data):
        return self._insert(WebsiteMetrics, data)

    # -------------------------------------------------------------------------
    # Projects
    # -------------------------------------------------------------------------

    def get_project(self, project_id):
        return self._get(Project, project_id)

    def list_projects(self, client_id=None):
        predicate = (lambda p: p.client_id == client_id) if client_id else None
        return _newest_first(self._filter(Project, predicate))

    def create_project(self, data):
        return self._insert(Project, data)

    def update_project(self, project_id, data):
        return self._patch(Project, project_id, data)

    def delete_project(self, project_id):
        with self._lock:
            if project_id not in self._rows(Project):
                return False
            self._remove_where(ProjectComment, lambda c: c.project_id == project_id)
            self._remove_where(ProjectTask, lambda t: t.project_id == project_id)
            self._remove_where(ProjectMilestone, lambda m: m.project_id == project_id)
            return self._remove(Project, project_id)

    def get_milestone(self, milestone_id):
        return self._get(ProjectMilestone, milestone_id)

    def list_milestones(self, project_id):
        return _by_order(self._filter(ProjectMilestone, lambda m: m.project_id == project_id))

    def create_milestone(self, data):
        return self._insert(ProjectMilestone, data)

    def update_milestone(self, milestone_id, data):
        return self._patch(ProjectMilestone, milestone_id, data)

    def delete_milestone(self, milestone_id):
        with self._lock:
            if milestone_id not in self._rows(ProjectMilestone):
                return False
            now = utcnow()
            for task in self._filter(ProjectTask, lambda t: t.milestone_id == milestone_id):
                task.milestone_id = None
                task.updated_at = now
            self._remove_where(ProjectComment, lambda c: c.milestone_id == milestone_id)
            return self._remove(ProjectMilestone, milestone_id)

    def get_task(self, task_id):
        return self._get(ProjectTask, task_id)

    def list_tasks(self, project_id, milestone_id=None):
        def predicate(t):
            if t.project_id != project_id:
                return False
            return milestone_id is None or t.milestone_id == milestone_id

        return _by_order(self._filter(ProjectTask, predicate))

    def create_task(self, data):
        return self._insert(ProjectTask, data)

    def update_task(self, task_id, data):
        return self._patch(ProjectTask, task_id, data)

    def delete_task(self, task_id):
        with self._lock:
            if task_id not in self._rows(ProjectTask):
                return False
            self._remove_where(ProjectComment, lambda c: c.task_id == task_id)
            return self._remove(ProjectTask, task_id)

    def get_comment(self, comment_id):
        return self._get(ProjectComment, comment_id)

    def list_comments(self, project_id, task_id=None, milestone_id=None, include_internal=True):
        def predicate(c):
            if c.project_id != project_id:
                return False
            if task_id is not None and c.task_id != task_id:
                return False
            if milestone_id is not None and c.milestone_id != milestone_id:
                return False
            return include_internal or not c.is_internal

        return _oldest_first(self._filter(ProjectComment, predicate))

    def create_comment(self, data):
        return self._insert(ProjectComment, data)

    def update_comment(self, comment_id, data):
        return self._patch(ProjectComment, comment_id, data)

    def delete_comment(self, comment_id):
        return self._remove(ProjectComment, comment_id)

    # -------------------------------------------------------------------------
    # Notifications & files
    # -------------------------------------------------------------------------

    def get_notification(self, notification_id):
        return self._get(Notification, notification_id)

    def list_notifications(self, recipient_type=None, recipient_id=None):
        def predicate(n):
            if recipient_type is not None and n.recipient_type != recipient_type:
                return False
            return recipient_id is None or n.recipient_id == recipient_id

        return _newest_first(self._filter(Notification, predicate))

    def create_notification(self, data):
        return self._insert(Notification, data)

    def mark_notification_read(self, notification_id):
        return self._patch(Notification, notification_id, {"is_read": True})

    def delete_notification(self, notification_id):
        return self._remove(Notification, notification_id)

    def get_file_upload(self, file_id):
        return self._get(FileUpload, file_id)

    def list_file_uploads(self):
        return _newest_first(self._filter(FileUpload))

    def create_file_upload(self, data):
        return self._insert(FileUpload, data)

    def delete_file_upload(self, file_id):
        return self._remove(FileUpload, file_id)

