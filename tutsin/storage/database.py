"""SQLAlchemy storage backend.

Each operation opens its own short session and commits before returning,
so records come back detached with their loaded state intact.
"""

from contextlib import contextmanager
from typing import Iterator, TypeVar

from sqlalchemy import delete, func, select, text, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from tutsin.db.base import Base
from tutsin.db.enums import PrincipalType
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


class DatabaseStorage(Storage):
    """Relational storage over a SQLAlchemy session factory."""

    name = "database"

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise StorageConflictError(str(exc.orig)) from exc
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    # -------------------------------------------------------------------------
    # Generic helpers
    # -------------------------------------------------------------------------

    def _get(self, model: type[M], record_id: str) -> M | None:
        with self._session() as db:
            return db.get(model, record_id)

    def _first(self, stmt):
        with self._session() as db:
            return db.scalars(stmt).first()

    def _all(self, stmt) -> list:
        with self._session() as db:
            return list(db.scalars(stmt).all())

    def _create(self, model: type[M], data: Fields) -> M:
        data = dict(data)
        now = utcnow()
        if hasattr(model, "created_at"):
            data.setdefault("created_at", now)
        if hasattr(model, "updated_at"):
            data.setdefault("updated_at", data.get("created_at", now))
        obj = model(**data)
        with self._session() as db:
            db.add(obj)
            db.flush()
        return obj

    def _update(self, model: type[M], record_id: str, data: Fields) -> M | None:
        with self._session() as db:
            obj = db.get(model, record_id)
            if obj is None:
                return None
            for key, value in data.items():
                if key in ("id", "created_at"):
                    continue
                setattr(obj, key, value)
            if hasattr(model, "updated_at"):
                obj.updated_at = utcnow()
            db.flush()
            return obj

    def _delete(self, model: type, record_id: str) -> bool:
        with self._session() as db:
            result = db.execute(delete(model).where(model.id == record_id))
            return result.rowcount > 0

    @staticmethod
    def _purge_project_children(db: Session, project_ids) -> None:
        db.execute(delete(ProjectComment).where(ProjectComment.project_id.in_(project_ids)))
        db.execute(delete(ProjectTask).where(ProjectTask.project_id.in_(project_ids)))
        db.execute(delete(ProjectMilestone).where(ProjectMilestone.project_id.in_(project_ids)))

    # -------------------------------------------------------------------------
    # Clients
    # -------------------------------------------------------------------------

    def get_client(self, client_id):
        return self._get(Client, client_id)

    def get_client_by_email(self, email):
        return self._first(select(Client).where(Client.email == email))

    def list_clients(self):
        return self._all(select(Client).order_by(Client.created_at))

    def create_client(self, data):
        return self._create(Client, data)

    def update_client(self, client_id, data):
        return self._update(Client, client_id, data)

    def delete_client(self, client_id):
        with self._session() as db:
            if db.get(Client, client_id) is None:
                return False
            project_ids = select(Project.id).where(Project.client_id == client_id)
            self._purge_project_children(db, project_ids)
            db.execute(delete(Project).where(Project.client_id == client_id))
            db.execute(delete(ClientSession).where(ClientSession.client_id == client_id))
            db.execute(
                delete(Notification).where(
                    Notification.recipient_type == PrincipalType.CLIENT.value,
                    Notification.recipient_id == client_id,
                )
            )
            db.execute(delete(Client).where(Client.id == client_id))
            return True

    # -------------------------------------------------------------------------
    # Client sessions
    # -------------------------------------------------------------------------

    def create_client_session(self, data):
        return self._create(ClientSession, data)

    def get_client_session(self, token_hash):
        return self._first(
            select(ClientSession).where(
                ClientSession.token_hash == token_hash,
                ClientSession.expires_at > utcnow(),
            )
        )

    def delete_client_session(self, token_hash):
        with self._session() as db:
            result = db.execute(delete(ClientSession).where(ClientSession.token_hash == token_hash))
            return result.rowcount > 0

    def clean_expired_client_sessions(self):
        with self._session() as db:
            result = db.execute(delete(ClientSession).where(ClientSession.expires_at <= utcnow()))
            return result.rowcount or 0

    # -------------------------------------------------------------------------
    # Admins & roles
    # -------------------------------------------------------------------------

    def get_admin(self, admin_id):
        return self._get(Admin, admin_id)

    def get_admin_by_email(self, email):
        return self._first(select(Admin).where(Admin.email == email))

    def list_admins(self):
        return self._all(select(Admin).order_by(Admin.created_at))

    def count_admins_with_role(self, role_id):
        with self._session() as db:
            return db.scalar(select(func.count()).select_from(Admin).where(Admin.role_id == role_id)) or 0

    def create_admin(self, data):
        return self._create(Admin, data)

    def update_admin(self, admin_id, data):
        return self._update(Admin, admin_id, data)

    def delete_admin(self, admin_id):
        with self._session() as db:
            db.execute(delete(AdminSession).where(AdminSession.admin_id == admin_id))
            result = db.execute(delete(Admin).where(Admin.id == admin_id))
            return result.rowcount > 0

    def get_admin_role(self, role_id):
        return self._get(AdminRole, role_id)

    def get_admin_role_by_name(self, name):
        return self._first(select(AdminRole).where(AdminRole.name == name))

    def list_admin_roles(self):
        return self._all(select(AdminRole).order_by(AdminRole.created_at))

    def create_admin_role(self, data):
        return self._create(AdminRole, data)

    def update_admin_role(self, role_id, data):
        return self._update(AdminRole, role_id, data)

    def delete_admin_role(self, role_id):
        return self._delete(AdminRole, role_id)

    # -------------------------------------------------------------------------
    # Admin sessions
    # -------------------------------------------------------------------------

    def create_admin_session(self, data):
        return self._create(AdminSession, data)

    def get_admin_session(self, token_hash):
        return self._first(
            select(AdminSession).where(
                AdminSession.token_hash == token_hash,
                AdminSession.expires_at > utcnow(),
            )
        )

    def delete_admin_session(self, token_hash):
        with self._session() as db:
            result = db.execute(delete(AdminSession).where(AdminSession.token_hash == token_hash))
            return result.rowcount > 0

    def clean_expired_admin_sessions(self):
        with self._session() as db:
            result = db.execute(delete(AdminSession).where(AdminSession.expires_at <= utcnow()))
            return result.rowcount or 0

    # -------------------------------------------------------------------------
    # Blog & contact
    # -------------------------------------------------------------------------

    def get_blog_post(self, post_id):
        return self._get(BlogPost, post_id)

    def list_blog_posts(self, published_only=False):
        stmt = select(BlogPost)
        if published_only:
            stmt = stmt.where(BlogPost.published.is_(True))
        return self._all(stmt.order_by(BlogPost.created_at.desc()))

    def create_blog_post(self, data):
        return self._create(BlogPost, data)

    def update_blog_post(self, post_id, data):
        return self._update(BlogPost, post_id, data)

    def delete_blog_post(self, post_id):
        return self._delete(BlogPost, post_id)

    def create_contact_submission(self, data):
        return self._create(ContactSubmission, data)

    def list_contact_submissions(self):
        return self._all(select(ContactSubmission).order_by(ContactSubmission.created_at.desc()))

    # -------------------------------------------------------------------------
    # Analytics
    # -------------------------------------------------------------------------

    def create_page_view(self, data):
        return self._create(PageView, data)

    def has_page_view_from(self, ip, since):
        stmt = select(PageView.id).where(PageView.ip == ip, PageView.timestamp >= since).limit(1)
        with self._session() as db:
            return db.scalars(stmt).first() is not None

    def purge_page_views(self, before):
        with self._session() as db:
            result = db.execute(delete(PageView).where(PageView.timestamp < before))
            return result.rowcount or 0

    def record_daily_view(self, date, page, referrer, new_visitor):
        try:
            return self._bump_daily_view(date, page, referrer, new_visitor)
        except StorageConflictError:
            # Another request created the day's row between our read and insert.
            return self._bump_daily_view(date, page, referrer, new_visitor)

    def _bump_daily_view(self, date, page, referrer, new_visitor) -> WebsiteMetrics:
        with self._session() as db:
            metrics = db.scalars(
                select(WebsiteMetrics).where(WebsiteMetrics.date == date).with_for_update()
            ).first()
            if metrics is None:
                now = utcnow()
                metrics = WebsiteMetrics(
                    date=date,
                    total_views=0,
                    unique_visitors=0,
                    top_pages=[],
                    top_referrers=[],
                    created_at=now,
                    updated_at=now,
                )
                db.add(metrics)
                db.flush()
            metrics.total_views += 1
            metrics.unique_visitors += int(new_visitor)
            metrics.top_pages = bump_ranked(metrics.top_pages, "page", "views", page)
            metrics.top_referrers = bump_ranked(
                metrics.top_referrers, "referrer", "visits", referrer
            )
            metrics.updated_at = utcnow()
            db.flush()
            return metrics

    def get_website_metrics(self, date):
        return self._first(select(WebsiteMetrics).where(WebsiteMetrics.date == date))

    def list_website_metrics(self, start_date, end_date):
        return self._all(
            select(WebsiteMetrics)
            .where(WebsiteMetrics.date >= start_date, WebsiteMetrics.date <= end_date)
            .order_by(WebsiteMetrics.date)
        )

    def create_website_metrics(self, data):
        return self._create(WebsiteMetrics, data)

    # -------------------------------------------------------------------------
    # Projects
    # -------------------------------------------------------------------------

    def get_project(self, project_id):
        return self._get(Project, project_id)

    def list_projects(self, client_id=None):
        stmt = select(Project)
        if client_id:
            stmt = stmt.where(Project.client_id == client_id)
        return self._all(stmt.order_by(Project.created_at.desc()))

    def create_project(self, data):
        return self._create(Project, data)

    def update_project(self, project_id, data):
        return self._update(Project, project_id, data)

    def delete_project(self, project_id):
        with self._session() as db:
            if db.get(Project, project_id) is None:
                return False
            self._purge_project_children(db, [project_id])
            db.execute(delete(Project).where(Project.id == project_id))
            return True

    def get_milestone(self, milestone_id):
        return self._get(ProjectMilestone, milestone_id)

    def list_milestones(self, project_id):
        return self._all(
            select(ProjectMilestone)
            .where(ProjectMilestone.project_id == project_id)
            .order_by(ProjectMilestone.order, ProjectMilestone.created_at)
        )

    def create_milestone(self, data):
        return self._create(ProjectMilestone, data)

    def update_milestone(self, milestone_id, data):
        return self._update(ProjectMilestone, milestone_id, data)

    def delete_milestone(self, milestone_id):
        with self._session() as db:
            if db.get(ProjectMilestone, milestone_id) is None:
                return False
            db.execute(
                update(ProjectTask)
                .where(ProjectTask.milestone_id == milestone_id)
                .values(milestone_id=None, updated_at=utcnow())
            )
            db.execute(delete(ProjectComment).where(ProjectComment.milestone_id == milestone_id))
            db.execute(delete(ProjectMilestone).where(ProjectMilestone.id == milestone_id))
            return True

    def get_task(self, task_id):
        return self._get(ProjectTask, task_id)

    def list_tasks(self, project_id, milestone_id=None):
        stmt = select(ProjectTask).where(ProjectTask.project_id == project_id)
        if milestone_id is not None:
            stmt = stmt.where(ProjectTask.milestone_id == milestone_id)
        return self._all(stmt.order_by(ProjectTask.order, ProjectTask.created_at))

    def create_task(self, data):
        return self._create(ProjectTask, data)

    def update_task(self, task_id, data):
        return self._update(ProjectTask, task_id, data)

    def delete_task(self, task_id):
        with self._session() as db:
            if db.get(ProjectTask, task_id) is None:
                return False
            db.execute(delete(ProjectComment).where(ProjectComment.task_id == task_id))
            db.execute(delete(ProjectTask).where(ProjectTask.id == task_id))
            return True

    def get_comment(self, comment_id):
        return self._get(ProjectComment, comment_id)

    def list_comments(self, project_id, task_id=None, milestone_id=None, include_internal=True):
        stmt = select(ProjectComment).where(ProjectComment.project_id == project_id)
        if task_id is not None:
            stmt = stmt.where(ProjectComment.task_id == task_id)
        if milestone_id is not None:
            stmt = stmt.where(ProjectComment.milestone_id == milestone_id)
        if not include_internal:
            stmt = stmt.where(ProjectComment.is_internal.is_(False))
        return self._all(stmt.order_by(ProjectComment.created_at))

    def create_comment(self, data):
        return self._create(ProjectComment, data)

    def update_comment(self, comment_id, data):
        return self._update(ProjectComment, comment_id, data)

    def delete_comment(self, comment_id):
        return self._delete(ProjectComment, comment_id)

    # -------------------------------------------------------------------------
    # Notifications & files
    # -------------------------------------------------------------------------

    def get_notification(self, notification_id):
        return self._get(Notification, notification_id)

    def list_notifications(self, recipient_type=None, recipient_id=None):
        stmt = select(Notification)
        if recipient_type is not None:
            stmt = stmt.where(Notification.recipient_type == recipient_type)
        if recipient_id is not None:
            stmt = stmt.where(Notification.recipient_id == recipient_id)
        return self._all(stmt.order_by(Notification.created_at.desc()))

    def create_notification(self, data):
        return self._create(Notification, data)

    def mark_notification_read(self, notification_id):
        return self._update(Notification, notification_id, {"is_read": True})

    def delete_notification(self, notification_id):
        return self._delete(Notification, notification_id)

    def get_file_upload(self, file_id):
        return self._get(FileUpload, file_id)

    def list_file_uploads(self):
        return self._all(select(FileUpload).order_by(FileUpload.created_at.desc()))

    def create_file_upload(self, data):
        return self._create(FileUpload, data)

    def delete_file_upload(self, file_id):
        return self._delete(FileUpload, file_id)

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    def ping(self) -> bool:
        with self._session() as db:
            db.execute(text("SELECT 1"))
        return True
