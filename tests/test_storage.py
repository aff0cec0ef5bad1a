"""Storage contract, run against both the memory and the SQL backend."""

from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest

from tutsin.core.config import Settings
from tutsin.db.base import Base
from tutsin.db.session import create_engine_with_settings, create_session_factory
from tutsin.db.types import utcnow
from tutsin.storage import DatabaseStorage, MemStorage, build_storage
from tutsin.storage.base import StorageConflictError


def _database_store() -> DatabaseStorage:
    engine = create_engine_with_settings(Settings(DATABASE_URL="sqlite://"))
    Base.metadata.create_all(engine)
    return DatabaseStorage(create_session_factory(engine))


@pytest.fixture(params=["memory", "database"])
def store(request):
    if request.param == "memory":
        return MemStorage()
    return _database_store()


def _client(store, email="jo@tutsin.io"):
    return store.create_client(
        {"first_name": "Jo", "last_name": "Park", "email": email, "password": "x" * 60}
    )


def test_create_fills_defaults(store):
    client = _client(store)
    assert client.id
    assert client.created_at is not None
    assert client.updated_at == client.created_at

    project = store.create_project({"title": "Site", "client_id": client.id})
    assert project.status == "active"
    assert project.priority == "medium"


def test_update_refreshes_updated_at_and_keeps_created_at(store):
    client = _client(store)
    updated = store.update_client(client.id, {"company": "Acme", "created_at": None})
    assert updated.company == "Acme"
    assert updated.created_at == client.created_at
    assert updated.updated_at >= client.updated_at
    assert store.update_client("missing", {"company": "x"}) is None


def test_lookup_by_email(store):
    client = _client(store)
    assert store.get_client_by_email("jo@tutsin.io").id == client.id
    assert store.get_client_by_email("nobody@tutsin.io") is None


def test_expired_sessions_are_invisible_and_swept(store):
    client = _client(store)
    store.create_client_session(
        {"token_hash": "live", "client_id": client.id, "expires_at": utcnow() + timedelta(hours=1)}
    )
    store.create_client_session(
        {"token_hash": "dead", "client_id": client.id, "expires_at": utcnow() - timedelta(hours=1)}
    )

    assert store.get_client_session("live") is not None
    assert store.get_client_session("dead") is None
    assert store.clean_expired_client_sessions() == 1
    assert store.clean_expired_client_sessions() == 0
    assert store.get_client_session("live") is not None


def test_delete_client_cascades(store):
    client = _client(store)
    project = store.create_project({"title": "Site", "client_id": client.id})
    task = store.create_task({"title": "Build", "project_id": project.id})
    store.create_comment(
        {"project_id": project.id, "author_id": client.id, "content": "hi"}
    )
    store.create_client_session(
        {"token_hash": "t", "client_id": client.id, "expires_at": utcnow() + timedelta(hours=1)}
    )

    assert store.delete_client(client.id) is True
    assert store.get_client(client.id) is None
    assert store.get_project(project.id) is None
    assert store.get_task(task.id) is None
    assert store.list_comments(project.id) == []
    assert store.get_client_session("t") is None
    assert store.delete_client(client.id) is False


def test_projects_newest_first_and_scoped(store):
    a = _client(store, "a@tutsin.io")
    b = _client(store, "b@tutsin.io")
    first = store.create_project({"title": "First", "client_id": a.id})
    second = store.create_project({"title": "Second", "client_id": a.id})
    store.create_project({"title": "Other", "client_id": b.id})

    assert [p.id for p in store.list_projects(client_id=a.id)] == [second.id, first.id]
    assert len(store.list_projects()) == 3


def test_tasks_ordered_and_milestone_delete_detaches(store):
    client = _client(store)
    project = store.create_project({"title": "Site", "client_id": client.id})
    milestone = store.create_milestone({"title": "M1", "project_id": project.id})
    late = store.create_task(
        {"title": "Late", "project_id": project.id, "order": 2, "milestone_id": milestone.id}
    )
    early = store.create_task({"title": "Early", "project_id": project.id, "order": 1})

    assert [t.id for t in store.list_tasks(project.id)] == [early.id, late.id]
    assert [t.id for t in store.list_tasks(project.id, milestone_id=milestone.id)] == [late.id]

    assert store.delete_milestone(milestone.id) is True
    assert store.get_task(late.id).milestone_id is None


def test_comments_internal_filter(store):
    client = _client(store)
    project = store.create_project({"title": "Site", "client_id": client.id})
    store.create_comment({"project_id": project.id, "author_id": "a", "content": "public"})
    store.create_comment(
        {"project_id": project.id, "author_id": "a", "content": "internal", "is_internal": True}
    )

    assert [c.content for c in store.list_comments(project.id)] == ["public", "internal"]
    assert [c.content for c in store.list_comments(project.id, include_internal=False)] == ["public"]


def test_role_usage_count(store):
    role = store.create_admin_role({"name": "editor", "permissions": ["manage_content"]})
    assert role.permissions == ["manage_content"]
    store.create_admin(
        {
            "first_name": "E",
            "last_name": "D",
            "email": "ed@tutsin.io",
            "password": "x" * 60,
            "role_id": role.id,
        }
    )
    assert store.count_admins_with_role(role.id) == 1


def test_website_metrics_range(store):
    for day in ("2026-01-01", "2026-01-02", "2026-01-05"):
        store.create_website_metrics({"date": day, "total_views": 1})

    dates = [m.date for m in store.list_website_metrics("2026-01-02", "2026-01-05")]
    assert dates == ["2026-01-02", "2026-01-05"]
    assert store.get_website_metrics("2026-01-01").top_pages == []


def test_notifications_scoped_and_marked_read(store):
    n = store.create_notification(
        {"recipient_id": "c1", "recipient_type": "client", "title": "t", "message": "m"}
    )
    store.create_notification(
        {"recipient_id": "a1", "recipient_type": "admin", "title": "t", "message": "m"}
    )

    assert [x.id for x in store.list_notifications("client", "c1")] == [n.id]
    assert store.mark_notification_read(n.id).is_read is True
    assert store.delete_notification(n.id) is True
    assert store.get_notification(n.id) is None


def test_ping(store):
    assert store.ping() is True


def test_build_storage_selects_backend_and_seeds():
    storage = build_storage(
        Settings(DATABASE_URL="sqlite://", STORAGE_BACKEND="memory", SEED_SAMPLE_DATA=True)
    )
    assert isinstance(storage, MemStorage)
    assert storage.get_admin_role_by_name("super_admin") is not None
    assert storage.list_blog_posts(published_only=True)
    assert storage.list_projects()


def test_build_storage_rejects_unknown_backend():
    with pytest.raises(ValueError, match="Unknown STORAGE_BACKEND"):
        build_storage(Settings(DATABASE_URL="sqlite://", STORAGE_BACKEND="redis"))


@pytest.mark.parametrize("scope", ["task_id", "milestone_id"])
def test_comments_internal_filter_in_task_and_milestone_scope(store, scope):
    client = _client(store)
    project = store.create_project({"title": "Site", "client_id": client.id})
    if scope == "task_id":
        target = store.create_task({"title": "Build", "project_id": project.id})
    else:
        target = store.create_milestone({"title": "M1", "project_id": project.id})
    store.create_comment({"project_id": project.id, "author_id": "a", "content": "on project"})
    for content, internal in (("public", False), ("internal", True)):
        store.create_comment(
            {
                "project_id": project.id,
                "author_id": "a",
                "content": content,
                "is_internal": internal,
                scope: target.id,
            }
        )

    scoped = store.list_comments(project.id, include_internal=False, **{scope: target.id})
    assert [c.content for c in scoped] == ["public"]
    everything = store.list_comments(project.id, **{scope: target.id})
    assert [c.content for c in everything] == ["public", "internal"]


def test_unique_columns_rejected_on_create(store):
    _client(store)
    with pytest.raises(StorageConflictError):
        _client(store)

    store.create_website_metrics({"date": "2026-10-19"})
    with pytest.raises(StorageConflictError):
        store.create_website_metrics({"date": "2026-10-19"})
    assert len(store.list_website_metrics("2026-10-19", "2026-10-19")) == 1


def test_unique_columns_rejected_on_update(store):
    _client(store, "a@tutsin.io")
    b = _client(store, "b@tutsin.io")

    with pytest.raises(StorageConflictError):
        store.update_client(b.id, {"email": "a@tutsin.io"})
    assert store.get_client(b.id).email == "b@tutsin.io"
    # Re-saving a record's own value is not a conflict.
    assert store.update_client(b.id, {"email": "b@tutsin.io"}).email == "b@tutsin.io"


def test_record_daily_view_counts_into_one_row(store):
    store.record_daily_view("2026-10-19", "/", "direct", True)
    store.record_daily_view("2026-10-19", "/pricing", "google.com", False)
    metrics = store.record_daily_view("2026-10-19", "/", "google.com", True)

    assert metrics.total_views == 3
    assert metrics.unique_visitors == 2
    assert metrics.top_pages == [{"page": "/", "views": 2}, {"page": "/pricing", "views": 1}]
    assert metrics.top_referrers[0] == {"referrer": "google.com", "visits": 2}
    assert len(store.list_website_metrics("2026-10-19", "2026-10-19")) == 1


def test_record_daily_view_extends_seeded_row(store):
    store.create_website_metrics(
        {"date": "2026-10-19", "total_views": 10, "top_pages": ["/", {"page": "/blog", "views": 4}]}
    )
    metrics = store.record_daily_view("2026-10-19", "/", "direct", False)

    assert metrics.total_views == 11
    assert metrics.top_pages == [{"page": "/blog", "views": 4}, {"page": "/", "views": 2}]


def test_concurrent_first_views_share_one_row():
    store = MemStorage()
    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda _: store.record_daily_view("2026-10-19", "/", "direct", False), range(40)))

    rows = store.list_website_metrics("2026-10-19", "2026-10-19")
    assert len(rows) == 1
    assert rows[0].total_views == 40


def test_daily_view_retries_when_row_created_concurrently(monkeypatch):
    store = _database_store()
    bump = store._bump_daily_view
    calls = []

    def lose_create_race(date, *args):
        calls.append(date)
        if len(calls) == 1:
            store.create_website_metrics({"date": date, "total_views": 5})
            raise StorageConflictError("website_metrics.date already exists")
        return bump(date, *args)

    monkeypatch.setattr(store, "_bump_daily_view", lose_create_race)

    metrics = store.record_daily_view("2026-10-19", "/", "direct", True)

    assert len(calls) == 2
    assert metrics.total_views == 6


def test_page_view_lookup_and_purge(store):
    now = utcnow()
    store.create_page_view({"path": "/", "ip": "203.0.113.7", "timestamp": now - timedelta(days=100)})
    store.create_page_view({"path": "/", "ip": "203.0.113.8", "timestamp": now})

    since = now - timedelta(days=1)
    assert store.has_page_view_from("203.0.113.8", since) is True
    assert store.has_page_view_from("203.0.113.7", since) is False

    assert store.purge_page_views(now - timedelta(days=90)) == 1
    assert store.purge_page_views(now - timedelta(days=90)) == 0
    assert store.has_page_view_from("203.0.113.8", since) is True
