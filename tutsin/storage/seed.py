"""Default roles, bootstrap admin and sample content.

All functions are idempotent: existing records (matched by email, role name
or metric date) are left alone.
"""

import logging
import random
from datetime import datetime, timedelta, timezone

from tutsin.core.permissions import DEFAULT_ROLES, SUPER_ADMIN_ROLE
from tutsin.core.security import hash_password
from tutsin.db.types import utcnow
from tutsin.storage.base import Storage

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_EMAIL = "admin@tutsindigital.com"
DEFAULT_ADMIN_PASSWORD = "admin123"

SAMPLE_CLIENT_EMAIL = "jane.smith@example.com"
SAMPLE_CLIENT_PASSWORD = "password123"

SAMPLE_PAGES = ["/", "/services", "/web-design", "/blog", "/hosting", "/contact"]
SAMPLE_REFERRERS = ["google.com", "facebook.com", "linkedin.com", "twitter.com", "direct"]


def _utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


def seed_roles(storage: Storage) -> dict[str, str]:
    """Create the default roles. Returns role name -> id."""
    ids: dict[str, str] = {}
    for name, (description, permissions) in DEFAULT_ROLES.items():
        role = storage.get_admin_role_by_name(name)
        if role is None:
            role = storage.create_admin_role(
                {"name": name, "description": description, "permissions": list(permissions)}
            )
            logger.info("Created admin role %s", name)
        ids[name] = role.id
    return ids


def seed_defaults(
    storage: Storage,
    email: str = DEFAULT_ADMIN_EMAIL,
    password: str = DEFAULT_ADMIN_PASSWORD,
) -> None:
    """Create default roles and the bootstrap super admin."""
    role_ids = seed_roles(storage)
    if storage.get_admin_by_email(email) is not None:
        return
    storage.create_admin(
        {
            "first_name": "Super",
            "last_name": "Admin",
            "email": email,
            "password": hash_password(password),
            "role_id": role_ids[SUPER_ADMIN_ROLE],
            "is_active": True,
        }
    )
    logger.warning("Created bootstrap super admin %s; change its password after first login", email)


def seed_blog_posts(storage: Storage) -> None:
    if storage.list_blog_posts():
        return
    posts = [
        (
            "10 Web Design Trends for 2024",
            "Web Design",
            "Discover the latest design trends shaping web development and user experience.",
            _utc(2024, 3, 15),
        ),
        (
            "AI-Powered SEO Strategies",
            "SEO",
            "How machine learning is changing search engine optimization and content strategy.",
            _utc(2024, 3, 12),
        ),
        (
            "Social Media ROI Maximization",
            "Marketing",
            "Strategies to get more return from social media marketing campaigns.",
            _utc(2024, 3, 10),
        ),
    ]
    for title, category, excerpt, created in posts:
        storage.create_blog_post(
            {
                "title": title,
                "category": category,
                "excerpt": excerpt,
                "content": excerpt,
                "published": True,
                "created_at": created,
                "updated_at": created,
            }
        )


def seed_website_metrics(storage: Storage, days: int = 30, seed: int | None = None) -> None:
    """Generate one metrics row per day for the trailing window."""
    rng = random.Random(seed)
    today = utcnow().date()
    for offset in range(days - 1, -1, -1):
        day = (today - timedelta(days=offset)).isoformat()
        if storage.get_website_metrics(day) is not None:
            continue
        total = rng.randint(500, 1500)
        storage.create_website_metrics(
            {
                "date": day,
                "total_views": total,
                "unique_visitors": int(total * rng.uniform(0.55, 0.8)),
                "bounce_rate": rng.randint(25, 55),
                "avg_session_duration": rng.randint(90, 300),
                "top_pages": [
                    {"page": page, "views": rng.randint(20, 300)}
                    for page in rng.sample(SAMPLE_PAGES, 3)
                ],
                "top_referrers": [
                    {"referrer": ref, "visits": rng.randint(10, 200)}
                    for ref in rng.sample(SAMPLE_REFERRERS, 3)
                ],
            }
        )


def seed_sample_projects(storage: Storage) -> None:
    """Sample client with two projects, milestones, tasks and a comment."""
    if storage.get_client_by_email(SAMPLE_CLIENT_EMAIL) is not None:
        return
    client = storage.create_client(
        {
            "first_name": "Jane",
            "last_name": "Smith",
            "email": SAMPLE_CLIENT_EMAIL,
            "password": hash_password(SAMPLE_CLIENT_PASSWORD),
            "company": "Acme Corp",
            "phone": "+1-555-0123",
        }
    )

    redesign = storage.create_project(
        {
            "title": "Website Redesign",
            "description": "Complete redesign of corporate website with modern UI/UX",
            "client_id": client.id,
            "status": "active",
            "priority": "high",
            "budget": 25000_00,
            "start_date": _utc(2024, 3, 1),
            "end_date": _utc(2024, 5, 15),
        }
    )
    storage.create_project(
        {
            "title": "SEO Optimization",
            "description": "Comprehensive SEO audit and optimization campaign",
            "client_id": client.id,
            "status": "completed",
            "priority": "medium",
            "budget": 8000_00,
            "start_date": _utc(2024, 2, 1),
            "end_date": _utc(2024, 3, 30),
            "completed_at": _utc(2024, 3, 28),
        }
    )

    storage.create_milestone(
        {
            "project_id": redesign.id,
            "title": "Design Phase",
            "description": "Wireframes, mockups and design system",
            "status": "completed",
            "due_date": _utc(2024, 3, 15),
            "completed_at": _utc(2024, 3, 14),
            "order": 1,
        }
    )
    development = storage.create_milestone(
        {
            "project_id": redesign.id,
            "title": "Development Phase",
            "description": "Frontend and backend implementation",
            "status": "in_progress",
            "due_date": _utc(2024, 4, 30),
            "order": 2,
        }
    )

    homepage = storage.create_task(
        {
            "project_id": redesign.id,
            "milestone_id": development.id,
            "title": "Homepage Development",
            "description": "Responsive homepage with hero section and key features",
            "status": "in_progress",
            "priority": "high",
            "estimated_hours": 20,
            "actual_hours": 12,
            "due_date": _utc(2024, 4, 10),
            "order": 1,
        }
    )
    storage.create_task(
        {
            "project_id": redesign.id,
            "milestone_id": development.id,
            "title": "Contact Form Integration",
            "description": "Contact form with validation and email notifications",
            "status": "todo",
            "priority": "medium",
            "estimated_hours": 8,
            "due_date": _utc(2024, 4, 15),
            "order": 2,
        }
    )

    storage.create_comment(
        {
            "project_id": redesign.id,
            "task_id": homepage.id,
            "author_id": client.id,
            "author_type": "client",
            "content": "The homepage is looking great! Could we make the hero image a bit larger?",
            "is_internal": False,
        }
    )


def seed_sample_data(storage: Storage) -> None:
    seed_blog_posts(storage)
    seed_website_metrics(storage)
    seed_sample_projects(storage)
    logger.info("Sample data seeded into %s storage", storage.name)
