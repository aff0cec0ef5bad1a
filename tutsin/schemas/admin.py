"""Pydantic schemas for admins, roles, permissions and dashboard stats."""

from datetime import datetime

from pydantic import EmailStr, Field

from tutsin.schemas.common import CamelModel


# =============================================================================
# Admin auth
# =============================================================================

class AdminLogin(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class AdminProfile(CamelModel):
    """Signed-in admin with resolved role name and permissions."""
    id: str
    first_name: str
    last_name: str
    email: str
    role: str | None = None
    permissions: list[str] = []
    last_login_at: datetime | None = None


class AdminLoginResponse(CamelModel):
    message: str
    token: str
    admin: AdminProfile


class AdminMeResponse(CamelModel):
    admin: AdminProfile


# =============================================================================
# Admin accounts
# =============================================================================

class AdminCreate(CamelModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    role_id: str
    is_active: bool = True


class AdminUpdate(CamelModel):
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None
    password: str | None = Field(None, min_length=6, max_length=128)
    role_id: str | None = None
    is_active: bool | None = None


class AdminRead(CamelModel):
    id: str
    first_name: str
    last_name: str
    email: str
    role_id: str
    role_name: str | None = None
    is_active: bool
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class AdminMutationResponse(CamelModel):
    message: str
    admin: AdminRead


# =============================================================================
# Roles & permissions
# =============================================================================

class RoleCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-z0-9_]+$")
    description: str | None = Field(None, max_length=500)
    permissions: list[str] = Field(default_factory=list)


class RoleUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=100, pattern=r"^[a-z0-9_]+$")
    description: str | None = Field(None, max_length=500)
    permissions: list[str] | None = None


class RoleRead(CamelModel):
    id: str
    name: str
    description: str | None = None
    permissions: list[str]
    created_at: datetime
    updated_at: datetime


class PermissionRead(CamelModel):
    key: str
    label: str
    description: str
    category: str


# =============================================================================
# Dashboard
# =============================================================================

class DashboardStats(CamelModel):
    total_admins: int
    total_roles: int
    total_clients: int
    total_blog_posts: int
    published_posts: int
    total_projects: int
    active_projects: int
    contact_submissions: int
