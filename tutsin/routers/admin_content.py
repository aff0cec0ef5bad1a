"""Blog post and contact submission management (manage_content)."""

from fastapi import APIRouter, Depends, HTTPException, Response

from tutsin.core.deps import require_permission
from tutsin.core.permissions import Permission
from tutsin.schemas.content import BlogPostCreate, BlogPostRead, BlogPostUpdate, ContactRead
from tutsin.storage import get_storage
from tutsin.storage.base import Storage

router = APIRouter(dependencies=[Depends(require_permission(Permission.MANAGE_CONTENT))])


# =============================================================================
# Blog posts (including drafts)
# =============================================================================

@router.get("/blog/posts", response_model=list[BlogPostRead])
def list_posts(storage: Storage = Depends(get_storage)):
    return storage.list_blog_posts()


@router.get("/blog/posts/{post_id}", response_model=BlogPostRead)
def get_post(post_id: str, storage: Storage = Depends(get_storage)):
    post = storage.get_blog_post(post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Blog post not found")
    return post


@router.post("/blog/posts", response_model=BlogPostRead, status_code=201)
def create_post(data: BlogPostCreate, storage: Storage = Depends(get_storage)):
    return storage.create_blog_post(data.model_dump())


@router.put("/blog/posts/{post_id}", response_model=BlogPostRead)
def update_post(post_id: str, data: BlogPostUpdate, storage: Storage = Depends(get_storage)):
    changes = data.model_dump(exclude_unset=True)
    for field in ("title", "content", "excerpt", "category", "published"):
        if field in changes and changes[field] is None:
            del changes[field]
    post = storage.update_blog_post(post_id, changes)
    if post is None:
        raise HTTPException(status_code=404, detail="Blog post not found")
    return post


@router.delete("/blog/posts/{post_id}", status_code=204)
def delete_post(post_id: str, storage: Storage = Depends(get_storage)):
    if not storage.delete_blog_post(post_id):
        raise HTTPException(status_code=404, detail="Blog post not found")
    return Response(status_code=204)


# =============================================================================
# Contact submissions
# =============================================================================

@router.get("/contact", response_model=list[ContactRead])
def list_contact_submissions(storage: Storage = Depends(get_storage)):
    """Newest first."""
    return storage.list_contact_submissions()
