"""Public blog endpoints (published posts only)."""

from fastapi import APIRouter, Depends, HTTPException

from tutsin.schemas.content import BlogPostRead
from tutsin.storage import get_storage
from tutsin.storage.base import Storage

router = APIRouter()


@router.get("/posts", response_model=list[BlogPostRead])
def list_posts(storage: Storage = Depends(get_storage)):
    """Published posts, newest first."""
    return storage.list_blog_posts(published_only=True)


@router.get("/posts/{post_id}", response_model=BlogPostRead)
def get_post(post_id: str, storage: Storage = Depends(get_storage)):
    post = storage.get_blog_post(post_id)
    if post is None or not post.published:
        raise HTTPException(status_code=404, detail="Blog post not found")
    return post
