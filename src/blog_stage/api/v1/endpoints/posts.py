# src/blog_stage/api/v1/endpoints/posts.py
"""Post-related endpoints for the Blog Stage API."""

from fastapi import APIRouter, Query, Response, status

from blog_stage.api.v1.dependencies import (
    CurrentSessionDep,
    LifecycleServiceDep,
    OptionalSessionDep,
)
from blog_stage.schemas.post import PostCreate, PostOut, PostUpdate

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("/", response_model=list[PostOut])
async def list_posts(session: OptionalSessionDep, lifecycle: LifecycleServiceDep) -> list[PostOut]:
    """List live posts, newest first.

    Owner fields of anonymous posts are only included for the owner and for
    super admins.
    """
    return [lifecycle.present(session, post) for post in lifecycle.list_posts()]


@router.get("/mine", response_model=list[PostOut])
async def list_my_posts(session: CurrentSessionDep, lifecycle: LifecycleServiceDep) -> list[PostOut]:
    return [lifecycle.present(session, post) for post in lifecycle.list_own_posts(session)]


@router.get("/{post_id}", response_model=PostOut)
async def get_post(post_id: str, session: OptionalSessionDep, lifecycle: LifecycleServiceDep) -> PostOut:
    return lifecycle.present(session, lifecycle.get_post(post_id))


@router.post("/", response_model=PostOut, status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: PostCreate,
    session: CurrentSessionDep,
    lifecycle: LifecycleServiceDep,
) -> PostOut:
    """Publish a post, optionally under the anonymous author label."""
    post = lifecycle.create_post(session, payload)
    return lifecycle.present(session, post)


@router.patch("/{post_id}", response_model=PostOut)
async def edit_post(
    post_id: str,
    payload: PostUpdate,
    session: CurrentSessionDep,
    lifecycle: LifecycleServiceDep,
) -> PostOut:
    post = lifecycle.edit_post(session, post_id, payload)
    return lifecycle.present(session, post)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: str,
    session: CurrentSessionDep,
    lifecycle: LifecycleServiceDep,
    soft: bool = Query(True, description="Keep a restorable copy in deleted posts"),
) -> Response:
    lifecycle.delete_post(session, post_id, soft=soft)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
