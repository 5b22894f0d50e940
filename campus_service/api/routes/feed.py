"""
Feed, post, like and comment routes
"""
from fastapi import APIRouter, Depends, status
from typing import List

from ...application.services import FeedService
from ...dependencies import get_current_user, get_feed_service
from ...schemas import (
    CommentCreate,
    CommentResponse,
    FeedResponse,
    MessageResponse,
    PostCreate,
    PostResponse,
    Viewer,
)


router = APIRouter(prefix="/api/v1", tags=["Feed"])


@router.get("/feed", response_model=FeedResponse)
async def get_feed(
    current_user: Viewer = Depends(get_current_user),
    service: FeedService = Depends(get_feed_service),
):
    """
    Get the viewer's feed

    Public posts, posts by followed users and posts in followed groups,
    newest first.
    """
    posts = await service.resolve_feed(current_user.id)
    return FeedResponse(
        posts=[PostResponse.model_validate(post) for post in posts],
        count=len(posts),
    )


@router.post("/posts", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    current_user: Viewer = Depends(get_current_user),
    service: FeedService = Depends(get_feed_service),
):
    """
    Create a post

    - **group_id**: a group id, or "public" for a public post
    - **is_public**: forces a public post; any group is dropped
    """
    post = await service.create_post(
        current_user.id,
        post_data.content,
        image=post_data.image,
        group_id=post_data.group_id,
        is_public=post_data.is_public,
    )
    return PostResponse.model_validate(post)


@router.post("/posts/{post_id}/like", response_model=MessageResponse)
async def like_post(
    post_id: int,
    current_user: Viewer = Depends(get_current_user),
    service: FeedService = Depends(get_feed_service),
):
    """Like a post. Unknown posts are accepted and ignored."""
    await service.increment_like(post_id)
    return MessageResponse(message="Like recorded")


@router.get("/posts/{post_id}/comments", response_model=List[CommentResponse])
async def list_comments(
    post_id: int,
    current_user: Viewer = Depends(get_current_user),
    service: FeedService = Depends(get_feed_service),
):
    """Comments on a post, oldest first"""
    comments = await service.list_comments(post_id)
    return [CommentResponse.model_validate(comment) for comment in comments]


@router.post("/posts/{post_id}/comments", response_model=MessageResponse)
async def add_comment(
    post_id: int,
    comment_data: CommentCreate,
    current_user: Viewer = Depends(get_current_user),
    service: FeedService = Depends(get_feed_service),
):
    """Comment on a post. Unknown posts are accepted and ignored."""
    await service.add_comment(post_id, current_user.id, comment_data.content)
    return MessageResponse(message="Comment recorded")
