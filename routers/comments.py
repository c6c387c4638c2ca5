import logging
from fastapi import APIRouter, HTTPException, Request, Depends, Query, status

from domain.comments import (
    CommitDetail, CommitLog, CreateCommentRequest, CreateCommentResponse,
    DeleteCommentRequest, MessageResponse, UpdateCommentRequest
)
from services.comment_store import (
    CommentLocked, CommentNotFound, CommentStore, InvalidPassword
)
from settings import settings

logger = logging.getLogger('uvicorn.error')

router = APIRouter(
    prefix="/comments",
    tags=["comments"]
)


async def get_comment_store(request: Request) -> CommentStore:
    if not hasattr(request.app.state, 'comment_store') or not request.app.state.comment_store:
        logger.error("Comment store not initialized or unavailable.")
        raise HTTPException(status_code=503, detail="Comment storage unavailable")
    return request.app.state.comment_store


def check_message_size(message: str):
    if len(message.encode('utf-8')) > settings.max_message_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Comment message exceeds the maximum size of {settings.max_message_kb} KB."
        )


# git log
@router.get("", response_model=CommitLog)
async def get_comments(
    post_id: str = Query(..., min_length=1),
    store: CommentStore = Depends(get_comment_store)
):
    try:
        return CommitLog(commits=await store.list_threads(post_id))
    except Exception as e:
        logger.exception(f"Error retrieving comments for post {post_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error while fetching comments.")


# git show
@router.get("/{commit_hash}", response_model=CommitDetail)
async def get_comment(
    commit_hash: str,
    store: CommentStore = Depends(get_comment_store)
):
    try:
        comment = await store.get_comment(commit_hash)
        if comment is None:
            logger.warning(f"Comment {commit_hash} not found")
            raise HTTPException(status_code=404, detail="Comment not found")
        return CommitDetail(
            hash=comment.commit_hash,
            post_id=comment.post_id,
            author=comment.author,
            date=comment.created_at,
            message=comment.message,
            parent_hash=comment.parent_hash,
            updated_at=comment.updated_at,
        )
    except HTTPException as http_exc:
        raise http_exc
    except Exception as e:
        logger.exception(f"Error retrieving comment {commit_hash}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error while fetching comment.")


# git commit
@router.post("", response_model=CreateCommentResponse, status_code=status.HTTP_201_CREATED)
async def create_comment(
    comment_in: CreateCommentRequest,
    store: CommentStore = Depends(get_comment_store)
):
    check_message_size(comment_in.message)
    try:
        comment = await store.create_comment(
            post_id=comment_in.post_id,
            message=comment_in.message,
            author=comment_in.author,
            password=comment_in.password,
            parent_hash=comment_in.parent_hash,
        )
    except CommentNotFound:
        logger.warning(f"Attempt to reply to non-existent comment {comment_in.parent_hash} on post {comment_in.post_id}")
        raise HTTPException(status_code=404, detail=f"Parent comment {comment_in.parent_hash} not found")
    except Exception as e:
        logger.exception(f"Error creating comment for post '{comment_in.post_id}': {e}")
        raise HTTPException(status_code=500, detail="Internal server error while creating comment.")

    return CreateCommentResponse(
        commit_hash=comment.commit_hash,
        author=comment.author,
        message=f"[comment {comment.commit_hash}] {comment.message}",
    )


# git rebase -i
@router.put("", response_model=MessageResponse)
async def update_comment(
    update_in: UpdateCommentRequest,
    store: CommentStore = Depends(get_comment_store)
):
    check_message_size(update_in.message)
    commit_hash = update_in.commit_hash
    try:
        await store.update_comment(commit_hash, update_in.password, update_in.message)
    except CommentNotFound:
        logger.warning(f"Update attempt on non-existent comment {commit_hash}")
        raise HTTPException(status_code=404, detail="Comment not found")
    except CommentLocked:
        logger.warning(f"Update attempt on read-only comment {commit_hash}")
        raise HTTPException(status_code=403, detail="This comment cannot be edited (no password set)")
    except InvalidPassword:
        logger.warning(f"Update attempt on comment {commit_hash} with invalid password")
        raise HTTPException(status_code=401, detail="Invalid password")
    except Exception as e:
        logger.exception(f"Error updating comment {commit_hash}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error while updating comment.")

    return MessageResponse(message=f"[{commit_hash}] Comment updated successfully")


# git reset --hard
@router.delete("", response_model=MessageResponse)
async def delete_comment(
    delete_in: DeleteCommentRequest,
    store: CommentStore = Depends(get_comment_store)
):
    commit_hash = delete_in.commit_hash
    try:
        await store.delete_comment(commit_hash, delete_in.password)
    except CommentNotFound:
        logger.warning(f"Delete attempt on non-existent comment {commit_hash}")
        raise HTTPException(status_code=404, detail="Comment not found")
    except CommentLocked:
        logger.warning(f"Delete attempt on read-only comment {commit_hash}")
        raise HTTPException(status_code=403, detail="This comment cannot be deleted (no password set)")
    except InvalidPassword:
        logger.warning(f"Delete attempt on comment {commit_hash} with invalid password")
        raise HTTPException(status_code=401, detail="Invalid password")
    except Exception as e:
        logger.exception(f"Error deleting comment {commit_hash}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error while deleting comment.")

    return MessageResponse(message=f"Comment {commit_hash} deleted.")
