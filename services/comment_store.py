import logging
from typing import List, Optional

import CommentAuth as auth
from domain.comments import (
    Comment, CommitEntry, CommitSummary, generate_commit_hash, utc_now
)
from services.kv import KeyValueStore

logger = logging.getLogger('uvicorn.error')

DEFAULT_AUTHOR = "Guest"
MAX_HASH_ATTEMPTS = 5


# --- Errors ---
class CommentStoreError(Exception):
    pass


class CommentNotFound(CommentStoreError):
    def __init__(self, commit_hash: str):
        super().__init__(f"Comment {commit_hash} not found")
        self.commit_hash = commit_hash


class CommentLocked(CommentStoreError):
    """The comment was created without a password and can never be mutated."""

    def __init__(self, commit_hash: str):
        super().__init__(f"Comment {commit_hash} has no password set")
        self.commit_hash = commit_hash


class InvalidPassword(CommentStoreError):
    def __init__(self, commit_hash: str):
        super().__init__(f"Invalid password for comment {commit_hash}")
        self.commit_hash = commit_hash


# --- Keys ---
def comments_key(post_id: str) -> str:
    return f"comments:{post_id}"


def comment_key(commit_hash: str) -> str:
    return f"comment:{commit_hash}"


def password_key(commit_hash: str) -> str:
    return f"password:{commit_hash}"


def to_summary(comment: Comment) -> CommitSummary:
    return CommitSummary(
        hash=comment.commit_hash,
        author=comment.author,
        date=comment.created_at,
        message=comment.message,
    )


class CommentStore:
    """
    Comment persistence over a KeyValueStore.

    Each post keeps a newest-first index of comment ids; bodies and password
    hashes are stored under their own keys. Mutations are password-gated and
    checked against the stored bcrypt hash on every call.
    """

    def __init__(self, kv: KeyValueStore, default_author: str = DEFAULT_AUTHOR):
        self.kv = kv
        self.default_author = default_author

    async def list_comments(self, post_id: str) -> List[Comment]:
        comments = []
        for commit_hash in await self.kv.list_items(comments_key(post_id)):
            comment = await self.get_comment(commit_hash)
            if comment is None:
                logger.warning(f"Index for post '{post_id}' references missing comment '{commit_hash}'")
                continue
            comments.append(comment)
        return comments

    async def list_threads(self, post_id: str) -> List[CommitEntry]:
        comments = await self.list_comments(post_id)
        threads = []
        for root in comments:
            if root.parent_hash:
                continue
            replies = [to_summary(c) for c in comments if c.parent_hash == root.commit_hash]
            threads.append(CommitEntry(**to_summary(root).model_dump(), replies=replies))
        return threads

    async def get_comment(self, commit_hash: str) -> Optional[Comment]:
        data = await self.kv.get(comment_key(commit_hash))
        if data is None:
            return None
        return Comment(**data)

    async def _new_commit_hash(self) -> str:
        for _ in range(MAX_HASH_ATTEMPTS):
            commit_hash = generate_commit_hash()
            if await self.kv.get(comment_key(commit_hash)) is None:
                return commit_hash
        raise CommentStoreError("Could not allocate a unique commit hash")

    async def _resolve_parent(self, post_id: str, parent_hash: str) -> str:
        parent = await self.get_comment(parent_hash)
        if parent is None or parent.post_id != post_id:
            raise CommentNotFound(parent_hash)
        if parent.parent_hash:
            # Threads are one level deep; attach to the reply's root instead
            root = await self.get_comment(parent.parent_hash)
            if root is None or root.post_id != post_id:
                logger.warning(f"Reply '{parent_hash}' points at missing root '{parent.parent_hash}'")
                raise CommentNotFound(parent.parent_hash)
            logger.info(f"Re-parenting reply to '{parent_hash}' onto root '{root.commit_hash}'")
            return root.commit_hash
        return parent.commit_hash

    async def create_comment(
        self,
        post_id: str,
        message: str,
        author: Optional[str] = None,
        password: Optional[str] = None,
        parent_hash: Optional[str] = None,
    ) -> Comment:
        if parent_hash:
            parent_hash = await self._resolve_parent(post_id, parent_hash)

        comment = Comment(
            commit_hash=await self._new_commit_hash(),
            post_id=post_id,
            author=author or self.default_author,
            message=message,
            parent_hash=parent_hash or None,
        )
        await self.kv.set(comment_key(comment.commit_hash), comment.model_dump(mode='json'))
        await self.kv.list_prepend(comments_key(post_id), comment.commit_hash)
        if password:
            await self.kv.set(password_key(comment.commit_hash), auth.get_password_hash(password))

        logger.info(f"Created comment '{comment.commit_hash}' on post '{post_id}' (editable: {bool(password)})")
        return comment

    async def _authorize(self, commit_hash: str, password: str) -> Comment:
        comment = await self.get_comment(commit_hash)
        if comment is None:
            raise CommentNotFound(commit_hash)

        password_hash = await self.kv.get(password_key(commit_hash))
        if not password_hash:
            raise CommentLocked(commit_hash)

        if not password or not auth.verify_password(password, password_hash):
            raise InvalidPassword(commit_hash)
        return comment

    async def update_comment(self, commit_hash: str, password: str, message: str) -> Comment:
        comment = await self._authorize(commit_hash, password)
        comment.message = message
        comment.updated_at = utc_now()
        await self.kv.set(comment_key(commit_hash), comment.model_dump(mode='json'))
        logger.info(f"Updated comment '{commit_hash}'")
        return comment

    async def delete_comment(self, commit_hash: str, password: str) -> Comment:
        comment = await self._authorize(commit_hash, password)
        # No cross-key transaction: an unindexed body left behind is unreachable
        await self.kv.list_remove(comments_key(comment.post_id), commit_hash)
        await self.kv.delete(comment_key(commit_hash))
        await self.kv.delete(password_key(commit_hash))
        logger.info(f"Deleted comment '{commit_hash}' from post '{comment.post_id}'")
        return comment
