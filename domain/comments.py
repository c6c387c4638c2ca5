from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
import datetime
import uuid

COMMIT_HASH_LENGTH = 8
SHORT_HASH_LENGTH = 7


def generate_commit_hash() -> str:
    return uuid.uuid4().hex[:COMMIT_HASH_LENGTH]


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class Comment(BaseModel):
    commit_hash: str = Field(default_factory=generate_commit_hash)
    post_id: str
    author: str = "Guest"
    message: str
    parent_hash: Optional[str] = None # Top-level comment this one replies to
    created_at: datetime.datetime = Field(default_factory=utc_now)
    updated_at: Optional[datetime.datetime] = None

    class Config:
        from_attributes = True


# --- Request bodies ---
class CreateCommentRequest(BaseModel):
    post_id: str = Field(min_length=1)
    author: Optional[str] = None
    password: Optional[str] = None
    message: str
    parent_hash: Optional[str] = None

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Message cannot be empty")
        return value


class UpdateCommentRequest(BaseModel):
    commit_hash: str
    password: str
    message: str

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Message cannot be empty")
        return value


class DeleteCommentRequest(BaseModel):
    commit_hash: str
    password: str


# --- Responses ---
class CommitSummary(BaseModel):
    hash: str
    author: str
    date: datetime.datetime
    message: str


class CommitEntry(CommitSummary):
    replies: List[CommitSummary] = Field(default_factory=list)


class CommitLog(BaseModel):
    commits: List[CommitEntry]


class CommitDetail(CommitSummary):
    post_id: str
    parent_hash: Optional[str] = None
    updated_at: Optional[datetime.datetime] = None


class CreateCommentResponse(BaseModel):
    commit_hash: str
    author: str
    message: str


class MessageResponse(BaseModel):
    message: str
