import logging
from typing import List, Optional

import httpx

from domain.comments import (
    CommitDetail, CommitEntry, CommitLog, CreateCommentResponse, MessageResponse
)

logger = logging.getLogger(__name__)


class CommentApiError(Exception):
    def __init__(self, detail: str, status_code: Optional[int] = None):
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, list):
        # pydantic validation errors
        detail = "; ".join(item.get("msg", str(item)) for item in detail)
    return detail or f"Request failed with status {response.status_code}"


class CommentsApi:
    """Client for the /comments endpoints, wrapping an httpx.Client."""

    def __init__(self, client: httpx.Client):
        self.client = client

    def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise CommentApiError("Could not reach the comment server") from e
        if response.is_error:
            detail = _error_detail(response)
            logger.debug(f"{method} {url} -> {response.status_code}: {detail}")
            raise CommentApiError(detail, response.status_code)
        return response

    def _parse(self, response: httpx.Response, model):
        try:
            return model(**response.json())
        except (ValueError, TypeError) as e:
            # Covers non-JSON bodies and pydantic validation errors
            logger.error(f"Unexpected response body from {response.request.url}: {e}")
            raise CommentApiError("Unexpected response from the comment server", response.status_code) from e

    def get_comments(self, post_id: str) -> List[CommitEntry]:
        response = self._send("GET", "/comments", params={"post_id": post_id})
        return self._parse(response, CommitLog).commits

    def get_comment(self, commit_hash: str) -> CommitDetail:
        response = self._send("GET", f"/comments/{commit_hash}")
        return self._parse(response, CommitDetail)

    def create_comment(
        self,
        post_id: str,
        author: Optional[str],
        password: Optional[str],
        message: str,
        parent_hash: Optional[str] = None,
    ) -> CreateCommentResponse:
        response = self._send("POST", "/comments", json={
            "post_id": post_id,
            "author": author,
            "password": password,
            "message": message,
            "parent_hash": parent_hash,
        })
        return self._parse(response, CreateCommentResponse)

    def update_comment(self, commit_hash: str, password: str, message: str) -> MessageResponse:
        response = self._send("PUT", "/comments", json={
            "commit_hash": commit_hash,
            "password": password,
            "message": message,
        })
        return self._parse(response, MessageResponse)

    def delete_comment(self, commit_hash: str, password: str) -> MessageResponse:
        response = self._send("DELETE", "/comments", json={
            "commit_hash": commit_hash,
            "password": password,
        })
        return self._parse(response, MessageResponse)
