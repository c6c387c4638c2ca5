"""
Tests for CommentsApi handling of odd server responses.
"""

import httpx
import pytest

from services.comments_api import CommentApiError, CommentsApi
from services.git_storage import GitStorage
from services.git_terminal import GitTerminal, LineKind, PromptStep


def api_returning(status_code, **kwargs):
    transport = httpx.MockTransport(lambda request: httpx.Response(status_code, **kwargs))
    return CommentsApi(httpx.Client(transport=transport, base_url="http://comments.test"))


class TestUnexpectedResponses:
    """Tests that malformed bodies become CommentApiError."""

    def test_non_json_success_body(self):
        api = api_returning(200, text="<html>gateway</html>")

        with pytest.raises(CommentApiError) as exc_info:
            api.get_comments("post")
        assert exc_info.value.detail == "Unexpected response from the comment server"

    def test_json_with_wrong_shape(self):
        api = api_returning(201, json={"unexpected": True})

        with pytest.raises(CommentApiError):
            api.create_comment("post", "Ann", "pw", "hello")

    def test_json_list_body(self):
        api = api_returning(200, json=["not", "an", "object"])

        with pytest.raises(CommentApiError):
            api.get_comment("a1b2c3d4")

    def test_error_with_non_json_body(self):
        api = api_returning(502, text="Bad Gateway")

        with pytest.raises(CommentApiError) as exc_info:
            api.delete_comment("a1b2c3d4", "pw")
        assert exc_info.value.status_code == 502
        assert exc_info.value.detail == "Request failed with status 502"

    def test_transport_failure(self):
        def fail(request):
            raise httpx.ConnectError("connection refused", request=request)

        api = CommentsApi(httpx.Client(transport=httpx.MockTransport(fail), base_url="http://comments.test"))

        with pytest.raises(CommentApiError) as exc_info:
            api.get_comments("post")
        assert exc_info.value.detail == "Could not reach the comment server"


class TestTerminalSurvivesBadResponses:
    """Tests that the terminal reports bad responses instead of raising."""

    def test_log_with_html_body(self):
        terminal = GitTerminal(api_returning(200, text="<html>gateway</html>"), GitStorage(), "post")

        lines = terminal.handle("git log")

        assert lines[-1].kind == LineKind.ERROR
        assert lines[-1].text == "Error: Unexpected response from the comment server"
        assert terminal.step == PromptStep.IDLE

    def test_interactive_commit_with_html_body(self):
        terminal = GitTerminal(api_returning(201, text="<html>gateway</html>"), GitStorage(), "post")

        for answer in ("git commit", "Ann", "pw"):
            terminal.handle(answer)
        lines = terminal.handle("hello")

        assert lines[-1].text == "Error: Unexpected response from the comment server"
        assert terminal.step == PromptStep.IDLE
        assert terminal.storage.reflog() == {}
