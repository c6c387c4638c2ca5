"""
Tests for the git-comments command line terminal.
"""

from unittest.mock import MagicMock, patch

from click.testing import CliRunner

import terminal as cli


class TestHistory:
    """Tests for readline command history handling."""

    def test_forget_last_history_entry(self):
        with patch.object(cli, "readline") as readline:
            readline.get_current_history_length.return_value = 3
            cli.forget_last_history_entry()
        readline.remove_history_item.assert_called_once_with(2)

    def test_forget_with_empty_history(self):
        with patch.object(cli, "readline") as readline:
            readline.get_current_history_length.return_value = 0
            cli.forget_last_history_entry()
        readline.remove_history_item.assert_not_called()

    def test_forget_without_readline(self):
        with patch.object(cli, "readline", None):
            cli.forget_last_history_entry()

    def test_prompt_answers_are_dropped_from_history(self, client, tmp_path):
        http_client = MagicMock()
        http_client.__enter__.return_value = client
        with patch.object(cli.httpx, "Client", return_value=http_client), \
                patch.object(cli, "forget_last_history_entry") as forget:
            CliRunner().invoke(
                cli.main,
                ["--post-id", "p", "--state-file", str(tmp_path / "state.json")],
                input="git commit\nAnn\npw\nhello\nexit\n",
            )
        # Author and message answers; the password is read hidden
        assert forget.call_count == 2


class TestMain:
    """Tests for the interactive loop."""

    def run(self, client, tmp_path, lines):
        http_client = MagicMock()
        http_client.__enter__.return_value = client
        with patch.object(cli.httpx, "Client", return_value=http_client):
            return CliRunner().invoke(
                cli.main,
                ["--post-id", "p", "--state-file", str(tmp_path / "state.json")],
                input="".join(f"{line}\n" for line in lines),
            )

    def test_commit_and_log(self, client, tmp_path):
        result = self.run(client, tmp_path, [
            'git commit --author="Ann" --password=pw -m "hello"',
            "git log --oneline",
            "exit",
        ])

        assert result.exit_code == 0
        assert " 1 comment created" in result.output
        assert " hello" in result.output

    def test_config_persists_to_state_file(self, client, tmp_path):
        self.run(client, tmp_path, ['git config user.name "Ann"', "exit"])

        assert '"user.name": "Ann"' in (tmp_path / "state.json").read_text()

    def test_end_of_input_exits(self, client, tmp_path):
        result = self.run(client, tmp_path, ["help"])
        assert result.exit_code == 0
        assert "SYNOPSIS" in result.output
