"""git-comments terminal: type git commands to read and write a post's comments."""

import logging

try:
    # Loading readline gives input(), and so click.prompt, up/down history
    import readline
except ImportError:
    readline = None

import click
import httpx

from services.comments_api import CommentsApi
from services.git_storage import GitStorage
from services.git_terminal import GitTerminal, LineKind, PromptStep
from settings import settings

EXIT_COMMANDS = ("exit", "quit")

LINE_STYLES = {
    LineKind.COMMAND: {"fg": "bright_black"},
    LineKind.HASH: {"fg": "yellow"},
    LineKind.SUCCESS: {"fg": "cyan"},
    LineKind.ERROR: {"fg": "red"},
    LineKind.MUTED: {"fg": "bright_black"},
}


def forget_last_history_entry():
    """Keeps prompt answers (author, message) out of the command history."""
    if readline is None:
        return
    length = readline.get_current_history_length()
    if length:
        readline.remove_history_item(length - 1)


def echo_lines(lines, skip_commands: bool = True):
    for line in lines:
        # The prompt and what was typed are already on screen
        if skip_commands and line.kind == LineKind.COMMAND:
            continue
        click.echo(click.style(line.text, **LINE_STYLES.get(line.kind, {})))


@click.command()
@click.option("--post-id", required=True, help="Post whose comments to work on.")
@click.option("--api-url", default=settings.api_url, show_default=True, help="Comment server base URL.")
@click.option("--state-file", default=settings.state_file, show_default=True,
              help="Where user.name and the reflog are kept.")
@click.option("-v", "--verbose", is_flag=True, help="Log HTTP and prompt-state details.")
def main(post_id: str, api_url: str, state_file: str, verbose: bool):
    """Interactive git-style comment terminal."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)

    with httpx.Client(base_url=api_url, timeout=10.0) as client:
        terminal = GitTerminal(
            CommentsApi(client),
            GitStorage(state_file),
            post_id,
            default_author=settings.default_author,
        )
        echo_lines(terminal.welcome())

        while True:
            try:
                line = click.prompt(
                    terminal.prompt,
                    default="",
                    show_default=False,
                    prompt_suffix=" ",
                    hide_input=terminal.expects_secret,
                )
            except click.Abort:
                click.echo()
                break

            if terminal.step != PromptStep.IDLE:
                # Hidden input never reaches the history; blank lines are not recorded
                if not terminal.expects_secret and line:
                    forget_last_history_entry()
            elif line.strip() in EXIT_COMMANDS:
                break
            echo_lines(terminal.handle(line))


if __name__ == "__main__":
    main()
