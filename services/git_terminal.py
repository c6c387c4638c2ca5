import logging
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional

from pydantic import BaseModel

from domain.commands import (
    CommitCommand, ConfigCommand, ErrorCommand, GitCommand, HelpCommand,
    LogCommand, RebaseCommand, ReflogCommand, ResetCommand, ShowCommand
)
from domain.comments import SHORT_HASH_LENGTH, CommitEntry, CommitSummary
from services.comments_api import CommentApiError, CommentsApi
from services.git_help import GIT_HELP, WELCOME
from services.git_parser import parse
from services.git_storage import GitStorage

logger = logging.getLogger(__name__)

IDLE_PROMPT = "guest@post:~$"
DEFAULT_AUTHOR = "Guest"


class PromptStep(str, Enum):
    IDLE = "idle"
    AUTHOR = "author"
    PASSWORD = "password"
    MESSAGE = "message"
    EDIT_PASSWORD = "edit_password"
    EDIT_MESSAGE = "edit_message"
    DELETE_PASSWORD = "delete_password"


PROMPTS = {
    PromptStep.IDLE: IDLE_PROMPT,
    PromptStep.AUTHOR: "Author (optional, press Enter to skip):",
    PromptStep.PASSWORD: "Password (required for edit/delete):",
    PromptStep.MESSAGE: "Message:",
    PromptStep.EDIT_PASSWORD: "Password:",
    PromptStep.EDIT_MESSAGE: "Message:",
    PromptStep.DELETE_PASSWORD: "Password:",
}

SECRET_STEPS = {PromptStep.PASSWORD, PromptStep.EDIT_PASSWORD, PromptStep.DELETE_PASSWORD}


class LineKind(str, Enum):
    OUTPUT = "output"
    COMMAND = "command"
    HASH = "hash"
    SUCCESS = "success"
    ERROR = "error"
    MUTED = "muted"


class TerminalLine(BaseModel):
    text: str
    kind: LineKind = LineKind.OUTPUT


class PromptState(BaseModel):
    step: PromptStep = PromptStep.IDLE
    author: Optional[str] = None
    password: Optional[str] = None
    parent_hash: Optional[str] = None
    commit_hash: Optional[str] = None


def format_date(value: datetime) -> str:
    return value.astimezone().strftime("%a %b %d %H:%M:%S %Y %z")


def short_hash(commit_hash: str) -> str:
    return commit_hash[:SHORT_HASH_LENGTH]


def flatten(commits: Iterable[CommitEntry]) -> List[CommitSummary]:
    flat = []
    for commit in commits:
        flat.append(commit)
        flat.extend(commit.replies)
    return flat


class GitTerminal:
    """
    Git-flavoured command interpreter for one post's comments.

    Feed it one input line at a time with `handle`. Commands that need more
    input (`git commit` without -m, `git rebase -i`, `git reset --hard`
    without a remembered password) move the terminal out of the idle step;
    until the sequence finishes or fails, every line is taken as the answer
    to the current prompt rather than as a new command.
    """

    def __init__(
        self,
        api: CommentsApi,
        storage: GitStorage,
        post_id: str,
        default_author: str = DEFAULT_AUTHOR,
    ):
        self.api = api
        self.storage = storage
        self.post_id = post_id
        self.default_author = default_author
        self.output: List[TerminalLine] = []
        self.state = PromptState()

    @property
    def step(self) -> PromptStep:
        return self.state.step

    @property
    def prompt(self) -> str:
        return PROMPTS[self.state.step]

    @property
    def expects_secret(self) -> bool:
        return self.state.step in SECRET_STEPS

    # --- Output ---
    def _print(self, text: str, kind: LineKind = LineKind.OUTPUT):
        for line in text.split("\n"):
            self.output.append(TerminalLine(text=line, kind=kind))

    def _error(self, text: str):
        self._print(text, LineKind.ERROR)

    def _muted(self, text: str):
        self._print(text, LineKind.MUTED)

    def _success(self, text: str):
        self._print(text, LineKind.SUCCESS)

    def _print_message(self, message: str, indent: str):
        for line in message.splitlines() or [""]:
            self._print(f"{indent}{line}")

    def welcome(self) -> List[TerminalLine]:
        start = len(self.output)
        for line in WELCOME:
            self._muted(line)
        return self.output[start:]

    def _enter(self, state: PromptState):
        logger.debug(f"Prompt step {self.state.step.value} -> {state.step.value}")
        self.state = state

    def _reset_prompt(self):
        self._enter(PromptState())

    # --- Input ---
    def handle(self, line: str) -> List[TerminalLine]:
        """Processes one line of input and returns the lines it printed."""
        start = len(self.output)
        if self.state.step != PromptStep.IDLE:
            self._answer(line.strip())
        else:
            command = parse(line)
            if command is not None:
                self._print(f"{IDLE_PROMPT} {line.strip()}", LineKind.COMMAND)
                self.execute(command)
        return self.output[start:]

    def execute(self, command: GitCommand):
        if isinstance(command, HelpCommand):
            self._print(GIT_HELP)
        elif isinstance(command, LogCommand):
            self.cmd_log(oneline=command.oneline)
        elif isinstance(command, CommitCommand):
            self.cmd_commit(command)
        elif isinstance(command, ShowCommand):
            self.cmd_show(command.hash)
        elif isinstance(command, RebaseCommand):
            self.cmd_rebase(command.hash)
        elif isinstance(command, ResetCommand):
            self.cmd_reset(command.hash)
        elif isinstance(command, ConfigCommand):
            self.cmd_config(command)
        elif isinstance(command, ReflogCommand):
            self.cmd_reflog()
        elif isinstance(command, ErrorCommand):
            self._error(command.message)
        else:
            self._error("Unknown command")

    def _answer(self, answer: str):
        state = self.state
        shown = "*" * len(answer) if self.expects_secret else answer
        self._print(f"{self.prompt} {shown}", LineKind.COMMAND)

        if state.step == PromptStep.AUTHOR:
            if answer:
                author = answer
            else:
                author = state.author or self.storage.get_config("user.name") or self.default_author
                self._muted(f"Author skipped, using {author}")
            self._enter(state.model_copy(update={"step": PromptStep.PASSWORD, "author": author}))

        elif state.step == PromptStep.PASSWORD:
            if not answer:
                self._error("Error: Password is required")
                return
            self._enter(state.model_copy(update={"step": PromptStep.MESSAGE, "password": answer}))

        elif state.step == PromptStep.MESSAGE:
            if not answer:
                self._error("Error: Message cannot be empty")
                return
            self._reset_prompt()
            self._create(state.author, state.password, answer, state.parent_hash)

        elif state.step == PromptStep.EDIT_PASSWORD:
            if not answer:
                self._error("Error: Password is required")
                return
            self._enter(state.model_copy(update={"step": PromptStep.EDIT_MESSAGE, "password": answer}))

        elif state.step == PromptStep.EDIT_MESSAGE:
            if not answer:
                self._error("Error: Message cannot be empty")
                return
            self._reset_prompt()
            self._update(state.commit_hash, state.password, answer)

        elif state.step == PromptStep.DELETE_PASSWORD:
            if not answer:
                self._error("Error: Password is required")
                return
            self._reset_prompt()
            self._delete(state.commit_hash, answer, show_log=True)

    # --- git log ---
    def cmd_log(self, oneline: bool = False):
        try:
            commits = self.api.get_comments(self.post_id)
        except CommentApiError as e:
            self._error(f"Error: {e.detail}")
            return

        if not commits:
            self._muted("No comments yet.")
            return

        for commit in commits:
            if oneline:
                self._print(f"{short_hash(commit.hash)} {commit.message.splitlines()[0]}")
                for reply in commit.replies:
                    self._print(f"  └─ {short_hash(reply.hash)} {reply.message.splitlines()[0]}")
                continue

            self._print(f"commit {commit.hash}", LineKind.HASH)
            self._print(f"Author: {commit.author}")
            self._print(f"Date:   {format_date(commit.date)}")
            self._print("")
            self._print_message(commit.message, "    ")
            self._print("")
            for reply in commit.replies:
                self._print(f"  └─ commit {reply.hash}", LineKind.MUTED)
                self._print(f"     Author: {reply.author}")
                self._print(f"     Date:   {format_date(reply.date)}")
                self._print("")
                self._print_message(reply.message, "         ")
                self._print("")

    # --- git commit ---
    def cmd_commit(self, command: CommitCommand):
        if command.message is None:
            self._enter(PromptState(
                step=PromptStep.AUTHOR,
                author=command.author,
                parent_hash=command.parent_hash,
            ))
            return

        if not command.message.strip():
            self._error("Error: Message cannot be empty")
            return

        author = command.author or self.storage.get_config("user.name") or self.default_author
        self._create(author, command.password, command.message, command.parent_hash)

    def _create(self, author: str, password: Optional[str], message: str, parent_hash: Optional[str]):
        try:
            result = self.api.create_comment(self.post_id, author, password, message, parent_hash)
        except CommentApiError as e:
            self._error(f"Error: {e.detail}")
            return

        self._success(result.message)
        self._print(f" Author: {result.author}")
        self._print(" 1 comment created")
        if password:
            self.storage.add_to_reflog(result.commit_hash, password)
        else:
            self._muted(" No password set: this comment is read-only.")

    # --- git show ---
    def cmd_show(self, commit_hash: str):
        try:
            comment = self.api.get_comment(commit_hash)
        except CommentApiError as e:
            if e.status_code == 404:
                self._error(f"fatal: bad object {commit_hash}")
            else:
                self._error(f"Error: {e.detail}")
            return

        self._print(f"commit {comment.hash}", LineKind.HASH)
        if comment.parent_hash:
            self._print(f"Reply-To: {comment.parent_hash}")
        self._print(f"Author: {comment.author}")
        self._print(f"Date:   {format_date(comment.date)}")
        if comment.updated_at:
            self._print(f"Edited: {format_date(comment.updated_at)}")
        self._print("")
        self._print_message(comment.message, "    ")

    # --- git rebase -i ---
    def cmd_rebase(self, commit_hash: str):
        try:
            self.api.get_comment(commit_hash)
        except CommentApiError as e:
            if e.status_code == 404:
                self._error(f"fatal: bad object {commit_hash}")
            else:
                self._error(f"Error: {e.detail}")
            return

        saved_password = self.storage.get_password(commit_hash)
        if saved_password:
            self._enter(PromptState(
                step=PromptStep.EDIT_MESSAGE, commit_hash=commit_hash, password=saved_password
            ))
        else:
            self._enter(PromptState(step=PromptStep.EDIT_PASSWORD, commit_hash=commit_hash))

    def _update(self, commit_hash: str, password: str, message: str):
        try:
            result = self.api.update_comment(commit_hash, password, message)
        except CommentApiError as e:
            self._error(f"Error: {e.detail}")
            return
        self._success(result.message)
        self.cmd_log()

    # --- git reset --hard ---
    def resolve_hash(self, commit_hash: str) -> Optional[str]:
        """
        Expands a short hash to the full id of a listed comment. Full ids
        pass through untouched.
        """
        if len(commit_hash) != SHORT_HASH_LENGTH:
            return commit_hash
        commits = self.api.get_comments(self.post_id)
        return next(
            (c.hash for c in flatten(commits) if c.hash.startswith(commit_hash)),
            None,
        )

    def cmd_reset(self, commit_hash: str):
        try:
            full_hash = self.resolve_hash(commit_hash)
        except CommentApiError as e:
            self._error(f"Error: {e.detail}")
            return
        if full_hash is None:
            self._error(f"fatal: bad object {commit_hash}")
            return

        saved_password = self.storage.get_password(full_hash)
        if saved_password:
            self._delete(full_hash, saved_password)
        else:
            self._enter(PromptState(step=PromptStep.DELETE_PASSWORD, commit_hash=full_hash))

    def _delete(self, commit_hash: str, password: str, show_log: bool = False):
        try:
            result = self.api.delete_comment(commit_hash, password)
        except CommentApiError as e:
            self._error(f"Error: {e.detail}")
            return
        self._success(result.message)
        self.storage.remove_from_reflog(commit_hash)
        if show_log:
            self.cmd_log()

    # --- git config ---
    def cmd_config(self, command: ConfigCommand):
        if command.get:
            value = self.storage.get_config(command.key)
            if value:
                self._print(value)
            else:
                self._muted(f"{command.key} not set")
            return
        self.storage.set_config(command.key, command.value)
        self._success(f"Config saved: {command.key} = {command.value}")

    # --- git reflog ---
    def cmd_reflog(self):
        hashes = list(self.storage.reflog())
        if not hashes:
            self._muted("No reflog entries.")
            return

        try:
            commits = self.api.get_comments(self.post_id)
        except CommentApiError as e:
            self._error(f"Error: {e.detail}")
            return

        by_hash = {c.hash: c for c in flatten(commits)}
        for commit_hash in hashes:
            comment = by_hash.get(commit_hash)
            if comment:
                self._print(f"{commit_hash} {comment.author}: {comment.message}")
