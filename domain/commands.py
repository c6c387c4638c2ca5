from pydantic import BaseModel
from typing import Literal, Optional, Union


class HelpCommand(BaseModel):
    command: Literal["help"] = "help"


class LogCommand(BaseModel):
    command: Literal["log"] = "log"
    oneline: bool = False
    comments: bool = True # Always on; only comments are tracked


class CommitCommand(BaseModel):
    command: Literal["commit"] = "commit"
    author: Optional[str] = None
    password: Optional[str] = None
    message: Optional[str] = None # None starts the interactive flow
    parent_hash: Optional[str] = None


class ShowCommand(BaseModel):
    command: Literal["show"] = "show"
    hash: str


class RebaseCommand(BaseModel):
    command: Literal["rebase"] = "rebase"
    hash: str


class ResetCommand(BaseModel):
    command: Literal["reset"] = "reset"
    hash: str


class ConfigCommand(BaseModel):
    command: Literal["config"] = "config"
    key: str
    value: Optional[str] = None
    get: bool = False


class ReflogCommand(BaseModel):
    command: Literal["reflog"] = "reflog"


class ErrorCommand(BaseModel):
    command: Literal["error"] = "error"
    message: str


GitCommand = Union[
    HelpCommand, LogCommand, CommitCommand, ShowCommand, RebaseCommand,
    ResetCommand, ConfigCommand, ReflogCommand, ErrorCommand,
]
