from typing import List, Optional

from domain.commands import (
    CommitCommand, ConfigCommand, ErrorCommand, GitCommand, HelpCommand,
    LogCommand, RebaseCommand, ReflogCommand, ResetCommand, ShowCommand
)

SUPPORTED_CONFIG_KEYS = ("user.name",)


def tokenize(line: str) -> List[str]:
    """
    Splits on whitespace, keeping double-quoted text (spaces included) inside
    the current token: `--author="Ann Lee"` -> `--author=Ann Lee`.
    There are no escape characters; an unterminated quote runs to the end.
    """
    tokens = []
    current = []
    in_quotes = False
    started = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
            started = True
        elif char.isspace() and not in_quotes:
            if started:
                tokens.append("".join(current))
                current = []
                started = False
        else:
            current.append(char)
            started = True
    if started:
        tokens.append("".join(current))
    return tokens


def _flag_value(token: str, flag: str) -> Optional[str]:
    value = token[len(flag):]
    return value or None


def parse_log(parts: List[str]) -> GitCommand:
    return LogCommand(oneline="--oneline" in parts)


def parse_commit(parts: List[str]) -> GitCommand:
    result = CommitCommand()
    i = 2
    while i < len(parts):
        part = parts[i]
        if part == "-m" and i + 1 < len(parts):
            result.message = parts[i + 1]
            i += 1
        elif part.startswith("--author="):
            result.author = _flag_value(part, "--author=")
        elif part.startswith("--password="):
            result.password = _flag_value(part, "--password=")
        elif part.startswith("--fixup="):
            result.parent_hash = _flag_value(part, "--fixup=")
        i += 1
    return result


def parse_show(parts: List[str]) -> GitCommand:
    if len(parts) < 3:
        return ErrorCommand(message="usage: git show <hash>")
    return ShowCommand(hash=parts[2])


def _hash_after(parts: List[str], flag: str) -> Optional[str]:
    index = parts.index(flag) + 1
    return parts[index] if index < len(parts) else None


def parse_rebase(parts: List[str]) -> GitCommand:
    if "-i" not in parts:
        return ErrorCommand(message="Only interactive rebase is supported. Use: git rebase -i <hash>")
    commit_hash = _hash_after(parts, "-i")
    if not commit_hash:
        return ErrorCommand(message="usage: git rebase -i <hash>")
    return RebaseCommand(hash=commit_hash)


def parse_reset(parts: List[str]) -> GitCommand:
    if "--hard" not in parts:
        return ErrorCommand(message="Only hard reset is supported. Use: git reset --hard <hash>")
    commit_hash = _hash_after(parts, "--hard")
    if not commit_hash:
        return ErrorCommand(message="usage: git reset --hard <hash>")
    return ResetCommand(hash=commit_hash)


def parse_config(parts: List[str]) -> GitCommand:
    if len(parts) < 3:
        return ErrorCommand(message='usage: git config user.name "<name>"')

    if parts[2] == "--get":
        if len(parts) > 3 and parts[3] in SUPPORTED_CONFIG_KEYS:
            return ConfigCommand(key=parts[3], get=True)
    elif parts[2] in SUPPORTED_CONFIG_KEYS:
        value = parts[3] if len(parts) > 3 else ""
        if value.strip():
            return ConfigCommand(key=parts[2], value=value.strip())
        return ConfigCommand(key=parts[2], get=True)

    return ErrorCommand(message="Only user.name config is supported.")


SUBCOMMANDS = {
    "log": parse_log,
    "commit": parse_commit,
    "show": parse_show,
    "rebase": parse_rebase,
    "reset": parse_reset,
    "config": parse_config,
    "reflog": lambda parts: ReflogCommand(),
}


def parse(line: str) -> Optional[GitCommand]:
    """Maps one input line to a command; blank input yields None."""
    trimmed = line.strip()
    if not trimmed:
        return None

    parts = tokenize(trimmed)
    if parts == ["help"] or parts == ["git", "--help"]:
        return HelpCommand()

    if parts[0] != "git":
        return ErrorCommand(
            message=f"Command not found: {parts[0]}\nType 'help' for available commands."
        )
    if len(parts) == 1:
        return ErrorCommand(message="usage: git <command> [<args>]\nType 'help' for available commands.")

    handler = SUBCOMMANDS.get(parts[1])
    if handler is None:
        return ErrorCommand(message=f"git: '{parts[1]}' is not a git command. See 'help'.")
    return handler(parts)
