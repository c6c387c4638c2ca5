import json
import logging
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

CONFIG_KEY = "config"
REFLOG_KEY = "reflog"


class GitStorage:
    """
    Client-side memory: `git config` values and the reflog of comments this
    client created, mapped to the plaintext password used. The reflog only
    lets the terminal skip a password prompt; the server re-checks every
    password it receives.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path).expanduser() if path else None
        self._data = {CONFIG_KEY: {}, REFLOG_KEY: {}}
        self._load()

    def _load(self):
        if not self.path or not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable state file {self.path}: {e}")
            return
        self._data[CONFIG_KEY].update(data.get(CONFIG_KEY) or {})
        self._data[REFLOG_KEY].update(data.get(REFLOG_KEY) or {})

    def _save(self):
        if not self.path:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")

    def set_config(self, key: str, value: str):
        self._data[CONFIG_KEY][key] = value
        self._save()

    def get_config(self, key: str) -> Optional[str]:
        return self._data[CONFIG_KEY].get(key)

    def add_to_reflog(self, commit_hash: str, password: str):
        self._data[REFLOG_KEY][commit_hash] = password
        self._save()

    def get_password(self, commit_hash: str) -> Optional[str]:
        return self._data[REFLOG_KEY].get(commit_hash)

    def remove_from_reflog(self, commit_hash: str):
        if self._data[REFLOG_KEY].pop(commit_hash, None) is not None:
            self._save()

    def reflog(self) -> Dict[str, str]:
        return dict(self._data[REFLOG_KEY])
