"""JSON blob cache for index lists and downloaded index records."""

from __future__ import annotations

import json
import shutil
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Iterable
from urllib.parse import quote, unquote

from .text import Messages

APPS_PREFIX = "apps"
INDICES_PREFIX = "indices"
ARTIFACT_SUFFIX = ".json"
KEY_DELIMITER = "-"


@dataclass(frozen=True, slots=True)
class ArtifactKey:
    """Identity of one downloaded (index, account) artifact.

    Index names are percent-encoded in the blob key so that a name holding
    a path separator still maps to a single file under ``indices/``.
    """

    index_name: str
    account_name: str

    @property
    def blob_key(self) -> str:
        return f"{INDICES_PREFIX}/{quote(self.index_name, safe='')}{KEY_DELIMITER}{self.account_name}{ARTIFACT_SUFFIX}"

    @classmethod
    def parse(cls, blob_key: str, accounts: Iterable[str]) -> "ArtifactKey | None":
        """Return the key stored under *blob_key*, matched against known *accounts*.

        The longest matching account suffix wins so that index names are free
        to contain the delimiter themselves.
        """

        stem = PurePosixPath(blob_key).name
        if not stem.endswith(ARTIFACT_SUFFIX):
            return None
        stem = stem[: -len(ARTIFACT_SUFFIX)]
        for account in sorted(set(accounts), key=len, reverse=True):
            suffix = f"{KEY_DELIMITER}{account}"
            if stem.endswith(suffix) and len(stem) > len(suffix):
                return cls(index_name=unquote(stem[: -len(suffix)]), account_name=account)
        return None


def index_list_key(account_name: str) -> str:
    return f"{APPS_PREFIX}/{account_name}{ARTIFACT_SUFFIX}"


class BlobCache:
    """Key-value store of JSON (or raw text) blobs rooted at a directory.

    Keys are relative POSIX paths such as ``apps/mesos.json``. There is no
    locking: every key is expected to have a single writer.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).expanduser()

    def path_for(self, key: str) -> Path:
        parts = PurePosixPath(key).parts
        if not parts or PurePosixPath(key).is_absolute() or ".." in parts:
            raise ValueError(Messages.ERROR_CACHE_KEY_INVALID.format(key=key))
        return self.root.joinpath(*parts)

    def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()

    def read_json(self, key: str) -> Any:
        path = self.path_for(key)
        return json.loads(path.read_text(encoding="utf-8"))

    def write_json(self, key: str, value: Any) -> None:
        self.write_raw(key, json.dumps(value, ensure_ascii=False, indent=2))

    def write_raw(self, key: str, text: str) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")

    def size(self, key: str) -> int:
        return self.path_for(key).stat().st_size

    def glob(self, pattern: str) -> list[str]:
        """Return the sorted keys matching *pattern* (e.g. ``indices/*.json``)."""

        if not self.root.is_dir():
            return []
        return sorted(
            path.relative_to(self.root).as_posix()
            for path in self.root.glob(pattern)
            if path.is_file()
        )

    def delete(self, key: str) -> bool:
        path = self.path_for(key)
        if not path.is_file():
            return False
        path.unlink()
        return True

    def clear(self, prefix: str | None = None) -> int:
        """Remove every blob under *prefix* (or the whole cache) and return the count."""

        target = self.root if prefix is None else self.path_for(prefix)
        if not target.is_dir():
            return 0
        removed = sum(1 for path in target.rglob("*") if path.is_file())
        shutil.rmtree(target)
        return removed
