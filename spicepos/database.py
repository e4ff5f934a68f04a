"""
JSON file persistence for the product and sales collections.

Each collection lives in one file holding a JSON array and is rewritten
wholesale on every mutation. Writers serialise on a ``FileLock`` kept next to
the data file; readers never lock. New content goes to a temporary file in
the same directory and is swapped in with ``os.replace``, so a reader sees
either the previous array or the new one.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, List, Union

from filelock import FileLock, Timeout

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class CorruptDataError(Exception):
    """The data file exists but does not hold a JSON array."""


def _load(path: Path) -> List[Record]:
    # Missing or blank files are an empty collection; anything else that
    # cannot be decoded raises CorruptDataError.
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    except (OSError, UnicodeDecodeError) as exc:
        raise CorruptDataError(f"could not read {path}: {exc}") from exc

    if not raw.strip():
        return []

    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as exc:
        raise CorruptDataError(f"invalid JSON in {path}: {exc}") from exc

    if not isinstance(data, list):
        raise CorruptDataError(f"JSON root in {path} is not an array")
    return data


def read_json_file(path: Union[str, Path]) -> List[Record]:
    """
    Return the decoded array stored at ``path``.

    Never raises: a missing, unreadable, empty or malformed file, or one whose
    root is not an array, reads as an empty list.
    """
    try:
        return _load(Path(path))
    except CorruptDataError as exc:
        logger.warning("%s", exc)
        return []


def _replace_file(path: Path, records: List[Record]) -> None:
    payload = json.dumps(records, indent=4, ensure_ascii=False)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(payload)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


class JsonFileStore:
    """One JSON array on disk plus the lock that guards its writers."""

    def __init__(self, path: Union[str, Path], lock_timeout: float = 10.0):
        self.path = Path(path)
        self.lock = FileLock(f"{self.path}.lock", timeout=lock_timeout)

    def read_all(self) -> List[Record]:
        return read_json_file(self.path)

    def write_all(self, records: List[Record]) -> bool:
        def _swap(current: List[Record]) -> bool:
            current[:] = records
            return True

        return self.update(_swap, strict=False)

    def update(self, mutate: Callable[[List[Record]], Any], strict: bool = True) -> bool:
        """
        Read-modify-write under the writer lock.

        ``mutate`` receives the current records and edits the list in place.
        A falsy return value aborts without writing. With ``strict`` set, a
        file that exists but cannot be decoded is left alone rather than
        overwritten.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.lock:
                if strict:
                    records = _load(self.path)
                else:
                    records = []
                if not mutate(records):
                    return False
                _replace_file(self.path, records)
        except Timeout:
            logger.error("could not acquire write lock for %s", self.path)
            return False
        except CorruptDataError as exc:
            logger.error("refusing to overwrite unreadable data file: %s", exc)
            return False
        except (OSError, TypeError, ValueError, RecursionError) as exc:
            logger.error("failed to write %s: %s", self.path, exc)
            return False
        return True
