import os
import tempfile
from contextlib import contextmanager
from typing import IO, Iterator

from errors import ResourceAccessError


@contextmanager
def scoped_read(path: str) -> Iterator[IO[bytes]]:
    """Open ``path`` for reading; the handle is closed on every exit path."""
    try:
        handle = open(path, "rb")
    except OSError as e:
        raise ResourceAccessError(path, e.strerror or str(e)) from e
    try:
        yield handle
    finally:
        handle.close()


@contextmanager
def scoped_write(path: str) -> Iterator[IO[str]]:
    """Write to a sibling temp file and move it onto ``path`` on success.

    If the block raises, the temp file is removed and ``path`` is untouched.
    """
    directory = os.path.dirname(os.path.abspath(path))
    try:
        fd, tmp_path = tempfile.mkstemp(
            prefix=".", suffix=".partial", dir=directory
        )
    except OSError as e:
        raise ResourceAccessError(path, e.strerror or str(e)) from e
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            yield handle
        os.replace(tmp_path, path)
    except OSError as e:
        _discard(tmp_path)
        raise ResourceAccessError(path, e.strerror or str(e)) from e
    except BaseException:
        _discard(tmp_path)
        raise


def _discard(path: str) -> None:
    if os.path.exists(path):
        os.remove(path)
