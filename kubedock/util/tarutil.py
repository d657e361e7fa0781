"""Helpers for reading and writing tar archives."""

import io
import logging
import posixpath
import tarfile
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, Union

log = logging.getLogger(__name__)

Archive = Union[bytes, bytearray, memoryview, BinaryIO]


def pack_folder(src: Union[str, Path], out: BinaryIO) -> None:
    """Write the folder ``src`` as an uncompressed tar stream to ``out``.

    Member names are relative to ``src``; the folder itself is stored as ``.``.
    """
    root = Path(src)
    with tarfile.open(fileobj=out, mode="w|") as archive:
        for path in _walk(root):
            name = path.relative_to(root).as_posix()
            info = archive.gettarinfo(str(path), arcname=name)
            if info is None:
                continue
            log.debug("add to tar file: %s", info.name)
            if info.isreg():
                with path.open("rb") as fh:
                    archive.addfile(info, fh)
            else:
                archive.addfile(info)


def unpack_file(dst: str, fname: str, archive: Archive) -> bytes:
    """Return the contents of the member that lands on ``fname`` below ``dst``."""
    with _open(archive) as members:
        for member in members:
            if _join(dst, member.name) == fname:
                if not member.isreg():
                    return b""
                handle = members.extractfile(member)
                return handle.read() if handle is not None else b""
    raise FileNotFoundError(f"{fname} not found in archive")


def get_target_folder_names(dst: str, archive: Archive) -> list:
    """Return the target paths of all directories in the archive."""
    return _get_targets(dst, archive, tarfile.DIRTYPE)


def get_target_file_names(dst: str, archive: Archive) -> list:
    """Return the target paths of all regular files in the archive."""
    return _get_targets(dst, archive, tarfile.REGTYPE)


def is_single_file_archive(archive: Archive) -> bool:
    """Return True if exactly one regular file is stored in the archive."""
    count = 0
    try:
        with _open(archive) as members:
            for member in members:
                if member.type == tarfile.REGTYPE:
                    count += 1
                    if count >= 2:
                        break
    except tarfile.TarError:
        pass
    return count == 1


def _get_targets(dst: str, archive: Archive, kind: bytes) -> list:
    with _open(archive) as members:
        return [_join(dst, m.name) for m in members if m.type == kind]


@contextmanager
def _open(archive: Archive) -> Iterator[Iterable[tarfile.TarInfo]]:
    if isinstance(archive, (bytes, bytearray, memoryview)):
        data = bytes(archive)
    else:
        data = archive.read()
    if not data:
        yield ()
        return
    with tarfile.open(fileobj=io.BytesIO(data), mode="r:") as tar:
        yield tar


def _join(*parts: str) -> str:
    joined = "/".join(p for p in parts if p)
    return posixpath.normpath(joined) if joined else ""


def _walk(path: Path) -> Iterator[Path]:
    yield path
    if path.is_dir() and not path.is_symlink():
        for child in sorted(path.iterdir(), key=lambda p: p.name):
            yield from _walk(child)