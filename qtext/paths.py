"""
qtext Paths - checks and helpers for file names received as text.

Paths use ``/`` only. User-supplied ``\\`` is converted by
``sanitize_file_path`` before any other helper sees the path.
"""

from __future__ import annotations


def sanitize_file_path(path: str) -> str:
    """Replace every backslash with a forward slash. Does no validation."""
    return path.replace("\\", "/")


def validate_filename(filename: str | None) -> bool:
    if not filename:
        return False
    return "\\" not in filename


def validate_relative_filename(filename: str | None) -> bool:
    """Reject drive letters, parent references, empty components and absolute or hidden paths."""
    if not validate_filename(filename):
        return False
    if ":" in filename or ".." in filename or "//" in filename:
        return False
    if filename[0] in "/.":
        return False
    return True


def file_name(path: str) -> str:
    """Part after the last slash."""
    return path[path.rfind("/") + 1:]


def base_path(path: str) -> str:
    """Part before the last slash, or the whole path when there is none."""
    slash = path.rfind("/")
    return path if slash == -1 else path[:slash]


def file_extension(path: str) -> str:
    """Everything from the first dot of the file name, e.g. ``.tar.gz``. "" if none."""
    name_start = path.rfind("/") + 1
    dot = path.find(".", name_start)
    return "" if dot == -1 else path[dot:]


def last_file_extension(path: str) -> str:
    """Everything from the last dot in the path. "" if none."""
    dot = path.rfind(".")
    return "" if dot == -1 else path[dot:]


def strip_extension(path: str) -> str:
    """Drop file_extension(path)."""
    return path[:len(path) - len(file_extension(path))]


def _has_extension(path: str) -> bool:
    name_start = path.rfind("/") + 1
    dot = path.rfind(".", name_start)
    return dot != -1 and dot + 1 < len(path)


def strip_last_extension(path: str) -> str:
    """Drop the last extension of the file name. A trailing dot is kept."""
    if not _has_extension(path):
        return path
    return path[:path.rfind(".")]


def default_extension(path: str, extension: str, size: int) -> str:
    """Append ``extension`` when the file name has none.

    The result stays below ``size`` characters: when there is no room the end
    of the path is overwritten by the extension.
    """
    if not extension or len(extension) >= size:
        raise ValueError(f"Extension {extension!r} does not fit in {size} characters")
    if _has_extension(path):
        return path
    if len(path) + len(extension) >= size:
        path = path[:size - len(extension) - 1]
    return path + extension
