"""Mapping between local relative paths and namespaced external paths."""

from enum import Enum
from typing import Optional

from ..exceptions import SaveSyncPathError

SEPARATOR = "/"
RESERVED_SEGMENTS = frozenset({".", ".."})


class Namespace(str, Enum):
    """Leading segment separating the mirrored roots on the external side."""

    SAVES = "saves"
    STATES = "states"

    @classmethod
    def from_segment(cls, segment: str) -> Optional["Namespace"]:
        """Return the namespace named exactly ``segment``, if any."""
        for namespace in cls:
            if namespace.value == segment:
                return namespace
        return None


def split_path(path: str) -> list[str]:
    """Split a relative path into validated segments.

    Both ``/`` and ``\\`` are accepted as separators. Empty segments from
    leading, trailing or doubled separators are dropped.

    Args:
        path: Relative path

    Returns:
        List of path segments

    Raises:
        SaveSyncPathError: If the path is empty or contains ``.`` or ``..``

    Examples:
        >>> split_path("sub\\\\game2.sav")
        ['sub', 'game2.sav']
    """
    segments = [s for s in path.replace("\\", SEPARATOR).split(SEPARATOR) if s]
    if not segments:
        raise SaveSyncPathError("Relative path is empty", path=path)
    for segment in segments:
        if segment in RESERVED_SEGMENTS:
            raise SaveSyncPathError(
                f"Relative path contains reserved segment {segment!r}", path=path
            )
    return segments


def normalize_path(path: str) -> str:
    """Return ``path`` with the canonical ``/`` separator."""
    return SEPARATOR.join(split_path(path))


def to_external_path(local_relative: str, namespace: Namespace) -> str:
    """Prefix a local relative path with its namespace segment.

    Examples:
        >>> to_external_path("sub/game2.sav", Namespace.SAVES)
        'saves/sub/game2.sav'
    """
    return SEPARATOR.join([namespace.value, *split_path(local_relative)])


def from_external_path(
    external_relative: str,
) -> Optional[tuple[Namespace, str]]:
    """Strip a recognized namespace segment from an external path.

    Args:
        external_relative: Path relative to the external root

    Returns:
        ``(namespace, local_relative)``, or None if the path does not live
        below ``saves/`` or ``states/``

    Raises:
        SaveSyncPathError: If the path is empty or contains ``.`` or ``..``
    """
    segments = split_path(external_relative)
    namespace = Namespace.from_segment(segments[0])
    if namespace is None or len(segments) < 2:
        return None
    return namespace, SEPARATOR.join(segments[1:])
