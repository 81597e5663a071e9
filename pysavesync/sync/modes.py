"""Sync directions."""

from enum import Enum


class SyncDirection(str, Enum):
    """Direction of a sync pass.

    Push and Pull are symmetric: they only swap which side is the source.
    """

    PUSH = "push"
    """Local storage to the external folder (sync out)"""

    PULL = "pull"
    """External folder to local storage (sync in)"""

    @classmethod
    def from_string(cls, value: str) -> "SyncDirection":
        """Parse a direction from its name or alias.

        Args:
            value: ``push``/``out`` or ``pull``/``in`` (case-insensitive)

        Returns:
            SyncDirection

        Raises:
            ValueError: If the value is not a known direction
        """
        aliases = {
            "push": cls.PUSH,
            "out": cls.PUSH,
            "pull": cls.PULL,
            "in": cls.PULL,
        }
        try:
            return aliases[value.strip().lower()]
        except KeyError:
            raise ValueError(
                f"Invalid sync direction: {value!r}. "
                f"Valid values: {', '.join(sorted(aliases))}"
            ) from None

    @property
    def source_label(self) -> str:
        return "local" if self is SyncDirection.PUSH else "external"

    @property
    def destination_label(self) -> str:
        return "external" if self is SyncDirection.PUSH else "local"
