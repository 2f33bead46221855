"""Named chunk size presets."""

from enum import Enum

from common.constants import BREATHING_ROOM
from mongofs.exceptions import ConfigurationError


class ChunkSize(Enum):
    """
    Chunk size presets, valued in KiB.

    The usable budget of each preset leaves BREATHING_ROOM bytes free so a
    chunk row with its other fields stays under the nominal size.
    """
    tiny_4K = 4         # lots of small files only
    small_32K = 32      # still small files mostly
    medium_256K = 256   # default
    large_1M = 1024     # lots of larger files
    huge_4M = 4096      # mega files only

    @property
    def chunk_size(self) -> int:
        """Chunk byte budget for this preset."""
        return self.value * 1024 - BREATHING_ROOM

    @classmethod
    def default(cls) -> "ChunkSize":
        return cls.medium_256K

    @classmethod
    def from_name(cls, name: str) -> "ChunkSize":
        """
        Resolve a preset by its name.

        Args:
            name: Preset name (e.g., 'large_1M')

        Returns:
            Matching ChunkSize member

        Raises:
            ConfigurationError: If no preset has that name
        """
        try:
            return cls[name]
        except KeyError:
            valid = ", ".join(member.name for member in cls)
            raise ConfigurationError(f"Unknown chunk size preset '{name}' (valid: {valid})") from None
