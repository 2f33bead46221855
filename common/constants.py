"""Project-wide constants (chunk sizing margins, locator literals, default paths)."""

# Bytes left free in every chunk row for the surrounding document fields
BREATHING_ROOM: int = 100

DEFAULT_CHUNK_PRESET: str = "medium_256K"

LOCATOR_SCHEME: str = "mongofile"
LOCATOR_GZ_MARKER: str = "gz"

DEFAULT_DATABASE_PATH: str = "/app/data/mongofs.db"
DEFAULT_MEDIA_TYPE: str = "application/octet-stream"
