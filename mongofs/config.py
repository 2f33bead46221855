"""Configuration settings for mongofs."""

import os
from common.constants import DEFAULT_CHUNK_PRESET as _DEFAULT_PRESET, DEFAULT_DATABASE_PATH


DATABASE_PATH = os.environ.get("MONGOFS_DATABASE_PATH", DEFAULT_DATABASE_PATH)

DEFAULT_CHUNK_PRESET = os.environ.get("MONGOFS_CHUNK_SIZE", _DEFAULT_PRESET)

COMPRESSIBLE_TYPES = os.environ.get("MONGOFS_COMPRESSIBLE_TYPES", "")
