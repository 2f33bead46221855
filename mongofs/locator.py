"""File locators: the ``mongofile`` URI-like strings that address stored files.

A locator packs a file's storage id, logical path, media type and storage
compression into one string::

    mongofile:<path>?<storage_id>#<media_type>
    mongofile://gz@<path>?<storage_id>#<media_type>

The ``gz`` authority marks content that is gzip-compressed in the store.
"""

import posixpath
import re
from dataclasses import dataclass
from typing import Callable, Optional

from common.constants import LOCATOR_GZ_MARKER, LOCATOR_SCHEME
from mongofs.exceptions import InvalidLocatorError
from mongofs.media_types import is_compressible

_LOCATOR_RE = re.compile(
    r"^(?P<scheme>[^:/?#]+):"
    r"(?://(?P<authority>[^/?#@]*)@)?"
    r"(?P<path>[^?#]+)"
    r"\?(?P<storage_id>[^?#]+)"
    r"(?:#(?P<media_type>[^#]*))?$"
)

_RESERVED = ("?", "#")


def _check_component(name: str, value: str, reserved=_RESERVED) -> None:
    for char in reserved:
        if char in value:
            raise InvalidLocatorError(f"Locator {name} may not contain '{char}': {value!r}")


@dataclass(frozen=True)
class FileLocator:
    """
    Parsed ``mongofile`` locator.

    Build instances with build() or parse(); the constructor does not
    validate its fields.
    """
    storage_id: str
    path: str
    media_type: Optional[str] = None
    stored_compressed: bool = False

    @classmethod
    def build(
        cls,
        storage_id,
        path: str,
        media_type: Optional[str] = None,
        compressed: bool = False,
    ) -> "FileLocator":
        """
        Create a locator for a stored file.

        Args:
            storage_id: Id of the file record; non-string ids are converted with str()
            path: Logical file path, its last segment is the file name
            media_type: MIME type of the content
            compressed: Whether the content is gzip-compressed in the store

        Returns:
            FileLocator instance

        Raises:
            InvalidLocatorError: If the id or path is empty or any field holds a reserved delimiter
        """
        if storage_id is None or str(storage_id) == "":
            raise InvalidLocatorError("Locator storage id cannot be empty")
        if not path:
            raise InvalidLocatorError("Locator path cannot be empty")

        storage_id = str(storage_id)
        _check_component("storage id", storage_id)
        _check_component("path", path)
        if path.startswith("//"):
            raise InvalidLocatorError(f"Locator path may not start with '//': {path!r}")
        if media_type:
            _check_component("media type", media_type, reserved=("#",))

        return cls(
            storage_id=storage_id,
            path=path,
            media_type=media_type or None,
            stored_compressed=bool(compressed),
        )

    @classmethod
    def parse(cls, text: str) -> "FileLocator":
        """
        Parse a locator string.

        Args:
            text: Locator string

        Returns:
            FileLocator instance

        Raises:
            InvalidLocatorError: If the scheme is not 'mongofile' or the string is malformed
        """
        if not isinstance(text, str) or not text:
            raise InvalidLocatorError(f"Locator must be a non-empty string, got {text!r}")

        match = _LOCATOR_RE.match(text)
        if match is None:
            raise InvalidLocatorError(f"Malformed locator: {text!r}")

        if match.group("scheme") != LOCATOR_SCHEME:
            raise InvalidLocatorError(
                f"Only the {LOCATOR_SCHEME} scheme is a valid locator, got {match.group('scheme')!r}"
            )

        authority = match.group("authority")
        if authority is not None and authority != LOCATOR_GZ_MARKER:
            raise InvalidLocatorError(f"Unsupported locator authority {authority!r}")
        if authority is None and match.group("path").startswith("//"):
            raise InvalidLocatorError(f"Unsupported locator authority in {text!r}")

        return cls(
            storage_id=match.group("storage_id"),
            path=match.group("path"),
            media_type=match.group("media_type") or None,
            stored_compressed=authority == LOCATOR_GZ_MARKER,
        )

    @classmethod
    def is_valid(cls, text) -> bool:
        """Return True if ``text`` parses as a locator."""
        try:
            cls.parse(text)
        except InvalidLocatorError:
            return False
        return True

    @property
    def scheme(self) -> str:
        return LOCATOR_SCHEME

    @property
    def file_name(self) -> str:
        """Last segment of the path."""
        return posixpath.basename(self.path.rstrip("/"))

    @property
    def extension(self) -> Optional[str]:
        """Lower-cased suffix after the last '.' of the file name, or None."""
        _, dot, suffix = self.file_name.rpartition(".")
        if not dot or not suffix:
            return None
        return suffix.lower()

    @property
    def is_stored_compressed(self) -> bool:
        return self.stored_compressed

    def is_content_compressible(self, predicate: Callable[[Optional[str]], bool] = is_compressible) -> bool:
        """
        Whether the media type is one that benefits from compression.

        Args:
            predicate: Compressible media type lookup

        Returns:
            predicate(media_type)
        """
        return predicate(self.media_type)

    def is_data_compressed(self, predicate: Callable[[Optional[str]], bool] = is_compressible) -> bool:
        """
        Whether the content is already compressed by its format.

        Media types missing from the compressible table (archives, most
        images and video) are treated as already compressed.
        """
        return not predicate(self.media_type)

    def __str__(self) -> str:
        authority = f"//{LOCATOR_GZ_MARKER}@" if self.stored_compressed else ""
        text = f"{LOCATOR_SCHEME}:{authority}{self.path}?{self.storage_id}"
        if self.media_type:
            text += f"#{self.media_type}"
        return text
