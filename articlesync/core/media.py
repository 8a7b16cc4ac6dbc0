"""File extension derivation for stored media.

The extension of an article image always comes from what the media store
knows about the file, never from the path string supplied in an import
record.
"""

import mimetypes
from pathlib import PurePosixPath

from .models import Media

EXTENSION_ALIASES = {
    "jpeg": "jpg",
    "jpe": "jpg",
    "jfif": "jpg",
    "tif": "tiff",
}


def normalize_extension(extension: str) -> str:
    extension = extension.strip().lstrip(".").lower()
    return EXTENSION_ALIASES.get(extension, extension)


def derive_extension(media: Media) -> str:
    """Derive the image file extension of a stored media.

    Tried in order: the stored extension, the stored MIME type, the suffix
    of the stored file path.

    Returns:
        Lower-case extension without a leading dot, or "" if unknown.
    """
    if media.extension:
        return normalize_extension(media.extension)

    if media.mime_type:
        guessed = mimetypes.guess_extension(media.mime_type.split(";", 1)[0].strip())
        if guessed:
            return normalize_extension(guessed)

    suffix = PurePosixPath(media.path).suffix
    if suffix:
        return normalize_extension(suffix)
    return ""
