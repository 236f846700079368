"""Metadata extraction utilities for uploads."""

import mimetypes
import os
from typing import BinaryIO

from server.apps.records.exceptions import InvalidArgumentError


def detect_mime_type(file_name: str) -> str:
    """Detect MIME type from a file name.

    Uses Python's built-in mimetypes module to guess the MIME type
    from the extension. The blob store records it as the object's
    Content-Type.

    Args:
        file_name: Display name with extension.

    Returns:
        MIME type string (e.g., 'image/jpeg', 'application/pdf').
        Returns 'application/octet-stream' if type cannot be determined.
    """
    mime_type, _ = mimetypes.guess_type(file_name)
    if mime_type is None:
        return 'application/octet-stream'
    return mime_type


def detect_stream_size(stream: BinaryIO) -> int:
    """Get the length a stream reports, without consuming it.

    Checks, in order, a ``size`` attribute (Django uploads), then
    seeks to the end of seekable streams and back again.

    Args:
        stream: Binary stream about to be uploaded.

    Returns:
        Size in bytes, or 0 when the stream cannot tell.
    """
    size = getattr(stream, 'size', None)
    if isinstance(size, int) and size >= 0:
        return size

    seekable = getattr(stream, 'seekable', None)
    if seekable is None or not seekable():
        return 0

    position = stream.tell()
    try:
        return stream.seek(0, os.SEEK_END)
    finally:
        stream.seek(position)


def validate_file_name(file_name: str, max_length: int | None = None) -> str:
    """Validate a display name for an upload.

    Args:
        file_name: Name supplied by the caller.
        max_length: Longest name the metadata store accepts.

    Returns:
        The same name, unchanged.

    Raises:
        InvalidArgumentError: If the name is empty, blank or too long.
    """
    if not file_name or not file_name.strip():
        raise InvalidArgumentError('file_name', 'must not be empty')
    if max_length is not None and len(file_name) > max_length:
        raise InvalidArgumentError(
            'file_name',
            f'longer than {max_length} characters',
        )
    return file_name


def validate_content_id(content_id: str) -> str:
    """Validate a content id received from a caller.

    Args:
        content_id: Id of a stored blob / file record.

    Returns:
        The same id, unchanged.

    Raises:
        InvalidArgumentError: If the id is empty.
    """
    if not content_id or not content_id.strip():
        raise InvalidArgumentError('content_id', 'must not be empty')
    return content_id
