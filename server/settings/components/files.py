"""File service settings."""

from server.settings.components import config

# Page size used when the caller does not ask for one
FILES_DEFAULT_PAGE_SIZE = config('FILES_DEFAULT_PAGE_SIZE', cast=int, default=20)

# Refuse to stream blobs whose metadata is soft-deleted
FILES_DOWNLOAD_RESPECTS_SOFT_DELETE = config(
    'FILES_DOWNLOAD_RESPECTS_SOFT_DELETE',
    cast=bool,
    default=False,
)
