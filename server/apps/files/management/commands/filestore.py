"""Management command to drive the file store from a shell."""

import logging
import shutil
from pathlib import Path
from typing import Any, Final

from django.core.management.base import BaseCommand, CommandError

from server.apps.files.exceptions import (
    BlobNotFoundError,
    BlobReadError,
    BlobWriteError,
)
from server.apps.files.logic.file_operations import (
    FileService,
    create_file_service,
)
from server.apps.records.exceptions import (
    InvalidArgumentError,
    MetadataCommitError,
    MetadataNotFoundError,
)

logger = logging.getLogger(__name__)

_COPY_CHUNK_SIZE: Final = 1024 * 1024

# One distinct message per failure kind
_ERROR_MESSAGES: Final = (
    (InvalidArgumentError, 'Invalid input'),
    (BlobNotFoundError, 'Content not found'),
    (MetadataNotFoundError, 'File not found'),
    (BlobReadError, 'Blob store read failed'),
    (BlobWriteError, 'Blob store write failed'),
    (MetadataCommitError, 'Metadata store commit failed'),
)


class Command(BaseCommand):
    """Upload, download, delete, show and list stored files."""

    help = 'Manage files in the hybrid blob/metadata store'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        subparsers = parser.add_subparsers(dest='action', required=True)

        upload = subparsers.add_parser('upload', help='Upload a local file')
        upload.add_argument('path', type=Path)
        upload.add_argument(
            '--name',
            help='Display name (default: the local file name)',
        )

        download = subparsers.add_parser('download', help='Download a file')
        download.add_argument('file_id')
        download.add_argument('destination', type=Path)

        delete = subparsers.add_parser('delete', help='Delete a file')
        delete.add_argument('file_id')

        show = subparsers.add_parser('show', help='Show file metadata')
        show.add_argument('file_id')

        list_parser = subparsers.add_parser('list', help='List files')
        list_parser.add_argument('--name', default=None)
        list_parser.add_argument('--page', type=int, default=1)
        list_parser.add_argument('--page-size', type=int, default=None)

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the requested action.

        Args:
            args: Positional arguments (unused).
            options: Command options.

        Raises:
            CommandError: If the file store rejects the action.
        """
        service = create_file_service()
        handler = getattr(self, f'_handle_{options["action"]}')
        try:
            handler(service, options)
        except tuple(error for error, _ in _ERROR_MESSAGES) as exc:
            message = next(
                text for error, text in _ERROR_MESSAGES
                if isinstance(exc, error)
            )
            logger.warning('%s: %s', message, exc)
            raise CommandError(f'{message}: {exc}') from exc

    def _handle_upload(self, service: FileService, options: Any) -> None:
        path: Path = options['path']
        if not path.is_file():
            raise CommandError(f'Not a file: {path}')

        with path.open('rb') as stream:
            file_instance = service.upload(stream, options['name'] or path.name)

        self.stdout.write(
            self.style.SUCCESS(
                f'Uploaded {file_instance.file_name} '
                f'({file_instance.size_bytes} bytes) as {file_instance.id}',
            ),
        )

    def _handle_download(self, service: FileService, options: Any) -> None:
        destination: Path = options['destination']
        with service.download(options['file_id']) as stream:
            with destination.open('wb') as target:
                shutil.copyfileobj(stream, target, _COPY_CHUNK_SIZE)

        self.stdout.write(
            self.style.SUCCESS(
                f'Downloaded {options["file_id"]} to {destination}',
            ),
        )

    def _handle_delete(self, service: FileService, options: Any) -> None:
        service.delete(options['file_id'])
        self.stdout.write(
            self.style.SUCCESS(f'Deleted {options["file_id"]}'),
        )

    def _handle_show(self, service: FileService, options: Any) -> None:
        file_instance = service.get_file(options['file_id'])
        self.stdout.write(f'id:         {file_instance.id}')
        self.stdout.write(f'file_name:  {file_instance.file_name}')
        self.stdout.write(f'size_bytes: {file_instance.size_bytes}')
        self.stdout.write(f'created_at: {file_instance.created_at.isoformat()}')
        self.stdout.write(f'updated_at: {file_instance.updated_at.isoformat()}')

    def _handle_list(self, service: FileService, options: Any) -> None:
        file_page = service.list_files(
            name=options['name'],
            page=options['page'],
            page_size=options['page_size'],
        )
        for file_instance in file_page.items:
            self.stdout.write(
                f'{file_instance.id}  {file_instance.size_bytes:>12}  '
                f'{file_instance.file_name}',
            )
        self.stdout.write(
            f'Page {file_page.page}/{max(file_page.total_pages, 1)}, '
            f'{file_page.total} file(s) total',
        )
