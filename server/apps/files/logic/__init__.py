"""Business logic layer for files app.

This package contains the orchestration of the two stores:
- Upload, download and delete of file content
- Soft deletion and paginated listing of file metadata

Content goes through the blob store adapter, metadata through the
unit of work; nothing here talks to S3 or the ORM directly.
"""
