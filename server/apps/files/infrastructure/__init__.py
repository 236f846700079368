"""Infrastructure layer for files app.

This package contains integrations with external systems:
- Custom storage backend (S3/MinIO/R2)
- Blob store adapter mapping storage failures to domain errors
- Stream and name helpers used before an upload

Keep infrastructure concerns separate from business logic.
"""
