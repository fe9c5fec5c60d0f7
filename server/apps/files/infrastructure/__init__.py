"""Infrastructure layer for files app.

This package contains integrations with external systems:
- S3 storage backend (upload, signed URLs, delete)
- Metadata derivation (content type, file type, blob keys)

Keep infrastructure concerns separate from business logic.
"""
