"""Business logic layer for files app.

This package contains all business logic for file operations:
- Batch upload with per-file failure isolation
- Listing, folder listing and signed download links
- Deletion across storage and database

All business logic should be implemented here, separate from
models (data layer) and infrastructure (external systems).
"""
