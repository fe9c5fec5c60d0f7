"""Cross-app plumbing: the service error taxonomy and JSON helpers."""
