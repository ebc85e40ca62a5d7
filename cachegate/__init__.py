"""Remote build-cache gateway backed by S3-compatible object storage."""

__version__ = "1.0.0"
