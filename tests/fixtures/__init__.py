"""
Test fixtures package for fshandler tests.

- fake_s3: in-memory S3 client with real listing pagination

All fixtures are also available through the main conftest.py file.
"""

from tests.fixtures.fake_s3 import FakeS3Client, makeClientError

__all__ = ["FakeS3Client", "makeClientError"]
