"""
fshandler - hierarchical file storage over a local directory tree or S3.
"""

__version__ = "0.1.0"
