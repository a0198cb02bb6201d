"""Unified, lazily loaded tree view over HDFS, S3, ADLS, ABFS and OFS storage."""

__version__ = "0.1.0"
