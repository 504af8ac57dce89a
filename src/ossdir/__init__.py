"""Hierarchical file storage on top of Aliyun OSS buckets."""

__VERSION__ = "0.1.0"
