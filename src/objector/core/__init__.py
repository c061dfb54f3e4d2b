"""Traversal, detection, deduplication and scheduling engine."""
