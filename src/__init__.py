"""Commit activity ingest and summary workflows."""
