"""Fetch, filter and cache the comments of a Hacker News thread."""

__version__ = "0.1.0"
