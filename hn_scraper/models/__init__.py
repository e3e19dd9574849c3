"""Data models and wire mapping for Hacker News items."""

from hn_scraper.models.comment import CommentRecord, FetchFailure, ResolveResult, ThreadRecord

__all__ = ["CommentRecord", "FetchFailure", "ResolveResult", "ThreadRecord"]
