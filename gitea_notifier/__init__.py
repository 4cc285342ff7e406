"""
Top‑level package for the Gitea Slack notifier.

All functionality lives in submodules under ``app``.
"""

__all__ = []
