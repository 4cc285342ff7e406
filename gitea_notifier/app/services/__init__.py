"""
Service layer.

Each service encapsulates one concern: talking to Gitea, talking to
Slack, rendering messages, storing thread roots, and the pipeline that
ties them together.  API handlers only call ``NotificationService``.
"""
