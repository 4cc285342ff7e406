"""
Pydantic schema definitions.

``webhook`` models the incoming Gitea payloads; ``slack`` models the
parts of Slack Web API responses the notifier reads.
"""
