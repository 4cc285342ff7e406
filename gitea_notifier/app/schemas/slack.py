"""
Pydantic models for Slack Web API data.
"""

from typing import Optional

from pydantic import BaseModel


class SlackUser(BaseModel):
    """Subset of the Slack user object returned by ``users.lookupByEmail``."""

    id: str
    name: Optional[str] = None

    @property
    def mention(self) -> str:
        """Slack markup that mentions (and notifies) the user."""
        return f"<@{self.id}>"
