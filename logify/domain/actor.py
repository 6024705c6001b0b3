"""
Actor

The principal performing an action, as seen at the time of the action.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class Actor(BaseModel):
    id: int = 0  # 0 = anonymous
    name: str = "Unknown"
    roles: List[str] = Field(default_factory=list)
    ip: Optional[str] = None
    location: Optional[str] = None
    agent: Optional[str] = None

    @property
    def is_anonymous(self) -> bool:
        return not self.id

    @property
    def role_string(self) -> str:
        if self.is_anonymous or not self.roles:
            return "none"
        return ", ".join(self.roles)
