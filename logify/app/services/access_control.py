"""
Access Control

Decides whose actions are logged, and who may read the log.
"""

import logging
from typing import Iterable, Optional

from config import ApplicationConfig
from logify.domain.actor import Actor

logger = logging.getLogger(__name__)


class ActorPolicy:
    def __init__(
        self,
        roles_to_track: Optional[Iterable[str]] = None,
        roles_with_access: Optional[Iterable[str]] = None,
        track_anonymous: Optional[bool] = None,
    ):
        self.roles_to_track = set(
            ApplicationConfig.ROLES_TO_TRACK if roles_to_track is None else roles_to_track
        )
        self.roles_with_access = set(
            ApplicationConfig.ROLES_WITH_ACCESS if roles_with_access is None else roles_with_access
        )
        self.track_anonymous = ApplicationConfig.TRACK_ANONYMOUS if track_anonymous is None else track_anonymous

    def allows(self, actor: Optional[Actor], all_users: bool = False) -> bool:
        """
        Whether an action by this actor should be logged.

        all_users is for events logged regardless of who acts, such as
        failed logins.
        """
        if all_users:
            return True
        if actor is None or actor.is_anonymous:
            return self.track_anonymous
        return bool(self.roles_to_track.intersection(actor.roles))

    def can_access_log(self, role: Optional[str]) -> bool:
        if not role:
            return False
        roles = {part.strip() for part in role.split(",")}
        return bool(self.roles_with_access.intersection(roles))
