"""
User Tracker

Logins, logouts, registrations, profile changes, deletions, and 'User Active'
sessions that stretch while the user keeps making requests.
"""

import logging
from typing import Any, Dict, Optional

from logify.app.resolvers.user_resolver import PRIVATE_FIELDS, USERMETA, USERS, get_properties
from logify.app.services.event_aggregator import ObservationContext
from logify.app.trackers.base import Observation, Tracker
from logify.domain.actor import Actor
from logify.domain.event import Event
from logify.domain.labels import strip_tags
from logify.domain.object_reference import ObjectReference
from logify.domain.values import are_equal, normalize

logger = logging.getLogger(__name__)

# Compared on profile_update
IGNORED_USER_FIELDS = ("meta", "roles", "user_activation_key", "session_tokens")


class UserTracker(Tracker):
    observations = {
        "wp_login": "on_wp_login",
        "wp_login_failed": "on_wp_login_failed",
        "wp_logout": "on_wp_logout",
        "wp_loaded": "on_wp_loaded",
        "user_register": "on_user_register",
        "profile_update": "on_profile_update",
        "update_user_meta": "on_update_user_meta",
        "delete_user": "on_delete_user",
    }

    def actor_from_user(self, context: ObservationContext, user: Dict[str, Any]) -> Actor:
        """The user as actor, for hooks that fire before the request knows who's logged in"""
        return Actor(
            id=normalize("ID", user.get("ID")) or 0,
            name=user.get("display_name") or user.get("user_login") or "Unknown",
            roles=list(user.get("roles") or []),
            ip=context.actor.ip,
            location=context.actor.location,
            agent=context.actor.agent,
        )

    async def get_update_user_event(
        self, context: ObservationContext, observation: Observation, user: Dict[str, Any]
    ) -> Optional[Event]:
        user_id = normalize("ID", user.get("ID"))
        return await self.aggregator.begin(
            context,
            f"user_update:{user_id}",
            "User Updated",
            self.reference("user", user),
            actor=self.actor_for(context, observation),
        )

    async def on_wp_login(self, context: ObservationContext, observation: Observation) -> None:
        user = self.current("user", observation.subject)
        if not user:
            return
        actor = observation.actor or self.actor_from_user(context, user)
        await self.aggregator.log_event(context, "User Login", self.reference("user", user), actor=actor)

    async def on_wp_login_failed(self, context: ObservationContext, observation: Observation) -> None:
        """Failed logins are logged whoever tried, since there's no one logged in."""
        metadata = {
            "username_entered": observation.arg("username"),
            "error_code": observation.arg("error_code"),
            "error_message": strip_tags(observation.arg("error_message")),
        }
        await self.aggregator.log_event(
            context,
            "Failed Login",
            "user",
            metadata=metadata,
            actor=self.actor_for(context, observation),
            all_users=True,
        )

    async def on_wp_logout(self, context: ObservationContext, observation: Observation) -> None:
        user = self.current("user", observation.subject)
        if not user:
            return
        actor = observation.actor or self.actor_from_user(context, user)
        await self.aggregator.log_event(context, "User Logout", self.reference("user", user), actor=actor)

    async def on_wp_loaded(self, context: ObservationContext, observation: Observation) -> None:
        # AJAX requests are mostly the browser polling, not the user doing something
        if observation.arg("doing_ajax", False):
            return

        actor = self.actor_for(context, observation)
        if actor.is_anonymous:
            return

        user = self.resolvers.catalog.get("user", actor.id)
        subject = self.reference("user", user) if user else ObjectReference(type="user", key=actor.id, name=actor.name)
        await self.aggregator.continue_session(context, "User Active", subject, actor=actor)

    async def on_user_register(self, context: ObservationContext, observation: Observation) -> None:
        user = self.current("user", observation.subject)
        if not user:
            return
        await self.aggregator.log_event(
            context, "User Registered", self.reference("user", user), actor=self.actor_for(context, observation)
        )

    async def on_profile_update(self, context: ObservationContext, observation: Observation) -> None:
        user_before, user_after = observation.prior, observation.subject
        if not user_before or not user_after:
            return

        for key, value in user_before.items():
            if key in IGNORED_USER_FIELDS or key not in user_after:
                continue
            val = normalize(key, value)
            new_val = normalize(key, user_after.get(key))
            if are_equal(val, new_val):
                continue

            event = await self.get_update_user_event(context, observation, user_after)
            if event is None:
                return
            if key == "user_pass":
                # Record that it changed, not the hashes
                event.set_prop(key, USERS, "(hidden)", "(changed)")
            else:
                event.set_prop(key, USERS, val, new_val)

        roles_before = list(user_before.get("roles") or [])
        roles_after = list(user_after.get("roles") or [])
        if "roles" in user_after and sorted(roles_before) != sorted(roles_after):
            event = await self.get_update_user_event(context, observation, user_after)
            if event is not None:
                event.set_prop("roles", USERMETA, ", ".join(roles_before) or "none", ", ".join(roles_after) or "none")

    async def on_update_user_meta(self, context: ObservationContext, observation: Observation) -> None:
        meta_key = observation.arg("meta_key")
        if not meta_key or meta_key in PRIVATE_FIELDS:
            return
        user = self.current("user", observation.subject)
        if not user:
            return

        current = (observation.prior or user).get("meta") or {}
        val = normalize(meta_key, current.get(meta_key))
        new_val = normalize(meta_key, observation.arg("meta_value"))
        if are_equal(val, new_val):
            return

        event = await self.get_update_user_event(context, observation, user)
        if event is None:
            return
        event.set_prop(meta_key, USERMETA, val, new_val)

    async def on_delete_user(self, context: ObservationContext, observation: Observation) -> None:
        user = self.current("user", observation.subject)
        if not user:
            return

        metadata = {
            "posts_authored": [
                ObjectReference(type="post", key=normalize("ID", post_id)) for post_id in observation.arg("posts_authored") or []
            ],
            "comments_authored": [
                ObjectReference(type="comment", key=normalize("comment_ID", comment_id))
                for comment_id in observation.arg("comments_authored") or []
            ],
        }
        reassign = normalize("reassign", observation.arg("reassign"))
        if reassign:
            metadata["content_reassigned_to"] = self.resolvers.complete(ObjectReference(type="user", key=reassign))

        await self.aggregator.log_event(
            context,
            "User Deleted",
            self.reference("user", user),
            metadata=metadata,
            properties=get_properties(user),
            actor=self.actor_for(context, observation),
        )
        self.forget("user", user.get("ID"))
