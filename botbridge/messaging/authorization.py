"""Authorization gate -- per-activity allow / deny decisions.

A denial is not an exception.  The dispatcher swaps the activity text for
a fixed command (see :func:`denial_text`) so the bot answers with a
visible error instead of going quiet.
"""

from __future__ import annotations

import enum
import logging

from botbuilder.schema import Activity

from ..config.settings import Settings
from ..errors import ConfigurationError
from ..state.authorized_users import AuthorizedUserStore

logger = logging.getLogger(__name__)


class Decision(enum.Enum):
    ALLOW = "allow"
    DENY_UNAUTHENTICATED = "deny_unauthenticated"
    DENY_UNSUPPORTED = "deny_unsupported"

    @property
    def allowed(self) -> bool:
        return self is Decision.ALLOW


_DENIAL_COMMANDS = {
    Decision.DENY_UNSUPPORTED: "return source authorization not supported error",
    Decision.DENY_UNAUTHENTICATED: "return unauthorized user error",
}


def denial_text(decision: Decision, bot_name: str) -> str:
    return f"{bot_name} {_DENIAL_COMMANDS[decision]}"


def caller_object_id(activity: Activity) -> str:
    sender = activity.from_property
    return (getattr(sender, "aad_object_id", None) or "") if sender else ""


class AuthorizationGate:
    def __init__(self, store: AuthorizedUserStore, enabled: bool) -> None:
        self.store = store
        self.enabled = enabled

    def authorize(self, activity: Activity, channel_supports_auth: bool) -> Decision:
        if not self.enabled:
            return Decision.ALLOW
        if not channel_supports_auth:
            logger.warning(
                "[auth] Channel %s does not support authorization", activity.channel_id
            )
            return Decision.DENY_UNSUPPORTED
        object_id = caller_object_id(activity)
        if not object_id or not self.store.is_authorized(object_id):
            sender = activity.from_property.id if activity.from_property else "?"
            logger.warning("[auth] Unauthorized user %s (object id %r)", sender, object_id)
            return Decision.DENY_UNAUTHENTICATED
        return Decision.ALLOW


def seed_authorized_users(store: AuthorizedUserStore, settings: Settings) -> None:
    """Seed the configured admin list once at startup.

    Raises :class:`ConfigurationError` when authorization is enabled but no
    admin identities are configured.
    """
    if not settings.auth_enabled:
        return
    if not settings.auth_initial_admins:
        raise ConfigurationError(
            "AUTH_ENABLED is set but AUTH_INITIAL_ADMINS is empty; "
            "configure at least one admin object id"
        )
    if not store.seed(settings.auth_initial_admins):
        logger.info("[auth] Authorized users already present; skipping seed")
