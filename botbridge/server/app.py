"""Bridge server -- app factory and entry point."""

from __future__ import annotations

import logging

from aiohttp import web
from botbuilder.core import BotFrameworkAdapter, BotFrameworkAdapterSettings, TurnContext
from botbuilder.schema import Activity, ActivityTypes

from .. import __version__
from ..channels.registry import StrategyRegistry, default_registry
from ..channels.roster import ConnectorRosterFetcher
from ..config.settings import Settings, cfg
from ..errors import ConfigurationError, UnsupportedChannelError
from ..messaging.authorization import AuthorizationGate, seed_authorized_users
from ..messaging.bot import Bot
from ..messaging.cards import CardTemplateCatalog
from ..messaging.events import MessageBus, QueueMessageBus
from ..messaging.transport import AdapterTransport
from ..state.authorized_users import AuthorizedUserStore
from ..state.user_directory import UserDirectory
from .bot_endpoint import BotEndpoint

logger = logging.getLogger(__name__)

BOT_KEY = web.AppKey("bot", Bot)
BUS_KEY = web.AppKey("bus", object)


# ---------------------------------------------------------------------------
# Bot Framework adapter
# ---------------------------------------------------------------------------


def create_adapter(settings: Settings) -> BotFrameworkAdapter:
    adapter = BotFrameworkAdapter(
        BotFrameworkAdapterSettings(
            app_id=settings.bot_app_id or None,
            app_password=settings.bot_app_password or None,
            channel_auth_tenant=settings.bot_app_tenant_id or None,
        )
    )

    async def on_error(context: TurnContext, error: Exception) -> None:
        logger.error("Bot turn error: %s", error, exc_info=True)
        if not isinstance(error, (ConfigurationError, UnsupportedChannelError)):
            try:
                await context.send_activity(
                    Activity(type=ActivityTypes.message, text="An error occurred.")
                )
            except Exception as send_exc:
                logger.warning("Failed to report turn error to the user: %s", send_exc)
        raise error

    adapter.on_turn_error = on_error
    return adapter


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


def build_bot(
    settings: Settings,
    adapter: BotFrameworkAdapter,
    bus: MessageBus,
    *,
    catalog: CardTemplateCatalog | None = None,
    registry: StrategyRegistry | None = None,
) -> Bot:
    """Create the stores, seed authorization and assemble the dispatcher.

    Raises :class:`ConfigurationError` on inconsistent auth settings.
    """
    settings.ensure_dirs()
    users = UserDirectory(settings.users_path)
    authorized = AuthorizedUserStore(settings.authorized_users_path)
    seed_authorized_users(authorized, settings)

    if registry is None:
        registry = default_registry(
            settings.bot_name,
            users,
            authorized,
            ConnectorRosterFetcher(adapter),
            tenant_allowlist=settings.tenant_allowlist,
            catalog=catalog,
        )
    logger.info(
        "Channel strategies: %s | auth=%s | tenants=%s",
        ", ".join(registry.names()),
        settings.auth_enabled,
        ", ".join(sorted(settings.tenant_allowlist)) or "(any)",
    )
    return Bot(
        registry,
        AuthorizationGate(authorized, settings.auth_enabled),
        bus,
        AdapterTransport(adapter, settings.bot_app_id),
        settings.bot_name,
    )


async def _health(_req: web.Request) -> web.Response:
    return web.json_response({"status": "ok", "version": __version__})


def create_app(settings: Settings | None = None, bus: MessageBus | None = None) -> web.Application:
    settings = settings or cfg
    bus = bus or QueueMessageBus()
    adapter = create_adapter(settings)
    bot = build_bot(settings, adapter, bus)

    app = web.Application()
    app[BOT_KEY] = bot
    app[BUS_KEY] = bus
    BotEndpoint(adapter, bot, settings).register(app.router)
    app.router.add_get("/health", _health)
    return app


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s  %(name)s  %(levelname)s  %(message)s",
    )
    cfg.reload()
    port = cfg.bot_port
    logger.info("Starting bridge on port %d (endpoint %s) ...", port, cfg.bot_endpoint)
    web.run_app(create_app(cfg), host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
