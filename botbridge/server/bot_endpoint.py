"""Bot Framework endpoint -- POST <BOT_ENDPOINT> (default ``/api/messages``)."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from aiohttp import web
from botbuilder.schema import Activity

from ..errors import UnsupportedChannelError

if TYPE_CHECKING:
    from botbuilder.core import BotFrameworkAdapter

    from ..config.settings import Settings
    from ..messaging.bot import Bot

logger = logging.getLogger(__name__)


class BotEndpoint:
    """Receives connector webhooks and runs each activity through the bot."""

    def __init__(self, adapter: BotFrameworkAdapter, bot: Bot, settings: Settings) -> None:
        self.adapter = adapter
        self._bot = bot
        self._settings = settings

    @property
    def path(self) -> str:
        return self._settings.bot_endpoint

    def register(self, router: web.UrlDispatcher) -> None:
        router.add_post(self.path, self.handle)
        router.add_get(self.path, self._probe)

    async def _probe(self, _req: web.Request) -> web.Response:
        """GET probe for the bot endpoint."""
        return web.json_response({
            "status": "ok",
            "endpoint": self.path,
            "method": "POST required",
            "bot_configured": bool(self._settings.bot_app_id),
        })

    async def handle(self, req: web.Request) -> web.Response:
        if not self._settings.bot_app_id or not self._settings.bot_app_password:
            logger.warning(
                "[bot] Rejected: bot credentials not configured (app_id=%s, password=%s)",
                bool(self._settings.bot_app_id), bool(self._settings.bot_app_password),
            )
            return web.json_response(
                {"status": "error", "message": "Bot credentials not configured"},
                status=503,
            )

        raw_body = await req.read()
        try:
            body = json.loads(raw_body)
        except ValueError as exc:
            logger.error("[bot] Failed to parse JSON body: %s | raw=%s", exc, raw_body[:500])
            return web.json_response(
                {"status": "error", "message": f"Invalid JSON: {exc}"},
                status=400,
            )

        items = body if isinstance(body, list) else [body]
        if not all(isinstance(item, dict) for item in items):
            return web.json_response(
                {"status": "error", "message": "Expected an activity object or array"},
                status=400,
            )

        auth_header = req.headers.get("Authorization", "")
        last_response = None
        for item in items:
            logger.info(
                "[bot] Activity: type=%s channel=%s from=%s",
                item.get("type", "?"),
                item.get("channelId", "?"),
                (item.get("from") or {}).get("id", "?"),
            )
            try:
                activity = Activity().deserialize(item)
                last_response = await self.adapter.process_activity(
                    activity, auth_header, self._bot.on_turn
                )
            except PermissionError as exc:
                logger.warning("[bot] Authentication failed (401): %s", exc)
                return web.Response(status=401, text=str(exc))
            except UnsupportedChannelError as exc:
                logger.error("[bot] %s", exc)
                return web.json_response({"status": "error", "message": str(exc)}, status=500)
            except Exception as exc:
                logger.exception("[bot] Error processing activity: %s", exc)
                return web.json_response(
                    {"status": "error", "message": f"Processing failed: {exc}"},
                    status=500,
                )

        if last_response is not None and len(items) == 1:
            return web.Response(
                status=last_response.status,
                body=json.dumps(last_response.body).encode() if last_response.body is not None else None,
                content_type="application/json",
            )
        return web.Response(status=200)
