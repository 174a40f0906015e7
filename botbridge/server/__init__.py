"""aiohttp server -- webhook endpoint and app factory."""
