"""Shared HTTP client utilities."""
from __future__ import annotations

import asyncio
from typing import Optional

import httpx

_client: Optional[httpx.AsyncClient] = None
_client_lock = asyncio.Lock()

# Limite por fase; o prazo total de cada chamada é imposto por quem a faz.
DEFAULT_TIMEOUT = httpx.Timeout(1.0, connect=0.5)


async def get_async_client() -> httpx.AsyncClient:
    """Return a shared AsyncClient instance."""
    global _client
    if _client is not None:
        return _client

    async with _client_lock:
        if _client is None:
            _client = httpx.AsyncClient(timeout=DEFAULT_TIMEOUT)
        return _client


async def close_async_client() -> None:
    global _client
    async with _client_lock:
        if _client is not None:
            await _client.aclose()
            _client = None
