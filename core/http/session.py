"""Shared aiohttp ClientSession for all provider clients.

The session is bound to the process and event loop that created it. After
a fork or when the running loop changes it is thrown away and rebuilt on
the next ``get_session()`` call.
"""

from __future__ import annotations

import asyncio
import logging
import os

import aiohttp

from core.constants import (
    HTTP_CONNECTION_LIMIT,
    HTTP_TIMEOUT_CONNECT,
    HTTP_TIMEOUT_SOCK_READ,
    HTTP_TIMEOUT_TOTAL,
)

logger = logging.getLogger(__name__)


class SessionState:
    """Holds the process-wide session and the pid that owns it."""

    session: aiohttp.ClientSession | None = None
    owner_pid: int | None = None


def _build_session() -> aiohttp.ClientSession:
    return aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(
            total=HTTP_TIMEOUT_TOTAL,
            connect=HTTP_TIMEOUT_CONNECT,
            sock_read=HTTP_TIMEOUT_SOCK_READ,
        ),
        headers={"Accept": "application/json"},
        connector=aiohttp.TCPConnector(
            limit=HTTP_CONNECTION_LIMIT,
            enable_cleanup_closed=True,
        ),
    )


def _forget_session() -> None:
    SessionState.session = None
    SessionState.owner_pid = None


async def _close_quietly(session: aiohttp.ClientSession) -> None:
    try:
        if not session.closed and not session.loop.is_closed():
            await session.close()
    except Exception as e:
        logger.warning("Error closing provider session: %s", e)


async def _drop_if_stale() -> None:
    session = SessionState.session
    if session is None:
        return

    if SessionState.owner_pid != os.getpid():
        # Never close a parent's session from a forked child.
        logger.debug("Dropping session owned by pid %s", SessionState.owner_pid)
        _forget_session()
        return

    loop = asyncio.get_running_loop()
    if session.loop is loop and not loop.is_closed():
        return

    logger.info("Event loop changed, rebuilding provider session")
    await _close_quietly(session)
    _forget_session()


async def get_session() -> aiohttp.ClientSession:
    """Return the shared provider session, creating it on first use."""
    await _drop_if_stale()

    if SessionState.session is None or SessionState.session.closed:
        SessionState.session = _build_session()
        SessionState.owner_pid = os.getpid()
        logger.debug("Opened provider session for pid %s", SessionState.owner_pid)

    return SessionState.session


async def cleanup_session() -> None:
    """Close the shared session, typically on application shutdown."""
    session = SessionState.session
    if session is not None:
        await _close_quietly(session)
        logger.info("Closed provider session for pid %s", os.getpid())
    _forget_session()
