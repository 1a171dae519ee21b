"""Console channel: writes outbound messages to stdout.

Handy for local runs and for exercising the full pipeline without a chat
platform: configure ``[channels.console]`` and send with ``--channel console``.
"""

from __future__ import annotations

import sys
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import pluggy

from courier.logger import logger

if TYPE_CHECKING:
    from courier.config import Settings
    from courier.outbound.deps import PollRequest, SendRequest

hookimpl = pluggy.HookimplMarker("courier")


def _message_id() -> str:
    return f"console-{int(datetime.now(UTC).timestamp() * 1000)}"


class ConsoleAdapter:
    name = "console"

    def __init__(self, stream: Any = None) -> None:
        self._stream = stream

    def _write(self, line: str) -> None:
        stream = self._stream or sys.stdout
        stream.write(line + "\n")
        stream.flush()

    async def send(self, config: Settings, request: SendRequest) -> dict[str, Any]:  # noqa: ARG002
        text = request.message
        if request.media_url:
            text = f"{text}\n[media] {request.media_url}" if text else f"[media] {request.media_url}"
        self._write(f"[{request.to}] {text}")
        message_id = _message_id()
        logger.debug("Console send", to=request.to, message_id=message_id)
        return {"ok": True, "messageId": message_id, "to": request.to}

    async def poll(self, config: Settings, request: PollRequest) -> dict[str, Any]:  # noqa: ARG002
        lines = [f"[{request.to}] poll: {request.question}"]
        lines += [f"  {i}. {option}" for i, option in enumerate(request.options, start=1)]
        self._write("\n".join(lines))
        return {"ok": True, "messageId": _message_id(), "to": request.to}


class ConsoleChannelPlugin:
    """Built-in plugin that provides the console adapter."""

    @hookimpl
    def courier_channel_adapter(self) -> ConsoleAdapter:
        return ConsoleAdapter()
