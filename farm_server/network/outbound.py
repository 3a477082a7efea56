"""
Per-connection outbound message channel.

Broadcasters enqueue already-serialized frames without blocking; a writer
task owned by the connection handler drains the queue onto the websocket.
A slow or dead recipient only ever fills its own queue.
"""

import asyncio
import logging

import websockets


logger = logging.getLogger(__name__)

_CLOSE = None  # Sentinel telling the writer loop to stop


class OutboundChannel:
    """Queue of serialized frames waiting to be written to one connection."""

    def __init__(self, owner: str = "?", maxsize: int = 0):
        self.owner = owner
        self._queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize)
        self._closed = False
        self.sent_count = 0
        self.dropped_count = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Number of frames waiting to be written."""
        return self._queue.qsize()

    def send(self, text: str) -> bool:
        """
        Enqueue a frame without blocking.

        Returns:
            True if queued, False if the channel is closed or full
        """
        if self._closed:
            self.dropped_count += 1
            logger.debug(f"Dropping frame for {self.owner}: channel closed")
            return False

        try:
            self._queue.put_nowait(text)
        except asyncio.QueueFull:
            self.dropped_count += 1
            logger.warning(f"Dropping frame for {self.owner}: outbound queue full")
            return False

        return True

    def close(self) -> None:
        """Stop accepting frames and tell the writer to finish."""
        if self._closed:
            return
        self._closed = True
        try:
            self._queue.put_nowait(_CLOSE)
        except asyncio.QueueFull:
            # Writer is cancelled by the handler once the drain timeout passes
            pass

    async def drain(self, websocket) -> None:
        """
        Writer loop: send queued frames until closed or the transport fails.
        """
        try:
            while True:
                text = await self._queue.get()
                if text is _CLOSE:
                    break
                await websocket.send(text)
                self.sent_count += 1
        except websockets.ConnectionClosed:
            logger.debug(f"Writer for {self.owner} stopped: connection closed")
        except Exception as e:
            logger.error(f"Error sending message to {self.owner}: {e}")
        finally:
            self._closed = True

    async def shutdown(self, writer: asyncio.Task, timeout: float) -> None:
        """
        Close the channel and wait up to timeout seconds for the writer to
        flush, cancelling it afterwards.
        """
        self.close()
        if writer.done():
            return
        try:
            await asyncio.wait_for(asyncio.shield(writer), timeout=timeout)
        except asyncio.TimeoutError:
            logger.debug(f"Writer for {self.owner} did not flush in {timeout}s, cancelling")
        finally:
            if not writer.done():
                writer.cancel()
                try:
                    await writer
                except asyncio.CancelledError:
                    pass
