"""Streaming response that always closes its body iterator"""

from __future__ import annotations

import anyio
from starlette.responses import StreamingResponse
from starlette.types import Receive, Scope, Send


class AssetStreamingResponse(StreamingResponse):
    """StreamingResponse that closes the body iterator however the response ends.

    On client disconnect Starlette stops iterating without closing the async
    generator; closing it here releases the store read handle right away.
    """

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            aclose = getattr(self.body_iterator, "aclose", None)
            if aclose is not None:
                with anyio.CancelScope(shield=True):
                    await aclose()
