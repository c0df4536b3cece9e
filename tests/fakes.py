"""Test doubles."""

import json

from starlette.websockets import WebSocketState


class FakeSocket:
    """Stand-in for a Starlette WebSocket in registry tests."""

    def __init__(self, fail_on_send: bool = False) -> None:
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED
        self.fail_on_send = fail_on_send
        self.sent = []
        self.close_code = None

    async def send_text(self, data: str) -> None:
        if self.fail_on_send:
            raise RuntimeError("connection reset")
        self.sent.append(json.loads(data))

    async def close(self, code: int = 1000, reason: str = None) -> None:
        self.close_code = code
        self.application_state = WebSocketState.DISCONNECTED
