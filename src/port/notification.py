from typing import Protocol


class NotificationPort(Protocol):
    async def send_welcome(self, email: str, display_name: str) -> None: ...
