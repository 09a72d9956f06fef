from typing import Protocol

from domain.model.audit import AuditEvent


class AuditLog(Protocol):
    """Sink for privileged-change audit events."""
    async def record(self, event: AuditEvent) -> None: ...
