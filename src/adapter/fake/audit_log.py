"""In-memory implementation of AuditLog for testing."""

from domain.model.audit import AuditEvent
from domain.model.errors import RepositoryError


class FakeAuditLog:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.attempts = 0
        self.events: list[AuditEvent] = []

    async def record(self, event: AuditEvent) -> None:
        self.attempts += 1
        if self.fail:
            raise RepositoryError("Audit log unavailable")
        self.events.append(event)
