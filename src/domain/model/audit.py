from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class AuditEvent:
    """A privileged change applied to a user record."""
    target_user_id: str
    performed_by: str
    attribute: str
    old_value: str
    new_value: str
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            'target_user_id': self.target_user_id,
            'performed_by': self.performed_by,
            'attribute': self.attribute,
            'old_value': self.old_value,
            'new_value': self.new_value,
            'occurred_at': self.occurred_at,
        }
