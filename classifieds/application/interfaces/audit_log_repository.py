from abc import ABC, abstractmethod

from classifieds.domain.entities.audit_log import AuditLog


class AuditLogRepository(ABC):
    """
    Port for the append-only audit trail.

    Implementations must write outside the caller's transaction so an audit
    failure can never roll back the change being audited.
    """

    @abstractmethod
    async def append(self, entry: AuditLog) -> AuditLog:
        ...
