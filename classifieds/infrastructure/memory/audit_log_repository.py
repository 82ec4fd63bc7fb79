import threading

from classifieds.application.interfaces.audit_log_repository import AuditLogRepository
from classifieds.domain.entities.audit_log import AuditLog


class InMemoryAuditLogRepository(AuditLogRepository):
    def __init__(self) -> None:
        self._entries: list[AuditLog] = []
        self._lock = threading.Lock()

    @property
    def entries(self) -> list[AuditLog]:
        with self._lock:
            return list(self._entries)

    async def append(self, entry: AuditLog) -> AuditLog:
        with self._lock:
            self._entries.append(entry)
        return entry
