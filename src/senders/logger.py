import threading

from src.models.dispatch import DispatchAttempt, DispatchTarget


class DispatchLogger:
    """Thread-safe record of outbound dispatch attempts."""

    def __init__(self):
        self._attempts: list[DispatchAttempt] = []
        self._lock = threading.Lock()

    def log(self, attempt: DispatchAttempt) -> None:
        with self._lock:
            self._attempts.append(attempt)

    def get_attempts(
        self,
        transaction_id: str | None = None,
        target: DispatchTarget | None = None,
    ) -> list[DispatchAttempt]:
        with self._lock:
            return [
                a for a in self._attempts
                if (transaction_id is None or a.transaction_id == transaction_id)
                and (target is None or a.target == target)
            ]

    def get_failed_attempts(self) -> list[DispatchAttempt]:
        with self._lock:
            return [
                a for a in self._attempts
                if a.status_code is None or a.status_code >= 400
            ]

    def clear(self) -> None:
        with self._lock:
            self._attempts.clear()
