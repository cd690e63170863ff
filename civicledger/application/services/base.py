"""Service logging mixin.

Usage:
    class MyService(LoggingMixin):
        def __init__(self, repository: ComplaintRepositoryProtocol) -> None:
            self._repository = repository
            self._init_logger(component="lifecycle")

        async def do_something(self, complaint_id: UUID) -> None:
            log = self._log_operation("do_something", complaint_id=str(complaint_id))
            log.info("operation_started")
"""

import structlog

from civicledger.infrastructure.observability.correlation import get_correlation_id


class LoggingMixin:
    """Mixin giving services a bound structlog logger.

    The logger is bound with the service class name and a component tag.
    Each operation logger additionally carries the operation name and the
    current request correlation id.
    """

    _log: structlog.BoundLogger

    def _init_logger(self, component: str = "complaints") -> None:
        """Bind the service logger; call from __init__.

        Args:
            component: Log category (ledger, lifecycle, votes, audit, ...).
        """
        self._log = structlog.get_logger().bind(
            service=self.__class__.__name__,
            component=component,
        )

    def _log_operation(
        self,
        operation: str,
        **context: object,
    ) -> structlog.BoundLogger:
        """Return an operation-scoped logger with correlation id.

        Args:
            operation: Operation name.
            **context: Extra fields to bind.
        """
        return self._log.bind(
            operation=operation,
            correlation_id=get_correlation_id(),
            **context,
        )
