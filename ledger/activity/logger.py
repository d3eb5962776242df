"""
Activity Logger

Every state transition and storage round-trip is logged locally as a
structured JSON line. This gives:
1. Traceability when a total looks wrong
2. A visible record of failed saves
3. Debugging capability without a debugger attached

The activity logger:
- Never raises (a logging problem must not break a mutation)
- Never persists anything (the ledger keeps no history)
"""

from typing import Any, Optional

import structlog

from ledger.models.activity import ActivityEvent, ActivityEventBuilder, ActivitySeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class ActivityLogger:
    """
    Central activity logging service.

    Keeps the last event in memory so the presentation layer (and tests)
    can see what just happened without parsing log output.
    """

    def __init__(self, logger_name: str = "ledger"):
        self._logger = structlog.get_logger(logger_name)
        self.last_event: Optional[ActivityEvent] = None

    def log(self, event: ActivityEvent) -> None:
        """Log an activity event at a level matching its severity."""
        self.last_event = event
        log_dict = event.to_log_dict()

        if event.severity == ActivitySeverity.ERROR:
            self._logger.error("ledger_activity", **log_dict)
        elif event.severity == ActivitySeverity.WARNING:
            self._logger.warning("ledger_activity", **log_dict)
        elif event.severity == ActivitySeverity.DEBUG:
            self._logger.debug("ledger_activity", **log_dict)
        else:
            self._logger.info("ledger_activity", **log_dict)

    def log_state_loaded(self, key: str, members: int, expenditures: int) -> None:
        self.log(ActivityEventBuilder.state_loaded(key, members, expenditures))

    def log_state_initialized(self, key: str) -> None:
        self.log(ActivityEventBuilder.state_initialized(key))

    def log_load_failed(self, key: str, error_message: str) -> None:
        self.log(ActivityEventBuilder.load_failed(key, error_message))

    def log_mutation_applied(self, action: str, details: Optional[dict[str, Any]] = None) -> None:
        self.log(ActivityEventBuilder.mutation_applied(action, details or {}))

    def log_mutation_rejected(self, action: str, reason: str, message: str) -> None:
        self.log(ActivityEventBuilder.mutation_rejected(action, reason, message))

    def log_state_saved(self, key: str, size_bytes: Optional[int] = None) -> None:
        self.log(ActivityEventBuilder.state_saved(key, size_bytes))

    def log_save_failed(self, key: str, error_message: str) -> None:
        self.log(ActivityEventBuilder.save_failed(key, error_message))

    def log_state_exported(self, size_bytes: int) -> None:
        self.log(ActivityEventBuilder.state_exported(size_bytes))

    def log_import_rejected(self, error_message: str) -> None:
        self.log(ActivityEventBuilder.import_rejected(error_message))
