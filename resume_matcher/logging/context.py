"""Scoped logging context.

Fields pushed here (run_id, alert_id, user_id, ...) are attached to every log
record emitted inside the scope by ``ContextualFilter``. Backed by
``contextvars`` so scheduler worker threads do not see each other's fields.
"""

from contextvars import ContextVar, Token
from typing import Any, Dict, Optional

_log_context: ContextVar[Dict[str, Any]] = ContextVar("resume_matcher_log_context", default={})


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the fields active in the current scope."""
    return dict(_log_context.get())


def push_log_context(**fields: Any) -> Token:
    """Merge ``fields`` into the active context.

    Returns:
        Token to hand back to ``pop_log_context`` to restore the previous fields
    """
    return _log_context.set({**_log_context.get(), **fields})


def pop_log_context(token: Token) -> None:
    """Restore the context captured by ``push_log_context``."""
    _log_context.reset(token)


def clear_log_context() -> None:
    """Drop every context field (used by tests)."""
    _log_context.set({})


class log_context:
    """Context manager that scopes logging fields to a block.

    Example:
        >>> with log_context(run_id="abc123", alert_id=42):
        ...     logger.info("Scoring alert")  # carries run_id and alert_id
    """

    def __init__(self, **fields: Any):
        self.fields = fields
        self.token: Optional[Token] = None

    def __enter__(self):
        self.token = push_log_context(**self.fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.token is not None:
            pop_log_context(self.token)
            self.token = None
        return False
