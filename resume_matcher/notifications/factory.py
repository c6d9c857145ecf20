"""Factory function for instantiating the configured notifier."""

import importlib
import logging

from resume_matcher.config.models import DispatchConfig

from .base import Notifier, NotifierError
from .logging_notifier import LoggingNotifier

logger = logging.getLogger(__name__)


def get_notifier(dispatch_config: DispatchConfig) -> Notifier:
    """Instantiate the notifier the dispatch cycle hands payloads to.

    Dry runs always use ``LoggingNotifier``. Otherwise ``dispatch.notifier``
    names a ``Notifier`` subclass as ``"package.module:ClassName"``; it is
    imported and constructed without arguments.

    Args:
        dispatch_config: Dispatch section of the application configuration

    Returns:
        Notifier instance

    Raises:
        NotifierError: If no notifier is configured for a live run, or the
            configured class cannot be imported or is not a Notifier

    Example:
        >>> get_notifier(DispatchConfig(dry_run=True))
        <...LoggingNotifier object at ...>
    """
    if dispatch_config.dry_run:
        return LoggingNotifier()

    target = dispatch_config.notifier
    if not target:
        raise NotifierError(
            "dispatch.dry_run is false but dispatch.notifier is not set"
        )

    module_name, _, class_name = target.partition(":")
    if not module_name or not class_name:
        raise NotifierError(
            f"Invalid notifier path: {target!r}. Expected 'package.module:ClassName'"
        )

    try:
        notifier_class = getattr(importlib.import_module(module_name), class_name)
    except (ImportError, AttributeError) as e:
        raise NotifierError(f"Cannot load notifier {target!r}: {e}") from e

    if not (isinstance(notifier_class, type) and issubclass(notifier_class, Notifier)):
        raise NotifierError(f"{target!r} is not a Notifier subclass")

    logger.debug(
        "Creating notifier instance",
        extra={"notifier_class": notifier_class.__name__},
    )

    try:
        return notifier_class()
    except Exception as e:
        raise NotifierError(f"Failed to create notifier {target!r}: {e}") from e
