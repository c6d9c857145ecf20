"""Non-fatal configuration checks."""

import warnings
from typing import Any, Dict, List

from .duration import DurationParseError, parse_duration


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """Return warnings for settings that are valid but probably unintended.

    Args:
        config_dict: Raw configuration dictionary (before validation)
    """
    messages = []

    interval = config_dict.get("dispatch_interval")
    if isinstance(interval, str):
        try:
            if parse_duration(interval) > 86400 // 2:
                messages.append(
                    f"Long dispatch_interval ({interval}) delays DAILY alerts by up to that long"
                )
        except DurationParseError:
            # Reported as a validation error instead
            pass

    threshold = config_dict.get("default_match_threshold")
    if isinstance(threshold, (int, float)) and threshold < 25:
        messages.append(
            f"Low default_match_threshold ({threshold}) will notify on weak matches"
        )

    dispatch = config_dict.get("dispatch", {})
    if isinstance(dispatch, dict) and dispatch.get("dry_run") is False:
        messages.append(
            "dispatch.dry_run is false; notifications go to the configured notifier"
        )

    return messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit each message as a UserWarning."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
