"""Main entry point for the Resume Alert Matcher service."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import signal
import sys
import threading
import time
from pathlib import Path
from typing import Optional, Tuple

from resume_matcher.config.environment import EnvironmentConfig
from resume_matcher.config.exceptions import ConfigurationError
from resume_matcher.config.loader import load_config
from resume_matcher.config.models import AppConfig
from resume_matcher.dispatch import DispatchCycle, DispatchRunResult
from resume_matcher.logging import get_logger
from resume_matcher.logging.config import configure_logging
from resume_matcher.matching import MatchingEngine
from resume_matcher.notifications import NotifierError, get_notifier
from resume_matcher.persistence.database import close_database, get_session, init_database
from resume_matcher.persistence.seed import load_seed_file
from resume_matcher.scheduler import SchedulerService
from resume_matcher.skills import SkillExtractor, SkillMatcher, load_registry
from resume_matcher.utils.timestamps import utc_now

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and settle the effective log level.

    Log level priority: CLI > LOG_LEVEL environment variable > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level or "INFO"

    return app_config, env_config


def build_dispatch_cycle(app_config: AppConfig) -> DispatchCycle:
    """
    Wire the registry, matching engine and notifier into a dispatch cycle.

    Raises:
        ConfigurationError: If the configured notifier cannot be built
    """
    registry = load_registry(app_config.skills_file)
    engine = MatchingEngine(SkillExtractor(registry), SkillMatcher())

    try:
        notifier = get_notifier(app_config.dispatch)
    except NotifierError as e:
        raise ConfigurationError(
            f"Invalid notifier configuration: {e}",
            suggestions=[
                "Set dispatch.dry_run: true to log notifications instead",
                "Set dispatch.notifier to 'package.module:ClassName' of a Notifier subclass",
            ],
        ) from e

    logger.info(
        "Services initialized",
        extra={
            "event": "services.initialized",
            "skill_count": len(registry),
            "notifier": type(notifier).__name__,
        },
    )
    return DispatchCycle(engine=engine, notifier=notifier, app_config=app_config)


def log_run_summary(result: DispatchRunResult) -> None:
    logger.info(
        f"Manual dispatch completed: "
        f"{result.due_alerts} due, "
        f"{result.matched_alerts} matched, "
        f"{result.notifications_sent} notified, "
        f"{result.digests_sent} digests",
        extra={
            "event": "service.manual_run.completed",
            "duration_seconds": result.total_duration_seconds,
            "had_errors": result.had_errors,
            "active_alerts": result.active_alerts,
            "due_alerts": result.due_alerts,
            "matched_alerts": result.matched_alerts,
            "notifications_sent": result.notifications_sent,
            "digests_sent": result.digests_sent,
        },
    )


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the Resume Alert Matcher.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    start_time = time.time()
    parser = argparse.ArgumentParser(
        description="Resume Alert Matcher - scores resumes against job alerts and dispatches due notifications"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml or config/config.yaml if present)",
    )
    parser.add_argument(
        "--manual-run",
        action="store_true",
        help="Run a single dispatch cycle immediately and exit",
    )
    parser.add_argument(
        "--seed",
        type=Path,
        default=None,
        help="YAML file of users, alerts and preferences to load before running",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )

    args = parser.parse_args(argv)

    try:
        # Step 1: Configuration first, logging format depends on it
        app_config, env_config = load_runtime_config(args.config, args.log_level)

        # Step 2: Logging
        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )

        logger.info(
            "Resume Alert Matcher starting",
            extra={
                "event": "service.starting",
                "config_path": str(args.config) if args.config else None,
                "log_level": env_config.log_level,
                "manual_run": args.manual_run,
                "dry_run": app_config.dispatch.dry_run,
                "dispatch_interval_seconds": app_config.dispatch_interval_seconds,
            },
        )

        # Step 3: State store
        init_database(env_config.database_url)

        if args.seed is not None:
            with get_session() as session:
                load_seed_file(session, args.seed, app_config.default_match_threshold, utc_now())

        # Step 4: Core services
        cycle = build_dispatch_cycle(app_config)

        # Step 5: Branch based on mode
        if args.manual_run:
            logger.info("Executing manual dispatch", extra={"event": "service.manual_run.starting"})
            result = cycle.run_once()
            log_run_summary(result)

            close_database()
            logger.info(
                "Resume Alert Matcher stopped",
                extra={
                    "event": "service.stopping",
                    "uptime_seconds": round(time.time() - start_time, 2),
                },
            )
            return 1 if result.had_errors else 0

        shutdown_event = threading.Event()
        scheduler_service = SchedulerService(
            dispatch_callable=cycle.run_once,
            interval_seconds=app_config.dispatch_interval_seconds,
            shutdown_event=shutdown_event,
        )

        def signal_handler(signum, frame):
            logger.info(
                f"Received signal {signum}, shutting down",
                extra={"event": "service.signal_received", "signal": signum},
            )
            scheduler_service.shutdown(wait=False)

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        scheduler_service.start()
        logger.info(
            "Scheduler started. Press Ctrl+C to stop",
            extra={"event": "service.daemon_mode.started"},
        )

        try:
            shutdown_event.wait()
        except KeyboardInterrupt:
            logger.info(
                "Keyboard interrupt received, shutting down",
                extra={"event": "service.keyboard_interrupt"},
            )
            scheduler_service.shutdown(wait=False)

        close_database()
        logger.info(
            "Resume Alert Matcher stopped",
            extra={
                "event": "service.stopping",
                "uptime_seconds": round(time.time() - start_time, 2),
            },
        )
        return 0

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e.message}",
            extra={"event": "config.error", "error_type": "ConfigurationError"},
        )
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error during startup",
            extra={
                "event": "service.startup.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
