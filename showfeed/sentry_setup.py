import logging
from typing import Optional

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

from showfeed.config import Settings, settings as global_settings

logger = logging.getLogger(__name__)


def init_sentry(current: Optional[Settings] = None) -> bool:
    """
    Initializes the Sentry SDK if a DSN is configured.
    Returns True when Sentry is active for this process.
    """
    current = current or global_settings
    sentry_settings = current.sentry

    if not sentry_settings.dsn:
        logger.info("Sentry DSN not found in settings. Sentry SDK will not be initialized.")
        return False

    effective_environment = sentry_settings.environment or current.environment
    logger.info(f"Sentry DSN found. Initializing Sentry SDK for environment: '{effective_environment}'.")

    try:
        sentry_sdk.init(
            dsn=str(sentry_settings.dsn),
            environment=effective_environment,
            traces_sample_rate=sentry_settings.traces_sample_rate,
            integrations=[
                LoggingIntegration(
                    level=logging.INFO,        # Capture info and above as breadcrumbs
                    event_level=logging.ERROR  # Send errors as Sentry events
                ),
            ],
        )
    except Exception as e:
        logger.error(f"Failed to initialize Sentry SDK: {e}", exc_info=True)
        return False

    logger.info("Sentry SDK initialized successfully.")
    return True
