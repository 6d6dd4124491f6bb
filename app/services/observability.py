"""
Error reporting with optional Sentry
"""
import logging

import sentry_sdk

logger = logging.getLogger(__name__)


def init_observability(dsn: str, environment: str, traces_sample_rate: float = 0.1) -> bool:
    if not dsn:
        logger.info("Sentry disabled (no DSN)")
        return False
    sentry_sdk.init(
        dsn=dsn,
        traces_sample_rate=traces_sample_rate,
        environment=environment,
        # Request bodies may carry uploads; keep them out of events
        max_request_body_size="never",
    )
    logger.info("Sentry initialized")
    return True
