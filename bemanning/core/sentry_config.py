# bemanning/core/sentry_config.py
"""
Felrapportering till Sentry, bara i produktion och bara med SENTRY_DSN satt.

Schemat innehåller namn, löner och frånvaro, så request-data och
PII skickas aldrig.
"""

import logging
import os
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from bemanning.core.config import APP_VERSION, IS_PRODUCTION

logger = logging.getLogger(__name__)

FILTERED = "[Filtered]"
SENSITIVE_HEADERS = ("cookie", "authorization", "x-api-key")


def init_sentry() -> bool:
    """
    Startar Sentry.

    Returns:
        True om Sentry initierades
    """
    if not IS_PRODUCTION:
        logger.info("Sentry disabled outside production")
        return False

    dsn = os.getenv("SENTRY_DSN", "").strip()
    if not dsn:
        logger.warning("SENTRY_DSN not set, error tracking disabled")
        return False

    environment = os.getenv("SENTRY_ENVIRONMENT", "production")
    sentry_sdk.init(
        dsn=dsn,
        integrations=[
            FastApiIntegration(),
            StarletteIntegration(),
            # breadcrumbs från INFO, events från ERROR
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1")),
        release=os.getenv("RELEASE_VERSION", f"bemanning@{APP_VERSION}"),
        environment=environment,
        send_default_pii=False,
        attach_stacktrace=True,
        before_send=before_send_hook,
    )

    logger.info("Sentry initialized", extra={"extra_fields": {"environment": environment}})
    return True


def before_send_hook(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any]:
    """Tar bort request-body och känsliga headers. State-trädet får inte lämna systemet."""
    request = event.get("request")
    if not request:
        return event

    headers = request.get("headers") or {}
    for header in SENSITIVE_HEADERS:
        if header in headers:
            headers[header] = FILTERED

    if "data" in request:
        request["data"] = FILTERED
    return event


def capture_exception(error: Exception, context: dict[str, dict[str, Any]] | None = None) -> None:
    """
    Skickar ett undantag med namngivna kontextblock.

    Args:
        error: Undantaget
        context: T.ex. {"schedule_generation": {"mode": "period"}}
    """
    with sentry_sdk.new_scope() as scope:
        for name, block in (context or {}).items():
            scope.set_context(name, block)
        sentry_sdk.capture_exception(error)


def capture_message(message: str, level: str = "info", context: dict[str, dict[str, Any]] | None = None) -> None:
    """Skickar ett meddelande (debug, info, warning, error, fatal)."""
    with sentry_sdk.new_scope() as scope:
        for name, block in (context or {}).items():
            scope.set_context(name, block)
        sentry_sdk.capture_message(message, level=level)
