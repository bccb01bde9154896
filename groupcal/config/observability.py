"""
Logging setup. All modules log through structlog; this only sets the level
below which events are dropped.
"""

import logging

import structlog


def configure_logging(level: str = "INFO"):
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        cache_logger_on_first_use=False,
    )
