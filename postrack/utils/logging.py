"""
Logging configuration.

Locally, logs go to stdout with any json_fields from the extra dict
appended. On Cloud Run, google-cloud-logging ships structured records
to Cloud Logging.
"""

import json
import logging
import os
import sys

# Flag to track if logging is already configured
_logging_configured = False


class LocalFormatter(logging.Formatter):
    """Formatter that appends json_fields from the extra dict."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)

        json_fields = getattr(record, "json_fields", None)
        if json_fields:
            fields_str = json.dumps(json_fields, indent=2, default=str)
            message = f"{message}\n{fields_str}"

        return message


def setup_logging(service_name: str = "postrack", level: int = logging.INFO):
    """
    Configure root logging once per process.

    Args:
        service_name: Name of the service for log identification
        level: Root log level
    """
    global _logging_configured

    if _logging_configured:
        return

    # Cloud Run sets K_SERVICE
    if os.getenv("K_SERVICE"):
        _setup_cloud_logging(service_name, level)
    else:
        _setup_local_logging(level)

    _logging_configured = True


def _setup_cloud_logging(service_name: str, level: int):
    """Send logs to Cloud Logging via google-cloud-logging."""
    try:
        import google.cloud.logging

        client = google.cloud.logging.Client()
        client.setup_logging(log_level=level)

        logging.info(f"Cloud Logging configured for service: {service_name}")
    except Exception as e:
        _setup_local_logging(level)
        logging.warning(f"Failed to setup Cloud Logging, using local logging: {e}")


def _setup_local_logging(level: int):
    """Log to stdout for local runs, reusing an existing postrack handler."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    if any(isinstance(h.formatter, LocalFormatter) for h in root_logger.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        LocalFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    root_logger.addHandler(handler)
