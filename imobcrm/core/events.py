"""Structured log event names.

Key transitions emit a log record with an ``event`` field, passed as
``extra={"event": events.X}``.  In ``LOG_FORMAT=json`` mode the value shows
up under ``extra.event``; in text mode the message is self-describing.

Usage example::

    import logging
    from imobcrm.core import events

    logger = logging.getLogger(__name__)

    logger.info("Publish started", extra={"event": events.PUBLISH_START})
"""

from __future__ import annotations

__all__ = [
    # Publishing lifecycle
    "PUBLISH_START",
    "PUBLISH_COMPLETE",
    "PUBLISH_REJECTED",
    # Per-platform outcomes
    "PLATFORM_SUBMIT_OK",
    "PLATFORM_SUBMIT_FAILED",
    "PLATFORM_FAULT",
    # Audit trail
    "AUDIT_ATTEMPT_LOGGED",
    "AUDIT_RESULT_SAVED",
    "AUDIT_WRITE_ERROR",
    # Session
    "AUTH_SIGNED_IN",
    "AUTH_SIGNED_OUT",
    "AUTH_REGISTERED",
    # CRM
    "LEAD_CREATED",
    "LEAD_STATUS_CHANGED",
    "LEAD_DELETED",
    "PROPERTY_CREATED",
    "PROPERTY_STATUS_CHANGED",
    "PROPERTY_DELETED",
]

# ---------------------------------------------------------------------------
# Publishing lifecycle
# ---------------------------------------------------------------------------

#: A publish request passed validation and is about to fan out.
PUBLISH_START: str = "PUBLISH_START"

#: Every requested platform has settled; results are being returned.
PUBLISH_COMPLETE: str = "PUBLISH_COMPLETE"

#: The property failed the publication rules; no platform was contacted.
PUBLISH_REJECTED: str = "PUBLISH_REJECTED"

# ---------------------------------------------------------------------------
# Per-platform outcomes
# ---------------------------------------------------------------------------

#: A platform accepted the ad.
PLATFORM_SUBMIT_OK: str = "PLATFORM_SUBMIT_OK"

#: A platform completed but rejected the ad (business-level failure).
PLATFORM_SUBMIT_FAILED: str = "PLATFORM_SUBMIT_FAILED"

#: The adapter raised; converted into a failed result.
PLATFORM_FAULT: str = "PLATFORM_FAULT"

# ---------------------------------------------------------------------------
# Audit trail
# ---------------------------------------------------------------------------

#: The publish-attempt row was written to ``publishing_logs``.
AUDIT_ATTEMPT_LOGGED: str = "AUDIT_ATTEMPT_LOGGED"

#: A per-platform row was written to ``publishing_results``.
AUDIT_RESULT_SAVED: str = "AUDIT_RESULT_SAVED"

#: An audit write failed; logged and otherwise ignored.
AUDIT_WRITE_ERROR: str = "AUDIT_WRITE_ERROR"

# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

AUTH_SIGNED_IN: str = "AUTH_SIGNED_IN"
AUTH_SIGNED_OUT: str = "AUTH_SIGNED_OUT"
AUTH_REGISTERED: str = "AUTH_REGISTERED"

# ---------------------------------------------------------------------------
# CRM
# ---------------------------------------------------------------------------

LEAD_CREATED: str = "LEAD_CREATED"
LEAD_STATUS_CHANGED: str = "LEAD_STATUS_CHANGED"
LEAD_DELETED: str = "LEAD_DELETED"
PROPERTY_CREATED: str = "PROPERTY_CREATED"
PROPERTY_STATUS_CHANGED: str = "PROPERTY_STATUS_CHANGED"
PROPERTY_DELETED: str = "PROPERTY_DELETED"
