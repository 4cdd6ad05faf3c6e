"""
Status normalisation – maps raw (Spanish or English) status tokens
to the canonical evaluation status.
"""

import logging

from evalconsole.models import CanonicalStatus

logger = logging.getLogger(__name__)

STATUS_ALIASES = {
    "pendiente": CanonicalStatus.PENDING,
    "pending": CanonicalStatus.PENDING,
    "en_progreso": CanonicalStatus.IN_PROGRESS,
    "in_progress": CanonicalStatus.IN_PROGRESS,
    "realizada": CanonicalStatus.COMPLETED,
    "completed": CanonicalStatus.COMPLETED,
    "atrasada": CanonicalStatus.OVERDUE,
    "overdue": CanonicalStatus.OVERDUE,
}


def normalize_status(raw) -> CanonicalStatus:
    """Return the canonical status for *raw*; unknown tokens become PENDING."""
    token = str(raw).strip().lower() if raw is not None else ""
    status = STATUS_ALIASES.get(token)
    if status is None:
        logger.warning("Unrecognized evaluation status %r, treating as pending", raw)
        return CanonicalStatus.PENDING
    return status
