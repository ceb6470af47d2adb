"""Property publishing: publication rules, platform adapters, orchestration."""

from imobcrm.publishing.audit import PublishingAuditLog
from imobcrm.publishing.form import PublishForm, render_results
from imobcrm.publishing.service import PublishingService
from imobcrm.publishing.validation import validate_property_for_publishing

__all__ = [
    "PublishForm",
    "PublishingAuditLog",
    "PublishingService",
    "render_results",
    "validate_property_for_publishing",
]
