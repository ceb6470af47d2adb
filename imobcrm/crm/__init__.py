"""CRM features: session, leads, properties, form validation, dashboard, text cards."""

from imobcrm.crm.dashboard import DashboardSummary, build_dashboard
from imobcrm.crm.leads import LeadStore
from imobcrm.crm.properties import PropertyStore
from imobcrm.crm.session import AuthService

__all__ = [
    "AuthService",
    "DashboardSummary",
    "LeadStore",
    "PropertyStore",
    "build_dashboard",
]
