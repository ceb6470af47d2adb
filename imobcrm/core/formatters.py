"""Brazilian-locale display helpers.

Pure functions behind the text cards in :mod:`imobcrm.crm.cards` and the
dashboard labels:

:func:`format_currency`: BRL amount, e.g. ``R$ 350.000,00``.
:func:`format_date`: ``dd/mm/yyyy``.
:func:`format_phone`: ``(11) 98765-4321`` / ``(11) 3456-7890``.
:func:`whatsapp_link`: ``https://wa.me/55...`` deep link.

The label tables map enum values to the Portuguese strings shown to users.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from urllib.parse import quote

from imobcrm.core.models import LeadSource, LeadStatus, PropertyStatus

__all__ = [
    "format_currency",
    "format_date",
    "format_phone",
    "whatsapp_link",
    "digits_only",
    "LEAD_STATUS_LABELS",
    "LEAD_SOURCE_LABELS",
    "PROPERTY_STATUS_LABELS",
]

logger = logging.getLogger(__name__)

_NON_DIGIT = re.compile(r"\D")

#: Country calling code prepended to WhatsApp numbers that lack one.
BRAZIL_COUNTRY_CODE: str = "55"

#: Characters encodeURIComponent leaves unescaped, besides letters, digits and "_.-~".
_URI_COMPONENT_SAFE = "!'()*"

LEAD_STATUS_LABELS: dict[LeadStatus, str] = {
    LeadStatus.COLD: "Frio",
    LeadStatus.WARM: "Morno",
    LeadStatus.HOT: "Quente",
}

LEAD_SOURCE_LABELS: dict[LeadSource, str] = {
    LeadSource.MANUAL: "Manual",
    LeadSource.WHATSAPP: "WhatsApp",
    LeadSource.REFERRAL: "Indicação",
    LeadSource.WEBSITE: "Site",
    LeadSource.OTHER: "Outro",
}

PROPERTY_STATUS_LABELS: dict[PropertyStatus, str] = {
    PropertyStatus.AVAILABLE: "Disponível",
    PropertyStatus.RESERVED: "Reservado",
    PropertyStatus.SOLD: "Vendido",
}


def digits_only(value: str) -> str:
    """Strip every non-digit character from *value*."""
    return _NON_DIGIT.sub("", value)


def format_currency(value: float) -> str:
    """Format *value* as Brazilian reais.

    Examples:
        >>> format_currency(350000)
        'R$ 350.000,00'
        >>> format_currency(-12.5)
        '-R$ 12,50'
    """
    # Render with US separators, then swap "," and "." for pt-BR.
    us = f"{abs(value):,.2f}"
    br = us.replace(",", "_").replace(".", ",").replace("_", ".")
    sign = "-" if value < 0 else ""
    return f"{sign}R$ {br}"


def format_date(value: date | datetime | str) -> str:
    """Format a date (or ISO-8601 string) as ``dd/mm/yyyy``.

    Raises:
        ValueError: If *value* is a string that is not valid ISO-8601.
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    return value.strftime("%d/%m/%Y")


def format_phone(phone: str) -> str:
    """Format a Brazilian phone number with area code.

    Eleven digits (mobile) become ``(XX) XXXXX-XXXX``; ten digits (landline)
    become ``(XX) XXXX-XXXX``.  Anything else is returned unchanged.
    """
    cleaned = digits_only(phone)
    if len(cleaned) == 11:
        return f"({cleaned[:2]}) {cleaned[2:7]}-{cleaned[7:]}"
    if len(cleaned) == 10:
        return f"({cleaned[:2]}) {cleaned[2:6]}-{cleaned[6:]}"
    return phone


def whatsapp_link(phone: str, message: str | None = None) -> str:
    """Build a ``wa.me`` link, adding the Brazilian country code if missing.

    A blank *phone* yields ``https://wa.me/?text=...``, which lets the user
    pick the recipient.  *message* is percent-encoded like JavaScript's
    ``encodeURIComponent``.
    """
    cleaned = digits_only(phone)
    if cleaned and not cleaned.startswith(BRAZIL_COUNTRY_CODE):
        cleaned = f"{BRAZIL_COUNTRY_CODE}{cleaned}"
    if message:
        return f"https://wa.me/{cleaned}?text={quote(message, safe=_URI_COMPONENT_SAFE)}"
    return f"https://wa.me/{cleaned}"
