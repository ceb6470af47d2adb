"""Plain-text cards for properties and leads.

The CLI prints these where the web app shows a property or lead card, and
:func:`property_share_message` is the text sent when a listing is shared
over WhatsApp.  The share text never includes the price.
"""

from __future__ import annotations

from imobcrm.core.formatters import (
    LEAD_SOURCE_LABELS,
    LEAD_STATUS_LABELS,
    PROPERTY_STATUS_LABELS,
    format_currency,
    format_date,
    format_phone,
    whatsapp_link,
)
from imobcrm.core.models import Lead, Property

__all__ = [
    "lead_whatsapp_link",
    "property_share_link",
    "property_share_message",
    "render_lead_card",
    "render_property_card",
]


def _area(value: float) -> str:
    return f"{value:g}".replace(".", ",")


def _location(prop: Property) -> str:
    return f"{prop.neighborhood}, {prop.city}/{prop.state}"


def render_property_card(prop: Property) -> str:
    """Render *prop* the way the property list shows it.

    Example::

        [Disponível] Casa ampla com piscina no Jardim Europa
        R$ 850.000,00
        Jardim Europa, São Paulo/SP
        Quartos: 3 | Banheiros: 2 | Vagas: 2
        Área Construída: 180 m² | Área Total: 300 m²
        Adicionado em 17/10/2026
    """
    status = PROPERTY_STATUS_LABELS.get(prop.status, str(prop.status))
    lines = [
        f"[{status}] {prop.title}",
        format_currency(prop.sale_price),
        _location(prop),
        f"Quartos: {prop.bedrooms} | Banheiros: {prop.bathrooms} | Vagas: {prop.parking_spaces}",
        f"Área Construída: {_area(prop.built_area)} m² | "
        f"Área Total: {_area(prop.total_area)} m²",
    ]
    if prop.created_at is not None:
        lines.append(f"Adicionado em {format_date(prop.created_at)}")
    return "\n".join(lines)


def property_share_message(prop: Property) -> str:
    """WhatsApp text advertising *prop*, without its price."""
    return (
        f"🏠 *{prop.title}*\n\n"
        f"📍 {_location(prop)}\n\n"
        f"🛏️ {prop.bedrooms} quartos\n"
        f"🚿 {prop.bathrooms} banheiros\n"
        f"🚗 {prop.parking_spaces} vagas\n"
        f"📏 {_area(prop.built_area)}m² de área construída\n\n"
        "Entre em contato para mais informações!"
    )


def property_share_link(prop: Property, phone: str = "") -> str:
    """``wa.me`` link carrying :func:`property_share_message`.

    With no *phone* the link opens WhatsApp's contact picker.
    """
    return whatsapp_link(phone, property_share_message(prop))


def lead_whatsapp_link(lead: Lead) -> str:
    return whatsapp_link(lead.phone)


def render_lead_card(lead: Lead) -> str:
    """Render *lead* the way the lead list shows it.

    Example::

        Maria Silva [Quente]
        Adicionado em 17/10/2026
        Telefone: (11) 98765-4321
        E-mail: maria@example.com
        Origem: WhatsApp
        WhatsApp: https://wa.me/5511987654321
    """
    status = LEAD_STATUS_LABELS.get(lead.status, "Desconhecido")
    lines = [f"{lead.name} [{status}]"]
    if lead.created_at is not None:
        lines.append(f"Adicionado em {format_date(lead.created_at)}")
    lines += [
        f"Telefone: {format_phone(lead.phone)}",
        f"E-mail: {lead.email}",
        f"Origem: {LEAD_SOURCE_LABELS.get(lead.source, 'Outro')}",
    ]
    if lead.notes:
        lines.append(f"Observações: {lead.notes}")
    lines.append(f"WhatsApp: {lead_whatsapp_link(lead)}")
    return "\n".join(lines)
