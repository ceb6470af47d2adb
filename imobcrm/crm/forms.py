"""Field-level validation for the lead, registration and login forms.

Each validator returns a ``{field: message}`` mapping; an empty mapping
means the form can be submitted.  At most one message is reported per
field, the first rule it breaks.
"""

from __future__ import annotations

import re

from imobcrm.core.formatters import digits_only
from imobcrm.core.models import LeadSource, LeadStatus

__all__ = [
    "MIN_NAME_LENGTH",
    "MIN_PASSWORD_LENGTH",
    "validate_lead_form",
    "validate_registration_form",
    "validate_login_form",
]

MIN_NAME_LENGTH: int = 2
MIN_PASSWORD_LENGTH: int = 6

_EMAIL_SHAPE = re.compile(r"\S+@\S+\.\S+")


def validate_lead_form(
    name: str,
    email: str,
    phone: str,
    source: LeadSource | str | None,
    status: LeadStatus | str | None,
) -> dict[str, str]:
    """Validate the "new lead" form."""
    errors: dict[str, str] = {}

    if not name.strip():
        errors["name"] = "Nome é obrigatório"
    elif len(name.strip()) < MIN_NAME_LENGTH:
        errors["name"] = f"Nome deve ter pelo menos {MIN_NAME_LENGTH} caracteres"

    if not email.strip():
        errors["email"] = "E-mail é obrigatório"
    elif not _EMAIL_SHAPE.search(email):
        errors["email"] = "E-mail inválido"

    if not phone.strip():
        errors["phone"] = "Telefone é obrigatório"
    elif not 10 <= len(digits_only(phone)) <= 11:
        errors["phone"] = "Telefone deve ter 10 ou 11 dígitos"

    if not source:
        errors["source"] = "Origem é obrigatória"
    elif source not in set(LeadSource):
        errors["source"] = "Origem inválida"

    if not status:
        errors["status"] = "Status é obrigatório"
    elif status not in set(LeadStatus):
        errors["status"] = "Status inválido"

    return errors


def validate_registration_form(
    name: str,
    email: str,
    phone: str,
    password: str,
    confirm_password: str,
) -> dict[str, str]:
    """Validate the sign-up form."""
    errors: dict[str, str] = {}

    if not name.strip():
        errors["name"] = "Nome é obrigatório"

    errors.update(_email_errors(email))

    if not phone:
        errors["phone"] = "Telefone é obrigatório"
    elif not 10 <= len(digits_only(phone)) <= 11:
        errors["phone"] = "Telefone inválido"

    errors.update(_password_errors(password))

    if password != confirm_password:
        errors["confirm_password"] = "As senhas não coincidem"

    return errors


def validate_login_form(email: str, password: str) -> dict[str, str]:
    """Validate the sign-in form."""
    return {**_email_errors(email), **_password_errors(password)}


def _email_errors(email: str) -> dict[str, str]:
    if not email:
        return {"email": "E-mail é obrigatório"}
    if not _EMAIL_SHAPE.search(email):
        return {"email": "E-mail inválido"}
    return {}


def _password_errors(password: str) -> dict[str, str]:
    if not password:
        return {"password": "Senha é obrigatória"}
    if len(password) < MIN_PASSWORD_LENGTH:
        return {"password": f"Senha deve ter pelo menos {MIN_PASSWORD_LENGTH} caracteres"}
    return {}
