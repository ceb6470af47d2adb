"""Unit tests for CRM form validators and the dashboard summary."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from imobcrm.core.models import Lead, LeadSource, LeadStatus, PropertyStatus
from imobcrm.crm.dashboard import LATEST_COUNT, build_dashboard
from imobcrm.crm.forms import (
    validate_lead_form,
    validate_login_form,
    validate_registration_form,
)
from tests.conftest import make_property


# ---------------------------------------------------------------------------
# Lead form
# ---------------------------------------------------------------------------


class TestLeadForm:
    def test_valid(self) -> None:
        errors = validate_lead_form(
            "Carlos Lima", "carlos@example.com", "(11) 91234-5678", "whatsapp", "warm"
        )
        assert errors == {}

    def test_all_blank(self) -> None:
        errors = validate_lead_form("", " ", "", None, None)
        assert errors == {
            "name": "Nome é obrigatório",
            "email": "E-mail é obrigatório",
            "phone": "Telefone é obrigatório",
            "source": "Origem é obrigatória",
            "status": "Status é obrigatório",
        }

    def test_short_name(self) -> None:
        errors = validate_lead_form("C", "c@example.com", "11912345678", "manual", "cold")
        assert errors == {"name": "Nome deve ter pelo menos 2 caracteres"}

    @pytest.mark.parametrize("email", ["carlos", "carlos@example", "carlos @x.com"])
    def test_bad_email(self, email: str) -> None:
        errors = validate_lead_form("Carlos", email, "11912345678", "manual", "cold")
        assert errors == {"email": "E-mail inválido"}

    @pytest.mark.parametrize("phone", ["123456789", "119123456789"])
    def test_phone_digit_count(self, phone: str) -> None:
        errors = validate_lead_form("Carlos", "c@example.com", phone, "manual", "cold")
        assert errors == {"phone": "Telefone deve ter 10 ou 11 dígitos"}

    def test_landline_accepted(self) -> None:
        assert validate_lead_form("Carlos", "c@example.com", "1134567890", "website", "hot") == {}

    def test_unknown_source(self) -> None:
        errors = validate_lead_form("Carlos", "c@example.com", "1134567890", "site", "hot")
        assert errors == {"source": "Origem inválida"}

    def test_unknown_status(self) -> None:
        errors = validate_lead_form("Carlos", "c@example.com", "1134567890", "other", "burning")
        assert errors == {"status": "Status inválido"}


# ---------------------------------------------------------------------------
# Registration / login
# ---------------------------------------------------------------------------


class TestRegistrationForm:
    def test_valid(self) -> None:
        assert (
            validate_registration_form(
                "Ana Souza", "ana@imob.com.br", "11987654321", "segredo1", "segredo1"
            )
            == {}
        )

    def test_errors(self) -> None:
        errors = validate_registration_form("", "ana", "119", "abc", "abd")
        assert errors == {
            "name": "Nome é obrigatório",
            "email": "E-mail inválido",
            "phone": "Telefone inválido",
            "password": "Senha deve ter pelo menos 6 caracteres",
            "confirm_password": "As senhas não coincidem",
        }


class TestLoginForm:
    def test_valid(self) -> None:
        assert validate_login_form("ana@imob.com.br", "segredo1") == {}

    def test_blank(self) -> None:
        assert validate_login_form("", "") == {
            "email": "E-mail é obrigatório",
            "password": "Senha é obrigatória",
        }


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


def _lead(name: str, status: LeadStatus, source: LeadSource, day: int) -> Lead:
    return Lead(
        id=name,
        name=name,
        email=f"{name.lower()}@example.com",
        phone="11912345678",
        source=source,
        status=status,
        agent_id="agent-1",
        created_at=datetime(2026, 5, day, tzinfo=UTC),
    )


class TestDashboard:
    def test_empty(self) -> None:
        summary = build_dashboard([], [])

        assert summary.total_leads == 0
        assert summary.latest_leads == []
        assert summary.lead_status_chart.labels == ["Frios", "Mornos", "Quentes"]
        assert summary.lead_status_chart.values == [0, 0, 0]
        assert summary.lead_source_chart.labels == []

    def test_counts_and_charts(self) -> None:
        leads = [
            _lead("A", LeadStatus.HOT, LeadSource.WHATSAPP, 1),
            _lead("B", LeadStatus.COLD, LeadSource.REFERRAL, 2),
            _lead("C", LeadStatus.HOT, LeadSource.WHATSAPP, 3),
            _lead("D", LeadStatus.WARM, LeadSource.MANUAL, 4),
        ]
        properties = [
            make_property(id="p1", created_at=datetime(2026, 5, 1, tzinfo=UTC)),
            make_property(
                id="p2",
                status=PropertyStatus.SOLD,
                created_at=datetime(2026, 5, 2, tzinfo=UTC),
            ),
        ]

        summary = build_dashboard(leads, properties)

        assert (summary.cold_leads, summary.warm_leads, summary.hot_leads) == (1, 1, 2)
        assert summary.total_leads == 4
        assert summary.total_properties == 2
        assert summary.available_properties == 1
        assert summary.lead_status_chart.values == [1, 1, 2]
        assert summary.lead_source_chart.labels == ["WhatsApp", "Indicação", "Manual"]
        assert summary.lead_source_chart.values == [2, 1, 1]
        assert [lead.id for lead in summary.latest_leads] == ["D", "C", "B"]
        assert len(summary.latest_leads) == LATEST_COUNT
        assert [p.id for p in summary.latest_properties] == ["p2", "p1"]
