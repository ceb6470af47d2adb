"""Unit tests for the publication rule set.

Covers:
- :func:`~imobcrm.publishing.validation.validate_property_for_publishing`
  acceptance of a complete property.
- One message per violated rule, in declaration order.
- Boundary values for title / description length, areas and prices.
"""

from __future__ import annotations

import pytest

from imobcrm.core.models import Property
from imobcrm.publishing.validation import (
    MIN_DESCRIPTION_LENGTH,
    MIN_TITLE_LENGTH,
    PUBLICATION_RULES,
    validate_property_for_publishing,
)
from tests.conftest import make_property

TITLE_MSG = "Título deve ter pelo menos 10 caracteres"
DESCRIPTION_MSG = "Descrição deve ter pelo menos 50 caracteres"
LOCATION_MSG = "Localização completa é obrigatória"
ROOMS_MSG = "Número de quartos e banheiros deve ser válido"
AREA_MSG = "Área construída deve ser maior que zero"
PRICE_MSG = "Preço de venda deve ser maior que zero"
PHOTOS_MSG = "Pelo menos uma foto é obrigatória"


class TestValidProperty:
    def test_complete_property_is_valid(self, valid_property: Property) -> None:
        outcome = validate_property_for_publishing(valid_property)
        assert outcome.is_valid is True
        assert outcome.errors == []

    def test_typical_listing_passes(self) -> None:
        """40-char title, 80-char description, full location, one photo."""
        prop = make_property(
            title="T" * 40,
            description="D" * 80,
            bedrooms=2,
            bathrooms=1,
            built_area=75,
            sale_price=350_000,
            photos=["a.jpg"],
        )
        outcome = validate_property_for_publishing(prop)
        assert outcome.is_valid
        assert outcome.errors == []

    def test_zero_bedrooms_is_allowed(self) -> None:
        """Studios have no separate bedroom; only negatives are rejected."""
        outcome = validate_property_for_publishing(make_property(bedrooms=0, bathrooms=0))
        assert outcome.is_valid


class TestSingleRuleViolations:
    def test_short_title(self) -> None:
        outcome = validate_property_for_publishing(make_property(title="Casa!"))
        assert not outcome.is_valid
        assert TITLE_MSG in outcome.errors

    def test_title_is_measured_after_trimming(self) -> None:
        outcome = validate_property_for_publishing(make_property(title="   Casa    "))
        assert outcome.errors == [TITLE_MSG]

    def test_title_at_minimum_length_passes(self) -> None:
        outcome = validate_property_for_publishing(make_property(title="x" * MIN_TITLE_LENGTH))
        assert outcome.is_valid

    def test_short_description(self) -> None:
        prop = make_property(description="x" * (MIN_DESCRIPTION_LENGTH - 1))
        assert validate_property_for_publishing(prop).errors == [DESCRIPTION_MSG]

    def test_description_at_minimum_length_passes(self) -> None:
        prop = make_property(description="x" * MIN_DESCRIPTION_LENGTH)
        assert validate_property_for_publishing(prop).is_valid

    @pytest.mark.parametrize("field", ["neighborhood", "city", "state"])
    def test_missing_location_part(self, field: str) -> None:
        prop = make_property(**{field: ""})
        assert validate_property_for_publishing(prop).errors == [LOCATION_MSG]

    @pytest.mark.parametrize(("bedrooms", "bathrooms"), [(-1, 1), (2, -1)])
    def test_negative_rooms(self, bedrooms: int, bathrooms: int) -> None:
        prop = make_property(bedrooms=bedrooms, bathrooms=bathrooms)
        assert validate_property_for_publishing(prop).errors == [ROOMS_MSG]

    @pytest.mark.parametrize("area", [0, -10])
    def test_non_positive_built_area(self, area: float) -> None:
        prop = make_property(built_area=area)
        assert validate_property_for_publishing(prop).errors == [AREA_MSG]

    @pytest.mark.parametrize("price", [0, -1])
    def test_non_positive_price(self, price: float) -> None:
        prop = make_property(sale_price=price)
        assert validate_property_for_publishing(prop).errors == [PRICE_MSG]

    def test_no_photos(self) -> None:
        prop = make_property(photos=[])
        assert validate_property_for_publishing(prop).errors == [PHOTOS_MSG]


class TestRuleOrdering:
    def test_empty_property_reports_every_rule_in_order(self) -> None:
        outcome = validate_property_for_publishing(Property(bedrooms=-1))
        assert outcome.errors == [
            TITLE_MSG,
            DESCRIPTION_MSG,
            LOCATION_MSG,
            ROOMS_MSG,
            AREA_MSG,
            PRICE_MSG,
            PHOTOS_MSG,
        ]
        assert outcome.is_valid is False

    def test_one_message_per_rule(self) -> None:
        outcome = validate_property_for_publishing(Property(bedrooms=-1, bathrooms=-1))
        assert len(outcome.errors) == len(PUBLICATION_RULES)
        assert outcome.errors.count(ROOMS_MSG) == 1

    def test_validation_never_raises_on_defaults(self) -> None:
        outcome = validate_property_for_publishing(Property())
        assert ROOMS_MSG not in outcome.errors
        assert len(outcome.errors) == 6
