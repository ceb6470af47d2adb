"""Publication rules a property must satisfy before it can be advertised.

:func:`validate_property_for_publishing` is pure and never raises: every rule
is evaluated, and each failing rule contributes exactly one message, in the
order the rules are declared in :data:`PUBLICATION_RULES`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from imobcrm.core.models import Property, ValidationOutcome

__all__ = [
    "MIN_TITLE_LENGTH",
    "MIN_DESCRIPTION_LENGTH",
    "PUBLICATION_RULES",
    "validate_property_for_publishing",
]

logger = logging.getLogger(__name__)

MIN_TITLE_LENGTH: int = 10
MIN_DESCRIPTION_LENGTH: int = 50


def _has_title(prop: Property) -> bool:
    return len(prop.title.strip()) >= MIN_TITLE_LENGTH


def _has_description(prop: Property) -> bool:
    return len(prop.description.strip()) >= MIN_DESCRIPTION_LENGTH


def _has_location(prop: Property) -> bool:
    return bool(prop.neighborhood and prop.city and prop.state)


def _has_valid_rooms(prop: Property) -> bool:
    return prop.bedrooms >= 0 and prop.bathrooms >= 0


def _has_built_area(prop: Property) -> bool:
    return prop.built_area > 0


def _has_price(prop: Property) -> bool:
    return prop.sale_price > 0


def _has_photos(prop: Property) -> bool:
    return len(prop.photos) > 0


#: ``(predicate, message)`` pairs in reporting order.
PUBLICATION_RULES: tuple[tuple[Callable[[Property], bool], str], ...] = (
    (_has_title, f"Título deve ter pelo menos {MIN_TITLE_LENGTH} caracteres"),
    (_has_description, f"Descrição deve ter pelo menos {MIN_DESCRIPTION_LENGTH} caracteres"),
    (_has_location, "Localização completa é obrigatória"),
    (_has_valid_rooms, "Número de quartos e banheiros deve ser válido"),
    (_has_built_area, "Área construída deve ser maior que zero"),
    (_has_price, "Preço de venda deve ser maior que zero"),
    (_has_photos, "Pelo menos uma foto é obrigatória"),
)


def validate_property_for_publishing(prop: Property) -> ValidationOutcome:
    """Check *prop* against every publication rule.

    Args:
        prop: The listing to check.

    Returns:
        A :class:`~imobcrm.core.models.ValidationOutcome`; ``errors`` holds
        one message per violated rule and is empty iff ``is_valid``.
    """
    errors = [message for rule, message in PUBLICATION_RULES if not rule(prop)]
    if errors:
        logger.debug(
            "Property %s failed %d publication rule(s)", prop.id or "<new>", len(errors)
        )
    return ValidationOutcome.from_errors(errors)
