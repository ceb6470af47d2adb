"""Headless model of the "publish property" dialog.

:class:`PublishForm` holds the state a user edits before publishing one
property (platform selection, price/photo toggles, an optional custom
description and the contact block) and drives
:class:`~imobcrm.publishing.service.PublishingService` on submit.
:func:`render_results` turns the outcome into the per-platform text summary
shown afterwards.

Platform selection rules:

* The selection starts as ``["all"]``.
* Toggling ``all`` always selects ``all`` alone.
* Toggling a concrete platform first removes ``all``, then adds or removes
  that platform.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from imobcrm.core.models import (
    ContactInfo,
    Platform,
    Profile,
    Property,
    PublishingOptions,
    PublishingResult,
    platform_display_name,
)
from imobcrm.publishing.service import PublishingService

__all__ = ["PublishForm", "render_results"]

logger = logging.getLogger(__name__)


class PublishForm:
    """Editable publish request for a single property.

    Args:
        prop: The property being published.
        profile: Signed-in user's profile; pre-fills the contact block.
    """

    def __init__(self, prop: Property, profile: Profile | None = None) -> None:
        self.property = prop
        self.platforms: list[Platform] = [Platform.ALL]
        self.include_price: bool = True
        self.include_photos: bool = True
        self.custom_description: str = ""
        self.contact_name: str = profile.name if profile else ""
        self.contact_phone: str = profile.phone if profile else ""
        self.contact_email: str = profile.email if profile else ""
        self.is_publishing: bool = False
        self.results: list[PublishingResult] = []

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def toggle_platform(self, platform: Platform | str) -> None:
        """Apply one click on a platform checkbox."""
        platform = Platform(platform)
        if platform is Platform.ALL:
            self.platforms = [Platform.ALL]
            return

        selected = [p for p in self.platforms if p is not Platform.ALL]
        if platform in selected:
            selected.remove(platform)
        else:
            selected.append(platform)
        self.platforms = selected

    def is_selected(self, platform: Platform | str) -> bool:
        return Platform(platform) in self.platforms

    @property
    def can_submit(self) -> bool:
        """``True`` when at least one platform and every contact field is set."""
        return bool(self.platforms) and all(
            value.strip()
            for value in (self.contact_name, self.contact_phone, self.contact_email)
        )

    @property
    def show_results(self) -> bool:
        return bool(self.results)

    def to_options(self) -> PublishingOptions:
        """Build the :class:`PublishingOptions` for the current state.

        Raises:
            pydantic.ValidationError: If no platform is selected or a contact
                field is blank.
        """
        return PublishingOptions(
            platforms=list(self.platforms),
            include_price=self.include_price,
            include_photos=self.include_photos,
            custom_description=self.custom_description,
            contact_info=ContactInfo(
                name=self.contact_name,
                phone=self.contact_phone,
                email=self.contact_email,
            ),
        )

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def submit(self, service: PublishingService) -> list[PublishingResult]:
        """Validate the property, then publish it with the current options.

        The latest results replace any earlier ones.

        Raises:
            PropertyValidationError: If the property fails the publication
                rules.  The previous results are kept.
        """
        options = self.to_options()
        self.is_publishing = True
        try:
            self.results = await service.validate_and_publish(self.property, options)
        finally:
            self.is_publishing = False
        return self.results

    def back_to_form(self) -> None:
        """Leave the results view so the user can publish again."""
        self.results = []


def render_results(results: Iterable[PublishingResult]) -> str:
    """Render one block of text per platform outcome.

    Example::

        ✓ OLX: Anúncio publicado com sucesso no OLX
          ID: olx_1760700000000_k3j9x0a1b
          Ver anúncio: https://olx.com.br/anuncio/olx_1760700000000_k3j9x0a1b
        ✗ VivaReal: Erro na publicação: Falha na autenticação
    """
    lines: list[str] = []
    for result in results:
        mark = "✓" if result.success else "✗"
        lines.append(f"{mark} {platform_display_name(result.platform)}: {result.message}")
        if result.ad_id:
            lines.append(f"  ID: {result.ad_id}")
        if result.success and result.ad_url:
            lines.append(f"  Ver anúncio: {result.ad_url}")
    return "\n".join(lines)
