"""imobcrm core domain models.

This module defines every data shape shared across the publishing, CRM and
storage layers: the :class:`Property` listing record, the publishing request
and result types, and the lead / profile records of the CRM.

Rows coming back from a :class:`~imobcrm.storage.gateway.DatastoreGateway`
are plain ``dict`` objects; callers turn them into models with
``Model.model_validate(row)``.  Unknown columns are ignored so a backend can
carry extra bookkeeping fields without breaking the models.

Typical usage::

    from imobcrm.core.models import ContactInfo, Platform, PublishingOptions

    options = PublishingOptions(
        platforms=[Platform.ALL],
        contact_info=ContactInfo(
            name="Ana Souza", phone="11987654321", email="ana@imob.com.br"
        ),
    )
    options.concrete_platforms()
    # [<Platform.OLX: 'olx'>, <Platform.ZAPIMOVEIS: 'zapimoveis'>, ...]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = [
    # Publishing
    "Platform",
    "CONCRETE_PLATFORMS",
    "PLATFORM_DISPLAY_NAMES",
    "platform_display_name",
    "Property",
    "PropertyStatus",
    "ContactInfo",
    "PublishingOptions",
    "PublishingResult",
    "ValidationOutcome",
    "AdPayload",
    # CRM
    "LeadStatus",
    "LeadSource",
    "Lead",
    "LeadCreate",
    "UserRole",
    "Profile",
]

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Platform(StrEnum):
    """Listing marketplaces a property can be published to.

    ``ALL`` is a request-side shorthand only; it expands to every concrete
    platform and never appears on a :class:`PublishingResult`.
    """

    OLX = "olx"
    ZAPIMOVEIS = "zapimoveis"
    VIVAREAL = "vivareal"
    ALL = "all"


#: Concrete platforms in their canonical order ("all" expands to this).
CONCRETE_PLATFORMS: tuple[Platform, ...] = (
    Platform.OLX,
    Platform.ZAPIMOVEIS,
    Platform.VIVAREAL,
)

PLATFORM_DISPLAY_NAMES: dict[Platform, str] = {
    Platform.OLX: "OLX",
    Platform.ZAPIMOVEIS: "ZapImóveis",
    Platform.VIVAREAL: "VivaReal",
    Platform.ALL: "Todas as Plataformas",
}


def platform_display_name(platform: str) -> str:
    """Return the marketplace's display name, or *platform* itself if unknown."""
    try:
        return PLATFORM_DISPLAY_NAMES[Platform(platform)]
    except ValueError:
        return str(platform)


class PropertyStatus(StrEnum):
    """Commercial status of a property in the agent's portfolio."""

    AVAILABLE = "available"
    RESERVED = "reserved"
    SOLD = "sold"


class LeadStatus(StrEnum):
    """Three-tier qualification pipeline for leads."""

    COLD = "cold"
    WARM = "warm"
    HOT = "hot"


class LeadSource(StrEnum):
    """Channel through which a lead arrived."""

    MANUAL = "manual"
    WHATSAPP = "whatsapp"
    REFERRAL = "referral"
    WEBSITE = "website"
    OTHER = "other"


class UserRole(StrEnum):
    """Account type; agencies see the data of every agent they own."""

    AGENT = "agent"
    AGENCY = "agency"


# ---------------------------------------------------------------------------
# Property
# ---------------------------------------------------------------------------


class Property(BaseModel):
    """A real-estate listing in an agent's portfolio.

    Numeric and text fields carry no range constraints, so a draft listing
    may be incomplete.  The publication rules in
    :mod:`imobcrm.publishing.validation` report the gaps.

    Attributes:
        id: Datastore identifier.  Blank for a record not yet persisted.
        title: Listing headline.
        description: Free-text body.
        sale_price: Asking price in BRL.
        appraisal_value: Optional appraised value in BRL.
        address: Optional street address.
        neighborhood: Neighbourhood (bairro).
        city: City name.
        state: State abbreviation (UF), e.g. ``"SP"``.
        bedrooms: Number of bedrooms.
        bathrooms: Number of bathrooms.
        parking_spaces: Number of parking spaces.
        built_area: Built area in square metres.
        total_area: Total plot area in square metres.
        benefits: Ordered list of selling points ("piscina", "churrasqueira").
        photos: Ordered list of photo URIs.
        status: Commercial status.
        owner_id: Profile id of the owning agent.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    title: str = ""
    description: str = ""
    sale_price: float = 0
    appraisal_value: float | None = None
    address: str | None = None
    neighborhood: str = ""
    city: str = ""
    state: str = ""
    bedrooms: int = 0
    bathrooms: int = 0
    parking_spaces: int = 0
    built_area: float = 0
    total_area: float = 0
    benefits: list[str] = Field(default_factory=list)
    photos: list[str] = Field(default_factory=list)
    status: PropertyStatus = PropertyStatus.AVAILABLE
    owner_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("benefits", "photos", mode="before")
    @classmethod
    def _none_to_empty_list(cls, v: object) -> object:
        """Datastores may hand back NULL for an empty array column."""
        return [] if v is None else v


# ---------------------------------------------------------------------------
# Publishing request / result
# ---------------------------------------------------------------------------


class ContactInfo(BaseModel):
    """Contact shown on the published ad.  All three fields are required."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)

    @field_validator("name", "phone", "email", mode="before")
    @classmethod
    def _strip(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip()
        return v


class PublishingOptions(BaseModel):
    """What to publish, where, and with which contact details.

    Attributes:
        platforms: Requested platforms.  ``Platform.ALL`` expands to every
            concrete platform; duplicates are collapsed.
        include_price: Show the sale price on the ad.
        include_photos: Attach the property's photos to the ad.
        custom_description: Overrides the property's own description when
            set.  Blank strings are treated as absent.
        contact_info: Contact block printed on the ad.
    """

    platforms: list[Platform] = Field(..., min_length=1)
    include_price: bool = True
    include_photos: bool = True
    custom_description: str | None = None
    contact_info: ContactInfo

    @field_validator("custom_description", mode="before")
    @classmethod
    def _blank_description_to_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def concrete_platforms(self) -> list[Platform]:
        """Expand ``all`` and drop duplicates, keeping first-request order."""
        if Platform.ALL in self.platforms:
            return list(CONCRETE_PLATFORMS)
        seen: list[Platform] = []
        for platform in self.platforms:
            if platform not in seen:
                seen.append(platform)
        return seen

    def description_for(self, prop: Property) -> str:
        """Return the ad body: the custom override or the property's own text."""
        return self.custom_description or prop.description


class PublishingResult(BaseModel):
    """Outcome of submitting one property to one concrete platform.

    ``ad_url`` is only populated on success by convention; the model does not
    enforce it.
    """

    model_config = ConfigDict(frozen=True)

    platform: Platform
    success: bool
    message: str
    ad_id: str | None = None
    ad_url: str | None = None

    @field_validator("platform")
    @classmethod
    def _concrete_only(cls, v: Platform) -> Platform:
        if v is Platform.ALL:
            raise ValueError("a publishing result must name a concrete platform")
        return v


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of running the publication rules against a property.

    Attributes:
        is_valid: ``True`` iff :attr:`errors` is empty.
        errors: Ordered rule-violation messages, one per failed rule.
    """

    is_valid: bool
    errors: list[str] = field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: list[str]) -> ValidationOutcome:
        return cls(is_valid=not errors, errors=list(errors))


class AdPayload(BaseModel):
    """The listing body a platform adapter submits.

    Built from a :class:`Property` and :class:`PublishingOptions` by
    :meth:`~imobcrm.publishing.adapters.base.BasePlatformAdapter.build_payload`;
    ``price`` and ``photos`` are left out when the options say so.
    """

    property_id: str
    title: str
    description: str
    price: float | None = None
    photos: list[str] = Field(default_factory=list)
    neighborhood: str
    city: str
    state: str
    bedrooms: int
    bathrooms: int
    parking_spaces: int
    built_area: float
    total_area: float
    benefits: list[str] = Field(default_factory=list)
    contact: ContactInfo


# ---------------------------------------------------------------------------
# CRM records
# ---------------------------------------------------------------------------


class LeadCreate(BaseModel):
    """Fields a user supplies when registering a new lead."""

    name: str
    email: str
    phone: str
    source: LeadSource
    status: LeadStatus
    notes: str | None = None


class Lead(BaseModel):
    """A prospective client tracked through the cold/warm/hot pipeline."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    email: str
    phone: str
    source: LeadSource
    status: LeadStatus
    agent_id: str
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Profile(BaseModel):
    """Public profile of an agent or agency, keyed by the auth user id."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    email: str
    phone: str
    role: UserRole
    photo_url: str | None = None
    agency_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
