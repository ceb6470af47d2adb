"""imobcrm command-line entry-point.

Usage:
    python -m imobcrm validate PROPERTY_JSON
    python -m imobcrm publish PROPERTY_JSON --contact-name NAME
        --contact-phone PHONE --contact-email EMAIL
        [--platform {all,olx,zapimoveis,vivareal} ...]
        [--no-price] [--no-photos] [--description TEXT] [--seed N]
    python -m imobcrm card PROPERTY_JSON [--phone PHONE]
    python -m imobcrm lead LEAD_JSON

``PROPERTY_JSON`` is a file holding one property object (the same fields as
a ``properties`` row); ``LEAD_JSON`` likewise holds one lead.  ``validate``
and ``publish`` print the property card first.  ``publish`` runs the
publication rules and then publishes through the simulated platform
adapters, writing the audit trail to the configured datastore.  ``card``
adds a WhatsApp link sharing the listing (to *PHONE*, or to a contact
picked in WhatsApp).

Logging level and format come from ``--log-level`` / ``--log-format``,
then from the settings (``LOG_LEVEL`` / ``LOG_FORMAT`` in the environment
or ``.env``).

Exit status is 1 when the property fails the publication rules, when the
input cannot be read, or on a configuration error.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
import sys
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from imobcrm.core import configure_logging
from imobcrm.core.exceptions import ConfigError, PropertyValidationError
from imobcrm.core.models import ContactInfo, Lead, Platform, Property, PublishingOptions
from imobcrm.core.settings import Settings
from imobcrm.crm.cards import property_share_link, render_lead_card, render_property_card

logger = logging.getLogger(__name__)

_ModelT = TypeVar("_ModelT", bound=BaseModel)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imobcrm",
        description="Real-estate CRM: validate and publish property listings.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        metavar="LEVEL",
        help="Override LOG_LEVEL env var (DEBUG|INFO|WARNING|ERROR).",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        metavar="FORMAT",
        help="Override LOG_FORMAT env var (text|json).",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    validate = commands.add_parser(
        "validate", help="Check a property against the publication rules."
    )
    validate.add_argument("property_json", type=Path, metavar="PROPERTY_JSON")

    publish = commands.add_parser("publish", help="Validate and publish a property.")
    publish.add_argument("property_json", type=Path, metavar="PROPERTY_JSON")
    publish.add_argument(
        "--platform",
        dest="platforms",
        action="append",
        choices=[str(p) for p in Platform],
        help="Target platform; repeatable.  Defaults to 'all'.",
    )
    publish.add_argument("--no-price", action="store_true", help="Hide the sale price on the ad.")
    publish.add_argument("--no-photos", action="store_true", help="Publish without photos.")
    publish.add_argument("--description", default=None, help="Custom ad description.")
    publish.add_argument("--contact-name", required=True)
    publish.add_argument("--contact-phone", required=True)
    publish.add_argument("--contact-email", required=True)
    publish.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed the simulation's random source for a reproducible run.",
    )

    card = commands.add_parser("card", help="Show a property card and its WhatsApp share link.")
    card.add_argument("property_json", type=Path, metavar="PROPERTY_JSON")
    card.add_argument("--phone", default="", help="Share with this number instead of picking.")

    lead = commands.add_parser("lead", help="Show a lead card.")
    lead.add_argument("lead_json", type=Path, metavar="LEAD_JSON")
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry-point registered in ``pyproject.toml``."""
    args = build_parser().parse_args(argv)

    try:
        settings = Settings()
        configure_logging(
            level=args.log_level or settings.log_level,
            fmt=args.log_format or settings.log_format,
        )
    except ValueError as exc:
        print(f"imobcrm: configuration error: {exc}", file=sys.stderr)  # noqa: T201
        sys.exit(1)

    if args.command == "lead":
        lead = _load_or_exit(args.lead_json, Lead)
        print(render_lead_card(lead))  # noqa: T201
        sys.exit(0)

    prop = _load_or_exit(args.property_json, Property)
    print(render_property_card(prop))  # noqa: T201

    if args.command == "card":
        print(f"Compartilhar no WhatsApp: {property_share_link(prop, args.phone)}")  # noqa: T201
        sys.exit(0)

    print()  # noqa: T201
    if args.command == "validate":
        sys.exit(_run_validate(prop))

    try:
        sys.exit(asyncio.run(_run_publish(prop, args, settings)))
    except ConfigError as exc:
        logger.critical("Configuration error: %s", exc)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted, exiting.")
        sys.exit(130)


def _load_or_exit(path: Path, model: type[_ModelT]) -> _ModelT:
    try:
        return model.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as exc:
        print(f"imobcrm: cannot read {path}: {exc}", file=sys.stderr)  # noqa: T201
        sys.exit(1)


def _run_validate(prop: Property) -> int:
    from imobcrm.publishing.validation import validate_property_for_publishing  # noqa: PLC0415

    outcome = validate_property_for_publishing(prop)
    if outcome.is_valid:
        print("Imóvel pronto para publicação.")  # noqa: T201
        return 0
    print("Erro na validação:")  # noqa: T201
    for error in outcome.errors:
        print(f"- {error}")  # noqa: T201
    return 1


async def _run_publish(prop: Property, args: argparse.Namespace, settings: Settings) -> int:
    # Only `publish` needs the adapters and a live datastore.
    from imobcrm.publishing.adapters import build_default_adapters  # noqa: PLC0415
    from imobcrm.publishing.form import render_results  # noqa: PLC0415
    from imobcrm.publishing.service import PublishingService  # noqa: PLC0415
    from imobcrm.storage import open_gateway  # noqa: PLC0415

    try:
        options = PublishingOptions(
            platforms=args.platforms or [Platform.ALL],
            include_price=not args.no_price,
            include_photos=not args.no_photos,
            custom_description=args.description,
            contact_info=ContactInfo(
                name=args.contact_name,
                phone=args.contact_phone,
                email=args.contact_email,
            ),
        )
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc

    rng = random.Random(args.seed) if args.seed is not None else None
    datastore, _auth = await open_gateway(settings)
    try:
        async with PublishingService(
            datastore, build_default_adapters(settings, rng=rng)
        ) as service:
            results = await service.validate_and_publish(prop, options)
    except PropertyValidationError as exc:
        print(exc)  # noqa: T201
        return 1
    finally:
        await datastore.close()

    print(render_results(results))  # noqa: T201
    return 0


if __name__ == "__main__":
    main()
