from __future__ import annotations

import logging
from typing import ClassVar, Optional

from landscaper.catalog import CATALOG_PATH, CatalogEntity, parse_catalog
from landscaper.errors import ParseError
from landscaper.models import ChangeSet, Repository, UpdateFile

from .base import StrategyContext, fetch_optional, show_diff

logger = logging.getLogger(__name__)

README_PATH = "README.md"


def badge_lines(entity: CatalogEntity, *, portal_url: str, portal_name: str) -> str:
    kind = entity.kind
    name = entity.metadata.name
    owner = entity.spec.owner
    entity_url = f"{portal_url}/catalog/default/{kind}/{name}"
    badge_url = f"{portal_url}/api/badges/entity/default/{kind}/{name}/badge"
    return (
        f"[![Link to {name} in {portal_name}, {kind}: {name}]"
        f'({badge_url}/pingback "Link to {name} in {portal_name}")]({entity_url})\n'
        f"[![Entity owner badge, owner: {owner}]"
        f'({badge_url}/owner "Entity owner badge")]({entity_url})\n'
    )


class AddBadgeStrategy:
    name: ClassVar[str] = "add-badges"
    title: ClassVar[str] = "[ci-skip] docs: Add ownership badges to readme"
    sort: ClassVar[Optional[str]] = "updated"
    direction: ClassVar[Optional[str]] = "desc"

    def compute_changes(self, ctx: StrategyContext, repository: Repository) -> ChangeSet:
        readme = fetch_optional(ctx, repository, README_PATH)
        if readme is None:
            logger.info("%s does not have a %s", repository.name, README_PATH)
            return ChangeSet()

        if ctx.settings.badge_prefix in readme.content:
            logger.info("%s already has a badge, skipping", repository.name)
            return ChangeSet()

        catalog = fetch_optional(ctx, repository, CATALOG_PATH)
        if catalog is None:
            logger.info("%s does not have %s", repository.name, CATALOG_PATH)
            return ChangeSet()

        try:
            entity = parse_catalog(catalog.content)
        except ParseError as exc:
            logger.info("%s does not have a valid %s: %s", repository.name, CATALOG_PATH, exc)
            return ChangeSet()

        if not entity.is_service:
            logger.info("%s is not a service, skipping", repository.name)
            return ChangeSet()

        portal_name = f"{ctx.settings.catalog_owner} Developer Portal"
        updated = (
            badge_lines(entity, portal_url=ctx.settings.portal_url, portal_name=portal_name)
            + readme.content
        )
        show_diff(repository, readme.path, readme.content, updated)
        return ChangeSet.of(UpdateFile(path=readme.path, content=updated, sha=readme.sha))
