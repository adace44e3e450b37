from __future__ import annotations

import logging
from typing import ClassVar, Optional

from landscaper.catalog import (
    ARGOCD_APP_NAME_ANNOTATION,
    CATALOG_PATH,
    PROJECT_SLUG_ANNOTATION,
    CatalogEntity,
)
from landscaper.deployment import DEPLOYMENT_SPEC_PATH
from landscaper.models import ChangeSet, CreateFile, Repository

from .base import StrategyContext, fetch_optional, show_diff

logger = logging.getLogger(__name__)


def build_catalog_entity(
    repository: Repository, *, owner: str, has_deployment_spec: bool
) -> CatalogEntity:
    entity = CatalogEntity.new_component(
        repository.name, repository.description or "", owner
    )
    entity.annotate(PROJECT_SLUG_ANNOTATION, repository.full_name)
    if has_deployment_spec:
        entity.annotate(ARGOCD_APP_NAME_ANNOTATION, repository.name)
    return entity


class CreateCatalogStrategy:
    name: ClassVar[str] = "create-catalog-files"
    title: ClassVar[str] = "chore: Add catalog-info.yaml [no-ci]"
    sort: ClassVar[Optional[str]] = "pushed"
    direction: ClassVar[Optional[str]] = None

    def compute_changes(self, ctx: StrategyContext, repository: Repository) -> ChangeSet:
        if fetch_optional(ctx, repository, CATALOG_PATH) is not None:
            logger.info("%s already has %s", repository.name, CATALOG_PATH)
            return ChangeSet()

        logger.info("%s does not have %s", repository.name, CATALOG_PATH)
        has_argo = fetch_optional(ctx, repository, DEPLOYMENT_SPEC_PATH) is not None
        entity = build_catalog_entity(
            repository, owner=ctx.settings.catalog_owner, has_deployment_spec=has_argo
        )
        content = entity.to_yaml()
        show_diff(repository, CATALOG_PATH, "", content)
        return ChangeSet.of(CreateFile(path=CATALOG_PATH, content=content))
