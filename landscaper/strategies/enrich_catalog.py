from __future__ import annotations

import logging
from typing import ClassVar, Optional, Tuple

from landscaper.catalog import (
    ARGOCD_APP_NAME_ANNOTATION,
    CATALOG_PATH,
    KUBERNETES_LABEL_SELECTOR_ANNOTATION,
    KUBERNETES_NAMESPACE_ANNOTATION,
    PROJECT_SLUG_ANNOTATION,
    CatalogEntity,
    parse_catalog,
)
from landscaper.deployment import DEPLOYMENT_SPEC_PATH, parse_deployment_spec
from landscaper.errors import ParseError
from landscaper.models import ChangeSet, Repository, UpdateFile

from .base import StrategyContext, fetch_optional, search_count, show_diff

logger = logging.getLogger(__name__)

TEMPLATE_NAME = "template"
TEMPLATE_DESCRIPTION = (
    "A template repository used to bootstrap the CICD environment with the required files"
)

# (code search needle, dependsOn reference) for legacy infrastructure.
LEGACY_SIGNATURES: Tuple[Tuple[str, str], ...] = (
    ("notmidship-db", "resource:hip-rds-mysql-prod"),
    ("notmidship-ro-db", "resource:hip-rds-mysql-prod-ro"),
    ("innocent-chimp", "resource:rabbitmq-innocent-chimp"),
    ("kafka-prod", "resource:kafka-prod"),
    ("gloo:", "component:gloo"),
)


def _apply_repository_identity(entity: CatalogEntity, repository: Repository) -> None:
    if entity.metadata.name == TEMPLATE_NAME:
        entity.metadata.name = repository.name
    if entity.metadata.description in (TEMPLATE_DESCRIPTION, ""):
        entity.metadata.description = repository.description or ""
    entity.annotate(PROJECT_SLUG_ANNOTATION, repository.full_name)


def _apply_deployment_spec(
    ctx: StrategyContext, entity: CatalogEntity, repository: Repository
) -> None:
    argo_file = fetch_optional(ctx, repository, DEPLOYMENT_SPEC_PATH)
    if argo_file is None:
        return
    logger.info("%s has %s", repository.name, DEPLOYMENT_SPEC_PATH)
    entity.annotate_if_missing(ARGOCD_APP_NAME_ANNOTATION, repository.name)
    try:
        app = parse_deployment_spec(argo_file.content)
    except ParseError as exc:
        logger.info("%s has an unreadable %s: %s", repository.name, DEPLOYMENT_SPEC_PATH, exc)
        return
    entity.annotate_if_missing(
        KUBERNETES_LABEL_SELECTOR_ANNOTATION,
        f"app.kubernetes.io/instance={repository.name}",
    )
    entity.annotate_if_missing(KUBERNETES_NAMESPACE_ANNOTATION, app.namespace)


def _apply_legacy_dependencies(
    ctx: StrategyContext, entity: CatalogEntity, repository: Repository
) -> None:
    for needle, reference in LEGACY_SIGNATURES:
        if search_count(ctx, repository, needle) > 0:
            logger.info("%s references %s -> %s", repository.name, needle, reference)
            entity.add_dependency(reference)


class EnrichCatalogStrategy:
    name: ClassVar[str] = "enrich-catalog-files"
    title: ClassVar[str] = "[no-ci] chore: Update catalog.info.yaml"
    sort: ClassVar[Optional[str]] = "updated"
    direction: ClassVar[Optional[str]] = "desc"

    def compute_changes(self, ctx: StrategyContext, repository: Repository) -> ChangeSet:
        original = fetch_optional(ctx, repository, CATALOG_PATH)
        if original is None:
            logger.info("%s does not have %s", repository.name, CATALOG_PATH)
            return ChangeSet()

        try:
            entity = parse_catalog(original.content)
        except ParseError as exc:
            logger.info("%s does not have a valid %s: %s", repository.name, CATALOG_PATH, exc)
            return ChangeSet()

        if not entity.is_service:
            logger.info("%s is not a service, skipping", repository.name)
            return ChangeSet()

        before = entity.to_document()
        _apply_repository_identity(entity, repository)
        _apply_deployment_spec(ctx, entity, repository)
        _apply_legacy_dependencies(ctx, entity, repository)

        if entity.to_document() == before:
            logger.info("%s catalog is already up to date", repository.name)
            return ChangeSet()

        updated = entity.to_yaml()
        show_diff(repository, original.path, original.content, updated)
        return ChangeSet.of(
            UpdateFile(path=original.path, content=updated, sha=original.sha)
        )
