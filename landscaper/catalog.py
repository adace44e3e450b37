"""Backstage `catalog-info.yaml` entities.

Serialization is deterministic so that an entity read from a file this module
wrote dumps back to exactly the same text. Key order is fixed, annotations keep
their insertion order, and the set-valued relations are emitted sorted. Keys
this model does not know about are kept and written after the known ones.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ParseError
from .yaml_io import dump_mapping, load_mapping

CATALOG_PATH = "catalog-info.yaml"
CATALOG_API_VERSION = "backstage.io/v1alpha1"
COMPONENT_KIND = "Component"
SERVICE_TYPE = "service"
DEFAULT_LIFECYCLE = "experimental"

PROJECT_SLUG_ANNOTATION = "github.com/project-slug"
ARGOCD_APP_NAME_ANNOTATION = "argocd/app-name"
KUBERNETES_LABEL_SELECTOR_ANNOTATION = "backstage.io/kubernetes-label-selector"
KUBERNETES_NAMESPACE_ANNOTATION = "backstage.io/kubernetes-namespace"

_ENTITY_REF_RE = re.compile(r"^[A-Za-z][\w-]*:\S+$")


def _none_to_empty(value: Any, empty: Any) -> Any:
    return empty if value is None else value


class EntityMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    description: str = ""
    annotations: Dict[str, str] = Field(default_factory=dict)
    tags: List[str] = Field(default_factory=list)

    @field_validator("annotations", mode="before")
    @classmethod
    def _annotations_default(cls, value: Any) -> Any:
        return _none_to_empty(value, {})

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_default(cls, value: Any) -> Any:
        return _none_to_empty(value, [])

    @field_validator("description", mode="before")
    @classmethod
    def _description_default(cls, value: Any) -> Any:
        return _none_to_empty(value, "")


class ComponentSpec(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: str
    lifecycle: str
    owner: str
    system: Optional[str] = None
    depends_on: Set[str] = Field(default_factory=set, alias="dependsOn")
    consumes_apis: Set[str] = Field(default_factory=set, alias="consumesApis")

    @field_validator("depends_on", "consumes_apis", mode="before")
    @classmethod
    def _relations_default(cls, value: Any) -> Any:
        return _none_to_empty(value, set())


class CatalogEntity(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    api_version: str = Field(alias="apiVersion")
    kind: str
    metadata: EntityMetadata
    spec: ComponentSpec

    @classmethod
    def new_component(cls, name: str, description: str, owner: str) -> CatalogEntity:
        return cls(
            api_version=CATALOG_API_VERSION,
            kind=COMPONENT_KIND,
            metadata=EntityMetadata(name=name, description=description),
            spec=ComponentSpec(
                type=SERVICE_TYPE, lifecycle=DEFAULT_LIFECYCLE, owner=owner
            ),
        )

    @property
    def is_service(self) -> bool:
        return self.spec.type == SERVICE_TYPE

    def annotate(self, key: str, value: str) -> None:
        self.metadata.annotations[key] = value

    def annotate_if_missing(self, key: str, value: str) -> None:
        self.metadata.annotations.setdefault(key, value)

    def add_dependency(self, ref: str) -> None:
        if not _ENTITY_REF_RE.match(ref):
            raise ValueError(f"Invalid entity reference (expected kind:name): {ref!r}")
        self.spec.depends_on.add(ref)

    def to_document(self) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {
            "name": self.metadata.name,
            "description": self.metadata.description,
            "annotations": dict(self.metadata.annotations),
        }
        if self.metadata.tags:
            metadata["tags"] = list(self.metadata.tags)
        metadata.update(self.metadata.model_extra or {})

        spec: Dict[str, Any] = {
            "type": self.spec.type,
            "lifecycle": self.spec.lifecycle,
            "owner": self.spec.owner,
        }
        if self.spec.system is not None:
            spec["system"] = self.spec.system
        if self.spec.depends_on:
            spec["dependsOn"] = sorted(self.spec.depends_on)
        if self.spec.consumes_apis:
            spec["consumesApis"] = sorted(self.spec.consumes_apis)
        spec.update(self.spec.model_extra or {})

        document: Dict[str, Any] = {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": metadata,
            "spec": spec,
        }
        document.update(self.model_extra or {})
        return document

    def to_yaml(self) -> str:
        return dump_mapping(self.to_document())


def parse_catalog(text: str) -> CatalogEntity:
    data = load_mapping(text, source=CATALOG_PATH)
    try:
        return CatalogEntity.model_validate(data)
    except ValidationError as exc:
        raise ParseError(f"{CATALOG_PATH} does not describe a component: {exc}") from exc
