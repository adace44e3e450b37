"""Argo CD application manifest (`.argocd.yaml`)."""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ParseError
from .yaml_io import load_mapping

DEPLOYMENT_SPEC_PATH = ".argocd.yaml"


class AppMetadata(BaseModel):
    name: str
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    finalizers: List[str] = Field(default_factory=list)


class AppDestination(BaseModel):
    server: str
    namespace: str


class AppSpec(BaseModel):
    destination: AppDestination


class DeploymentSpec(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    api_version: str = Field(alias="apiVersion")
    metadata: AppMetadata
    spec: AppSpec

    @property
    def namespace(self) -> str:
        return self.spec.destination.namespace


def parse_deployment_spec(text: str) -> DeploymentSpec:
    data: Dict[str, Any] = load_mapping(text, source=DEPLOYMENT_SPEC_PATH)
    try:
        return DeploymentSpec.model_validate(data)
    except ValidationError as exc:
        raise ParseError(f"{DEPLOYMENT_SPEC_PATH} is not an application spec: {exc}") from exc
