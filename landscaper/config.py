from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_BRANCH_NAME = "landscaper"
DEFAULT_PR_BODY = "Automated changes generated by landscaper."
DEFAULT_CATALOG_OWNER = "hipages"
DEFAULT_PORTAL_URL = "https://backyard.k8s.hipages.com.au"


@dataclass(frozen=True)
class GlobalOptions:
    """Options shared by every subcommand."""

    org: str
    write: bool = False
    branch: str = DEFAULT_BRANCH_NAME
    repo_filter: Optional[str] = None
    skip: int = 0


@dataclass(frozen=True)
class Settings:
    github_token: str
    pr_body: str = DEFAULT_PR_BODY
    catalog_owner: str = DEFAULT_CATALOG_OWNER
    portal_url: str = DEFAULT_PORTAL_URL

    @property
    def badge_prefix(self) -> str:
        return f"{self.portal_url}/api/badges/entity/"


def _env_str(env: Mapping[str, str], name: str, default: str) -> str:
    raw = (env.get(name) or "").strip()
    return raw or default


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """
    Build settings from the environment.

    `GITHUB_TOKEN` is required; the rest fall back to defaults:
    - LANDSCAPER_PR_BODY
    - LANDSCAPER_CATALOG_OWNER
    - LANDSCAPER_PORTAL_URL
    """
    env = os.environ if environ is None else environ
    token = (env.get("GITHUB_TOKEN") or "").strip()
    if not token:
        raise ConfigurationError("GITHUB_TOKEN not set")
    portal_url = _env_str(env, "LANDSCAPER_PORTAL_URL", DEFAULT_PORTAL_URL).rstrip("/")
    settings = Settings(
        github_token=token,
        pr_body=_env_str(env, "LANDSCAPER_PR_BODY", DEFAULT_PR_BODY),
        catalog_owner=_env_str(env, "LANDSCAPER_CATALOG_OWNER", DEFAULT_CATALOG_OWNER),
        portal_url=portal_url,
    )
    logger.debug(
        "Loaded settings catalog_owner=%s portal_url=%s",
        settings.catalog_owner,
        settings.portal_url,
    )
    return settings
