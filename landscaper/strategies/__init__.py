from __future__ import annotations

from typing import Optional

from landscaper.errors import ConfigurationError

from .add_badge import AddBadgeStrategy
from .base import ChangeStrategy, StrategyContext
from .create_catalog import CreateCatalogStrategy
from .enrich_catalog import EnrichCatalogStrategy
from .find_replace import FindReplaceStrategy

STRATEGY_NAMES = (
    FindReplaceStrategy.name,
    CreateCatalogStrategy.name,
    EnrichCatalogStrategy.name,
    AddBadgeStrategy.name,
)


def get_strategy(
    name: str,
    *,
    find: Optional[str] = None,
    replace: Optional[str] = None,
    message: Optional[str] = None,
) -> ChangeStrategy:
    strategy_name = name.lower()
    if strategy_name == FindReplaceStrategy.name:
        if not find or replace is None:
            raise ConfigurationError("find-replace requires --find and --replace")
        return FindReplaceStrategy(find=find, replace=replace, message=message)
    if strategy_name == CreateCatalogStrategy.name:
        return CreateCatalogStrategy()
    if strategy_name == EnrichCatalogStrategy.name:
        return EnrichCatalogStrategy()
    if strategy_name == AddBadgeStrategy.name:
        return AddBadgeStrategy()
    raise ConfigurationError(f"Unknown strategy: {name}")


__all__ = [
    "AddBadgeStrategy",
    "ChangeStrategy",
    "CreateCatalogStrategy",
    "EnrichCatalogStrategy",
    "FindReplaceStrategy",
    "STRATEGY_NAMES",
    "StrategyContext",
    "get_strategy",
]
