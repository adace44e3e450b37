from __future__ import annotations

from typing import Any, Dict

import yaml

from .errors import ParseError

# Wide enough that long descriptions are never folded across lines.
_LINE_WIDTH = 4096


def load_mapping(text: str, *, source: str) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ParseError(f"{source} is not valid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise ParseError(f"{source} does not contain a YAML mapping")
    return data


def dump_mapping(data: Dict[str, Any]) -> str:
    return yaml.safe_dump(
        data,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        width=_LINE_WIDTH,
    )
