"""
================================================================================
Table Target Configuration
================================================================================

Each configured target is one instance of the parameterised table suite:
the URL to open, the preview iframe (if any) and the labels and selectors
its controls are expected to carry.

Features:
    - YAML target definitions (config/targets.yaml)
    - Shared `defaults` block merged into every target
    - TABLE_TARGETS=a,b selects targets, TABLE_URL overrides their URL
    - ControlSpec construction for every control the suites use

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from loguru import logger

from table_tools.common.global_config import CONFIG_DIR, ConfigurationError

from .smart_locator import ControlSpec
from .table_reader import DEFAULT_NO_DATA_PATTERN


DEFAULT_TARGETS_PATH = CONFIG_DIR / "targets.yaml"

# Control names every target provides a ControlSpec for
SEARCH_TOGGLE = "search_toggle"
SEARCH_INPUT = "search_input"
FILTER_TOGGLE = "filter_toggle"
SORT_CONTROL = "sort_control"
ROW_EXPAND = "row_expand"
ROW_COLLAPSE = "row_collapse"


@dataclass(frozen=True)
class TableTarget:
    """
    One table configuration under test.

    Attributes:
        name: Target id (used in test ids)
        url: Page to open
        frame_title: Title of the preview iframe, None when the table is top level
        table_selector: Selector of the table element
        status_selector: Selector of elements carrying "1-10 of N" text
        header_filter_selector: Selector of filter inputs revealed in the header
        detail_panel_selector: Selector of expanded detail-panel cells
        no_data_pattern: Regex of the placeholder row text
        search_term: Text typed into the search box
        sort_clicks: Consecutive clicks issued on the sort control
        sample_rows: Rows read per column snapshot (0 = all rendered rows)
        labels: Accessible-name regexes per control
    """
    name: str
    url: str
    frame_title: Optional[str] = None
    table_selector: str = "table"
    status_selector: str = ""
    header_filter_selector: str = "table thead input"
    detail_panel_selector: str = "tbody td[colspan]"
    no_data_pattern: str = DEFAULT_NO_DATA_PATTERN
    search_term: str = "ali"
    sort_clicks: int = 3
    sample_rows: int = 0
    labels: Dict[str, Tuple[str, ...]] = field(default_factory=dict)

    def label(self, control: str) -> Tuple[str, ...]:
        return tuple(self.labels.get(control, ()))


def _as_tuple(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    result = copy.deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _build_target(name: str, raw: Dict[str, Any]) -> TableTarget:
    known = {f.name for f in fields(TableTarget)}
    unknown = set(raw) - known
    if unknown:
        raise ConfigurationError(f"Target '{name}' has unknown keys: {sorted(unknown)}")
    if not raw.get("url"):
        raise ConfigurationError(f"Target '{name}' has no url")

    values = dict(raw)
    values["name"] = name
    values["labels"] = {k: _as_tuple(v) for k, v in (raw.get("labels") or {}).items()}
    values["sort_clicks"] = int(values.get("sort_clicks", 3))
    values["sample_rows"] = int(values.get("sample_rows", 0))
    return TableTarget(**values)


def load_targets(path: Optional[Path] = None) -> List[TableTarget]:
    """
    Load table targets from YAML.

    Args:
        path: Targets file. Uses TABLE_TARGETS_FILE or config/targets.yaml.

    Returns:
        Selected targets, in file order

    Raises:
        ConfigurationError: On invalid YAML, bad target entries or unknown
            names in TABLE_TARGETS
    """
    path = Path(path or os.getenv("TABLE_TARGETS_FILE", str(DEFAULT_TARGETS_PATH)))
    if not path.exists():
        raise ConfigurationError(f"Targets file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            document = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in targets file: {e}") from e

    defaults = document.get("defaults") or {}
    raw_targets = document.get("targets") or {}
    if not raw_targets:
        raise ConfigurationError(f"No targets defined in {path}")

    targets = [
        _build_target(name, _deep_merge(defaults, raw or {}))
        for name, raw in raw_targets.items()
    ]

    selected = [n.strip() for n in os.getenv("TABLE_TARGETS", "").split(",") if n.strip()]
    if selected:
        by_name = {t.name: t for t in targets}
        missing = [n for n in selected if n not in by_name]
        if missing:
            raise ConfigurationError(
                f"Unknown target(s) {missing}; available: {sorted(by_name)}"
            )
        targets = [by_name[n] for n in selected]

    url_override = os.getenv("TABLE_URL")
    if url_override:
        targets = [_replace_url(t, url_override) for t in targets]

    logger.debug(f"Loaded {len(targets)} table target(s) from {path}")
    return targets


def _replace_url(target: TableTarget, url: str) -> TableTarget:
    values = {f.name: getattr(target, f.name) for f in fields(TableTarget)}
    values["url"] = url
    return TableTarget(**values)


def control_specs(target: TableTarget) -> Dict[str, ControlSpec]:
    """
    Build the control descriptions for a target.

    Strategy order per control follows the locator priority: role match
    scoped to the table structure, nested child of a matched element,
    then attribute/text fallback anywhere in the root. Row controls have no
    root-wide fallback since the header carries "expand all" twins.
    """
    return {
        SEARCH_TOGGLE: ControlSpec(
            name=SEARCH_TOGGLE,
            role="button",
            patterns=target.label(SEARCH_TOGGLE),
            attributes=(("aria-label", "search"), ("title", "search")),
            strategies=("role", "fallback"),
        ),
        SEARCH_INPUT: ControlSpec(
            name=SEARCH_INPUT,
            role="textbox",
            patterns=target.label(SEARCH_INPUT),
            attributes=(("placeholder", "search"), ("aria-label", "search")),
            strategies=("role", "fallback"),
        ),
        FILTER_TOGGLE: ControlSpec(
            name=FILTER_TOGGLE,
            role="button",
            patterns=target.label(FILTER_TOGGLE),
            attributes=(("aria-label", "filters"), ("title", "filters")),
            strategies=("role", "fallback"),
        ),
        SORT_CONTROL: ControlSpec(
            name=SORT_CONTROL,
            role="button",
            patterns=target.label(SORT_CONTROL),
            scope=f"{target.table_selector} thead",
            container_role="columnheader",
            container_patterns=target.label("sort_column"),
            child_patterns=(r"\bsort",),
            attributes=tuple(("aria-label", label) for label in target.label("sort_attribute")),
            column_index=True,
        ),
        ROW_EXPAND: ControlSpec(
            name=ROW_EXPAND,
            role="button",
            patterns=target.label(ROW_EXPAND),
            scope=f"{target.table_selector} tbody",
            strategies=("role",),
        ),
        ROW_COLLAPSE: ControlSpec(
            name=ROW_COLLAPSE,
            role="button",
            patterns=target.label(ROW_COLLAPSE),
            scope=f"{target.table_selector} tbody",
            strategies=("role",),
        ),
    }


__all__ = [
    "FILTER_TOGGLE",
    "ROW_COLLAPSE",
    "ROW_EXPAND",
    "SEARCH_INPUT",
    "SEARCH_TOGGLE",
    "SORT_CONTROL",
    "TableTarget",
    "control_specs",
    "load_targets",
]
