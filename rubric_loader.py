"""Utilities for loading rubric definitions from JSON or YAML files."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from importlib.resources import files
from pathlib import Path
from typing import Any, List, Mapping, Sequence, Tuple

import yaml

from rubric import RUBRIC_VERSION, RubricCategory, RubricOption, check_rubric

logger = logging.getLogger(__name__)

# Shipped as package data of the `rubrics` package so installs resolve it too.
DEFAULT_RUBRIC_FILE = Path(str(files("rubrics").joinpath("guard_performance.yaml")))


@dataclass(frozen=True)
class RubricDefinition:
    """Complete rubric definition returned by loaders."""

    name: str
    version: str
    description: str
    categories: Tuple[RubricCategory, ...]


def _coerce_options(category_id: str, raw_options: Sequence[Mapping[str, Any]]) -> Tuple[RubricOption, ...]:
    options: List[RubricOption] = []
    for idx, option in enumerate(raw_options, start=1):
        if "points" not in option or "description" not in option:
            raise ValueError(
                f"Option #{idx} of category {category_id!r} is missing 'points' or 'description'"
            )
        points = option["points"]
        if isinstance(points, bool) or not isinstance(points, (int, float)):
            raise ValueError(
                f"Option #{idx} of category {category_id!r} has non-numeric points: {points!r}"
            )
        options.append(RubricOption(points=points, description=str(option["description"])))
    return tuple(options)


def _coerce_categories(raw_categories: Sequence[Mapping[str, Any]]) -> Tuple[RubricCategory, ...]:
    categories: List[RubricCategory] = []
    for idx, item in enumerate(raw_categories, start=1):
        if "id" not in item or "label" not in item:
            raise ValueError(f"Rubric category #{idx} is missing required 'id' or 'label' fields")
        category_id = str(item["id"])
        raw_options = item.get("options") or []
        if not raw_options:
            raise ValueError(f"Rubric category {category_id!r} must list at least one option")
        categories.append(
            RubricCategory(
                id=category_id,
                label=str(item["label"]),
                description=str(item.get("description") or ""),
                options=_coerce_options(category_id, raw_options),
            )
        )
    check_rubric(categories)
    return tuple(categories)


def _load_raw(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"Rubric file not found: {path}")
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return json.loads(text)
    if path.suffix.lower() in {".yaml", ".yml"}:
        return yaml.safe_load(text)
    raise ValueError(f"Unsupported rubric file type: {path.suffix}")


def load_rubric(path: str | Path = DEFAULT_RUBRIC_FILE) -> RubricDefinition:
    path = Path(path)
    raw = _load_raw(path)

    if isinstance(raw, Mapping):
        if "categories" not in raw:
            raise ValueError("Rubric file must contain a 'categories' list")
        name = str(raw.get("name") or path.stem)
        version = str(raw.get("version") or RUBRIC_VERSION)
        description = str(raw.get("description") or "")
        categories = _coerce_categories(raw["categories"])
    elif isinstance(raw, Sequence) and not isinstance(raw, str):
        name = path.stem
        version = RUBRIC_VERSION
        description = ""
        categories = _coerce_categories(raw)  # type: ignore[arg-type]
    else:
        raise ValueError("Rubric file must be a list or an object with a 'categories' list")

    logger.debug("Loaded rubric %s (version %s) from %s", name, version, path)
    return RubricDefinition(name=name, version=version, description=description, categories=categories)
