"""Catalog snapshot loading, saving and active-entry projection."""

import json
import logging
import os
import tempfile
from types import MappingProxyType

from .config import SERVICES_PATH
from .models import Category, CatalogError, CategoryCounts, ProjectedEntry

logger = logging.getLogger(__name__)

_snapshot = None
_snapshot_path = None


def read_document(path: str = None) -> list[dict]:
    """Read the raw services.json document (list of category objects)."""
    path = path or SERVICES_PATH
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise CatalogError(f"Catalog not found: {path}")
    except json.JSONDecodeError as e:
        raise CatalogError(f"Catalog is not valid JSON ({path}): {e}")
    if not isinstance(data, list):
        raise CatalogError(f"Catalog root should be a list of categories: {path}")
    return data


def write_document(data: list[dict], path: str = None) -> None:
    """Write the raw document atomically: temp file in the same dir, then replace."""
    path = path or SERVICES_PATH
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix=".services-", suffix=".json", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp_path, path)
    except OSError as e:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise CatalogError(f"Could not save catalog {path}: {e}")
    invalidate()
    logger.info("Saved catalog to %s", path)


def parse_document(data: list[dict]) -> tuple[Category, ...]:
    """Turn a raw document into typed categories, failing fast on bad input."""
    if not isinstance(data, list):
        raise CatalogError("Catalog root should be a list of categories")
    categories = tuple(Category.from_dict(item, i) for i, item in enumerate(data))
    names = set()
    for category in categories:
        if category.name in names:
            raise CatalogError(f"Duplicate category name '{category.name}'")
        names.add(category.name)
    return categories


def load_snapshot(path: str = None) -> tuple[Category, ...]:
    """Load and cache the typed catalog snapshot."""
    global _snapshot, _snapshot_path
    path = path or SERVICES_PATH
    if _snapshot is None or _snapshot_path != path:
        _snapshot = parse_document(read_document(path))
        _snapshot_path = path
        logger.debug("Loaded %d categories from %s", len(_snapshot), path)
    return _snapshot


def invalidate() -> None:
    """Drop the cached snapshot so the next load re-reads the file."""
    global _snapshot, _snapshot_path
    _snapshot = None
    _snapshot_path = None


def project(categories) -> list[ProjectedEntry]:
    """Flatten active entries, tagging each with its category and incumbent."""
    projected = []
    for category in categories:
        for entry in category.entries:
            if entry.status.is_active:
                projected.append(ProjectedEntry(
                    entry=entry,
                    category_name=category.name,
                    incumbent_name=category.incumbent.name,
                ))
    return projected


def category_counts(projected) -> CategoryCounts:
    """Count active entries per category (sorted by name), plus the total."""
    counts = {}
    for item in projected:
        counts[item.category_name] = counts.get(item.category_name, 0) + 1
    ordered = {name: counts[name] for name in sorted(counts)}
    return CategoryCounts(total=len(projected), by_category=MappingProxyType(ordered))


def iter_innovators(data: list[dict]):
    """Yield (category_dict, innovator_dict) pairs from a raw document."""
    for category in data:
        for innovator in category.get("innovators", []):
            yield category, innovator
