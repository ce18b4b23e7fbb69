"""Recommendation catalog lookup, backed by a static JSON file."""

import json
import logging
import os
from enum import Enum

from risk_profiler.models import Recommendation

logger = logging.getLogger(__name__)

DATA_PATH = os.path.join(os.path.dirname(__file__), "data", "recommendations.json")


class FactorType(str, Enum):
    SMOKING = "smoking"
    POOR_DIET = "poor diet"
    LOW_EXERCISE = "low exercise"
    HIGH_STRESS = "high stress"
    POOR_SLEEP = "poor sleep"
    EXCESSIVE_ALCOHOL = "excessive alcohol"
    ABNORMAL_WEIGHT = "abnormal weight"
    ADVANCED_AGE = "advanced age"
    MEDICAL_HISTORY = "medical history"
    GENERAL = "general"


# Types answered by a generated recommendation instead of catalog entries.
UNCATALOGUED_TYPES = {FactorType.GENERAL}

_catalog_cache: dict[FactorType, list[Recommendation]] | None = None


def _load_catalog() -> dict[FactorType, list[Recommendation]]:
    global _catalog_cache
    if _catalog_cache is None:
        with open(os.path.abspath(DATA_PATH), "r") as f:
            raw = json.load(f)

        catalog = {}
        for key, entries in raw.items():
            catalog[FactorType(key)] = [Recommendation(**entry) for entry in entries]

        missing = {t for t in FactorType if t not in UNCATALOGUED_TYPES and not catalog.get(t)}
        if missing:
            raise ValueError(
                "Recommendation catalog has no entries for: "
                + ", ".join(sorted(t.value for t in missing))
            )

        logger.debug("Loaded %d recommendation templates", sum(len(v) for v in catalog.values()))
        _catalog_cache = catalog
    return _catalog_cache


def get_templates(factor_type: FactorType) -> list[Recommendation]:
    return list(_load_catalog().get(factor_type, []))


def list_catalog_ids() -> list[str]:
    return sorted(rec.id for entries in _load_catalog().values() for rec in entries)
