"""Region filter activity.

Selects features by an attribute predicate and projects each kept
feature onto a reduced attribute set.  Geometry and the feature name
are never discarded.  An empty result is valid and is returned as-is.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from europe_map.models.feature import Feature

logger = logging.getLogger("europe_map.activities.filter_region")


def attribute_equals(key: str, value: object) -> Callable[[Feature], bool]:
    """Build a predicate matching features whose ``key`` attribute equals ``value``."""

    def predicate(feature: Feature) -> bool:
        return feature.get(key) == value

    return predicate


def filter_region(
    features: Sequence[Feature],
    predicate: Callable[[Feature], bool],
    keep_attributes: Iterable[str],
) -> list[Feature]:
    """Keep features satisfying ``predicate``, in original order.

    Args:
        features: Input features.
        predicate: Boolean test applied to each feature.
        keep_attributes: Property keys to retain; every other property
            is dropped.  Keys absent from a feature are ignored.

    Returns:
        New Feature objects; inputs are left untouched.
    """
    keep = tuple(keep_attributes)
    selected = [
        dataclasses.replace(
            feature,
            properties={k: feature.properties[k] for k in keep if k in feature.properties},
        )
        for feature in features
        if predicate(feature)
    ]

    if not selected:
        logger.warning("Region filter matched no features | input=%d", len(features))
    logger.info(
        "Region filter applied | input=%d | kept=%d | attributes=%s",
        len(features),
        len(selected),
        ",".join(keep),
    )
    return selected
