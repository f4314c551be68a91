"""glTF "extras" -> spatial user data."""

import logging
from typing import Any

from rehomer.scene import Spatial

logger = logging.getLogger(__name__)


def apply_extras(target: Any, extras: Any) -> None:
    """
    Copy an extras object onto target's user data.

    target may be a single spatial or a sequence of them (a mesh whose
    primitives became several geometries). Only JSON objects are applied.
    """
    if target is None or extras is None:
        return
    if not isinstance(extras, dict):
        logger.warning("Skipping extras: %r", extras)
        return
    if isinstance(target, (list, tuple)):
        for item in target:
            logger.debug("processing extras for %r", item)
            apply_extras(item, extras)
    elif isinstance(target, Spatial):
        for name, value in extras.items():
            target.user_data[name] = value
    else:
        logger.warning("Unhandled extras target type: %s", type(target).__name__)
