from __future__ import annotations

import os
from typing import Dict

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_PRIORITY_ENTITY = "User"

LOG_LEVEL = os.environ.get("RELSPEC_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
PRIORITY_ENTITY = os.environ.get("RELSPEC_PRIORITY_ENTITY", DEFAULT_PRIORITY_ENTITY).strip()


def build_renderer_config() -> Dict[str, object]:
    """
    Returns keyword arguments for the Markdown renderer.

    An empty ``RELSPEC_PRIORITY_ENTITY`` disables pinning.
    """

    return {"prioritized_entity": PRIORITY_ENTITY or None}
