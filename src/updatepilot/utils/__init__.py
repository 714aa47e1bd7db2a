"""Utilities for UpdatePilot."""

from updatepilot.utils.ids import generate_id
from updatepilot.utils.paths import get_resources_dir
from updatepilot.utils.timefmt import human_time_diff

__all__ = ["generate_id", "get_resources_dir", "human_time_diff"]
