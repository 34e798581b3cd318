"""Diff parsing, noise filtering and rendering utilities."""

from gh_agent.utils.diff_parser import (
    commentable_lines,
    parse_hunk_header,
    parse_patch,
    split_raw_diff,
)
from gh_agent.utils.noise_filter import NoiseRules, filter_noise, is_noise

__all__ = [
    "NoiseRules",
    "commentable_lines",
    "filter_noise",
    "is_noise",
    "parse_hunk_header",
    "parse_patch",
    "split_raw_diff",
]
