"""Folder-name aliasing against existing destination folders."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Mapping, Sequence

LOGGER = logging.getLogger(__name__)


def _existing_folders(root: Path) -> List[str]:
    try:
        return sorted(entry.name for entry in root.iterdir() if entry.is_dir())
    except OSError:
        return []


def resolve_folder_alias(
    segments: Sequence[str],
    root: Path,
    aliases: Mapping[str, str],
) -> List[str]:
    """Replace the first segment with a matching folder under ``root``.

    Only segments with a configured alias are considered. The lookup prefers
    an exact ``root/alias`` directory, then the first existing directory
    (by name) containing the alias, then the first containing the original
    segment.

    Args:
        segments: Folder segments produced by classification.
        root: Destination root the segments are relative to.
        aliases: Mapping of segment name to preferred folder name.

    Returns:
        List[str]: Segments with the first one possibly replaced.
    """
    result = list(segments)
    if not result:
        return result

    original = result[0]
    alias = aliases.get(original)
    if not alias:
        return result

    if (root / alias).is_dir():
        result[0] = alias
        return result

    folders = _existing_folders(root)
    for needle in (alias, original):
        for name in folders:
            if needle in name:
                LOGGER.debug("Aliasing folder %s to existing %s.", original, name)
                result[0] = name
                return result
    return result


__all__ = ["resolve_folder_alias"]
