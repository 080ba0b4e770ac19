"""Tag vocabularies used to derive interaction folders."""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Optional

# (tag, folder name) in lookup order; the first entries win ties.
GENDER_TAGS: tuple[tuple[str, str], ...] = (
    ("male", "Male"),
    ("female", "Female"),
    ("andromorph", "Cuntboy"),
    ("gynomorph", "Dickgirl"),
    ("herm", "Herm"),
    ("maleherm", "Maleherm"),
    ("ambiguous_gender", "Ambiguous"),
)

# Pair tags such as ``male/female`` use these prefixes.
INTERACTION_GENDERS: tuple[tuple[str, str], ...] = (
    ("male", "Male"),
    ("female", "Female"),
    ("gynomorph", "Dickgirl"),
    ("andromorph", "Cuntboy"),
    ("herm", "Herm"),
    ("maleherm", "Maleherm"),
    ("ambiguous", "Ambiguous"),
)

SOLO_TAG = "solo"
SOLO_FOCUS_TAG = "solo_focus"
GROUP_TAG = "group"


@dataclass(frozen=True)
class InteractionPair:
    """An unordered pair of subject types and the tags that denote it."""

    tag: str
    reverse_tag: str
    name: str

    def matches(self, tags: AbstractSet[str]) -> bool:
        return self.tag in tags or self.reverse_tag in tags


def _build_pairs() -> tuple[InteractionPair, ...]:
    pairs = []
    for index, (first_tag, first_name) in enumerate(INTERACTION_GENDERS):
        for second_tag, second_name in INTERACTION_GENDERS[index:]:
            pairs.append(
                InteractionPair(
                    tag=f"{first_tag}/{second_tag}",
                    reverse_tag=f"{second_tag}/{first_tag}",
                    name=f"{first_name} & {second_name}",
                )
            )
    return tuple(pairs)


INTERACTION_PAIRS = _build_pairs()

_NAME_ORDER = {name: position for position, (_, name) in enumerate(INTERACTION_GENDERS)}


def match_genders(tags: AbstractSet[str]) -> list[str]:
    """Return the folder names of every gender tag present, in lookup order."""
    return [name for tag, name in GENDER_TAGS if tag in tags]


def match_pairs(tags: AbstractSet[str]) -> list[str]:
    """Return the names of every interaction pair present, each counted once."""
    return [pair.name for pair in INTERACTION_PAIRS if pair.matches(tags)]


def pair_name(first: str, second: str) -> Optional[str]:
    """Return the pair name for two gender folder names, in vocabulary order."""
    if first not in _NAME_ORDER or second not in _NAME_ORDER:
        return None
    ordered = sorted((first, second), key=_NAME_ORDER.__getitem__)
    return f"{ordered[0]} & {ordered[1]}"


__all__ = [
    "GENDER_TAGS",
    "INTERACTION_GENDERS",
    "INTERACTION_PAIRS",
    "InteractionPair",
    "SOLO_TAG",
    "SOLO_FOCUS_TAG",
    "GROUP_TAG",
    "match_genders",
    "match_pairs",
    "pair_name",
]
