"""Tests for the tag-to-folder classifier."""

from __future__ import annotations

from typing import Callable, Iterable, Optional

import pytest
from support import make_response

from boorusort.catalog import CatalogClient, Post
from boorusort.classification import ClassificationStatus, TagClassifier
from boorusort.config.models import ClassificationOptions


def _post(tags: Iterable[str], rating: Optional[str] = "s", post_id: int = 1) -> Post:
    return Post(id=post_id, file_hash="aa", rating=rating, tags={"general": list(tags)})


def _classifier(**options: object) -> TagClassifier:
    return TagClassifier(ClassificationOptions(**options))


def test_missing_post_is_not_found() -> None:
    result = _classifier(by_rating=True).classify(None)

    assert result.status is ClassificationStatus.NOT_FOUND
    assert result.path_segments == ["! Not found"]


def test_rating_only() -> None:
    result = _classifier(by_rating=True).classify(_post(["solo", "male"], rating="s"))

    assert result.path_segments == ["Safe"]
    assert result.status is ClassificationStatus.RESOLVED
    assert result.path == "Safe"


def test_rating_and_solo_gender() -> None:
    classifier = _classifier(by_rating=True, by_interaction=True)

    result = classifier.classify(_post(["solo", "male"], rating="e"))

    assert result.path_segments == ["Explicit", "Solo", "Male"]
    assert result.path == "Explicit/Solo/Male"


def test_group_without_pair_tag() -> None:
    result = _classifier(by_interaction=True).classify(_post(["male", "female", "group"]))

    assert result.path_segments == ["Multiple characters"]


def test_two_genders_infer_pair() -> None:
    result = _classifier(by_interaction=True).classify(_post(["male", "female"]))

    assert result.path_segments == ["Male & Female"]
    assert result.status is ClassificationStatus.RESOLVED


@pytest.mark.parametrize("pair_tag", ["male/female", "female/male"])
def test_pair_name_follows_vocabulary_order(pair_tag: str) -> None:
    result = _classifier(by_interaction=True).classify(_post([pair_tag]))

    assert result.path_segments == ["Male & Female"]


def test_pair_and_reverse_count_once() -> None:
    result = _classifier(by_interaction=True).classify(_post(["male/female", "female/male"]))

    assert result.path_segments == ["Male & Female"]
    assert result.status is ClassificationStatus.RESOLVED


def test_group_with_single_pair_adds_sub_segment() -> None:
    result = _classifier(by_interaction=True).classify(_post(["group", "gynomorph/male"]))

    assert result.path_segments == ["Multiple characters", "Male & Dickgirl"]


def test_group_with_several_pairs_has_no_suffix() -> None:
    result = _classifier(by_interaction=True).classify(
        _post(["group", "male/male", "female/female"])
    )

    assert result.path_segments == ["Multiple characters"]
    assert result.status is ClassificationStatus.RESOLVED


def test_several_pairs_without_group_conflict() -> None:
    result = _classifier(by_interaction=True).classify(_post(["male/male", "female/female"]))

    assert result.path_segments == ["! Conflict"]
    assert result.status is ClassificationStatus.CONFLICT
    assert result.debug_notes is not None
    assert result.debug_notes.startswith("Multiple interaction tags matched: \n")
    assert "Male & Male" in result.debug_notes
    assert "Female & Female" in result.debug_notes
    assert "Tags: " in result.debug_notes


def test_solo_with_several_genders_conflicts() -> None:
    classifier = _classifier(by_rating=True, by_interaction=True)

    result = classifier.classify(_post(["solo", "male", "andromorph"], rating="q"))

    assert result.path_segments == ["Questionable", "Solo", "! Conflict"]
    assert result.status is ClassificationStatus.CONFLICT
    assert result.debug_notes is not None
    assert "Male\nCuntboy" in result.debug_notes


def test_solo_without_gender_is_unknown() -> None:
    result = _classifier(by_interaction=True).classify(_post(["solo"]))

    assert result.path_segments == ["Solo", "Unknown"]


def test_solo_uses_display_names() -> None:
    result = _classifier(by_interaction=True).classify(_post(["solo", "ambiguous_gender"]))

    assert result.path_segments == ["Solo", "Ambiguous"]


def test_no_interaction_tags_is_unknown() -> None:
    result = _classifier(by_interaction=True).classify(_post(["landscape"]))

    assert result.path_segments == ["Unknown"]


def test_solo_focus_appends_single_gender() -> None:
    result = _classifier(by_interaction=True).classify(
        _post(["male/female", "solo_focus", "female"])
    )

    assert result.path_segments == ["Male & Female", "Solo focus", "Female"]


def test_solo_focus_without_unambiguous_gender() -> None:
    result = _classifier(by_interaction=True).classify(
        _post(["male/female", "solo_focus", "female", "male"])
    )

    assert result.path_segments == ["Male & Female", "Solo focus"]


def test_unknown_rating_stops_classification() -> None:
    classifier = _classifier(by_rating=True, by_interaction=True)

    result = classifier.classify(_post(["solo", "male"], rating="x"))

    assert result.path_segments == ["! Unknown rating"]
    assert result.status is ClassificationStatus.UNKNOWN


def test_require_all_tags_gate() -> None:
    classifier = _classifier(by_rating=True, require_all_tags="solo canine")

    assert classifier.classify(_post(["solo", "canine"])).path_segments == ["Safe"]
    result = classifier.classify(_post(["solo"]))
    assert result.status is ClassificationStatus.INVALID
    assert result.path_segments == ["! Invalid"]


def test_require_all_tags_missing_every_tag() -> None:
    result = _classifier(require_all_tags=["canine", "feline"]).classify(_post(["solo"]))

    assert result.status is ClassificationStatus.INVALID


def test_require_one_tag_gate() -> None:
    classifier = _classifier(by_rating=True, require_one_tag=["canine", "feline"])

    assert classifier.classify(_post(["feline"])).path_segments == ["Safe"]
    assert classifier.classify(_post(["avian"])).status is ClassificationStatus.INVALID


def test_require_one_tag_applies_after_require_all_tags() -> None:
    classifier = _classifier(
        by_rating=True, require_all_tags="solo", require_one_tag="canine feline"
    )

    assert classifier.classify(_post(["solo", "feline"])).path_segments == ["Safe"]
    result = classifier.classify(_post(["solo", "avian"]))
    assert result.status is ClassificationStatus.INVALID
    assert result.debug_notes is not None
    assert "None of the tags matched" in result.debug_notes


def test_no_rules_gives_empty_path() -> None:
    result = _classifier().classify(_post(["solo", "male"]))

    assert result.path_segments == []
    assert result.path == ""


def test_classify_is_idempotent() -> None:
    classifier = _classifier(by_rating=True, by_interaction=True)
    post = _post(["male/male", "female/female"], rating="e")

    assert classifier.classify(post) == classifier.classify(post)


def test_categorize_fetches_post(make_client: Callable[..., CatalogClient]) -> None:
    payload = {
        "posts": [
            {
                "id": 8,
                "file": {"md5": "aa", "url": None},
                "rating": "e",
                "tags": {"general": ["solo", "female"]},
            }
        ]
    }
    client = make_client([make_response(payload)])
    classifier = TagClassifier(ClassificationOptions(by_rating=True, by_interaction=True), client)

    result = classifier.categorize(8)

    assert result.path_segments == ["Explicit", "Solo", "Female"]


def test_categorize_api_failure_is_not_found(make_client: Callable[..., CatalogClient]) -> None:
    client = make_client([make_response({}, status=500)])
    classifier = TagClassifier(ClassificationOptions(by_rating=True), client)

    result = classifier.categorize(8)

    assert result.status is ClassificationStatus.NOT_FOUND
    assert result.debug_notes is not None and "API failure" in result.debug_notes


def test_categorize_missing_post_is_not_found(make_client: Callable[..., CatalogClient]) -> None:
    client = make_client([make_response({"posts": []})])
    classifier = TagClassifier(ClassificationOptions(by_rating=True), client)

    assert classifier.categorize(8).path_segments == ["! Not found"]
