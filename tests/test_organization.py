"""Tests for move planning and execution."""

from __future__ import annotations

from pathlib import Path

import pytest

from boorusort.classification import ClassificationResult, ClassificationStatus
from boorusort.organization import (
    FilesystemError,
    OperationExecutor,
    OrganizationError,
    OrganizerPlanner,
)


def _setup(tmp_path: Path) -> tuple[Path, Path, Path]:
    source = tmp_path / "source"
    target = tmp_path / "target"
    source.mkdir()
    target.mkdir()
    image = source / "img.png"
    image.write_bytes(b"image")
    return source, target, image


def test_classified_file_goes_under_target(tmp_path: Path) -> None:
    source, target, image = _setup(tmp_path)
    result = ClassificationResult(path_segments=["Safe", "Solo", "Male"])

    operation = OrganizerPlanner().plan_move(
        image, result, target_root=target, quarantine_root=source
    )

    assert operation.destination == target / "Safe" / "Solo" / "Male" / "img.png"
    assert operation.conflict_applied is False


def test_error_marker_goes_under_quarantine_root(tmp_path: Path) -> None:
    source, target, image = _setup(tmp_path)
    result = ClassificationResult.marker(ClassificationStatus.NOT_FOUND)

    operation = OrganizerPlanner().plan_move(
        image, result, target_root=target, quarantine_root=source
    )

    assert operation.destination == source / "! Not found" / "img.png"


def test_alias_applied_against_chosen_root(tmp_path: Path) -> None:
    source, target, image = _setup(tmp_path)
    (target / "Clean").mkdir()

    operation = OrganizerPlanner().plan_move(
        image,
        ClassificationResult(path_segments=["Safe"]),
        target_root=target,
        quarantine_root=source,
    )

    assert operation.destination == target / "Clean" / "img.png"


def test_collision_is_retargeted_to_exists_folder(tmp_path: Path) -> None:
    source, target, image = _setup(tmp_path)
    (target / "Safe").mkdir()
    (target / "Safe" / "img.png").write_bytes(b"other")

    operation = OrganizerPlanner(folder_aliases={}).plan_move(
        image,
        ClassificationResult(path_segments=["Safe"]),
        target_root=target,
        quarantine_root=source,
    )

    assert operation.destination == source / "! Exists" / "Safe" / "img.png"
    assert operation.conflict_applied is True


def test_repeated_collisions_nest(tmp_path: Path) -> None:
    source, target, image = _setup(tmp_path)
    for folder in (target / "Safe", source / "! Exists" / "Safe"):
        folder.mkdir(parents=True)
        (folder / "img.png").write_bytes(b"other")

    operation = OrganizerPlanner(folder_aliases={}).plan_move(
        image,
        ClassificationResult(path_segments=["Safe"]),
        target_root=target,
        quarantine_root=source,
    )

    assert operation.destination == source / "! Exists" / "! Exists" / "Safe" / "img.png"


def test_planned_destinations_count_as_occupied(tmp_path: Path) -> None:
    source, target, image = _setup(tmp_path)
    claimed = target / "Safe" / "img.png"

    operation = OrganizerPlanner(folder_aliases={}).plan_move(
        image,
        ClassificationResult(path_segments=["Safe"]),
        target_root=target,
        quarantine_root=source,
        occupied={claimed},
    )

    assert operation.destination == source / "! Exists" / "Safe" / "img.png"


def test_collision_depth_is_bounded(tmp_path: Path) -> None:
    source, target, image = _setup(tmp_path)
    folder = target / "Safe"
    folder.mkdir()
    (folder / "img.png").write_bytes(b"other")
    nested = source / "! Exists"
    nested.mkdir()
    (nested / "Safe").mkdir()
    (nested / "Safe" / "img.png").write_bytes(b"other")

    planner = OrganizerPlanner(folder_aliases={}, max_depth=1)

    with pytest.raises(OrganizationError):
        planner.plan_move(
            image,
            ClassificationResult(path_segments=["Safe"]),
            target_root=target,
            quarantine_root=source,
        )


def test_executor_moves_file_and_writes_notes(tmp_path: Path) -> None:
    source, target, image = _setup(tmp_path)
    result = ClassificationResult(
        path_segments=["! Conflict"],
        status=ClassificationStatus.CONFLICT,
        debug_notes="Multiple interaction tags matched: \nMale & Male",
    )
    operation = OrganizerPlanner().plan_move(
        image, result, target_root=target, quarantine_root=source
    )

    OperationExecutor().apply(operation)

    assert not image.exists()
    assert operation.destination.read_bytes() == b"image"
    notes = operation.destination.with_name("img.png.txt")
    assert notes.read_text(encoding="utf-8").startswith("Multiple interaction tags matched")


def test_executor_can_skip_notes(tmp_path: Path) -> None:
    source, target, image = _setup(tmp_path)
    result = ClassificationResult.marker(ClassificationStatus.ERROR, debug_notes="boom")
    operation = OrganizerPlanner().plan_move(
        image, result, target_root=target, quarantine_root=source
    )

    OperationExecutor(write_debug_notes=False).apply(operation)

    assert operation.destination.exists()
    assert not operation.notes_path.exists()


def test_executor_dry_run_leaves_filesystem_untouched(tmp_path: Path) -> None:
    source, target, image = _setup(tmp_path)
    operation = OrganizerPlanner().plan_move(
        image,
        ClassificationResult(path_segments=["Safe"]),
        target_root=target,
        quarantine_root=source,
    )

    OperationExecutor().apply(operation, dry_run=True)

    assert image.exists()
    assert not (target / "Safe").exists()


def test_executor_reports_directory_failures(tmp_path: Path) -> None:
    source, target, image = _setup(tmp_path)
    (target / "Safe").write_text("a file where a folder should be", encoding="utf-8")
    operation = OrganizerPlanner(folder_aliases={}).plan_move(
        image,
        ClassificationResult(path_segments=["Safe", "Solo"]),
        target_root=target,
        quarantine_root=source,
    )

    with pytest.raises(FilesystemError):
        OperationExecutor().apply(operation)

    assert image.exists()


def test_executor_rejects_missing_source(tmp_path: Path) -> None:
    source, target, image = _setup(tmp_path)
    operation = OrganizerPlanner().plan_move(
        image,
        ClassificationResult(path_segments=["Safe"]),
        target_root=target,
        quarantine_root=source,
    )
    image.unlink()

    with pytest.raises(OrganizationError):
        OperationExecutor().apply(operation)
