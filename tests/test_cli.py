"""CLI integration tests for `boorusort`."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from support import FakeCatalog, FakeClock, FakeSession, post_payload, write_image

from boorusort.catalog import CatalogClient
from boorusort.cli import cli
from boorusort.ingestion import HashComputer


@pytest.fixture
def catalog(monkeypatch: pytest.MonkeyPatch) -> FakeCatalog:
    """Route every client built by the service to an in-memory catalog."""
    fake = FakeCatalog()
    clock = FakeClock()

    def _client(settings: Any) -> CatalogClient:
        return CatalogClient(
            settings, session=FakeSession(fake), clock=clock.time, sleep=clock.sleep
        )

    monkeypatch.setattr("boorusort.service.CatalogClient", _client)
    return fake


def test_cli_help_lists_commands() -> None:
    result = CliRunner().invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "sort" in result.output
    assert "config" in result.output


def test_cli_sort_moves_files(tmp_path: Path, catalog: FakeCatalog) -> None:
    source = tmp_path / "source"
    target = tmp_path / "target"
    target.mkdir()
    image = write_image(source / "a.png")
    write_image(source / "b.png", color=(1, 2, 3))
    catalog.posts.append(
        post_payload(1, HashComputer().compute(image), rating="s", general=["solo", "female"])
    )
    user = tmp_path / "rules.yaml"
    user.write_text("BY_RATING: true\nBY_INTERACTION: true\n", encoding="utf-8")

    result = CliRunner().invoke(
        cli, ["sort", str(source), str(target), str(user), "--no-reverse-search"]
    )

    assert result.exit_code == 0, result.output
    assert (target / "Safe" / "Solo" / "Female" / "a.png").exists()
    assert (source / "! Not found" / "b.png").exists()
    assert "Sort summary" in result.output
    assert "moved=2" in result.output
    assert "Found using MD5 lookup (cached)" in result.output


def test_cli_sort_dry_run_keeps_files(tmp_path: Path, catalog: FakeCatalog) -> None:
    source = tmp_path / "source"
    write_image(source / "a.png")

    result = CliRunner().invoke(cli, ["sort", str(source), "--no-reverse-search", "--dry-run"])

    assert result.exit_code == 0, result.output
    assert (source / "a.png").exists()
    assert "Would move" in result.output


def test_cli_sort_prompts_for_path_and_reverse_search(
    tmp_path: Path, catalog: FakeCatalog
) -> None:
    source = tmp_path / "source"
    write_image(source / "a.png")

    result = CliRunner().invoke(cli, ["sort", "--dry-run"], input=f"{source}\nn\n")

    assert result.exit_code == 0, result.output
    assert "Please enter target path" in result.output
    assert "Use reverse search?" in result.output


def test_cli_sort_rejects_invalid_prompted_path(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["sort"], input=f"{tmp_path / 'missing'}\n")

    assert result.exit_code == 1
    assert "Invalid path!" in result.output


def test_cli_sort_rejects_non_yaml_config(tmp_path: Path) -> None:
    user = tmp_path / "config.cfg"
    user.write_text("LOGIN=x\n", encoding="utf-8")

    result = CliRunner().invoke(cli, ["sort", str(tmp_path), str(user)])

    assert result.exit_code == 1
    assert "not a config file type" in result.output


def test_cli_sort_rejects_third_directory(tmp_path: Path) -> None:
    dirs = [tmp_path / name for name in ("a", "b", "c")]
    for directory in dirs:
        directory.mkdir()

    result = CliRunner().invoke(cli, ["sort", *map(str, dirs)])

    assert result.exit_code == 1
    assert "already set" in result.output


def test_cli_sort_quiet_and_summary_conflict(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["sort", str(tmp_path), "--quiet", "--summary"])

    assert result.exit_code == 1
    assert "cannot both be enabled" in result.output


def test_cli_sort_saves_posts_dump(tmp_path: Path, catalog: FakeCatalog) -> None:
    source = tmp_path / "source"
    first = write_image(source / "a.png")
    write_image(source / "b.png", color=(1, 2, 3))
    catalog.posts.append(post_payload(1, HashComputer().compute(first)))
    dump = tmp_path / "posts.json"

    result = CliRunner().invoke(
        cli,
        ["sort", str(source), "--no-reverse-search", "--dry-run", "--save-dump", str(dump)],
    )

    assert result.exit_code == 0, result.output
    assert dump.exists()


def test_cli_config_view_shows_effective_values(tmp_path: Path) -> None:
    user = tmp_path / "user.yaml"
    user.write_text("LOGIN: viewer\n", encoding="utf-8")

    result = CliRunner().invoke(cli, ["config", "view", str(user), "--no-env"])

    assert result.exit_code == 0, result.output
    assert "login: viewer" in result.output
    assert "base_url" in result.output


def test_cli_sort_stops_on_filesystem_error(tmp_path: Path, catalog: FakeCatalog) -> None:
    source = tmp_path / "source"
    target = tmp_path / "target"
    target.mkdir()
    (target / "Safe").write_text("blocked", encoding="utf-8")
    image = write_image(source / "a.png")
    write_image(source / "b.png", color=(1, 2, 3))
    catalog.posts.append(post_payload(1, HashComputer().compute(image), rating="s"))
    user = tmp_path / "rules.yaml"
    user.write_text("BY_RATING: true\n", encoding="utf-8")

    result = CliRunner().invoke(
        cli, ["sort", str(source), str(target), str(user), "--no-reverse-search"]
    )

    assert result.exit_code == 1
    assert "was not created" in result.output
    assert (source / "a.png").exists()
    assert (source / "b.png").exists()
