"""Shared pytest fixtures."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

import pytest
from support import FakeClock, FakeSession, Handler, Scripted

from boorusort.catalog import CatalogClient
from boorusort.config.models import ApiSettings


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME at a temporary directory so no real config is touched."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for key in [name for name in os.environ if name.startswith("BOORUSORT__")]:
        monkeypatch.delenv(key)
    return home


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_client(clock: FakeClock) -> Callable[..., CatalogClient]:
    """Return a factory building clients around a fake session."""

    def _factory(
        script: Union[Iterable[Scripted], Handler] = (),
        settings: Optional[ApiSettings] = None,
    ) -> CatalogClient:
        return CatalogClient(
            settings,
            session=FakeSession(script),
            clock=clock.time,
            sleep=clock.sleep,
        )

    return _factory
