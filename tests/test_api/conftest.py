"""Fixtures for API tests: an app wired to fake upstreams."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tests._github_helpers import FakeGitHub
from tests._origin_helpers import FakeOrigin
from tests.conftest import create_test_client

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from httpx import AsyncClient

    from pagesync.config import Settings


@pytest.fixture
def origin() -> FakeOrigin:
    return FakeOrigin()


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
async def client(
    test_settings: Settings, origin: FakeOrigin, fake_github: FakeGitHub
) -> AsyncGenerator[AsyncClient]:
    """Create test HTTP client."""
    async with create_test_client(
        test_settings, origin_handler=origin, github_handler=fake_github
    ) as ac:
        yield ac
