"""Test container with per-component unmocking."""

from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import FastapiProvider

from atdemo.util.di import PROVIDERS, Component, get_provider


def build_test_container(unmock: set[Component] | None = None) -> AsyncContainer:
    """Build a container where every mockable component is faked by default.

    Settings come from the environment, so tests adjust them with
    ``monkeypatch.setenv`` before building.

    Examples:
        # In-memory stores, fake identity provider and PDS
        container = build_test_container()

        # Real SQL stores on in-memory SQLite
        container = build_test_container(unmock={"persistence"})
    """
    unmock = unmock or set()
    _validate_unmock(unmock)

    providers = [
        get_provider(base, use_mock=_mocked(base, unmock))() for base in PROVIDERS
    ]
    return make_async_container(*providers, FastapiProvider())


def _mocked(base, unmock: set[Component]) -> bool:
    component = base.__mock_component__
    return component is not None and component not in unmock


def _validate_unmock(unmock: set[Component]) -> None:
    known = {base.__mock_component__ for base in PROVIDERS if base.__mock_component__}
    unknown = unmock - known
    if unknown:
        raise ValueError(f"Unknown components: {unknown}")
