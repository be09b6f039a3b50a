"""Shared fixtures for scraperoute tests."""

from typing import Any

import pytest


class RecordingAction:
    """Action double that records every call the router makes."""

    def __init__(self) -> None:
        self.params: list[dict[Any, Any]] = []
        self.gets: list[str] = []
        self.requests: list[dict[str, Any]] = []

    def set_chain_parameter(self, params: dict[Any, Any]) -> None:
        self.params.append(params)

    def get(self, url: str) -> None:
        self.gets.append(url)

    def request(self, options: dict[str, Any]) -> None:
        self.requests.append(options)


@pytest.fixture
def action() -> RecordingAction:
    return RecordingAction()


@pytest.fixture
def make_action() -> type[RecordingAction]:
    return RecordingAction
