from collections.abc import Iterator

import pytest

from notesvn.cli import CLIContext
from notesvn.svn import DataAggregator


@pytest.fixture(autouse=True)
def cli_context(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("COLUMNS", "400")
    CLIContext.reset()
    yield
    CLIContext.reset()


@pytest.fixture
def use_aggregator(aggregator: DataAggregator, monkeypatch: pytest.MonkeyPatch) -> DataAggregator:
    monkeypatch.setattr("notesvn.cli._shared.build_aggregator", lambda: aggregator)
    return aggregator
