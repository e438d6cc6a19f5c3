"""Shared test fixtures for notesvn tests."""

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import anyio
import pytest

from notesvn.svn import (
    CacheManager,
    CommandOutput,
    DataAggregator,
    FakeCommandExecutor,
    OperationManager,
    PathResolver,
)

INFO_XML = """<?xml version="1.0" encoding="UTF-8"?>
<info>
<entry kind="file" path="{path}" revision="{revision}">
<url>file:///srv/repo/notes/a.md</url>
<relative-url>^/notes/a.md</relative-url>
<repository>
<root>file:///srv/repo</root>
<uuid>6c0d7c9e-1f3b-4c1a-9e57-9d5c1f6f0a11</uuid>
</repository>
<commit revision="{revision}">
<author>alice</author>
<date>2024-03-01T12:00:00.000000Z</date>
</commit>
</entry>
</info>
"""

NOT_FOUND_STDERR = "svn: warning: W155010: The node '{path}' was not found.\n"


@dataclass(frozen=True, slots=True)
class WorkingCopy:
    """Paths for a test working copy.

    Structure:
        tmp_path/
            wc/
                .svn/
                notes/
                    a.md
                    b.md
    """

    root: Path
    notes: Path
    note: Path
    other: Path

    def info_xml(self, path: Path | None = None, revision: int = 5) -> str:
        return INFO_XML.format(path=path or self.note, revision=revision)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def working_copy(tmp_path: Path) -> WorkingCopy:
    root = tmp_path / "wc"
    (root / ".svn").mkdir(parents=True)
    notes = root / "notes"
    notes.mkdir()
    note = notes / "a.md"
    note.write_text("# A\n")
    other = notes / "b.md"
    other.write_text("# B\n")
    return WorkingCopy(root=root, notes=notes, note=note, other=other)


@pytest.fixture
def fake() -> FakeCommandExecutor:
    return FakeCommandExecutor()


@pytest.fixture
def operations(working_copy: WorkingCopy, fake: FakeCommandExecutor) -> OperationManager:
    return OperationManager(
        PathResolver(working_copy.root),
        fake,
        CacheManager(),
        enrich_sizes=False,
    )


@pytest.fixture
def aggregator(operations: OperationManager) -> DataAggregator:
    return DataAggregator(operations, freshness_window=60.0, refresh_throttle=60.0)


@dataclass(slots=True)
class HeldStatusExecutor:
    """Fake whose status replies are picked at call time but delivered late.

    Lets a test change the scripted state, or mutate, while a status read
    is still outstanding.
    """

    inner: FakeCommandExecutor
    hold: float = 0.2

    async def run(
        self,
        argv: Sequence[str],
        cwd: str | None = None,
        timeout: float | None = None,
    ) -> CommandOutput:
        output = await self.inner.run(argv, cwd, timeout)
        if len(argv) > 1 and argv[1] == "status":
            await anyio.sleep(self.hold)
        return output


@pytest.fixture
def held_operations(working_copy: WorkingCopy, fake: FakeCommandExecutor) -> OperationManager:
    return OperationManager(
        PathResolver(working_copy.root),
        HeldStatusExecutor(fake),
        CacheManager(),
        enrich_sizes=False,
    )


@pytest.fixture
def held_aggregator(held_operations: OperationManager) -> DataAggregator:
    return DataAggregator(held_operations, freshness_window=60.0, refresh_throttle=60.0)
