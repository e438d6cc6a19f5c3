import shutil
import subprocess
from pathlib import Path

import pytest

from notesvn.svn import CacheManager, CommandExecutor, DataAggregator, OperationManager, PathResolver


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.integration)


@pytest.fixture(autouse=True)
def requires_client() -> None:
    if shutil.which("svn") is None or shutil.which("svnadmin") is None:
        pytest.skip("Subversion client not installed")


def _run(*args: str, cwd: Path | None = None) -> None:
    result = subprocess.run(  # noqa: S603 - Safe: running svn with controlled args
        list(args),
        cwd=str(cwd) if cwd else None,
        capture_output=True,
        text=True,
        check=False,
    )
    if result.returncode != 0:
        msg = f"{' '.join(args)} failed: {result.stderr}"
        raise RuntimeError(msg)


@pytest.fixture
def real_working_copy(tmp_path: Path) -> Path:
    """Create a repository and an empty checkout of it."""
    repository = tmp_path / "repo"
    checkout = tmp_path / "wc"
    _run("svnadmin", "create", str(repository))
    _run("svn", "checkout", "--quiet", repository.as_uri(), str(checkout))
    return checkout


@pytest.fixture
def real_aggregator(real_working_copy: Path) -> DataAggregator:
    operations = OperationManager(
        PathResolver(real_working_copy),
        CommandExecutor(default_timeout=60.0),
        CacheManager(),
        enrich_sizes=False,
    )
    return DataAggregator(operations, freshness_window=0.0, refresh_throttle=0.0)
