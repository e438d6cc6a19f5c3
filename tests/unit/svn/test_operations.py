from typing import TYPE_CHECKING

import anyio
import pytest

from notesvn.exceptions import (
    CommandExecutionError,
    CommandTimeoutError,
    ConfigurationError,
    ConflictError,
    NotInTrackedTreeError,
)
from notesvn.svn import (
    CacheCategory,
    CacheKey,
    CacheManager,
    FakeCommandExecutor,
    InvalidationEvent,
    InvalidationKind,
    OperationManager,
    PathResolver,
    StatusCode,
    is_already_versioned,
    is_out_of_date,
    is_soft_failure,
    repository_path_from_url,
    validate_repository_name,
)

if TYPE_CHECKING:
    from tests.conftest import WorkingCopy

pytestmark = pytest.mark.anyio

NOT_FOUND = "svn: warning: W155010: The node 'x' was not found.\n"
OUT_OF_DATE = "svn: E155011: File '/wc/notes/a.md' is out of date\n"


def subcommands(fake: FakeCommandExecutor) -> list[str]:
    return [call[1] for call in fake.calls]


async def until_called(fake: FakeCommandExecutor, subcommand: str) -> None:
    with anyio.fail_after(5):
        while not fake.count(subcommand):
            await anyio.sleep(0.005)


class TestClassifiers:
    @pytest.mark.parametrize(
        "stderr",
        [
            NOT_FOUND,
            "svn: E155010: The node '/wc/x' was not found.",
            "svn: warning: W155010: not under version control",
            "svn: E200005: '/wc/x' is not under version control",
            "svn: E160013: Path not found",
            "svn: E200009: Could not display info for all targets",
        ],
    )
    def test_soft_failures(self, stderr: str) -> None:
        assert is_soft_failure(stderr)

    def test_real_failure_is_not_soft(self) -> None:
        assert not is_soft_failure("svn: E170013: Unable to connect to a repository")

    @pytest.mark.parametrize(
        "stderr",
        [
            OUT_OF_DATE,
            "svn: E160028: Directory '/notes' is out of date",
            "svn: E160024: resource out of date; try updating",
            "svn: E170004: Item '/notes/a.md' is out of date",
        ],
    )
    def test_out_of_date(self, stderr: str) -> None:
        assert is_out_of_date(stderr)

    def test_already_versioned(self) -> None:
        assert is_already_versioned(
            "svn: warning: W150002: '/wc/a.md' is already under version control"
        )
        assert not is_already_versioned(NOT_FOUND)


class TestRepositoryHelpers:
    def test_repository_path_from_file_url(self) -> None:
        assert repository_path_from_url("file:///srv/repo") == "/srv/repo"
        assert repository_path_from_url("file:///srv/my%20repo") == "/srv/my repo"

    def test_remote_url_has_no_local_path(self) -> None:
        assert repository_path_from_url("https://svn.example.com/repo") is None

    def test_validate_strips_leading_dots(self) -> None:
        assert validate_repository_name("..notes") == "notes"

    @pytest.mark.parametrize("name", ["", "...", "a/b", "a\\b"])
    def test_validate_rejects(self, name: str) -> None:
        with pytest.raises(ValueError, match="Repository name"):
            _ = validate_repository_name(name)


class TestGetStatus:
    async def test_parses_and_caches(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("status", f"M       {working_copy.note}\n")

        first = await operations.get_status(working_copy.note)
        second = await operations.get_status(working_copy.note)

        assert [e.status_code for e in first] == [StatusCode.MODIFIED]
        assert first == second
        assert fake.count("status") == 1

    async def test_command_shape(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        _ = await operations.get_status(working_copy.note, depth="empty")

        call = fake.calls_for("status")[0]
        assert call[0] == "svn"
        assert "--non-interactive" in call
        assert "--depth=empty" in call
        assert call[-1] == str(working_copy.note)

    async def test_defaults_to_configured_root(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        _ = await operations.get_status()

        assert fake.calls_for("status")[0][-1] == str(working_copy.root)

    async def test_soft_failure_yields_empty(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("status", stderr=NOT_FOUND, exit_code=1)

        assert await operations.get_status(working_copy.note) == []

    async def test_hard_failure_raises(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("status", stderr="svn: E155036: working copy upgrade needed", exit_code=1)

        with pytest.raises(CommandExecutionError) as exc_info:
            _ = await operations.get_status(working_copy.note)

        assert exc_info.value.exit_code == 1
        assert "E155036" in exc_info.value.stderr

    async def test_outside_tree_raises(
        self, operations: OperationManager, working_copy: "WorkingCopy"
    ) -> None:
        with pytest.raises(NotInTrackedTreeError):
            _ = await operations.get_status(working_copy.root.parent / "loose.md")

    async def test_without_root_raises(self, fake: FakeCommandExecutor) -> None:
        operations = OperationManager(PathResolver(), fake, CacheManager())

        with pytest.raises(ConfigurationError):
            _ = await operations.get_status()

    async def test_read_overlapping_a_mutation_is_not_cached(
        self,
        held_operations: OperationManager,
        fake: FakeCommandExecutor,
        working_copy: "WorkingCopy",
    ) -> None:
        fake.respond("status", f"M       {working_copy.note}\n")
        results: list[list[StatusCode]] = []

        async def read() -> None:
            entries = await held_operations.get_status(working_copy.note)
            results.append([e.status_code for e in entries])

        async with anyio.create_task_group() as tg:
            tg.start_soon(read)
            await until_called(fake, "status")
            fake.reset("status")
            held_operations.invalidate_path(working_copy.note)

        after = await held_operations.get_status(working_copy.note)

        assert results == [[StatusCode.MODIFIED]]
        assert after == []
        assert fake.count("status") == 2


class TestIsTracked:
    async def test_info_url_decides(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("info", working_copy.info_xml())

        assert await operations.is_tracked(working_copy.note)
        assert fake.count("status") == 0

    async def test_unversioned_status_means_untracked(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("info", stderr=NOT_FOUND, exit_code=1)
        fake.respond("status", f"?       {working_copy.note}\n")

        assert not await operations.is_tracked(working_copy.note)

    async def test_added_status_means_tracked(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("info", stderr=NOT_FOUND, exit_code=1)
        fake.respond("status", f"A       {working_copy.note}\n")

        assert await operations.is_tracked(working_copy.note)

    async def test_ambiguous_result_rechecks_with_verbose_status(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("info", "")
        fake.respond(
            "status", f"        5        4 alice        {working_copy.note}\n", contains="--verbose"
        )

        assert await operations.is_tracked(working_copy.note)
        assert fake.count("status") == 2

    async def test_result_is_cached(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("info", working_copy.info_xml())

        _ = await operations.is_tracked(working_copy.note)
        _ = await operations.is_tracked(working_copy.note)

        assert fake.count("info") == 1
        assert CacheKey.build(CacheCategory.TRACKED, str(working_copy.note)) in operations.cache

    async def test_answer_overlapping_an_add_is_not_cached(
        self,
        held_operations: OperationManager,
        fake: FakeCommandExecutor,
        working_copy: "WorkingCopy",
    ) -> None:
        fake.respond("info", stderr=NOT_FOUND, exit_code=1)
        fake.respond("status", f"?       {working_copy.note}\n")
        answers: list[bool] = []

        async def check() -> None:
            answers.append(await held_operations.is_tracked(working_copy.note))

        async with anyio.create_task_group() as tg:
            tg.start_soon(check)
            await until_called(fake, "status")
            fake.reset("status")
            fake.respond("status", f"A       {working_copy.note}\n")
            held_operations.invalidate_path(working_copy.note)

        key = CacheKey.build(CacheCategory.TRACKED, str(working_copy.note))
        assert answers == [False]
        assert key not in held_operations.cache
        assert await held_operations.is_tracked(working_copy.note)

    async def test_outside_tree_is_untracked_without_commands(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        assert not await operations.is_tracked(working_copy.root.parent / "loose.md")
        assert fake.count() == 0


class TestGetLog:
    LOG = (
        '<log><logentry revision="12"><author>alice</author><msg>two</msg></logentry>'
        '<logentry revision="11"><author>bob</author><msg>one</msg></logentry></log>'
    )

    async def test_applies_limit_at_head(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("info", working_copy.info_xml(revision=12))
        fake.respond("log", self.LOG)

        entries = await operations.get_log(working_copy.note, limit=2)

        assert [e.revision for e in entries] == [12, 11]
        call = fake.calls_for("log")[0]
        assert call[call.index("--limit") + 1] == "2"

    async def test_pinned_working_copy_fetches_full_range(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("info", working_copy.info_xml(revision=20), contains="HEAD")
        fake.respond("info", working_copy.info_xml(revision=12))
        fake.respond("log", self.LOG)

        _ = await operations.get_log(working_copy.note, limit=2)

        call = fake.calls_for("log")[0]
        assert "--limit" not in call
        assert call[call.index("-r") + 1] == "HEAD:1"

    async def test_cached_per_limit(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("info", working_copy.info_xml(revision=12))
        fake.respond("log", self.LOG)

        _ = await operations.get_log(working_copy.note, limit=2)
        _ = await operations.get_log(working_copy.note, limit=2)
        _ = await operations.get_log(working_copy.note, limit=5)

        assert fake.count("log") == 2

    async def test_soft_failure_yields_empty(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("log", stderr=NOT_FOUND, exit_code=1)

        assert await operations.get_log(working_copy.note) == []

    async def test_enrichment_is_partial_and_failable(
        self, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        operations = OperationManager(PathResolver(working_copy.root), fake, CacheManager())
        fake.respond("info", working_copy.info_xml(revision=12))
        fake.respond("log", self.LOG)
        fake.respond(
            "list",
            "<lists><list><entry><size>2048</size></entry></list></lists>",
            contains="-r 12",
        )
        fake.respond("list", stderr="svn: E160013: path not found", exit_code=1)
        fake.respond("rev-size", "4096\n", contains="-r 11")
        fake.respond("rev-size", stderr="svnadmin: E160006: No such revision", exit_code=1)

        entries = await operations.get_log(working_copy.note)

        by_revision = {e.revision: e for e in entries}
        assert by_revision[12].file_size_bytes == 2048
        assert by_revision[11].file_size_bytes is None
        assert by_revision[12].repository_storage_bytes is None
        assert by_revision[11].repository_storage_bytes == 4096
        assert fake.calls_for("rev-size")[0][:3] == ("svnadmin", "rev-size", "/srv/repo")

    async def test_enrichment_timeouts_are_tolerated(
        self, working_copy: "WorkingCopy"
    ) -> None:
        class SlowLookups(FakeCommandExecutor):
            async def run(self, argv, cwd=None, timeout=None):  # noqa: ANN001, ANN202
                if argv[1] in {"list", "rev-size"}:
                    raise CommandTimeoutError(argv, timeout or 0.0)
                return await super().run(argv, cwd, timeout)

        fake = SlowLookups()
        operations = OperationManager(PathResolver(working_copy.root), fake, CacheManager())
        fake.respond("info", working_copy.info_xml(revision=12))
        fake.respond("log", self.LOG)

        entries = await operations.get_log(working_copy.note)

        assert [e.file_size_bytes for e in entries] == [None, None]


class TestAdd:
    async def test_adds_untracked_parents_first(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        nested = working_copy.root / "new" / "sub"
        nested.mkdir(parents=True)
        target = nested / "c.md"
        target.write_text("c")
        fake.respond("info", stderr=NOT_FOUND, exit_code=1)

        result = await operations.add([target], add_parents=True)

        assert result.success
        adds = fake.calls_for("add")
        assert [call[-1] for call in adds] == [
            str(working_copy.root / "new"),
            str(nested),
            str(target),
        ]
        assert "--depth=empty" in adds[0]
        assert "--depth=empty" in adds[1]
        assert "--depth=empty" not in adds[2]

    async def test_tracked_parents_are_not_added(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("info", working_copy.info_xml(path=working_copy.notes))

        _ = await operations.add([working_copy.note], add_parents=True)

        assert [call[-1] for call in fake.calls_for("add")] == [str(working_copy.note)]

    async def test_already_versioned_is_success(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond(
            "add", stderr="svn: warning: W150002: already under version control", exit_code=1
        )

        result = await operations.add([working_copy.note])

        assert result.success

    async def test_requires_paths(self, operations: OperationManager) -> None:
        with pytest.raises(ValueError, match="At least one path"):
            _ = await operations.add([])

    async def test_invalidates_ancestor_tracked_flags(
        self, operations: OperationManager, working_copy: "WorkingCopy"
    ) -> None:
        for path in (working_copy.root, working_copy.notes, working_copy.note):
            operations.cache.set(CacheKey.build(CacheCategory.TRACKED, str(path)), False)

        _ = await operations.add([working_copy.note])

        assert operations.cache.keys(CacheCategory.TRACKED) == []


class TestRemove:
    async def test_keep_local_flag(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        _ = await operations.remove([working_copy.note], keep_local=True)

        assert fake.calls_for("delete")[0][-2:] == ("--keep-local", str(working_copy.note))


class TestMove:
    async def test_outside_tree_is_skipped(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        loose = working_copy.root.parent / "loose.md"

        result = await operations.move(loose, working_copy.root.parent / "renamed.md")

        assert result.skipped
        assert fake.count() == 0

    async def test_invalidates_both_ends_and_parents(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        events: list[InvalidationEvent] = []
        _ = operations.cache.subscribe(events.append)
        destination = working_copy.root / "archive" / "a.md"

        result = await operations.move(working_copy.note, destination)

        assert result.success
        assert "--parents" in fake.calls_for("move")[0]
        invalidated = {event.path for event in events if event.kind is InvalidationKind.PATH}
        assert invalidated == {
            str(working_copy.note),
            str(destination),
            str(working_copy.notes),
            str(destination.parent),
        }

    async def test_invalidates_even_when_client_fails(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        events: list[InvalidationEvent] = []
        _ = operations.cache.subscribe(events.append)
        fake.respond("move", stderr="svn: E155010: boom", exit_code=1)

        with pytest.raises(CommandExecutionError):
            _ = await operations.move(working_copy.note, working_copy.other)

        assert events


class TestCommit:
    @pytest.fixture(autouse=True)
    def tracked_everywhere(self, fake: FakeCommandExecutor, working_copy: "WorkingCopy") -> None:
        fake.respond("info", working_copy.info_xml())

    async def test_plain_commit(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("commit", "Committed revision 7.\n")

        result = await operations.commit([working_copy.note], "Edit a")

        assert result.success
        assert result.revision == 7
        assert fake.calls_for("commit") == [
            ("svn", "commit", "--non-interactive", "-m", "Edit a", str(working_copy.note))
        ]
        assert fake.count("add") == 0

    async def test_empty_paths_are_skipped(
        self, operations: OperationManager, fake: FakeCommandExecutor
    ) -> None:
        result = await operations.commit([], "nothing")

        assert result.skipped
        assert fake.count() == 0

    async def test_out_of_date_updates_once_then_retries(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("commit", stderr=OUT_OF_DATE, exit_code=1, once=True)
        fake.respond("commit", "Committed revision 8.\n")
        fake.respond("update", "Updating '.':\nU    notes/a.md\nUpdated to revision 7.\n")

        result = await operations.commit([working_copy.note], "Edit a")

        assert result.revision == 8
        assert fake.count("update") == 1
        assert fake.count("commit") == 2
        assert subcommands(fake).index("update") < len(subcommands(fake)) - 1
        assert "postpone" in fake.calls_for("update")[0]

    async def test_conflict_in_update_output_aborts_retry(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("commit", stderr=OUT_OF_DATE, exit_code=1)
        fake.respond("update", "C    notes/a.md\nUpdated to revision 7.\n")

        with pytest.raises(ConflictError) as exc_info:
            _ = await operations.commit([working_copy.note], "Edit a")

        assert exc_info.value.paths == ("notes/a.md",)
        assert fake.count("update") == 1
        assert fake.count("commit") == 1

    async def test_conflict_in_post_update_status_aborts_retry(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("commit", stderr=OUT_OF_DATE, exit_code=1)
        fake.respond("update", "Updated to revision 7.\n")
        fake.respond("status", f"C       {working_copy.note}\n", contains="a.md")

        with pytest.raises(ConflictError) as exc_info:
            _ = await operations.commit([working_copy.note], "Edit a")

        assert exc_info.value.paths == (str(working_copy.note),)
        assert fake.count("commit") == 1

    async def test_second_out_of_date_is_not_retried(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("commit", stderr=OUT_OF_DATE, exit_code=1)

        with pytest.raises(CommandExecutionError):
            _ = await operations.commit([working_copy.note], "Edit a")

        assert fake.count("update") == 1
        assert fake.count("commit") == 2

    async def test_added_parent_is_committed_first(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("status", f"A       {working_copy.notes}\n", contains="--depth=empty")
        fake.respond("commit", "Committed revision 3.\n")

        _ = await operations.commit([working_copy.note], "First note")

        commits = fake.calls_for("commit")
        assert len(commits) == 2
        assert "--depth=empty" in commits[0]
        assert commits[0][-1] == str(working_copy.notes)
        assert commits[1][-1] == str(working_copy.note)

    async def test_untracked_target_is_added_first(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.reset("info")
        fake.respond("info", stderr=NOT_FOUND, exit_code=1, contains="a.md")
        fake.respond("info", working_copy.info_xml(path=working_copy.notes))
        fake.respond("status", f"?       {working_copy.note}\n", contains="a.md")

        _ = await operations.commit([working_copy.note], "New note")

        order = subcommands(fake)
        assert fake.calls_for("add")[0][-1] == str(working_copy.note)
        assert order.index("add") < order.index("commit")

    async def test_invalidates_status_cache(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("status", f"M       {working_copy.note}\n", contains="a.md")
        _ = await operations.get_status(working_copy.note)

        _ = await operations.commit([working_copy.note], "Edit a")

        key = CacheKey.build(CacheCategory.STATUS, str(working_copy.note))
        assert key not in operations.cache


class TestUpdate:
    async def test_update_to_revision_reports_conflicts(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("update", "C    notes/a.md\nUpdated to revision 3.\n")

        result = await operations.update_to_revision(working_copy.note, 3)

        assert result.success
        assert result.conflicts == ("notes/a.md",)
        assert result.revision == 3
        call = fake.calls_for("update")[0]
        assert call[call.index("-r") + 1] == "3"
        assert call[call.index("--accept") + 1] == "postpone"

    async def test_update_to_head(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("update", "Updating '.':\nAt revision 9.\n")

        result = await operations.update([working_copy.note, working_copy.other])

        assert result.conflicts == ()
        assert result.revision == 9
        assert fake.calls_for("update")[0][-2:] == (str(working_copy.note), str(working_copy.other))

    async def test_conflict_summary_without_path_lines_flags_targets(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond(
            "update",
            "Updating '.':\nUpdated to revision 4.\nSummary of conflicts:\n  Tree conflicts: 1\n",
        )

        result = await operations.update_to_revision(working_copy.note, 4)

        assert result.conflicts == (str(working_copy.note),)
        assert result.revision == 4

    async def test_conflict_summary_on_head_update_flags_every_target(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("update", "Summary of conflicts:\n  Text conflicts: 1\nAt revision 9.\n")

        result = await operations.update([working_copy.note, working_copy.other])

        assert result.conflicts == (str(working_copy.note), str(working_copy.other))

    async def test_checkout_revision_reverts_then_raises_on_conflict(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("update", "C    notes/a.md\nUpdated to revision 3.\n")

        with pytest.raises(ConflictError):
            _ = await operations.checkout_revision(working_copy.note, 3)

        assert subcommands(fake) == ["revert", "update"]


class TestDetailQueries:
    async def test_diff_range(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("diff", "Index: a.md\n")

        text = await operations.get_diff(working_copy.note, 3, 5)

        assert text == "Index: a.md\n"
        call = fake.calls_for("diff")[0]
        assert call[call.index("-r") + 1] == "3:5"

    async def test_properties_failure_yields_empty(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("proplist", stderr="svn: E170013: unreachable", exit_code=1)

        assert await operations.get_properties(working_copy.note) == {}

    async def test_head_revision_failure_yields_none(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        fake.respond("info", stderr="svn: E170013: unreachable", exit_code=1)

        assert await operations.get_head_revision(working_copy.root) is None


class TestCreateRepository:
    async def test_creates_hidden_directory(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        result = await operations.create_repository("vault")

        assert result.success
        assert not result.skipped
        assert fake.calls[0] == ("svnadmin", "create", str(working_copy.root / ".vault"))

    async def test_existing_directory_is_skipped(
        self, operations: OperationManager, fake: FakeCommandExecutor, working_copy: "WorkingCopy"
    ) -> None:
        (working_copy.root / ".vault").mkdir()

        result = await operations.create_repository(".vault")

        assert result.success
        assert result.skipped
        assert fake.count() == 0

    async def test_requires_root(self, fake: FakeCommandExecutor) -> None:
        operations = OperationManager(PathResolver(), fake, CacheManager())

        with pytest.raises(ConfigurationError):
            _ = await operations.create_repository("vault")

    async def test_invalid_name(self, operations: OperationManager) -> None:
        with pytest.raises(ValueError, match="path separators"):
            _ = await operations.create_repository("a/b")
