"""Tests for the interactive sync state machine."""

import pytest

from notes_sync.exceptions import RemoteStoreError, SyncAborted
from notes_sync.models import NoteRecord
from notes_sync.notes.frontmatter import decode
from notes_sync.sync.orchestrator import SyncOrchestrator, SyncState
from notes_sync.sync.reconciler import classify, find_conflicts, local_only, remote_only
from notes_sync.sync.vcs import NoVersionControl
from tests.fixtures import (
    FakeVersionControl,
    MockRemoteNotes,
    ScriptedDecisionSource,
    write_raw,
    write_tracked,
)


def _record(note_id: str, title: str, content: str = "body") -> NoteRecord:
    return NoteRecord(
        id=note_id,
        title=title,
        content=content,
        date="2024-01-10T09:00:00.000Z",
        created_at="2024-01-10T09:00:00.000Z",
        updated_at="2024-01-11T09:00:00.000Z",
        tags=["t"],
    )


def _run(store, remote, decisions, vcs=None, **kwargs):
    orchestrator = SyncOrchestrator(
        store=store,
        remote=remote,
        decisions=decisions,
        vcs=vcs or FakeVersionControl(),
        **kwargs,
    )
    with remote:
        return orchestrator.run()


def assert_fixed_point(store, remote: MockRemoteNotes) -> None:
    files = store.scan()
    units = classify(store.resolved_notes(files), list(remote.notes.values()))

    assert local_only(units) == []
    assert remote_only(units) == []
    assert find_conflicts(units) == []
    assert store.creatable_notes(files) == []


class TestHappyPath:
    def test_create_and_download_reach_fixed_point(self, store, notes_dir) -> None:
        write_raw(notes_dir, "draft.md", "---\ntitle: Draft\n---\nFresh idea")
        in_sync = _record("keep-1", "Kept")
        write_tracked(notes_dir, "kept.md", in_sync)
        remote = MockRemoteNotes([in_sync, _record("srv-1", "From Server")])
        decisions = ScriptedDecisionSource(
            [
                ("Create 1 notes remotely?", True),
                ("Create note Draft?", True),
                ("Download 1 notes?", True),
            ]
        )

        report = _run(store, remote, decisions)

        assert decisions.exhausted
        assert report.final_state is SyncState.DONE
        assert not report.aborted
        assert report.created == 1
        assert report.downloaded == 1
        assert report.conflicts_surfaced == 0
        assert (notes_dir / "from-server.md").exists()
        assert_fixed_point(store, remote)

    def test_created_note_keeps_its_path(self, store, notes_dir) -> None:
        path = write_raw(notes_dir, "My Draft.md", "Plain text only")
        remote = MockRemoteNotes()
        decisions = ScriptedDecisionSource([("Create 1 notes remotely?", True)])

        report = _run(store, remote, decisions, confirm_each=False)

        assert report.created == 1
        frontmatter, body = decode(path.read_text(encoding="utf-8"))
        assert frontmatter is not None
        assert frontmatter["id"] == "remote-1"
        assert frontmatter["title"] == "My Draft"
        assert body == "Plain text only"
        assert [p.name for p in store.list_note_paths()] == ["My Draft.md"]
        assert_fixed_point(store, remote)

    def test_empty_sides_finish_without_prompts(self, store) -> None:
        remote = MockRemoteNotes()

        report = _run(store, remote, ScriptedDecisionSource())

        assert report.final_state is SyncState.DONE
        assert remote.calls.count("create_note") == 0

    def test_declined_creation_leaves_draft_untracked(self, store, notes_dir) -> None:
        write_raw(notes_dir, "draft.md", "---\ntitle: Draft\n---\nText")
        remote = MockRemoteNotes()
        decisions = ScriptedDecisionSource([("Create 1 notes remotely?", False)])

        report = _run(store, remote, decisions)

        assert report.skipped == 1
        assert "create_note" not in remote.calls
        assert len(store.creatable_notes(store.scan())) == 1

    def test_per_note_confirmation(self, store, notes_dir) -> None:
        write_raw(notes_dir, "a.md", "---\ntitle: Alpha\n---\nA")
        write_raw(notes_dir, "b.md", "---\ntitle: Beta\n---\nB")
        remote = MockRemoteNotes()
        decisions = ScriptedDecisionSource(
            [
                ("Create 2 notes remotely?", True),
                ("Create note Alpha?", False),
                ("Create note Beta?", True),
            ]
        )

        report = _run(store, remote, decisions)

        assert report.created == 1
        assert report.skipped == 1
        assert [note.title for note in remote.notes.values()] == ["Beta"]


class TestGitPrecheck:
    def test_commit_then_continue(self, store) -> None:
        vcs = FakeVersionControl(dirty=[True, False])
        decisions = ScriptedDecisionSource([("uncommitted changes", "commit")])

        report = _run(store, MockRemoteNotes(), decisions, vcs=vcs, commit_message="snap")

        assert vcs.commits == ["snap"]
        assert report.final_state is SyncState.DONE

    def test_external_tool_then_recheck(self, store) -> None:
        vcs = FakeVersionControl(dirty=[True, True, False])
        decisions = ScriptedDecisionSource(
            [("uncommitted changes", "externalTool"), ("uncommitted changes", "recheck")]
        )

        _run(store, MockRemoteNotes(), decisions, vcs=vcs)

        assert vcs.tool_opened == 1
        assert vcs.commits == []

    def test_exit_aborts_before_touching_remote(self, store) -> None:
        remote = MockRemoteNotes()
        orchestrator = SyncOrchestrator(
            store=store,
            remote=remote,
            decisions=ScriptedDecisionSource([("uncommitted changes", "exit")]),
            vcs=FakeVersionControl(dirty=[True]),
        )

        with remote, pytest.raises(SyncAborted) as exc_info:
            orchestrator.run()

        assert exc_info.value.state == SyncState.GIT_PRECHECK.value
        assert orchestrator.report.aborted
        assert orchestrator.report.final_state is SyncState.GIT_PRECHECK
        assert remote.calls == []


class TestEnsureTracked:
    def test_duplicate_resolution_deletes_chosen_file(self, store, notes_dir) -> None:
        record = _record("dup-1", "Dup")
        first = write_tracked(notes_dir, "a.md", record)
        second = write_tracked(notes_dir, "b.md", record)
        remote = MockRemoteNotes([record])
        decisions = ScriptedDecisionSource([("Note dup-1 is tracked by a.md and b.md", "delete-second")])

        report = _run(store, remote, decisions)

        assert first.exists()
        assert not second.exists()
        assert report.deleted == 1
        assert_fixed_point(store, remote)

    def test_duplicate_exit_aborts(self, store, notes_dir) -> None:
        record = _record("dup-1", "Dup")
        write_tracked(notes_dir, "a.md", record)
        write_tracked(notes_dir, "b.md", record)

        with pytest.raises(SyncAborted) as exc_info:
            _run(store, MockRemoteNotes([record]), ScriptedDecisionSource([("tracked by", "exit")]))

        assert exc_info.value.state == SyncState.ENSURE_TRACKED.value

    def test_missing_remote_recreate(self, store, notes_dir) -> None:
        path = write_tracked(notes_dir, "gone.md", _record("gone-1", "Gone"))
        remote = MockRemoteNotes()
        decisions = ScriptedDecisionSource([("Gone no longer exists remotely", "recreate")])

        report = _run(store, remote, decisions)

        assert report.recreated == 1
        assert list(remote.notes) == ["remote-1"]
        assert store.find_path_for_id("remote-1") == path
        assert_fixed_point(store, remote)

    def test_missing_remote_delete_after_confirm(self, store, notes_dir) -> None:
        path = write_tracked(notes_dir, "gone.md", _record("gone-1", "Gone"))
        decisions = ScriptedDecisionSource(
            [("no longer exists remotely", "delete"), ("Delete local file gone.md?", True)]
        )

        report = _run(store, MockRemoteNotes(), decisions)

        assert not path.exists()
        assert report.deleted == 1

    def test_missing_remote_delete_declined_is_a_skip(self, store, notes_dir) -> None:
        path = write_tracked(notes_dir, "gone.md", _record("gone-1", "Gone"))
        decisions = ScriptedDecisionSource(
            [("no longer exists remotely", "delete"), ("Delete local file", False)]
        )

        report = _run(store, MockRemoteNotes(), decisions)

        assert path.exists()
        assert report.skipped_ids == ["gone-1"]

    def test_missing_remote_skip_is_reported(self, store, notes_dir) -> None:
        path = write_tracked(notes_dir, "gone.md", _record("gone-1", "Gone"))
        decisions = ScriptedDecisionSource([("no longer exists remotely", "skip")])

        report = _run(store, MockRemoteNotes(), decisions)

        assert path.exists()
        assert report.final_state is SyncState.DONE
        assert report.skipped_ids == ["gone-1"]

    def test_invalid_files_are_never_touched(self, store, notes_dir) -> None:
        text = "---\nid: broken\ntitle: Broken\n---\nNo timestamps"
        path = write_raw(notes_dir, "broken.md", text)

        report = _run(store, MockRemoteNotes(), ScriptedDecisionSource())

        assert report.final_state is SyncState.DONE
        assert path.read_text(encoding="utf-8") == text


class TestConflicts:
    def test_conflict_is_surfaced_with_remote_version(self, store, notes_dir) -> None:
        remote_note = _record("c-1", "Remote title")
        path = write_tracked(notes_dir, "c.md", _record("c-1", "Local title"))
        remote = MockRemoteNotes([remote_note])

        report = _run(store, remote, ScriptedDecisionSource())

        assert report.conflicts_surfaced == 1
        assert report.pushed == 0
        frontmatter, _ = decode(path.read_text(encoding="utf-8"))
        assert frontmatter is not None
        assert frontmatter["title"] == "Remote title"
        assert_fixed_point(store, remote)

    def test_restored_local_edit_is_pushed(self, store, notes_dir) -> None:
        local_note = _record("c-1", "Local title")
        path = write_tracked(notes_dir, "c.md", local_note)
        remote = MockRemoteNotes([_record("c-1", "Remote title")])

        def restore_local(directory) -> None:
            write_tracked(directory, "c.md", local_note)

        vcs = FakeVersionControl(dirty=[False, True, False], on_tool=restore_local)
        decisions = ScriptedDecisionSource(
            [
                ("Review the surfaced conflicts", "externalTool"),
                ("Push local version of Remote title?", True),
            ]
        )

        report = _run(store, remote, decisions, vcs=vcs)

        assert decisions.exhausted
        assert report.pushed == 1
        assert remote.notes["c-1"].title == "Local title"
        assert remote.calls[-2:] == ["update_note", "get_note_by_id"]
        frontmatter, _ = decode(path.read_text(encoding="utf-8"))
        assert frontmatter is not None
        assert frontmatter["updatedAt"] == remote.notes["c-1"].updated_at
        assert_fixed_point(store, remote)

    def test_nothing_pushed_then_exit(self, store, notes_dir) -> None:
        local_note = _record("c-1", "Local title")
        write_tracked(notes_dir, "c.md", local_note)
        remote = MockRemoteNotes([_record("c-1", "Remote title")])

        vcs = FakeVersionControl(
            dirty=[False, True, False],
            on_tool=lambda directory: write_tracked(directory, "c.md", local_note),
        )
        decisions = ScriptedDecisionSource(
            [
                ("Review the surfaced conflicts", "externalTool"),
                ("Push local version", False),
                ("No changes were pushed", "exit"),
            ]
        )

        with pytest.raises(SyncAborted) as exc_info:
            _run(store, remote, decisions, vcs=vcs)

        assert exc_info.value.state == SyncState.CONFLICT_REVIEW.value
        assert "update_note" not in remote.calls

    def test_review_exit_while_dirty(self, store, notes_dir) -> None:
        write_tracked(notes_dir, "c.md", _record("c-1", "Local title"))
        remote = MockRemoteNotes([_record("c-1", "Remote title")])
        vcs = FakeVersionControl(dirty=[False, True])
        decisions = ScriptedDecisionSource([("Review the surfaced conflicts", "exit")])

        with pytest.raises(SyncAborted):
            _run(store, remote, decisions, vcs=vcs)

    def test_declined_push_is_offered_again(self, store, notes_dir) -> None:
        local_a = _record("a-1", "Local A")
        local_b = _record("b-1", "Local B")
        write_tracked(notes_dir, "a.md", local_a)
        write_tracked(notes_dir, "b.md", local_b)
        remote = MockRemoteNotes([_record("a-1", "Remote A"), _record("b-1", "Remote B")])

        def restore_local(directory) -> None:
            write_tracked(directory, "a.md", local_a)
            write_tracked(directory, "b.md", local_b)

        vcs = FakeVersionControl(dirty=[False, True, False], on_tool=restore_local)
        decisions = ScriptedDecisionSource(
            [
                ("Review the surfaced conflicts", "externalTool"),
                ("Push local version of Remote A?", True),
                ("Push local version of Remote B?", False),
                ("Push local version of Remote B?", True),
            ]
        )

        report = _run(store, remote, decisions, vcs=vcs)

        assert decisions.exhausted
        assert report.final_state is SyncState.DONE
        assert report.pushed == 2
        assert report.skipped == 1
        assert remote.notes["b-1"].title == "Local B"
        assert_fixed_point(store, remote)

    def test_declined_push_then_exit_keeps_conflict_open(self, store, notes_dir) -> None:
        local_a = _record("a-1", "Local A")
        local_b = _record("b-1", "Local B")
        write_tracked(notes_dir, "a.md", local_a)
        write_tracked(notes_dir, "b.md", local_b)
        remote = MockRemoteNotes([_record("a-1", "Remote A"), _record("b-1", "Remote B")])

        def restore_local(directory) -> None:
            write_tracked(directory, "a.md", local_a)
            write_tracked(directory, "b.md", local_b)

        vcs = FakeVersionControl(dirty=[False, True, False], on_tool=restore_local)
        decisions = ScriptedDecisionSource(
            [
                ("Review the surfaced conflicts", "externalTool"),
                ("Push local version of Remote A?", True),
                ("Push local version of Remote B?", False),
                ("Push local version of Remote B?", False),
                ("No changes were pushed", "exit"),
            ]
        )

        with pytest.raises(SyncAborted) as exc_info:
            _run(store, remote, decisions, vcs=vcs)

        assert exc_info.value.state == SyncState.CONFLICT_REVIEW.value
        assert remote.notes["a-1"].title == "Local A"
        assert remote.notes["b-1"].title == "Remote B"

    def test_review_pauses_without_version_control(self, store, notes_dir) -> None:
        path = write_tracked(notes_dir, "c.md", _record("c-1", "My local edit"))
        remote = MockRemoteNotes([_record("c-1", "Remote title")])
        decisions = ScriptedDecisionSource([("edit them, then recheck", "exit")])

        with pytest.raises(SyncAborted) as exc_info:
            _run(store, remote, decisions, vcs=NoVersionControl())

        assert decisions.exhausted
        assert exc_info.value.state == SyncState.CONFLICT_REVIEW.value
        frontmatter, _ = decode(path.read_text(encoding="utf-8"))
        assert frontmatter is not None
        assert frontmatter["title"] == "Remote title"

    def test_recheck_without_version_control_accepts_remote(self, store, notes_dir) -> None:
        write_tracked(notes_dir, "c.md", _record("c-1", "My local edit"))
        remote = MockRemoteNotes([_record("c-1", "Remote title")])
        decisions = ScriptedDecisionSource([("edit them, then recheck", "recheck")])

        report = _run(store, remote, decisions, vcs=NoVersionControl())

        assert decisions.exhausted
        assert report.final_state is SyncState.DONE
        assert "update_note" not in remote.calls
        assert_fixed_point(store, remote)


class TestRemoteFailures:
    def test_remote_error_propagates(self, store, notes_dir) -> None:
        write_tracked(notes_dir, "a.md", _record("a-1", "A"))
        remote = MockRemoteNotes()
        remote.fail_on.add("get_all_notes")

        with pytest.raises(RemoteStoreError):
            _run(store, remote, ScriptedDecisionSource())

    def test_failed_create_leaves_draft(self, store, notes_dir) -> None:
        text = "---\ntitle: Draft\n---\nText"
        path = write_raw(notes_dir, "draft.md", text)
        remote = MockRemoteNotes()
        remote.fail_on.add("create_note")
        decisions = ScriptedDecisionSource(
            [("Create 1 notes remotely?", True), ("Create note Draft?", True)]
        )

        with pytest.raises(RemoteStoreError):
            _run(store, remote, decisions)

        assert path.read_text(encoding="utf-8") == text
