from __future__ import annotations

import os
import time
from pathlib import Path

from oshelpers.core.io import LockFile, cleanup_stale_locks, find_stale_locks, read_lock_owner
from tests.helpers.timeouts import LOCK_TIMEOUT

NOW = 1_700_000_000.0


def _lock(path: Path, pid: int, created: float) -> Path:
    path.write_text(f"pid={pid}\ncreated={created:.6f}\n", encoding="utf-8")
    return path


def test_read_lock_owner_round_trips_lock_file_metadata(tmp_path: Path) -> None:
    before = time.time()
    with LockFile(tmp_path / "live.lock", timeout=LOCK_TIMEOUT) as lock:
        owner = read_lock_owner(lock.path)

    assert owner.pid == os.getpid()
    assert owner.alive is True
    assert owner.created is not None
    assert before - 1 <= owner.created <= time.time() + 1


def test_read_lock_owner_tolerates_missing_or_malformed_fields(tmp_path: Path) -> None:
    empty = tmp_path / "empty.lock"
    empty.touch()
    owner = read_lock_owner(empty)
    assert (owner.pid, owner.created, owner.alive) == (None, None, None)

    garbled = tmp_path / "garbled.lock"
    garbled.write_text("pid=abc\ncreated=soon\nnoise\n", encoding="utf-8")
    owner = read_lock_owner(garbled)
    assert (owner.pid, owner.created) == (None, None)

    assert read_lock_owner(tmp_path / "missing.lock").pid is None


def test_age_comes_from_created_metadata_not_mtime(tmp_path: Path) -> None:
    # Freshly written file, but metadata says it was created two hours ago.
    old = _lock(tmp_path / "old.lock", 0, NOW - 7200)
    # Old mtime, but metadata says it was created a minute ago.
    young = _lock(tmp_path / "young.lock", 0, NOW - 60)
    os.utime(young, (NOW - 7200, NOW - 7200))

    stale = find_stale_locks([old, young], max_age_seconds=3600, now=NOW)

    assert [s.path for s in stale] == [old]
    assert stale[0].age_seconds == 7200
    assert stale[0].owner.alive is False


def test_find_stale_locks_skips_live_owners_and_missing_files(tmp_path: Path) -> None:
    live = _lock(tmp_path / "live.lock", os.getpid(), NOW - 7200)
    dead = _lock(tmp_path / "dead.lock", 0, NOW - 7200)

    # No metadata: falls back to mtime.
    anonymous = tmp_path / "anon.lock"
    anonymous.touch()
    os.utime(anonymous, (NOW - 7200, NOW - 7200))

    stale = find_stale_locks(
        [live, dead, anonymous, tmp_path / "gone.lock"], max_age_seconds=3600, now=NOW
    )

    assert [s.path for s in stale] == [anonymous, dead]
    by_path = {s.path: s for s in stale}
    assert by_path[anonymous].owner.pid is None
    assert by_path[anonymous].age_seconds == 7200


def test_cleanup_stale_locks_dry_run_and_delete(tmp_path: Path) -> None:
    old = _lock(tmp_path / "old.lock", 0, time.time() - 10_000)

    stale, removed = cleanup_stale_locks([old], dry_run=True)
    assert [s.path for s in stale] == [old]
    assert removed == []
    assert old.exists()

    stale, removed = cleanup_stale_locks([old])
    assert removed == [old]
    assert not old.exists()

    # Once removed, a new LockFile can take the path immediately.
    with LockFile(old, timeout=0) as lock:
        assert lock.attempts == 1


def test_cleanup_respects_configured_max_age(tmp_path: Path, monkeypatch) -> None:
    from tests.helpers.cache_utils import reset_oshelpers_caches

    monkeypatch.setenv("OSHELPERS_stale_locks__max_age_seconds", "100000")
    reset_oshelpers_caches()

    old = _lock(tmp_path / "old.lock", 0, time.time() - 10_000)
    stale, removed = cleanup_stale_locks([old])
    assert stale == [] and removed == []
    assert old.exists()
