"""
Property tests for terminal record retention.

Verifies:
- A record survives garbage collection exactly when its age is below the
  retention window of its status
- The outcome for one record does not depend on how many others exist
- Pending descriptors are never touched by garbage collection
"""

from datetime import timedelta

from hypothesis import given
from hypothesis import strategies as st

from instance_watcher.domain.job_management import JobManager, RetentionPolicy
from instance_watcher.domain.job_management.entities import is_safe_filename
from tests.fixtures.fake_adapters import MockJobRepository, utc
from tests.property.strategies import (
    aged_records,
    record_ages,
    safe_filenames,
    terminal_statuses,
    unsafe_filenames,
)

NOW = utc(2026, 3, 1, 12, 0, 0)


class TestRetentionBoundary:

    @given(status=terminal_statuses, age=record_ages)
    def test_record_survives_iff_younger_than_window(self, status, age):
        repo = MockJobRepository()
        path = repo.add_record("job.json", status, NOW - age)
        policy = RetentionPolicy()

        JobManager(repo, policy).garbage_collect(NOW)

        assert (path in repo.records) == (age < policy.retention_for(status))

    @given(status=terminal_statuses)
    def test_record_at_exact_window_is_removed(self, status):
        repo = MockJobRepository()
        policy = RetentionPolicy()
        path = repo.add_record("job.json", status, NOW - policy.retention_for(status))

        report = JobManager(repo, policy).garbage_collect(NOW)

        assert path not in repo.records
        assert report.removed == [path]

    @given(
        hours=st.integers(min_value=0, max_value=72),
        days=st.integers(min_value=0, max_value=14),
        age=record_ages,
        status=terminal_statuses,
    )
    def test_custom_windows(self, hours, days, age, status):
        repo = MockJobRepository()
        policy = RetentionPolicy(completed=timedelta(hours=hours), failed=timedelta(days=days))
        path = repo.add_record("job.json", status, NOW - age)

        JobManager(repo, policy).garbage_collect(NOW)

        assert (path in repo.records) == (age < policy.retention_for(status))


class TestRetentionVolume:

    @given(records=aged_records())
    def test_each_record_judged_independently(self, records):
        repo = MockJobRepository()
        policy = RetentionPolicy()
        expected_survivors = set()
        for i, (status, age) in enumerate(records):
            path = repo.add_record(f"job-{i:03d}.json", status, NOW - age)
            if age < policy.retention_for(status):
                expected_survivors.add(path)

        report = JobManager(repo, policy).garbage_collect(NOW)

        assert set(repo.records) == expected_survivors
        assert report.removed_count == len(records) - len(expected_survivors)
        assert report.errors == []

    @given(records=aged_records(max_size=20))
    def test_pending_descriptors_untouched(self, records):
        repo = MockJobRepository()
        pending = repo.add_pending("waiting.json", {"url": "https://x/y"})
        for i, (status, age) in enumerate(records):
            repo.add_record(f"job-{i:03d}.json", status, NOW - age)

        JobManager(repo).garbage_collect(NOW)

        assert pending in repo.pending


class TestFilenameSafety:

    @given(name=safe_filenames)
    def test_safe_filenames_accepted(self, name):
        assert is_safe_filename(name)

    @given(name=unsafe_filenames())
    def test_unsafe_filenames_rejected(self, name):
        assert not is_safe_filename(name)
