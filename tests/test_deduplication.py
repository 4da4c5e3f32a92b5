from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone

from app.services.deduplication import DuplicateCleanupService, partition_duplicates, stored_entry_age_key
from tests.fakes import InMemoryEntryStore, make_entry, stored_from

T0 = datetime(2025, 11, 1, 8, 0, tzinfo=timezone.utc)


class TestPartitionDuplicates(unittest.TestCase):
    def test_first_item_by_sort_key_survives(self) -> None:
        items = [("a", 3), ("b", 1), ("a", 1), ("a", 2)]

        partition = partition_duplicates(items, key_fn=lambda item: item[0], sort_key=lambda item: item[1])

        self.assertEqual(partition.kept, [("b", 1), ("a", 1)])
        self.assertEqual(len(partition.groups), 1)
        self.assertEqual(partition.groups[0].survivor, ("a", 1))
        self.assertEqual(partition.groups[0].size, 3)
        self.assertEqual(partition.dropped, [("a", 2), ("a", 3)])

    def test_age_key_orders_missing_timestamps_last(self) -> None:
        entry = make_entry()
        newer = stored_from(entry, entry_id="b", created_at=T0 + timedelta(hours=1))
        older = stored_from(entry, entry_id="c", created_at=T0)
        undated = stored_from(entry, entry_id="a")

        ordered = sorted([undated, newer, older], key=stored_entry_age_key)

        self.assertEqual([item.id for item in ordered], ["c", "b", "a"])

    def test_same_timestamp_falls_back_to_source_row(self) -> None:
        entry = make_entry()
        later_row = stored_from(entry, entry_id="a", created_at=T0, source_row=9)
        earlier_row = stored_from(entry, entry_id="b", created_at=T0, source_row=2)

        self.assertLess(stored_entry_age_key(earlier_row), stored_entry_age_key(later_row))


class TestDuplicateCleanupService(unittest.TestCase):
    def test_keeps_oldest_entry_of_each_group(self) -> None:
        entry = make_entry()
        store = InMemoryEntryStore(
            [
                stored_from(entry, entry_id="newest", created_at=T0 + timedelta(days=2)),
                stored_from(entry, entry_id="oldest", created_at=T0),
                stored_from(make_entry(person_name=" jana "), entry_id="middle", created_at=T0 + timedelta(days=1)),
                stored_from(make_entry(activity_name="Job posting"), entry_id="unique", created_at=T0),
            ]
        )

        report = DuplicateCleanupService(entry_store=store).cleanup()

        self.assertEqual(report.scanned_entries, 4)
        self.assertEqual(report.duplicate_groups_found, 1)
        self.assertEqual(report.entries_deleted, 2)
        self.assertEqual(sorted(item.id for item in store.entries), ["oldest", "unique"])
        self.assertEqual(report.examples[0].duplicate_count, 3)
        self.assertEqual(report.to_dict()["duplicate_examples"][0]["person"], "Jana")

    def test_dry_run_deletes_nothing(self) -> None:
        entry = make_entry()
        store = InMemoryEntryStore([stored_from(entry, created_at=T0), stored_from(entry, created_at=T0)])

        report = DuplicateCleanupService(entry_store=store).cleanup(dry_run=True)

        self.assertEqual(report.duplicate_groups_found, 1)
        self.assertEqual(report.entries_deleted, 0)
        self.assertTrue(report.dry_run)
        self.assertEqual(len(store.entries), 2)

    def test_clean_store(self) -> None:
        store = InMemoryEntryStore([stored_from(make_entry())])

        report = DuplicateCleanupService(entry_store=store).cleanup()

        self.assertEqual(report.entries_deleted, 0)
        self.assertEqual(report.examples, [])

    def test_examples_are_capped(self) -> None:
        entries = []
        for index in range(7):
            entry = make_entry(activity_name=f"Task {index}")
            entries.extend([stored_from(entry, created_at=T0), stored_from(entry, created_at=T0)])
        store = InMemoryEntryStore(entries)

        report = DuplicateCleanupService(entry_store=store).cleanup()

        self.assertEqual(report.duplicate_groups_found, 7)
        self.assertEqual(report.entries_deleted, 7)
        self.assertEqual(len(report.examples), 5)


if __name__ == "__main__":
    unittest.main()
