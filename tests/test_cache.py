"""Tests for the feed cache."""

import unittest
from datetime import timedelta

from notefeed.notes.cache import InfiniteNotesCache, chunk
from notefeed.notes.domain import FeedNote, Pending, Persisted

from _fakes import T0


def note(key: str, minutes: int = 0, pending: bool = False) -> FeedNote:
    ref = Pending(key) if pending else Persisted(key)
    return FeedNote(ref=ref, content=f"<p>{key}</p>", created_at=T0 - timedelta(minutes=minutes))


class ChunkTest(unittest.TestCase):
    def test_chunk_splits_and_never_returns_no_pages(self):
        notes = [note(str(i)) for i in range(5)]
        self.assertEqual([len(p) for p in chunk(notes, 2)], [2, 2, 1])
        self.assertEqual(chunk([], 2), [[]])


class InfiniteNotesCacheTest(unittest.TestCase):
    def setUp(self):
        self.cache = InfiniteNotesCache()
        self.cache.append_page(1, [note("a", 1), note("b", 2)])
        self.cache.append_page(2, [note("c", 3), note("d", 4)])

    def test_prepend_goes_to_head_of_first_page(self):
        self.cache.prepend(note("tmp", pending=True))
        self.assertEqual([n.key for n in self.cache.pages[0]], ["tmp", "a", "b"])
        self.assertEqual(self.cache.page_params, [1, 2])

    def test_replace_content_keeps_ref_and_rechunks(self):
        self.cache.prepend(note("tmp", pending=True))

        found = self.cache.replace_content("tmp", "<p>edited</p>", page_size=2)

        self.assertTrue(found)
        self.assertEqual([[n.key for n in p] for p in self.cache.pages], [["tmp", "a"], ["b", "c"], ["d"]])
        edited = self.cache.find("tmp")
        self.assertEqual(edited.content, "<p>edited</p>")
        self.assertEqual(edited.ref, Pending("tmp"))
        self.assertEqual(self.cache.page_params, [1, 2, 3])

    def test_snapshot_restore_is_exact(self):
        before = self.cache.snapshot()
        self.cache.prepend(note("tmp", pending=True))
        self.cache.restore(before)
        self.assertEqual(self.cache.snapshot(), before)

    def test_cancel_invalidates_older_generations(self):
        gen = self.cache.generation
        self.cache.cancel()
        self.assertFalse(self.cache.is_current(gen))
        self.assertTrue(self.cache.is_current(self.cache.generation))

    def test_remove_rechunks(self):
        self.cache.remove("b", page_size=2)
        self.assertEqual([[n.key for n in p] for p in self.cache.pages], [["a", "c"], ["d"]])
        self.assertEqual(self.cache.page_params, [1, 2])

    def test_first_page_replaces_everything(self):
        self.cache.append_page(1, [note("z")])
        self.assertEqual(self.cache.keys(), ["z"])
        self.assertEqual(self.cache.page_params, [1])


if __name__ == "__main__":
    unittest.main()
