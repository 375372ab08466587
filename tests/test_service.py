"""Tests for the NotesApp facade."""

import unittest
from datetime import timedelta, timezone

from notefeed.config import Settings
from notefeed.notes.domain import Persisted
from notefeed.notes.notify import RecordingNotifier
from notefeed.notes.rendering import PLACEHOLDER_TEXT
from notefeed.notes.service import NoteNotLoaded, NotesApp

from _fakes import T0, FakeClock, FakeGateway, image_url

UTC = timezone.utc
NOW = T0 + timedelta(hours=2)


class NotesAppTestCase(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.gateway = FakeGateway()
        self.gateway.seed(20, start=T0 - timedelta(hours=1))
        self.notifier = RecordingNotifier()
        self.app = NotesApp(
            self.gateway,
            settings=Settings(url="https://project.example.co", anon_key="k"),
            notifier=self.notifier,
            clock=self.clock,
            tz=UTC,
        )
        self.app.load()


class ReadPathTest(NotesAppTestCase):
    def test_load_and_load_more(self):
        self.assertEqual(len(self.app.view(NOW).items), 16)
        self.assertTrue(self.app.load_more())
        self.assertEqual(len(self.app.view(NOW).items), 20)

    def test_load_all_stops_on_empty_page(self):
        self.assertEqual(self.app.load_all(), 2)
        self.assertFalse(self.app.view(NOW).has_next_page)

    def test_search(self):
        view = self.app.search("note 19")
        self.assertEqual([i.key for i in view.items], ["seed19"])

    def test_find_unknown_key(self):
        with self.assertRaises(NoteNotLoaded):
            self.app.find("nope")

    def test_render_html_marks_rows(self):
        note = self.app.create_note("<p>fresh</p>")
        self.app.delete_note("seed19")

        page = self.app.render_html(NOW)

        self.assertTrue(page.startswith("<!doctype html>"))
        self.assertIn(f'data-key="{note.key}"', page)
        self.assertIn('data-optimistic="true"', page)
        self.assertIn('data-exiting="true"', page)
        self.assertIn("<p>fresh</p>", page)

    def test_placeholder_when_empty(self):
        self.gateway.rows = []
        self.app.load()
        self.assertIn(PLACEHOLDER_TEXT, self.app.render_html(NOW))


class EditTest(NotesAppTestCase):
    def test_only_one_note_in_edit_mode(self):
        self.app.start_edit("seed19")
        self.app.start_edit("seed18")

        self.assertTrue(self.app.state.is_editing("seed18"))
        self.assertFalse(self.app.state.is_editing("seed19"))

    def test_save_edit_updates_and_leaves_edit_mode(self):
        editor = self.app.start_edit("seed19")
        editor.surface.type("<p>changed</p>")

        self.assertTrue(self.app.save_edit())

        self.assertIsNone(self.app.state.editing_key)
        self.assertIsNone(self.app.edit_editor)
        self.assertEqual(self.app.find("seed19").content, "<p>changed</p>")

    def test_failed_save_stays_in_edit_mode(self):
        self.app.start_edit("seed19")
        self.gateway.fail("update")

        self.assertFalse(self.app.save_edit("<p>changed</p>"))

        self.assertTrue(self.app.state.is_editing("seed19"))
        self.assertEqual(self.app.find("seed19").content, "<p>note 19</p>")

    def test_cancel_edit_keeps_images_of_saved_note(self):
        saved = f'<p>x</p><img src="{image_url("keep.png")}">'
        self.app.update_note(Persisted("seed19"), saved)
        editor = self.app.start_edit("seed19")
        editor.upload_image("new.png", b"x")
        new_name = f"{editor.editor_id}-new.png"
        editor.surface.type("<p>x</p>")

        self.app.cancel_edit()

        self.assertEqual(self.gateway.removed, [[new_name]])
        self.assertIsNone(self.app.state.editing_key)

    def test_save_without_edit_raises(self):
        with self.assertRaises(RuntimeError):
            self.app.save_edit()


class DeleteAndDialogTest(NotesAppTestCase):
    def test_delete_while_editing_leaves_edit_mode(self):
        self.app.start_edit("seed19")
        self.app.delete_note("seed19")
        self.assertIsNone(self.app.state.editing_key)

    def test_delete_flush_after_undo_window(self):
        self.app.delete_note("seed19")
        self.assertEqual(self.app.flush_deletes(), [])
        self.clock.advance(4.0)
        self.assertEqual(self.app.flush_deletes(), ["seed19"])
        self.assertNotIn("seed19", [i.key for i in self.app.view(NOW).items])

    def test_image_preview_dialog(self):
        self.app.open_image_preview("https://x/a.png")
        self.assertTrue(self.app.is_image_preview_open)
        self.assertEqual(self.app.state.preview_image_src, "https://x/a.png")
        self.app.close_image_preview()
        self.assertFalse(self.app.is_image_preview_open)
        self.assertEqual(self.app.state.preview_image_src, "")


class GarbageCollectionTest(NotesAppTestCase):
    def test_mapping_survives_while_row_is_cached(self):
        note = self.app.create_note("<p>fresh</p>")
        self.assertEqual(self.app.collect_garbage(), 0)
        self.assertEqual(self.app.resolve(note.ref), "srv1")

    def test_entries_for_unreferenced_rows_are_dropped(self):
        note = self.app.create_note("<p>fresh</p>")
        self.app.load()  # the refetch drops the optimistic row

        self.assertGreaterEqual(self.app.collect_garbage(), 1)
        self.assertEqual(len(self.app.mutations.reconciliation()), 0)
        self.assertNotIn(note.key, self.app.cache.keys())

    def test_committed_delete_of_new_note_releases_its_mapping(self):
        note = self.app.create_note("<p>fresh</p>")
        self.app.delete_note(note.key)
        self.clock.advance(4.0)
        self.assertEqual(self.app.flush_deletes(), [note.key])

        self.assertGreaterEqual(self.app.collect_garbage(), 2)

        self.assertEqual(len(self.app.mutations.reconciliation()), 0)
        self.assertEqual(self.gateway.ops("delete"), [("delete", "srv1")])


class WiringTest(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.gateway = FakeGateway()
        self.gateway.seed(3, start=T0 - timedelta(hours=1))
        self.app = NotesApp(
            self.gateway,
            settings=Settings(
                url="https://project.example.co",
                anon_key="k",
                page_size=4,
                undo_seconds=10.0,
            ),
            notifier=RecordingNotifier(),
            clock=self.clock,
            tz=UTC,
        )
        self.app.load()

    def _keys(self):
        return [i.key for i in self.app.view(NOW).items]

    def test_components_share_state(self):
        self.assertIs(self.app.mutations.deleted, self.app.state.deleted)
        self.assertIs(self.app.feed.deleted, self.app.state.deleted)
        self.assertIs(self.app.mutations.tracker, self.app.tracker)
        self.assertIs(self.app.mutations.cache, self.app.cache)
        self.assertIs(self.app.feed.cache, self.app.cache)
        self.assertEqual(self.app.mutations.undo.delay, 10.0)

    def test_delete_hides_then_undo_brings_back(self):
        self.app.delete_note("seed1")
        self.clock.advance(1.0)
        self.assertEqual(self._keys(), ["seed2", "seed0"])

        self.assertTrue(self.app.undo_delete("seed1"))

        self.assertEqual(self._keys(), ["seed2", "seed1", "seed0"])
        self.clock.advance(20.0)
        self.assertEqual(self.app.flush_deletes(), [])
        self.assertEqual(self.gateway.ops("delete"), [])

    def test_flush_waits_for_configured_undo_window(self):
        self.app.delete_note("seed1")

        self.clock.advance(9.0)
        self.assertEqual(self.app.flush_deletes(), [])
        self.assertEqual(self.gateway.ops("delete"), [])

        self.clock.advance(1.0)
        self.assertEqual(self.app.flush_deletes(), ["seed1"])
        self.assertEqual(self.gateway.ops("delete"), [("delete", "seed1")])
        self.assertEqual(self._keys(), ["seed2", "seed0"])


if __name__ == "__main__":
    unittest.main()
