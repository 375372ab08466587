"""Tests for the note editor session."""

import unittest

import requests

from notefeed.gateway import NotesApiError
from notefeed.notes.editor import (
    HtmlSurface,
    ImageTrackingEditor,
    NoteEditor,
    PlainEditor,
)
from notefeed.notes.notify import RecordingNotifier

from _fakes import FakeGateway, image_url


class HtmlSurfaceTest(unittest.TestCase):
    def test_only_user_edits_emit_updates(self):
        seen = []
        surface = HtmlSurface(on_update=seen.append)

        surface.set_content("<p>a</p>")
        surface.clear_content()
        self.assertEqual(seen, [])

        surface.type("<p>b</p>")
        self.assertEqual(seen, ["<p>b</p>"])

    def test_read_only_surface_rejects_typing(self):
        surface = HtmlSurface()
        surface.set_editable(False)
        with self.assertRaises(RuntimeError):
            surface.type("<p>x</p>")

    def test_insert_image_appends_img_and_empty_paragraph(self):
        surface = HtmlSurface("<p>hi</p>")
        surface.insert_image("https://x/a.png")
        self.assertEqual(surface.get_html(), '<p>hi</p><img src="https://x/a.png"><p></p>')


class NoteEditorTest(unittest.TestCase):
    def setUp(self):
        self.gateway = FakeGateway()
        self.notifier = RecordingNotifier()

    def _editor(self, html="", **config):
        return NoteEditor(
            HtmlSurface(html),
            config=ImageTrackingEditor(**config),
            gateway=self.gateway,
            notifier=self.notifier,
        )

    def test_on_change_receives_normalized_html(self):
        changes = []
        editor = NoteEditor(HtmlSurface(), on_change=changes.append)
        editor.surface.type("<p>x</p>")
        editor.surface.type("<p></p>")
        self.assertEqual(changes, ["", "<p>x</p>", ""])
        self.assertIsNone(editor.tracker)

    def test_can_submit_needs_text_or_image(self):
        editor = NoteEditor(HtmlSurface())
        self.assertFalse(editor.can_submit())
        editor.surface.type("<p> </p>")
        self.assertFalse(editor.can_submit())
        editor.surface.type('<img src="a.png">')
        self.assertTrue(editor.can_submit())

    def test_image_tracking_requires_gateway(self):
        with self.assertRaises(ValueError):
            NoteEditor(config=ImageTrackingEditor())

    def test_plain_editor_rejects_uploads(self):
        editor = NoteEditor(config=PlainEditor())
        with self.assertRaises(RuntimeError):
            editor.upload_image("a.png", b"x")

    def test_upload_prefixes_editor_id_and_inserts_public_url(self):
        editor = self._editor()

        src = editor.upload_image("cat.png", b"data")

        name = f"{editor.editor_id}-cat.png"
        self.assertEqual(self.gateway.uploads, {name: b"data"})
        self.assertEqual(src, image_url(name))
        self.assertIn(f'<img src="{src}">', editor.surface.get_html())
        self.assertEqual(editor.value, editor.surface.get_html())
        self.assertTrue(editor.surface.editable)
        self.assertEqual([n.message for n in self.notifier.items], ["Image is uploaded"])

    def test_failed_upload_reports_and_leaves_document(self):
        editor = self._editor("<p>hi</p>")
        self.gateway.fail("upload", NotesApiError("nope"))

        self.assertIsNone(editor.upload_image("cat.png", b"data"))

        self.assertEqual(editor.surface.get_html(), "<p>hi</p>")
        self.assertTrue(editor.surface.editable)
        self.assertEqual(self.notifier.errors, ["Failed to upload image, something went wrong"])

    def test_network_error_during_upload_is_reported(self):
        editor = self._editor("<p>hi</p>")
        self.gateway.fail("upload", requests.ConnectionError("offline"))

        self.assertIsNone(editor.upload_image("cat.png", b"data"))

        self.assertTrue(editor.surface.editable)
        self.assertEqual(editor.surface.get_html(), "<p>hi</p>")
        self.assertEqual(self.notifier.errors, ["Failed to upload image, something went wrong"])

    def test_reset_removes_dropped_uploads_and_renews_id(self):
        editor = self._editor()
        editor.upload_image("cat.png", b"data")
        name = f"{editor.editor_id}-cat.png"
        old_id = editor.editor_id

        editor.surface.type("<p>no picture after all</p>")
        editor.reset()

        self.assertEqual(self.gateway.removed, [[name]])
        self.assertNotEqual(editor.editor_id, old_id)

    def test_reset_can_keep_editor_id(self):
        editor = self._editor(renew_id_on_reset=False)
        old_id = editor.editor_id
        editor.reset()
        self.assertEqual(editor.editor_id, old_id)

    def test_images_in_starting_document_are_tracked(self):
        saved = f'<p>x</p><img src="{image_url("old.png")}">'
        editor = self._editor(saved)

        editor.surface.type("<p>x</p>")
        editor.reset(keep_html=None)

        self.assertEqual(self.gateway.removed, [["old.png"]])


if __name__ == "__main__":
    unittest.main()
