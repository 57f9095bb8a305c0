from pathlib import Path
import sys
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from infill.document import TextDocument, build_doc_context, insert_into_doc_context


class TextDocumentTests(unittest.TestCase):
    def test_display_path_prefers_relative_path(self):
        document = TextDocument(
            file_name="/home/dev/project/src/app.py",
            language_id="python",
            relative_path="src/app.py",
        )

        self.assertEqual(document.display_path, "src/app.py")

    def test_display_path_defaults_to_file_name(self):
        document = TextDocument(file_name="app.py", language_id="python")

        self.assertEqual(document.display_path, "app.py")

    def test_rejects_blank_file_name(self):
        with self.assertRaises(ValueError):
            TextDocument(file_name="  ", language_id="python")


class DocumentContextTests(unittest.TestCase):
    def test_derives_cursor_lines(self):
        context = build_doc_context(
            "import os\n\ndef main():\n    return ",
            "value\n\nprint(main())\n",
        )

        self.assertEqual(context.current_line_prefix, "    return ")
        self.assertEqual(context.current_line_suffix, "value")
        self.assertEqual(context.prev_non_empty_line, "def main():")
        self.assertEqual(context.next_non_empty_line, "print(main())")

    def test_empty_window(self):
        context = build_doc_context("", "")

        self.assertEqual(context.current_line_prefix, "")
        self.assertEqual(context.current_line_suffix, "")
        self.assertEqual(context.prev_non_empty_line, "")
        self.assertEqual(context.next_non_empty_line, "")

    def test_insert_appends_to_prefix(self):
        context = build_doc_context("def f():\n", "\n")

        advanced = insert_into_doc_context(context, "    x = 1\n    y")

        self.assertEqual(advanced.prefix, "def f():\n    x = 1\n    y")
        self.assertEqual(advanced.suffix, "\n")
        self.assertEqual(advanced.current_line_prefix, "    y")
        self.assertEqual(advanced.prev_non_empty_line, "    x = 1")


if __name__ == "__main__":
    unittest.main()
