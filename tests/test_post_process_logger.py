from pathlib import Path
import sys
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from infill.observability import PostProcessLogger


class PostProcessLoggerTests(unittest.TestCase):
    def test_entries_are_buffered_until_flush(self):
        post_process_logger = PostProcessLogger()

        post_process_logger.info(request_id="r1", stage="truncate", detail="truncated_with=newline")
        post_process_logger.info(request_id="", stage="hot_streak", detail="lines=2")

        self.assertEqual(len(post_process_logger), 2)

        with self.assertLogs("infill.pipeline.post_process", level="DEBUG") as logs:
            post_process_logger.flush()

        self.assertEqual(len(post_process_logger), 0)
        self.assertIn("post_process request_id=r1 stage=truncate truncated_with=newline", logs.output[0])
        self.assertIn("post_process request_id=- stage=hot_streak lines=2", logs.output[1])

    def test_flush_without_entries_writes_nothing(self):
        post_process_logger = PostProcessLogger()

        with self.assertNoLogs("infill.pipeline.post_process", level="DEBUG"):
            post_process_logger.flush()


if __name__ == "__main__":
    unittest.main()
