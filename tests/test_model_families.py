from pathlib import Path
import sys
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from infill.providers.families import InfillingInput, ModelFamily


def _parts(**overrides):
    values = {
        "file_path": "src/app.py",
        "intro": "",
        "prefix": "def f():\n",
        "suffix": "\n    pass",
        "raw_prefix": "def f():\n",
        "raw_suffix": "\n    pass",
    }
    values.update(overrides)
    return InfillingInput(**values)


class ModelFamilyResolutionTests(unittest.TestCase):
    def test_resolves_by_model_prefix(self):
        self.assertIs(ModelFamily.for_model("starcoder-hybrid"), ModelFamily.STARCODER)
        self.assertIs(ModelFamily.for_model("starcoder-1b"), ModelFamily.STARCODER)
        self.assertIs(ModelFamily.for_model("llama-code-13b-instruct"), ModelFamily.LLAMA_CODE)
        self.assertIs(ModelFamily.for_model("mistral-7b-instruct-4k"), ModelFamily.INSTRUCT)
        self.assertIs(ModelFamily.for_model("mistral-7b"), ModelFamily.UNKNOWN)

    def test_only_starcoder_omits_path_header(self):
        self.assertFalse(ModelFamily.STARCODER.announces_path)
        self.assertTrue(ModelFamily.LLAMA_CODE.announces_path)
        self.assertTrue(ModelFamily.INSTRUCT.announces_path)


class InfillingTemplateTests(unittest.TestCase):
    def test_starcoder_template(self):
        prompt = ModelFamily.STARCODER.render_infilling_prompt(
            "starcoder-16b",
            _parts(intro="# note\n"),
        )

        self.assertEqual(
            prompt,
            "<filename>src/app.py<fim_prefix># note\ndef f():\n<fim_suffix>\n    pass<fim_middle>",
        )

    def test_llama_code_template(self):
        prompt = ModelFamily.LLAMA_CODE.render_infilling_prompt("llama-code-13b", _parts())

        self.assertEqual(prompt, "<PRE> def f():\n <SUF>\n    pass <MID>")

    def test_instruct_template_wraps_code_tags(self):
        prompt = ModelFamily.INSTRUCT.render_infilling_prompt(
            "mistral-7b-instruct-4k",
            _parts(
                prefix="import os\n\ndef f():\n    x = 1\n    ",
                raw_prefix="import os\n\ndef f():\n    x = 1\n    ",
                suffix="",
                raw_suffix="\n\nf()",
            ),
        )

        self.assertTrue(prompt.startswith("<s>[INST] Below is the code from file path src/app.py. "))
        self.assertIn("```\nimport os\n\n<CODE5711></CODE5711>\n\nf()\n```[/INST]\n", prompt)
        self.assertTrue(prompt.endswith(" <CODE5711>def f():\n    x = 1"))

    def test_unknown_family_falls_back_and_logs(self):
        with self.assertLogs("infill.providers.families", level="ERROR") as logs:
            prompt = ModelFamily.UNKNOWN.render_infilling_prompt(
                "gpt-neo",
                _parts(intro="// Path: src/app.py\n"),
            )

        self.assertEqual(prompt, "// Path: src/app.py\ndef f():\n")
        self.assertIn("infilling_prompt_unresolved model=gpt-neo", logs.output[0])


class PostProcessTests(unittest.TestCase):
    def test_strips_starcoder_end_of_text(self):
        self.assertEqual(ModelFamily.STARCODER.post_process("return x<|endoftext|>"), "return x")

    def test_strips_only_first_marker(self):
        self.assertEqual(
            ModelFamily.STARCODER.post_process("a<|endoftext|>b<|endoftext|>"),
            "ab<|endoftext|>",
        )

    def test_strips_llama_code_end_of_text(self):
        self.assertEqual(ModelFamily.LLAMA_CODE.post_process("return x <EOT>"), "return x")

    def test_other_families_are_untouched(self):
        self.assertEqual(ModelFamily.INSTRUCT.post_process("x <EOT>"), "x <EOT>")
        self.assertEqual(ModelFamily.UNKNOWN.post_process("x<|endoftext|>"), "x<|endoftext|>")
        self.assertEqual(ModelFamily.LLAMA_CODE.post_process("x<|endoftext|>"), "x<|endoftext|>")


if __name__ == "__main__":
    unittest.main()
