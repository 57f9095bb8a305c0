from pathlib import Path
import sys
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from infill.document import TextDocument, build_doc_context
from infill.llm.errors import UnknownModelError
from infill.providers.base import ProviderOptions, standard_context_size_hints
from infill.providers.families import ModelFamily
from infill.providers.fireworks import (
    MODEL_MAP,
    FireworksProvider,
    create_provider_config,
    get_max_context_tokens,
)


class _NullClient:
    def complete(self, parameters, abort_event):
        raise AssertionError("config tests never call the backend")


def _options():
    return ProviderOptions(
        document=TextDocument(file_name="main.go", language_id="go"),
        doc_context=build_doc_context("func main() {\n\t", "\n}"),
    )


class ProviderConfigTests(unittest.TestCase):
    def test_empty_model_resolves_to_hybrid(self):
        for model in (None, ""):
            with self.subTest(model=model):
                config = create_provider_config(model=model, client=_NullClient())
                self.assertEqual(config.model, "starcoder-hybrid")

    def test_known_models_resolve_to_themselves(self):
        for model in list(MODEL_MAP) + ["starcoder-hybrid"]:
            with self.subTest(model=model):
                self.assertEqual(create_provider_config(model=model, client=_NullClient()).model, model)

    def test_unknown_model_fails_fast(self):
        with self.assertRaises(UnknownModelError) as raised:
            create_provider_config(model="gpt-4", client=_NullClient())

        self.assertEqual(str(raised.exception), "Unknown model: `gpt-4`")
        self.assertIsInstance(raised.exception, ValueError)

    def test_context_hints_follow_token_budget(self):
        config = create_provider_config(model="llama-code-7b", client=_NullClient())

        self.assertEqual(config.identifier, "fireworks")
        self.assertEqual(config.context_size_hints.total_chars, 7372)
        self.assertEqual(config.context_size_hints.prefix_chars, 4915)
        self.assertEqual(config.context_size_hints.suffix_chars, 819)

    def test_every_known_model_shares_budget(self):
        for model in MODEL_MAP:
            with self.subTest(model=model):
                self.assertEqual(get_max_context_tokens(model), 2048)
        self.assertEqual(get_max_context_tokens("starcoder-hybrid"), 2048)
        self.assertEqual(get_max_context_tokens("starcoder-32b"), 1200)

    def test_create_builds_fresh_providers(self):
        config = create_provider_config(model="mistral-7b-instruct-4k", client=_NullClient())

        first = config.create(_options())
        second = config.create(_options())

        self.assertIsInstance(first, FireworksProvider)
        self.assertIsNot(first, second)
        self.assertIs(first.family, ModelFamily.INSTRUCT)
        self.assertEqual(first.prompt_chars, 7168)

    def test_context_window_override(self):
        config = create_provider_config(
            model="starcoder-7b",
            client=_NullClient(),
            max_context_tokens=4096,
        )

        self.assertEqual(config.context_size_hints, standard_context_size_hints(4096))
        self.assertEqual(config.create(_options()).prompt_chars, 15360)

    def test_context_window_override_must_leave_room_for_prompt(self):
        with self.assertRaises(ValueError):
            create_provider_config(model="starcoder-7b", client=_NullClient(), max_context_tokens=256)


class ProviderOptionsTests(unittest.TestCase):
    def test_rejects_non_positive_sample_count(self):
        with self.assertRaises(ValueError):
            ProviderOptions(
                document=TextDocument(file_name="a.py", language_id="python"),
                doc_context=build_doc_context("", ""),
                n=0,
            )


if __name__ == "__main__":
    unittest.main()
