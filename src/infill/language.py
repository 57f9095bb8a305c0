"""Language profiles used when embedding context snippets into prompts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


DEFAULT_COMMENT_START = "// "

_DEFAULT_BLOCK_OPENERS: Tuple[str, ...] = ("{", "(", "[")


@dataclass(frozen=True)
class LanguageConfig:
    language_id: str
    comment_start: str
    block_openers: Tuple[str, ...] = _DEFAULT_BLOCK_OPENERS

    def opens_block(self, line: str) -> bool:
        stripped = line.rstrip()
        return bool(stripped) and stripped.endswith(self.block_openers)


_COMMENT_STARTS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "// ",
        (
            "c",
            "cpp",
            "csharp",
            "dart",
            "go",
            "java",
            "javascript",
            "javascriptreact",
            "kotlin",
            "php",
            "rust",
            "scala",
            "swift",
            "typescript",
            "typescriptreact",
        ),
    ),
    (
        "# ",
        (
            "dockerfile",
            "elixir",
            "julia",
            "perl",
            "powershell",
            "python",
            "r",
            "ruby",
            "shellscript",
            "toml",
            "yaml",
        ),
    ),
    ("-- ", ("elm", "haskell", "lua", "sql")),
    ("; ", ("clojure", "lisp", "scheme")),
    ("% ", ("erlang", "latex", "matlab")),
)

_BLOCK_OPENERS: dict[str, Tuple[str, ...]] = {
    "python": (":",) + _DEFAULT_BLOCK_OPENERS,
    "ruby": (" do", "|") + _DEFAULT_BLOCK_OPENERS,
    "lua": (" then", " do") + _DEFAULT_BLOCK_OPENERS,
}


def _build_table() -> dict[str, LanguageConfig]:
    table: dict[str, LanguageConfig] = {}
    for comment_start, language_ids in _COMMENT_STARTS:
        for language_id in language_ids:
            table[language_id] = LanguageConfig(
                language_id=language_id,
                comment_start=comment_start,
                block_openers=_BLOCK_OPENERS.get(language_id, _DEFAULT_BLOCK_OPENERS),
            )
    return table


_LANGUAGES = _build_table()


def get_language_config(language_id: Optional[str]) -> Optional[LanguageConfig]:
    """Return the profile for ``language_id`` or ``None`` when it is not known."""

    if not language_id:
        return None
    return _LANGUAGES.get(language_id.strip().lower())


def comment_start_for(language_id: Optional[str]) -> str:
    config = get_language_config(language_id)
    return config.comment_start if config is not None else DEFAULT_COMMENT_START
