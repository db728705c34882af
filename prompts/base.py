"""Text templates sent to the advisor model.

Each template is a ``.txt`` file next to this module. Placeholders use
``str.format`` syntax (``{message}``) and are checked before rendering, so a
missing value names every field at once instead of failing on the first.
"""

from __future__ import annotations

import string
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

__all__ = ["PromptTemplate", "available_prompts", "load_prompt", "get_prompt_text", "render_prompt"]

TEMPLATE_DIR = Path(__file__).resolve().parent
TEMPLATE_SUFFIX = ".txt"


def _placeholders(text: str) -> frozenset[str]:
    return frozenset(name for _, name, _, _ in string.Formatter().parse(text) if name)


@dataclass(frozen=True)
class PromptTemplate:
    name: str
    content: str
    placeholders: frozenset[str] = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "placeholders", _placeholders(self.content))

    def render(self, **values: object) -> str:
        missing = sorted(self.placeholders - values.keys())
        if missing:
            raise KeyError(f"Prompt {self.name!r} needs values for: {', '.join(missing)}")
        return self.content.format(**values)


def available_prompts() -> list[str]:
    return sorted(path.stem for path in TEMPLATE_DIR.glob(f"*{TEMPLATE_SUFFIX}"))


@lru_cache(maxsize=32)
def load_prompt(name: str) -> PromptTemplate:
    """Read the template called ``name``; only bare file stems are accepted."""

    if not name or Path(name).name != name:
        raise ValueError(f"Invalid prompt name: {name!r}")
    path = TEMPLATE_DIR / f"{name}{TEMPLATE_SUFFIX}"
    if not path.is_file():
        raise FileNotFoundError(f"No advisor prompt named {name!r} in {TEMPLATE_DIR}")
    return PromptTemplate(name=name, content=path.read_text(encoding="utf-8").strip())


def get_prompt_text(name: str) -> str:
    return load_prompt(name).content


def render_prompt(name: str, **values: object) -> str:
    return load_prompt(name).render(**values)
