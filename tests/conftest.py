"""Shared test fixtures for yamlassist."""

from __future__ import annotations

from pathlib import Path

import pytest

from yamlassist.parser.recovery import YamlParser
from yamlassist.schema.registry import FRONT_MATTER, SchemaRegistry, default_registry
from yamlassist.schema.validator import ValidatorQueue
from yamlassist.service.engine import AutomationEngine
from yamlassist.settings import Settings

FIXTURES_DIR = Path(__file__).parent / "fixtures"
REPORT_QMD = FIXTURES_DIR / "report.qmd"

# Front matter with string-valued title and author
STRICT_FRONT_MATTER = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "author": {"type": "string"},
    },
}

HELLO_DOC = "---\ntitle: Foo\n---\nHello\n"

OPTIONS_DOC = """\
---
title: 3
---

```{python}
#| echo: maybe
#| foo: 1
x = 1
```
"""


@pytest.fixture
def parser() -> YamlParser:
    return YamlParser()


@pytest.fixture
def registry() -> SchemaRegistry:
    return default_registry()


@pytest.fixture
def queue(registry: SchemaRegistry) -> ValidatorQueue:
    return ValidatorQueue(registry)


@pytest.fixture
def engine(registry: SchemaRegistry) -> AutomationEngine:
    return AutomationEngine(registry, settings=Settings())


@pytest.fixture
def strict_engine() -> AutomationEngine:
    """Engine whose front matter schema is STRICT_FRONT_MATTER."""
    registry = SchemaRegistry()
    registry.register(FRONT_MATTER, STRICT_FRONT_MATTER)
    registry.load_builtin()
    return AutomationEngine(registry, settings=Settings())


@pytest.fixture
def report_text() -> str:
    return REPORT_QMD.read_text(encoding="utf-8")
