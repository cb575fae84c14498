import json
import sys
from pathlib import Path
from typing import Optional

import pytest

# Add src to sys.path so we can import rulebook
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from rulebook.compiler import CompilerConfig  # noqa: E402


MANIFEST_TEXT = """\
# Sections

This file defines the rule categories, in document order.

---

## 1. Eliminating Waterfalls (async)

**Impact:** CRITICAL
**Description:** Waterfalls are the #1 performance killer.

## 2. Bundle Size Optimization (bundle)

**Impact:** HIGH
**Description:** Smaller bundles load and parse faster.
"""


PAIRED_BODY = """\

## {title}

Sequential awaits add a full network round trip per call.

**Incorrect (sequential):**

```typescript
const user = await fetchUser()
const posts = await fetchPosts()
```

**Correct (parallel):**

```typescript
const [user, posts] = await Promise.all([fetchUser(), fetchPosts()])
```

Reference: [Promise.all](https://developer.mozilla.org/docs/Web/JavaScript/Reference/Global_Objects/Promise/all)
"""


def rule_text(
    title: str = "Promise.all for Independent Operations",
    impact: str = "CRITICAL",
    body: Optional[str] = None,
    *,
    impact_description: Optional[str] = None,
    tags: Optional[str] = None,
) -> str:
    """Render a rule file; the default body holds one incorrect/correct pair."""
    lines = ["---", f"title: {title}", f"impact: {impact}"]
    if impact_description:
        lines.append(f"impactDescription: {impact_description}")
    if tags:
        lines.append(f"tags: {tags}")
    lines.append("---")
    if body is None:
        body = PAIRED_BODY.format(title=title)
    return "\n".join(lines) + "\n" + body


def example_body(incorrect: int, correct: int, *, reference: bool = True) -> str:
    """Body with the given number of labeled incorrect and correct blocks."""
    parts = ["Intro paragraph.", ""]
    for i in range(1, incorrect + 1):
        parts += [f"**Incorrect ({i}):**", "", "```js", f"bad{i}()", "```", ""]
    for i in range(1, correct + 1):
        parts += [f"**Correct ({i}):**", "", "```js", f"good{i}()", "```", ""]
    if reference:
        parts.append("Reference: https://example.com/docs")
    return "\n".join(parts) + "\n"


class CorpusBuilder:
    """Writes a rule corpus (rules dir, manifest, metadata) under a temp root."""

    def __init__(self, root: Path):
        self.root = root
        self.rules_dir = root / "rules"
        self.rules_dir.mkdir(parents=True, exist_ok=True)

    def manifest(self, text: str = MANIFEST_TEXT) -> Path:
        path = self.rules_dir / "_sections.md"
        path.write_text(text, encoding="utf-8")
        return path

    def rule(self, name: str, text: Optional[str] = None, **kwargs) -> Path:
        path = self.rules_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text if text is not None else rule_text(**kwargs), encoding="utf-8")
        return path

    def metadata(self, data) -> Path:
        path = self.root / "metadata.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    def config(self, **overrides) -> CompilerConfig:
        overrides.setdefault("max_workers", 1)
        return CompilerConfig.for_rules_dir(self.rules_dir, **overrides)


@pytest.fixture
def corpus(tmp_path: Path) -> CorpusBuilder:
    """Empty corpus with the default two-category manifest."""
    builder = CorpusBuilder(tmp_path)
    builder.manifest()
    return builder


@pytest.fixture
def sample_corpus(corpus: CorpusBuilder) -> CorpusBuilder:
    """Valid corpus: two async rules and one bundle rule."""
    corpus.rule("async-parallel.md", title="Promise.all for Independent Operations")
    corpus.rule(
        "async-defer-await.md",
        title="Defer Await Until Needed",
        impact="HIGH",
        impact_description="avoids blocking unused branches",
        tags="async, await",
    )
    corpus.rule("bundle-barrel-imports.md", title="Avoid Barrel File Imports", impact="MEDIUM-HIGH")
    return corpus
