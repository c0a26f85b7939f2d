import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

import pytest


def build_refs(ids):
    """Return a CSL-JSON array with one 2020 journal article per id."""
    return json.dumps(
        [
            {
                "id": ref_id,
                "type": "article-journal",
                "author": [{"family": f"Author{ref_id[-1].upper()}", "given": "A."}],
                "title": f"Title {ref_id}",
                "issued": {"date-parts": [[2020]]},
            }
            for ref_id in ids
        ]
    )


class FakeEngine:
    """Engine double that records calls and renders ids verbatim."""

    def __init__(self):
        self.cluster_calls = []
        self.bibliography_calls = []

    def format_citation_clusters(self, style, references_json, grouped_items):
        self.cluster_calls.append(grouped_items)
        lines = []
        for group in grouped_items:
            parts = []
            for item in group:
                text = item["id"]
                if "locator" in item:
                    text += f" {item.get('label', '?')} {item['locator']}"
                parts.append(text)
            lines.append("(" + "; ".join(parts) + ")")
        return "\n".join(lines)

    def format_bibliography(self, style, references_json):
        refs = json.loads(references_json)
        self.bibliography_calls.append([ref["id"] for ref in refs])
        return "\n".join(f"- {ref['title']}" for ref in refs)


@pytest.fixture()
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture()
def refs_abc() -> str:
    return build_refs(["a", "b", "c"])


@pytest.fixture()
def refs_file(tmp_path: Path, refs_abc: str) -> Path:
    path = tmp_path / "refs.json"
    path.write_text(refs_abc)
    return path
