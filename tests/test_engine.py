import json

import pytest

pytest.importorskip("citeproc")

from csl_tools.app import CitationProcessorApp
from csl_tools.engine import CiteprocEngine, EngineError
from csl_tools.styles import builtin_style

from conftest import build_refs

DOE_REFS = json.dumps(
    [
        {
            "id": "doe2021",
            "type": "article-journal",
            "author": [{"family": "Doe", "given": "Jane"}],
            "title": "A study of testing",
            "issued": {"date-parts": [[2021]]},
        },
        {
            "id": "roe2019",
            "type": "book",
            "author": [{"family": "Roe", "given": "Richard"}],
            "title": "Handbook of references",
            "issued": {"date-parts": [[2019]]},
        },
    ]
)


def test_format_citation_clusters_returns_one_line_per_group():
    engine = CiteprocEngine(output_format="text")
    output = engine.format_citation_clusters(
        builtin_style("minimal"), DOE_REFS, [[{"id": "doe2021"}], [{"id": "roe2019"}]]
    )
    lines = output.splitlines()
    assert len(lines) == 2
    assert "Doe" in lines[0] and "2021" in lines[0]
    assert "Roe" in lines[1] and "2019" in lines[1]


def test_format_bibliography_html_wraps_entries():
    engine = CiteprocEngine(output_format="html")
    bibliography = engine.format_bibliography(builtin_style("minimal"), DOE_REFS)
    assert bibliography.startswith('<div class="csl-bib-body">')
    assert bibliography.count('<div class="csl-entry">') == 2
    assert "A study of testing" in bibliography


def test_malformed_style_raises_engine_error():
    engine = CiteprocEngine()
    with pytest.raises(EngineError):
        engine.format_citation_clusters("<style><unclosed>", DOE_REFS, [[{"id": "doe2021"}]])


def test_malformed_references_raise_engine_error():
    engine = CiteprocEngine()
    with pytest.raises(EngineError):
        engine.format_bibliography(builtin_style("minimal"), "{not json")


def test_unknown_output_format_is_rejected():
    with pytest.raises(ValueError):
        CiteprocEngine(output_format="rtf")


def test_numeric_cluster_replaces_whole_span():
    app = CitationProcessorApp(engine=CiteprocEngine(output_format="text"))
    text = "Studies [@a] [@b] [@c] show that..."
    result = app.process_text(text, build_refs(["a", "b", "c"]), builtin_style("numeric"))

    assert len(result.processed) == 1
    assert result.content.startswith("Studies (")
    assert result.content.endswith(") show that...")
    assert "[@" not in result.content
    assert "1" in result.content
    assert "## References" in result.output


def test_numeric_cluster_lists_every_number():
    app = CitationProcessorApp(engine=CiteprocEngine(output_format="text"), include_bibliography=False)
    result = app.process_text("Studies [@a] [@b] [@c] show.", build_refs(["a", "b", "c"]), builtin_style("numeric"))
    assert "(1,2,3)" in result.content
    assert "[@" not in result.content


def test_reference_without_type_raises_engine_error():
    engine = CiteprocEngine()
    refs = json.dumps([{"id": "a", "title": "Untyped"}])
    with pytest.raises(EngineError, match="Reference 'a' has no 'type'"):
        engine.format_bibliography(builtin_style("minimal"), refs)


def test_reference_without_id_raises_engine_error():
    engine = CiteprocEngine()
    refs = json.dumps([{"type": "book", "title": "Anonymous"}])
    with pytest.raises(EngineError, match="has no string 'id'"):
        engine.format_citation_clusters(builtin_style("minimal"), refs, [[{"id": "a"}]])
