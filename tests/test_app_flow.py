import io
from pathlib import Path

import pytest

from csl_tools.app import CitationProcessorApp, InputFileError
from csl_tools.processor import ReferenceNotFoundError
from csl_tools.references import RefsError
from csl_tools.report import render_report
from csl_tools.styles import StyleError


def test_process_text_replaces_cluster_and_appends_bibliography(fake_engine, refs_abc):
    app = CitationProcessorApp(engine=fake_engine)
    result = app.process_text("Studies [@a] [@b] [@c] show that...", refs_abc, "<style/>")

    assert len(fake_engine.cluster_calls) == 1
    assert result.content == "Studies (a; b; c) show that..."
    assert result.bibliography == "- Title a\n- Title b\n- Title c"
    assert result.output == (
        "Studies (a; b; c) show that...\n\n## References\n\n- Title a\n- Title b\n- Title c"
    )


def test_process_text_without_bibliography(fake_engine, refs_abc):
    app = CitationProcessorApp(engine=fake_engine, include_bibliography=False)
    result = app.process_text("See [@a].\n", refs_abc, "<style/>")
    assert result.output == "See (a)."
    assert result.bibliography is None
    assert fake_engine.bibliography_calls == []


def test_process_text_custom_header(fake_engine, refs_abc):
    app = CitationProcessorApp(engine=fake_engine, bib_header="# Works Cited")
    result = app.process_text("See [@b].", refs_abc, "<style/>")
    assert "# Works Cited\n\n- Title b" in result.output


def test_process_text_without_citations(fake_engine, refs_abc):
    app = CitationProcessorApp(engine=fake_engine)
    result = app.process_text("Nothing cited.  \n", refs_abc, "<style/>")
    assert result.output == "Nothing cited."
    assert fake_engine.cluster_calls == []


def test_process_text_missing_reference_aborts(fake_engine, refs_abc):
    app = CitationProcessorApp(engine=fake_engine)
    with pytest.raises(ReferenceNotFoundError):
        app.process_text("See [@nope].", refs_abc, "<style/>")
    assert fake_engine.bibliography_calls == []


def test_process_file_reads_inputs(tmp_path: Path, fake_engine, refs_file: Path):
    doc = tmp_path / "paper.md"
    doc.write_text("Cited [@a, p. 3].")
    result = CitationProcessorApp(engine=fake_engine).process_file(doc, refs_file, "minimal")
    assert result.content == "Cited (a page 3)."


def test_process_file_reads_stdin(monkeypatch, fake_engine, refs_file: Path):
    monkeypatch.setattr("sys.stdin", io.StringIO("[@c]"))
    result = CitationProcessorApp(engine=fake_engine).process_file("-", refs_file, "minimal")
    assert result.content == "(c)"


def test_process_file_error_kinds(tmp_path: Path, fake_engine, refs_file: Path):
    app = CitationProcessorApp(engine=fake_engine)
    doc = tmp_path / "paper.md"
    doc.write_text("[@a]")
    bad_refs = tmp_path / "bad.json"
    bad_refs.write_text("[oops")

    with pytest.raises(InputFileError):
        app.process_file(tmp_path / "missing.md", refs_file, "minimal")
    with pytest.raises(RefsError):
        app.process_file(doc, bad_refs, "minimal")
    with pytest.raises(StyleError):
        app.process_file(doc, refs_file, "unknown-style")


def test_render_report_summarizes_result(fake_engine, refs_abc):
    app = CitationProcessorApp(engine=fake_engine)
    result = app.process_text("[@a] [@b] and [@c]", refs_abc, "<style/>")
    report = render_report(result)
    assert "Citations detected: 3" in report
    assert "Clusters formatted: 2" in report
    assert "Grouped clusters: 1" in report
    assert "Bibliography: included" in report


def test_process_text_bibliography_includes_pandoc_group_items(fake_engine, refs_abc):
    app = CitationProcessorApp(engine=fake_engine)
    result = app.process_text("See [@a; @b] and [@c, p. 1; @b].", refs_abc, "<style/>")

    assert result.content == "See (a; b) and (c page 1; b)."
    assert fake_engine.bibliography_calls == [["a", "b", "c"]]
    assert result.bibliography == "- Title a\n- Title b\n- Title c"
