"""FastAPI + Tailwind interface for formatting citations in the browser.

Run with:
    uvicorn csl_tools.web:app --reload
"""
from __future__ import annotations

from html import escape
from typing import List

from fastapi import FastAPI, Form, HTTPException
from fastapi.responses import HTMLResponse

from .app import CitationProcessorApp
from .engine import OUTPUT_FORMATS, CiteprocEngine
from .processor import ProcessorError
from .references import RefsError, normalize_refs
from .report import render_report
from .styles import builtin_style, builtin_style_names

app = FastAPI(title="CSL Tools", description="Format Markdown citations from the browser")


def _layout(content: str) -> str:
    """Wrap provided content in a Tailwind-powered HTML page."""

    return f"""
    <!doctype html>
    <html lang=\"en\" class=\"h-full bg-gray-50\">
    <head>
        <meta charset=\"utf-8\" />
        <title>CSL Tools</title>
        <link href=\"https://cdn.jsdelivr.net/npm/tailwindcss@3.4.4/dist/tailwind.min.css\" rel=\"stylesheet\" />
    </head>
    <body class=\"min-h-full py-10\">
        <div class=\"max-w-5xl mx-auto px-4\">
            <div class=\"bg-white shadow rounded-lg p-6\">
                <h1 class=\"text-3xl font-semibold text-gray-900\">CSL Tools</h1>
                <p class=\"text-gray-600 mt-2\">Paste Markdown with [@key] citations and CSL-JSON references to get formatted citations and a bibliography.</p>
                {content}
            </div>
        </div>
    </body>
    </html>
    """


def _options(values: List[str], selected: str) -> str:
    return "".join(
        f"<option value=\"{escape(value)}\"{' selected' if value == selected else ''}>{escape(value)}</option>"
        for value in values
    )


def _form_page(
    output: str | None = None,
    report: str | None = None,
    style: str = "minimal",
    output_format: str = "html",
) -> str:
    """Render the landing page with optional formatted output."""

    form = f"""
    <form action=\"/process\" method=\"post\" class=\"bg-gray-50 border border-gray-200 rounded-lg p-4 mt-6\">
        <label class=\"block text-sm font-medium text-gray-700 mb-2\" for=\"markdown\">Markdown</label>
        <textarea name=\"markdown\" required placeholder=\"Studies [@a] [@b] show that...\" class=\"w-full h-44 border border-gray-300 rounded-md p-3 text-sm\"></textarea>
        <label class=\"block text-sm font-medium text-gray-700 mt-4 mb-2\" for=\"references\">References (CSL-JSON or JSONL)</label>
        <textarea name=\"references\" required class=\"w-full h-32 border border-gray-300 rounded-md p-3 text-sm font-mono\"></textarea>
        <div class=\"flex items-center gap-4 mt-3\">
            <select name=\"style\" class=\"border border-gray-300 rounded-md text-sm\">{_options(builtin_style_names(), style)}</select>
            <select name=\"output_format\" class=\"border border-gray-300 rounded-md text-sm\">{_options(sorted(OUTPUT_FORMATS), output_format)}</select>
            <input type=\"checkbox\" id=\"no_bib\" name=\"no_bib\" value=\"1\" class=\"h-4 w-4 text-indigo-600 border-gray-300 rounded\" />
            <label for=\"no_bib\" class=\"text-sm text-gray-700\">Omit bibliography</label>
        </div>
        <button type=\"submit\" class=\"mt-4 inline-flex items-center px-4 py-2 bg-indigo-600 text-white rounded-md shadow hover:bg-indigo-700\">Format citations</button>
    </form>
    """

    output_block = ""
    if output is not None:
        output_block = f"""
        <div class=\"mt-8\">
            <h2 class=\"text-xl font-semibold text-gray-800\">Output</h2>
            <pre class=\"mt-3 bg-gray-900 text-green-100 p-4 rounded-lg whitespace-pre-wrap text-sm\">{escape(output)}</pre>
        </div>
        """

    report_block = ""
    if report:
        report_block = f"""
        <div class=\"mt-4\">
            <pre class=\"bg-gray-100 text-gray-800 p-4 rounded-lg whitespace-pre-wrap text-sm\">{escape(report)}</pre>
        </div>
        """

    return _layout(form + output_block + report_block)


@app.get("/", response_class=HTMLResponse)
async def home() -> HTMLResponse:
    """Serve the submission form."""

    return HTMLResponse(_form_page())


@app.get("/styles")
async def styles() -> List[str]:
    return builtin_style_names()


@app.post("/process", response_class=HTMLResponse)
async def process(
    markdown: str = Form(...),
    references: str = Form(...),
    style: str = Form("minimal"),
    output_format: str = Form("html"),
    no_bib: bool = Form(False),
) -> HTMLResponse:
    """Format the submitted Markdown and render the result."""

    style_xml = builtin_style(style)
    if style_xml is None:
        raise HTTPException(status_code=400, detail=f"Unknown style: {style}")
    if output_format not in OUTPUT_FORMATS:
        raise HTTPException(status_code=400, detail=f"Unknown output format: {output_format}")

    processor_app = CitationProcessorApp(
        engine=CiteprocEngine(output_format=output_format), include_bibliography=not no_bib
    )
    try:
        refs_json = normalize_refs(references)
        result = processor_app.process_text(markdown, refs_json, style_xml)
    except (RefsError, ProcessorError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return HTMLResponse(
        _form_page(result.output, render_report(result), style=style, output_format=output_format)
    )


def main() -> None:
    """Run the FastAPI app using uvicorn."""

    import uvicorn

    uvicorn.run("csl_tools.web:app", host="0.0.0.0", port=8000, reload=False)


__all__ = ["app", "main"]
