"""Website generation: one provider call, split into exactly N pages."""

from __future__ import annotations

import html
import re
from typing import TYPE_CHECKING

import httpx
import structlog
from pydantic_ai.exceptions import AgentRunError, ModelHTTPError

from sitesmith.errors import NotConfiguredError, UpstreamError, ValidationError
from sitesmith.metrics import generated_pages_total
from sitesmith.models.session import GeneratedPage, PageStructure

if TYPE_CHECKING:
    from sitesmith.protocols import LLMPort

logger = structlog.get_logger()

SYSTEM_PROMPT = """\
You are an expert front-end developer creating complete, production-ready HTML5 websites.

Strict output rules:
- Every page must be a full standalone HTML5 document starting with <!DOCTYPE html>
- Output the pages one after another with nothing between them
- All CSS must be inline or in a <style> block; JavaScript inline or from trusted CDNs
- Use semantic HTML5 tags
- Include Font Awesome via https://cdnjs.cloudflare.com/ajax/libs/font-awesome/6.5.0/css/all.min.css
- Use royalty-free images by direct URL from Unsplash, Pexels or Pixabay
- Never use placeholder text such as "Lorem ipsum"
- Never wrap output in markdown fences
"""

MIN_PAGE_LENGTH = 50

_FENCE_RE = re.compile(r"```(?:html)?", re.IGNORECASE)
_DOC_START_RE = re.compile(r"(?:<!doctype\s+html[^>]*>\s*)?<html[\s>]", re.IGNORECASE)
_ROOT_RE = re.compile(r"^(?:<!doctype\s+html[^>]*>\s*)?<html[\s>]", re.IGNORECASE)
_BODY_RE = re.compile(r"<body[\s>]", re.IGNORECASE)
_TAG_RE = re.compile(r"<[a-z][a-z0-9]*[\s>/]", re.IGNORECASE)


def compose_prompt(query: str, page_count: int, structure: list[PageStructure] | None = None) -> str:
    lines = [query.strip(), ""]
    if page_count == 1:
        lines.append("Generate exactly 1 complete HTML page.")
    else:
        lines.append(f"Generate exactly {page_count} complete HTML pages, in order.")
    if structure:
        lines.append("Pages, in order (link between them using these filenames):")
        lines.extend(f"- {p.title}: {p.filename}" for p in structure[:page_count])
    return "\n".join(lines)


def wrap_fragment(fragment: str) -> str:
    """Turn markup without an <html> root into a full document."""
    if _BODY_RE.search(fragment):
        return f'<!DOCTYPE html>\n<html lang="en">\n{fragment}\n</html>'
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        '<head>\n  <meta charset="UTF-8">\n</head>\n'
        f"<body>\n{fragment}\n</body>\n"
        "</html>"
    )


def split_into_pages(raw: str) -> list[str]:
    """Split one provider reply into candidate documents at root-tag boundaries.

    Text before the first document (commentary, fences) is dropped. A reply
    with markup but no root tag at all is wrapped into a single document.
    """
    text = _FENCE_RE.sub("", raw)
    starts = [m.start() for m in _DOC_START_RE.finditer(text)]
    if not starts:
        fragment = text.strip()
        return [wrap_fragment(fragment)] if _TAG_RE.search(fragment) else []
    chunks = []
    for i, start in enumerate(starts):
        end = starts[i + 1] if i + 1 < len(starts) else len(text)
        chunk = text[start:end].strip()
        if chunk:
            chunks.append(chunk)
    return chunks


def is_valid_page(content: str) -> bool:
    """True when *content* starts with an HTML root tag and contains a body."""
    stripped = content.strip()
    return (
        len(stripped) >= MIN_PAGE_LENGTH
        and bool(_ROOT_RE.match(stripped))
        and bool(_BODY_RE.search(stripped))
    )


def placeholder_page(title: str, reason: str = "failed to generate") -> str:
    safe = html.escape(title)
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '  <meta charset="UTF-8">\n'
        '  <meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
        f"  <title>{safe} (Placeholder)</title>\n"
        "</head>\n"
        '<body style="font-family:sans-serif;padding:3rem;background:#111;color:#eee;">\n'
        f'  <h1 style="color:#ff4444;">{safe} {html.escape(reason)}.</h1>\n'
        "  <p>This is a placeholder page. Try simplifying your prompt or "
        "reducing the number of pages, then generate again.</p>\n"
        "</body>\n"
        "</html>"
    )


def page_filenames(page_count: int, structure: list[PageStructure] | None = None) -> list[str]:
    names = []
    for i in range(page_count):
        if structure and i < len(structure) and structure[i].filename:
            names.append(structure[i].filename)
        else:
            names.append("index.html" if i == 0 else f"page{i + 1}.html")
    return names


def page_titles(page_count: int, structure: list[PageStructure] | None = None) -> list[str]:
    titles = []
    for i in range(page_count):
        if structure and i < len(structure) and structure[i].title:
            titles.append(structure[i].title)
        else:
            titles.append(f"Page {i + 1}")
    return titles


def assemble_pages(
    chunks: list[str],
    page_count: int,
    structure: list[PageStructure] | None = None,
) -> list[GeneratedPage]:
    """Pair chunks with filenames, substituting placeholders for gaps and garbage."""
    filenames = page_filenames(page_count, structure)
    titles = page_titles(page_count, structure)
    pages = []
    for i in range(page_count):
        chunk = chunks[i] if i < len(chunks) else ""
        if is_valid_page(chunk):
            content = chunk
            generated_pages_total.labels(outcome="generated").inc()
        else:
            reason = "failed to generate" if not chunk else "came back incomplete"
            content = placeholder_page(titles[i], reason)
            generated_pages_total.labels(outcome="placeholder").inc()
        pages.append(GeneratedPage(filename=filenames[i], content=content))
    return pages


class SiteGenerator:
    """Calls the generation provider once and returns exactly *page_count* pages."""

    def __init__(self, llm: LLMPort, max_page_count: int = 10) -> None:
        self.llm = llm
        self.max_page_count = max_page_count

    async def generate(
        self,
        query: str,
        page_count: int = 1,
        structure: list[PageStructure] | None = None,
    ) -> list[GeneratedPage]:
        if not query or not query.strip():
            raise ValidationError("Prompt (query) is required and cannot be empty")
        if not 1 <= page_count <= self.max_page_count:
            raise ValidationError(f"page_count must be between 1 and {self.max_page_count}")
        if not self.llm.is_available:
            raise NotConfiguredError("Generation provider")

        prompt = compose_prompt(query, page_count, structure)
        logger.info("Generation request", prompt=query[:100], page_count=page_count)
        try:
            raw = await self.llm.generate_text(prompt, system=SYSTEM_PROMPT)
        except ModelHTTPError as exc:
            raise UpstreamError("generation", exc.status_code, str(exc.body or exc)) from exc
        except (AgentRunError, httpx.HTTPError) as exc:
            raise UpstreamError("generation", 502, str(exc)) from exc

        chunks = split_into_pages(raw)
        logger.info("Pages extracted", raw_length=len(raw), chunks=len(chunks), page_count=page_count)
        return assemble_pages(chunks, page_count, structure)
