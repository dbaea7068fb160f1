"""Cross-page link rewriting for multi-page sites."""

from __future__ import annotations

from bs4 import BeautifulSoup

from sitesmith.domains import slugify
from sitesmith.models.session import GeneratedPage, PageStructure


def structure_from_pages(pages: list[GeneratedPage]) -> list[PageStructure]:
    """Derive page titles from each document's <title>, keeping existing filenames."""
    structure = []
    for i, page in enumerate(pages):
        soup = BeautifulSoup(page.content, "html.parser")
        title = soup.title.get_text(strip=True) if soup.title else ""
        structure.append(PageStructure(title=title or f"Page {i + 1}", filename=page.filename))
    return structure


def rewrite_links(
    pages: list[GeneratedPage], structure: list[PageStructure] | None = None
) -> list[GeneratedPage]:
    """Point anchors whose text names another page at that page's file.

    Pages with no matching anchor are returned untouched.
    """
    structure = structure or structure_from_pages(pages)
    by_title = {p.title.strip().lower(): p.filename for p in structure if p.title}
    rewritten = []
    for page in pages:
        soup = BeautifulSoup(page.content, "html.parser")
        changed = False
        for anchor in soup.find_all("a"):
            target = by_title.get(anchor.get_text(strip=True).lower())
            if target and anchor.get("href") != target:
                anchor["href"] = target
                changed = True
        rewritten.append(
            page.model_copy(update={"content": str(soup)}) if changed else page
        )
    return rewritten


def netlify_slug(base: str, attempt: int, max_length: int = 40) -> str:
    """Site name for the *attempt*-th creation try: ``base``, ``base-1``, ``base-2``..."""
    slug = slugify(base, max_length=max_length) or "site"
    if attempt == 0:
        return slug
    suffix = f"-{attempt}"
    return f"{slug[: max_length - len(suffix)].rstrip('-')}{suffix}"
