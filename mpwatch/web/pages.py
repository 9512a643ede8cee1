"""
Server-rendered pages for the public site.

Plain f-string templates; every value coming from the backend or the URL is
escaped with html.escape before it reaches the markup.
"""

from __future__ import annotations

import html
from datetime import datetime

from mpwatch.core.config import settings
from mpwatch.models.chapters import Chapter
from mpwatch.models.documents import Document, Pagination
from mpwatch.models.stories import Story
from mpwatch.services.highlight import highlight_html
from mpwatch.services.library import LibraryView, library_url, snippet_links, viewer_url
from mpwatch.services.stories import NewsView, story_path
from mpwatch.services.viewer import DocumentPage
from mpwatch.web.markdown import first_heading_id, is_safe_href, markdown_to_html
from mpwatch.web.social import story_meta_tags

FILE_TYPE_ICONS = {
    "pdf": "📄",
    "docx": "📝",
    "txt": "📃",
    "url": "🔗",
}

ACTIVE_CLASS = ' class="active"'

STYLE = """
body { font-family: system-ui, sans-serif; margin: 0; background: #f9fafb; color: #111827; }
header.site { background: #fff; border-bottom: 1px solid #e5e7eb; padding: 1rem 2rem; }
header.site a { margin-right: 1.5rem; color: #1d4ed8; text-decoration: none; }
main { max-width: 72rem; margin: 0 auto; padding: 2rem 1rem; }
.card { background: #fff; border: 1px solid #e5e7eb; border-radius: .5rem; padding: 1.5rem; margin-bottom: 1.5rem; }
.meta { color: #6b7280; font-size: .875rem; }
.badge { background: #dbeafe; color: #1e40af; border-radius: 999px; padding: .2rem .7rem; font-size: .8rem; }
mark { background: #fef08a; color: #713f12; padding: 0 .15rem; border-radius: .2rem; }
.error { color: #b91c1c; }
nav.pages a, nav.pages span { margin: 0 .25rem; }
nav.pages .current { font-weight: bold; }
nav.pages .disabled { color: #9ca3af; }
.content { white-space: pre-wrap; line-height: 1.7; }
.whitepaper { display: flex; gap: 2rem; }
.whitepaper aside { width: 18rem; flex-shrink: 0; }
.whitepaper aside a.active { font-weight: bold; }
"""


def esc(value: object) -> str:
    return html.escape("" if value is None else str(value), quote=True)


def format_date(value: str | None) -> str:
    if not value:
        return ""
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value

    return f"{dt.strftime('%B')} {dt.day}, {dt.year}"


def truncate(content: str, max_length: int = 300) -> str:
    if len(content) <= max_length:
        return content

    return content[:max_length] + "..."


def file_type_icon(file_type: str) -> str:
    return FILE_TYPE_ICONS.get((file_type or "").lower(), "📄")


def layout(title: str, body: str, *, head: str = "") -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{esc(title)} | {esc(settings.SITE_NAME)}</title>
{head}
  <style>{STYLE}</style>
</head>
<body>
  <header class="site">
    <a href="/"><strong>{esc(settings.SITE_NAME)}</strong></a>
    <a href="/news">Latest News</a>
    <a href="/research-library">Research Library</a>
    <a href="/whitepaper">Whitepaper</a>
  </header>
  <main>
{body}
  </main>
</body>
</html>"""


def _pagination_nav(pagination: Pagination, url_for) -> str:
    if pagination.total_pages <= 1:
        return ""

    current = pagination.page
    parts = []
    if current > 1:
        parts.append(f'<a href="{esc(url_for(current - 1))}">Previous</a>')
    else:
        parts.append('<span class="disabled">Previous</span>')

    for n in range(1, pagination.total_pages + 1):
        if n == current:
            parts.append(f'<span class="current">{n}</span>')
        else:
            parts.append(f'<a href="{esc(url_for(n))}">{n}</a>')

    if current < pagination.total_pages:
        parts.append(f'<a href="{esc(url_for(current + 1))}">Next</a>')
    else:
        parts.append('<span class="disabled">Next</span>')

    return f'<nav class="pages">{" ".join(parts)}</nav>'


def _document_header(doc: Document, title_html: str) -> str:
    meta = [f"<span>{esc(format_date(doc.created_at))}</span>"] if doc.created_at else []
    if doc.metadata.author:
        meta.append(f"<span>{esc(doc.metadata.author)}</span>")
    if doc.metadata.source:
        meta.append(f"<span>{esc(doc.metadata.source)}</span>")

    return f"""<div>
      <span>{file_type_icon(doc.file_type)}</span>
      <h3>{title_html}</h3>
      <div class="meta">{" &middot; ".join(meta)}</div>
      <span class="badge">{esc(doc.file_type.upper())}</span>
    </div>"""


def _document_card(doc: Document, view: LibraryView) -> str:
    term = view.query if view.is_search else None
    title_html = highlight_html(doc.title, term)
    title_html = f'<a href="{esc(viewer_url(doc.id))}">{title_html}</a>'

    if view.is_search:
        snippets = "\n".join(
            f"""<li><p>{highlight_html(snippet, term)}</p>
          <a href="{esc(url)}">View Document</a></li>"""
            for snippet, url in snippet_links(doc, view.query)
        )
        body = f"<ul class=\"snippets\">{snippets}</ul>" if snippets else ""
    else:
        body = f"<p>{esc(truncate(doc.content, settings.PREVIEW_CHARS))}</p>"

    notes = ""
    if doc.metadata.notes:
        notes = f'<p class="meta"><strong>Notes:</strong> {esc(doc.metadata.notes)}</p>'

    return f"""<article class="card">
    {_document_header(doc, title_html)}
    {body}
    {notes}
  </article>"""


def _filter_select(view: LibraryView) -> str:
    if not view.options:
        return ""

    opts = "".join(
        f'<option value="{esc(o.id)}"{" selected" if o.id in view.selected_ids else ""}>'
        f"{esc(o.title)}</option>"
        for o in view.options
    )

    return f'<select name="documentIds" multiple>{opts}</select>'


def render_library(view: LibraryView) -> str:
    if view.is_search:
        heading = "Search Results"
        summary = f'{view.pagination.total} results found for "{esc(view.query)}"'
        empty = """<h3>No results found</h3>
    <p>Try different search terms or browse all documents.</p>"""
    else:
        heading = "All Documents"
        summary = f"{view.pagination.total} documents available"
        empty = """<h3>No documents available</h3>
    <p>Check back later for new research documents.</p>"""

    error = f'<p class="error">{esc(view.error)}</p>' if view.error else ""
    cards = "\n".join(_document_card(d, view) for d in view.documents)
    nav = _pagination_nav(
        view.pagination, lambda n: library_url(view.query, n, view.selected_ids)
    )

    body = f"""<h1>Research Library</h1>
  <p>Explore our curated collection of microplastics research documents, reports, and studies.</p>
  <form class="card" method="get" action="/research-library">
    <input type="text" name="q" value="{esc(view.query)}" placeholder="Search research documents...">
    {_filter_select(view)}
    <button type="submit">Search</button>
  </form>
  <h2>{heading}</h2>
  <p>{summary}</p>
  {error}
  {cards if view.documents else f'<div class="card">{empty}</div>'}
  {nav}"""

    return layout("Research Library", body)


def render_document_page(dp: DocumentPage) -> str:
    doc = dp.document

    def page_url(n: int) -> str:
        return viewer_url(doc.id, dp.highlight, n)

    prev_link = (
        f'<a href="{esc(page_url(dp.page - 1))}">Previous</a>'
        if dp.has_prev
        else '<span class="disabled">Previous</span>'
    )
    next_link = (
        f'<a href="{esc(page_url(dp.page + 1))}">Next</a>'
        if dp.has_next
        else '<span class="disabled">Next</span>'
    )
    hidden = f'<input type="hidden" name="highlight" value="{esc(dp.highlight)}">' if dp.highlight else ""
    search_note = ""
    if dp.highlight:
        search_note = f'<p class="meta">Highlighting "{esc(dp.highlight)}"</p>'

    # scroll to the first mark once rendered
    script = ""
    if dp.has_highlight:
        script = """<script>
  var el = document.getElementById('first-highlight');
  if (el) { el.scrollIntoView({behavior: 'smooth', block: 'center'}); }
</script>"""

    body = f"""<p><a href="/research-library">Back to Research Library</a></p>
  <div class="card">
    {_document_header(doc, esc(doc.title))}
    {search_note}
    <nav class="pages">
      {prev_link}
      <form method="get" action="{esc(viewer_url(doc.id))}" style="display:inline">
        Page <input type="number" name="page" value="{dp.page}" min="1" max="{dp.total_pages}">
        of {dp.total_pages}
        {hidden}
      </form>
      {next_link}
    </nav>
  </div>
  <div class="card content" id="document-content">{dp.html()}</div>
  {script}"""

    return layout(doc.title, body)


def render_document_not_found(message: str = "Document not found") -> str:
    body = f"""<div class="card">
    <h1>Document Not Found</h1>
    <p class="error">{esc(message)}</p>
    <p><a href="/research-library">Back to Research Library</a></p>
  </div>"""

    return layout("Document Not Found", body)


def render_whitepaper(chapters: list[Chapter], active: Chapter | None, error: str | None = None) -> str:
    active_id = active.id if active else None
    links = "\n".join(
        f'<li><a href="/whitepaper?chapter={esc(c.id)}#{esc(c.id)}"'
        f'{ACTIVE_CLASS if c.id == active_id else ""}>{esc(c.title)}</a></li>'
        for c in chapters
    )

    if error:
        content = f'<p class="error">{esc(error)}</p>'
    elif active is None:
        content = "<p>Select a chapter to start reading.</p>"
    elif first_heading_id(active.content) == active.id:
        # the chapter opens with its own title; that heading is the anchor
        content = markdown_to_html(active.content)
    else:
        chapter_html = markdown_to_html(active.content, reserved_ids=[active.id])
        content = f"""<h1 id="{esc(active.id)}">{esc(active.title)}</h1>
      {chapter_html or '<p>This chapter is not available right now.</p>'}"""

    body = f"""<div class="whitepaper">
    <aside>
      <h2>Whitepaper Chapters</h2>
      <ul>{links}</ul>
    </aside>
    <section>
      {content}
    </section>
  </div>"""

    return layout(active.title if active else "Whitepaper", body)


def _story_image(story: Story) -> str:
    # backend values end up in href/src; only http(s) and site-relative targets pass
    if is_safe_href(story.ai_image_url):
        return story.ai_image_url

    return settings.DEFAULT_OG_IMAGE


def render_story(story: Story, story_id: str) -> str:
    image = _story_image(story)
    date = format_date(story.published_date or story.created_at)
    source = f" &middot; Source: {esc(story.source)}" if story.source else ""
    link = ""
    if is_safe_href(story.url):
        link = f'<p><a href="{esc(story.url)}" rel="noopener" target="_blank">Read the original article</a></p>'

    body = f"""<article class="card">
    <header>
      <h1>{esc(story.title)}</h1>
      <p class="meta"><span>Published on {esc(date)}</span>{source}</p>
    </header>
    <img src="{esc(image)}" alt="{esc(story.title)}" style="max-width:100%">
    <p>{esc(story.ai_summary or "")}</p>
    {link}
  </article>"""

    return layout(story.title, body, head=story_meta_tags(story, story_id))


def _news_card(story: Story) -> str:
    href = esc(story_path(story.id))
    date = format_date(story.published_date or story.created_at)
    source = f" &middot; {esc(story.source)}" if story.source else ""

    return f"""<article class="card">
    <a href="{href}"><img src="{esc(_story_image(story))}" alt="{esc(story.title)}" style="max-width:100%"></a>
    <h3><a href="{href}">{esc(story.title)}</a></h3>
    <p class="meta"><span>{esc(date)}</span>{source}</p>
    <p>{esc(truncate(story.ai_summary or "", settings.PREVIEW_CHARS))}</p>
  </article>"""


def render_news(view: NewsView) -> str:
    error = f'<p class="error">{esc(view.error)}</p>' if view.error else ""
    if view.stories:
        cards = "\n".join(_news_card(s) for s in view.stories)
    elif view.error:
        cards = ""
    else:
        cards = '<div class="card"><h3>No news yet</h3></div>'
    nav = _pagination_nav(view.pagination, lambda n: f"/news?page={n}" if n > 1 else "/news")

    body = f"""<h1>Latest News</h1>
  <p>The latest microplastics research and news, summarised.</p>
  {error}
  {cards}
  {nav}"""

    return layout("Latest News", body)


def render_message(title: str, message: str) -> str:
    body = f"""<div class="card">
    <h1>{esc(title)}</h1>
    <p class="error">{esc(message)}</p>
    <p><a href="/">Back to home</a></p>
  </div>"""

    return layout(title, body)
