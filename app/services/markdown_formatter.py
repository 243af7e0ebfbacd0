"""
Markdown to HTML.

CommonMark rules via markdown-it-py with tables and strikethrough enabled.
Raw HTML in the source is escaped, so shared content cannot inject markup
into the rendered page.
"""
from markdown_it import MarkdownIt

_md = MarkdownIt("commonmark", {"html": False, "linkify": False, "typographer": False}).enable(
    ["table", "strikethrough"]
)


def render_markdown(text: str) -> str:
    """Convert Markdown to an HTML fragment. Pure and deterministic."""
    return _md.render(text or "")
