"""HTML to Markdown conversion."""

import re

from bs4 import BeautifulSoup, Tag
from markdownify import ATX
from markdownify import MarkdownConverter as BaseMarkdownConverter

# MediaWiki chrome that carries no article text
_NOISE_SELECTORS = [
    "script",
    "style",
    ".mw-editsection",
    ".noprint",
]


class MarkdownConverter(BaseMarkdownConverter):
    """Markdown converter tuned for MediaWiki article bodies."""

    def __init__(self, **kwargs):
        super().__init__(
            heading_style=ATX,
            bullets="-",
            strong_em_symbol="*",
            **kwargs,
        )

    def convert_pre(self, el: Tag, text: str, parent_tags=None, **kwargs) -> str:
        """Fenced code blocks, keeping the language when the wiki tags it."""
        code = el.find("code")
        source = code if code else el
        lang = self._extract_language(el) or (
            self._extract_language(code) if code else ""
        )
        code_text = source.get_text()
        if not code_text.startswith("\n"):
            code_text = "\n" + code_text
        if not code_text.endswith("\n"):
            code_text = code_text + "\n"
        return f"\n```{lang}{code_text}```\n\n"

    def convert_code(self, el: Tag, text: str, parent_tags=None, **kwargs) -> str:
        """Handle inline code."""
        if el.parent and el.parent.name == "pre":
            return text
        code_text = el.get_text()
        if "`" in code_text:
            return f"`` {code_text} ``"
        return f"`{code_text}`"

    def _extract_language(self, elem: Tag) -> str:
        """Extract the programming language from class names."""
        raw_classes: str | list[str] = elem.get("class") or []
        classes: list[str] = (
            raw_classes.split() if isinstance(raw_classes, str) else list(raw_classes)
        )

        for cls in classes:
            if cls.startswith("language-"):
                return cls[9:]
            if cls.startswith("lang-"):
                return cls[5:]
            if cls.startswith("highlight-source-"):
                return cls[17:]
        return ""

    def convert_table(self, el: Tag, text: str, parent_tags=None, **kwargs) -> str:
        """Convert HTML tables to Markdown tables."""
        rows = []
        header_row = None

        thead = el.find("thead")
        if thead:
            header_row = thead.find("tr")
        else:
            first_row = el.find("tr")
            if first_row and first_row.find("th"):
                header_row = first_row

        if header_row:
            headers = [self._cell_text(cell) for cell in header_row.find_all(["th", "td"])]
            if headers:
                rows.append("| " + " | ".join(headers) + " |")
                rows.append("| " + " | ".join(["---"] * len(headers)) + " |")

        for tr in el.find_all("tr"):
            if tr == header_row:
                continue
            cells = [self._cell_text(cell) for cell in tr.find_all(["th", "td"])]
            if cells:
                rows.append("| " + " | ".join(cells) + " |")

        if rows:
            return "\n\n" + "\n".join(rows) + "\n\n"
        return ""

    def _cell_text(self, cell: Tag) -> str:
        text = cell.get_text(separator=" ", strip=True)
        return text.replace("\n", " ").replace("|", "\\|")

    def convert_svg(self, el: Tag, text: str, parent_tags=None, **kwargs) -> str:
        """Suppress inline SVG icons."""
        return ""


def html_to_markdown(html: str) -> str:
    """Convert an HTML fragment to Markdown."""
    if not html:
        return ""

    soup = BeautifulSoup(html, "lxml")

    for selector in _NOISE_SELECTORS:
        for tag in soup.select(selector):
            tag.decompose()

    converter = MarkdownConverter()
    markdown = converter.convert_soup(soup)

    markdown = re.sub(r"\n{3,}", "\n\n", markdown)
    return markdown.strip()


def convert_page_to_markdown(content: Tag, title: str) -> str:
    """Render a page's content region as Markdown with a title heading."""
    return f"# {title}\n\n{html_to_markdown(str(content))}"
