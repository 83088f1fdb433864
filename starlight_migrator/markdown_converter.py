"""Convert GitBook-flavored Markdown to Starlight MDX.

GitBook uses {% %} template tags and a handful of HTML conventions for its
custom components. This module runs every converter over one document in a
fixed order and collects anything that needs a human look.
"""

from typing import Optional

from .config import ConvertConfig
from .directives import convert_directives, find_unconverted
from .frontmatter import transform_frontmatter
from .html_blocks import convert_html_blocks
from .imports import add_imports
from .links import LinkResolver
from .normalize import normalize_inline


class MarkdownConverter:
    """Converts GitBook-flavored Markdown to Starlight MDX."""

    def __init__(self, config: Optional[ConvertConfig] = None):
        self.config = config or ConvertConfig()
        self.qa_issues = []
        self.page_hidden = False

    def convert(self, content: str, page_path: str) -> str:
        """Convert one GitBook markdown file to Starlight MDX.

        Args:
            content: Raw markdown text of the page
            page_path: Path of the page relative to the source root (e.g. 'publishing/settings.md')
        """
        self.qa_issues = []
        self.page_hidden = False
        config = self.config

        body = content.replace('\r\n', '\n')

        # GitBook template tags and HTML components
        body = convert_directives(body, config, self.qa_issues)
        body = convert_html_blocks(body, config)

        # Internal links (.md → Starlight routes)
        resolver = LinkResolver(page_path, config)
        body = resolver.rewrite(body)
        for link in resolver.escaped_links:
            self.qa_issues.append(f'Link leaves the documentation root: {link}')

        body = normalize_inline(body, config)

        for tag in find_unconverted(body):
            self.qa_issues.append(f'Unconverted template tag: {{% {tag} %}}')

        result, frontmatter = transform_frontmatter(body, page_path)
        self.page_hidden = frontmatter.get('hidden') == 'true'

        return add_imports(result, config.component_source)


def convert_document(content: str, page_path: str, config: Optional[ConvertConfig] = None) -> str:
    """Convert a single document without keeping QA state around."""
    return MarkdownConverter(config).convert(content, page_path)
