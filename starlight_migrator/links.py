"""Resolve GitBook internal links for Starlight routing.

GitBook addresses pages by file (``guide/setup.md``). Starlight routes an
index file at its folder (``guide/README.md`` → ``guide``) and every other
page at folder + stem (``guide/setup.md`` → ``guide/setup``). Relative links
are recomputed between those two URL spaces:

- an index page's links are relative to its own URL (the folder);
- a regular page's links are relative to the *parent* of its URL, since
  ``guide/setup`` sits one segment below ``guide``.
"""

import posixpath
import re
from typing import Optional

from .config import ConvertConfig
from .utils import strip_md, to_posix


EXTERNAL_SCHEMES = ('http://', 'https://')

# [text](file.md#anchor "mention")
MENTION_LINK_RE = re.compile(r'\[([^\]]+)\]\(([^)#\s]*)(#[^)\s]+)?\s+"mention"\)')
# <a data-mention href="file.md#anchor">text</a>
HTML_MENTION_RE = re.compile(r'<a\s+data-mention\s+href="([^"]+)"[^>]*>([^<]+)</a>', re.IGNORECASE)
# <a href="file.md">text</a>
HTML_LINK_RE = re.compile(r'<a\s+href="([^"]+)"[^>]*>([^<]+)</a>', re.IGNORECASE)
# [text](file.md#anchor)
MD_LINK_RE = re.compile(r'(?<!!)\[([^\]]+)\]\(([^)#\s]+\.md)(#[^)\s]+)?\)')


def _normpath(path: str) -> str:
    path = posixpath.normpath(path) if path else ''
    return '' if path == '.' else path


def split_anchor(href: str) -> tuple[str, Optional[str]]:
    """Split ``file.md#anchor`` into (``file.md``, ``#anchor``)."""
    url, sep, fragment = href.partition('#')
    return url, (sep + fragment) if fragment else None


def clean_link_text(text: str, target: str = '') -> str:
    """Regenerate a mention's visible text from its target filename.

    ``getting-started.md`` becomes ``Getting started``. Any other text is
    returned unchanged.
    """
    if text.endswith('.md') or (target and text == strip_md(target)):
        clean = strip_md(text).replace('-', ' ')
        return clean[:1].upper() + clean[1:]
    return text


class LinkResolver:
    """Rewrites links found in one document.

    Args:
        page_path: Path of the document relative to the source root
            (e.g. 'documentation/design-process/background.md')
        config: Conversion settings (index filename, anchor remap table)
    """

    def __init__(self, page_path: str, config: ConvertConfig):
        self.config = config
        page_path = _normpath(to_posix(page_path))
        filename = posixpath.basename(page_path)

        self.current_dir = posixpath.dirname(page_path)
        self.is_index = config.is_index(filename)
        self.current_stem = strip_md(filename).lower()
        if self.is_index:
            self.url_path = self.current_dir
        else:
            self.url_path = posixpath.join(self.current_dir, strip_md(filename))

        # Relative links whose source path leaves the corpus root
        self.escaped_links = []

    @property
    def base_path(self) -> str:
        """URL-space location relative links are computed from."""
        return self.url_path if self.is_index else posixpath.dirname(self.url_path)

    def resolve(self, raw_url: str, anchor: Optional[str] = None) -> str:
        """Compute the Starlight link target for ``raw_url`` + ``anchor``."""
        anchor = anchor or ''

        if not raw_url:
            return self.config.remap_anchor(anchor) or '#'

        # External anchors belong to another site and are never remapped
        if raw_url.startswith(EXTERNAL_SCHEMES):
            return raw_url + anchor

        mapped_anchor = self.config.remap_anchor(anchor)

        if raw_url.startswith('/'):
            return strip_md(raw_url) + mapped_anchor

        target = re.sub(r'^\./', '', strip_md(raw_url))
        resolved = _normpath(posixpath.join(self.current_dir, target))
        if resolved == '..' or resolved.startswith('../'):
            self.escaped_links.append(raw_url + anchor)

        target_name = posixpath.basename(resolved).lower()
        target_dir = posixpath.dirname(resolved)
        names_self = (
            target_name == self.current_stem
            or (self.is_index and target_name == self.config.index_stem)
        )
        if names_self and target_dir == self.current_dir:
            return mapped_anchor or '#'

        if self.config.is_index(target_name):
            target_url = target_dir
        else:
            target_url = resolved

        relative = posixpath.relpath(target_url or '.', self.base_path or '.')
        relative = to_posix(relative) or '.'
        return relative + mapped_anchor

    def rewrite(self, content: str) -> str:
        """Rewrite mention links, HTML anchors and markdown .md links."""
        def replace_mention(match):
            text, url, anchor = match.group(1), match.group(2), match.group(3)
            return f'[{clean_link_text(text, url)}]({self.resolve(url, anchor)})'

        content = MENTION_LINK_RE.sub(replace_mention, content)

        def replace_html_mention(match):
            url, anchor = split_anchor(match.group(1))
            text = match.group(2)
            return f'[{clean_link_text(text, url)}]({self.resolve(url, anchor)})'

        content = HTML_MENTION_RE.sub(replace_html_mention, content)

        def replace_html_link(match):
            href, text = match.group(1), match.group(2)
            if href.startswith(EXTERNAL_SCHEMES + ('mailto:',)):
                return match.group(0)
            url, anchor = split_anchor(href)
            return f'[{text}]({self.resolve(url, anchor)})'

        content = HTML_LINK_RE.sub(replace_html_link, content)

        def replace_md_link(match):
            text, url, anchor = match.group(1), match.group(2), match.group(3)
            return f'[{text}]({self.resolve(url, anchor)})'

        return MD_LINK_RE.sub(replace_md_link, content)


def resolve_links(content: str, page_path: str, config: ConvertConfig) -> str:
    """Rewrite every internal link in ``content`` for the page at ``page_path``."""
    return LinkResolver(page_path, config).rewrite(content)
