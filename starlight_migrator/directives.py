"""Convert GitBook {% %} template tags to Starlight MDX.

Template markers are tokenized once per pass and then paired by name, so
group constructs (tabs, steppers) come out as a flat list of items rather
than being carved up by nested patterns.
"""

import posixpath
import re
from dataclasses import dataclass, field
from typing import Callable, Optional
from urllib.parse import urlparse

from .config import ConvertConfig
from .utils import escape_attr


MARKER_RE = re.compile(r'\{%\s*(end)?([\w-]+)(.*?)%\}', re.DOTALL)
ATTR_RE = re.compile(r'([\w-]+)\s*=\s*"([^"]*)"')

VIDEO_HOSTS = ('youtube.com', 'youtu.be')
RECORDING_HOSTS = ('screen.studio',)

# First match wins
YOUTUBE_ID_PATTERNS = [
    re.compile(r'youtube\.com/watch\?(?:[^#\s]*&)?v=([^&\s?#]+)'),
    re.compile(r'youtu\.be/([^&\s?#]+)'),
    re.compile(r'youtube\.com/embed/([^&\s?#]+)'),
    re.compile(r'youtube\.com/v/([^&\s?#]+)'),
]

HEADING4_RE = re.compile(r'^####(?!#)\s*(.+?)\s*$')


@dataclass
class Marker:
    """One {% name attrs %} or {% endname %} marker found in the text."""
    name: str
    closing: bool
    start: int
    end: int
    attrs: dict = field(default_factory=dict)


# rewrite(attrs, inner) -> replacement, or None to leave the block as-is.
# ``inner`` is None for a block without an end marker.
Rewriter = Callable[[dict, Optional[str]], Optional[str]]


def tokenize(text: str) -> list[Marker]:
    """Find every template marker in ``text``, in document order."""
    markers = []
    for match in MARKER_RE.finditer(text):
        attrs = dict(ATTR_RE.findall(match.group(3)))
        markers.append(Marker(
            name=match.group(2),
            closing=bool(match.group(1)),
            start=match.start(),
            end=match.end(),
            attrs=attrs,
        ))
    return markers


def replace_blocks(text: str, name: str, rewrite: Rewriter,
                   end_optional: bool = False) -> str:
    """Replace each ``{% name %}…{% endname %}`` block with ``rewrite``'s output.

    Args:
        end_optional: Pair with an end marker when one follows before the next
            opening of the same name, otherwise treat the opening marker alone
            as the block.

    An opening marker without its end marker (when one is required) is left
    untouched, as is any block the rewriter declines.
    """
    markers = tokenize(text)
    parts = []
    pos = 0
    i = 0

    while i < len(markers):
        marker = markers[i]
        if marker.closing or marker.name != name or marker.start < pos:
            i += 1
            continue

        end_marker = None
        j = i + 1
        while j < len(markers):
            other = markers[j]
            if other.name == name:
                if other.closing:
                    end_marker = other
                break
            j += 1

        if end_marker is not None:
            inner = text[marker.end:end_marker.start]
            span_end = end_marker.end
        elif end_optional:
            inner = None
            span_end = marker.end
        else:
            i += 1
            continue

        replacement = rewrite(marker.attrs, inner)
        if replacement is None:
            i += 1
            continue

        parts.append(text[pos:marker.start])
        parts.append(replacement)
        pos = span_end
        i = j + 1 if end_marker is not None else i + 1

    parts.append(text[pos:])
    return ''.join(parts)


def split_items(inner: str, item_name: str) -> list[tuple[dict, str]]:
    """Split a group's inner text at each ``{% item_name %}`` marker.

    Each item runs to the next item marker, the last one to the end of the
    group. ``{% enditem_name %}`` markers are dropped; text before the first
    item is discarded.
    """
    openings = [m for m in tokenize(inner) if m.name == item_name and not m.closing]
    end_re = re.compile(r'\{%\s*end' + re.escape(item_name) + r'\s*%\}')

    items = []
    for idx, marker in enumerate(openings):
        stop = openings[idx + 1].start if idx + 1 < len(openings) else len(inner)
        body = end_re.sub('', inner[marker.end:stop])
        items.append((marker.attrs, body.strip()))
    return items


# ---- Per-directive rewriters ----

def convert_hints(content: str, config: ConvertConfig) -> str:
    """Convert {% hint style="..." %} to Starlight <Aside>."""
    def rewrite(attrs, inner):
        aside_type = config.hint_map.get(attrs.get('style', ''), config.default_callout)
        title, body = _lift_title(inner)
        title_attr = f' title="{escape_attr(title)}"' if title else ''
        return f'<Aside type="{aside_type}"{title_attr}>\n{body.strip()}\n</Aside>'

    return replace_blocks(content, 'hint', rewrite)


def _lift_title(inner: str) -> tuple[str, str]:
    """Pull a leading #### heading out of a hint body."""
    lines = inner.split('\n')
    for idx, line in enumerate(lines):
        if not line.strip():
            continue
        match = HEADING4_RE.match(line.strip())
        if not match:
            break
        del lines[idx]
        return match.group(1), '\n'.join(lines)
    return '', inner


def convert_tabs(content: str) -> str:
    """Convert {% tabs %}/{% tab title="..." %} to <Tabs>/<TabItem>."""
    def rewrite(attrs, inner):
        tabs = split_items(inner, 'tab')
        if not tabs:
            return None
        items = '\n'.join(
            f'<TabItem label="{escape_attr(tab_attrs.get("title", ""))}">\n{body}\n</TabItem>'
            for tab_attrs, body in tabs
        )
        return f'<Tabs>\n{items}\n</Tabs>'

    return replace_blocks(content, 'tabs', rewrite)


def convert_stepper(content: str) -> str:
    """Convert {% stepper %}/{% step %} to a numbered list."""
    def rewrite(attrs, inner):
        steps = [body for _, body in split_items(inner, 'step')]
        if not steps:
            return None
        return '\n\n'.join(_list_item(i + 1, step) for i, step in enumerate(steps))

    return replace_blocks(content, 'stepper', rewrite)


def _list_item(number: int, body: str) -> str:
    # Continuation lines are indented so the whole body stays in one item
    marker = f'{number}. '
    lines = body.split('\n')
    indent = ' ' * len(marker)
    rest = [indent + line if line.strip() else '' for line in lines[1:]]
    return '\n'.join([marker + lines[0]] + rest)


def convert_file_refs(content: str, config: ConvertConfig) -> str:
    """Convert {% file src="..." %} (optionally with a caption) to a download link."""
    def rewrite(attrs, inner):
        src = attrs.get('src')
        if not src:
            return None
        filename = posixpath.basename(src)
        link = f'[Download {filename}]({config.download_url(src)})'
        caption = (inner or '').strip()
        if caption:
            return f'{link}\n\n{caption}'
        return link

    return replace_blocks(content, 'file', rewrite, end_optional=True)


def convert_content_refs(content: str) -> str:
    """Convert {% content-ref url="..." %} to a plain link."""
    def rewrite(attrs, inner):
        url = attrs.get('url')
        if not url:
            return None
        clean_url = re.sub(r'\.md$', '', url)
        link_text = posixpath.basename(clean_url).replace('-', ' ')
        return f'[{link_text}]({clean_url})'

    return replace_blocks(content, 'content-ref', rewrite)


def convert_embeds(content: str, qa_issues: Optional[list] = None) -> str:
    """Convert {% embed url="..." %} (optionally with a caption) to an iframe."""
    def rewrite(attrs, inner):
        url = attrs.get('url')
        if not url:
            return None
        iframe = create_iframe(url)
        if qa_issues is not None and _host_kind(url) == 'generic':
            qa_issues.append(f'Embedded content: {url} — verify rendering')
        caption = (inner or '').strip()
        if caption:
            return f'{iframe}\n<figcaption>{caption}</figcaption>'
        return iframe

    return replace_blocks(content, 'embed', rewrite, end_optional=True)


def _host_kind(url: str) -> str:
    host = (urlparse(url).netloc or url).lower()
    if any(h in host for h in VIDEO_HOSTS):
        return 'video'
    if any(h in host for h in RECORDING_HOSTS):
        return 'recording'
    return 'generic'


def extract_youtube_id(url: str) -> Optional[str]:
    """Extract a YouTube video id from watch, short, embed or /v/ URLs."""
    for pattern in YOUTUBE_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def create_iframe(url: str) -> str:
    """Build the iframe markup for an embedded URL."""
    kind = _host_kind(url)

    if kind == 'video':
        video_id = extract_youtube_id(url)
        if video_id:
            return (
                '<iframe\n'
                '  width="100%"\n'
                '  height="400"\n'
                f'  src="https://www.youtube.com/embed/{video_id}"\n'
                '  title="YouTube video"\n'
                '  frameborder="0"\n'
                '  allow="accelerometer; autoplay; clipboard-write; encrypted-media; gyroscope; picture-in-picture"\n'
                '  allowfullscreen\n'
                '></iframe>'
            )

    if kind == 'recording':
        return (
            '<iframe\n'
            '  width="100%"\n'
            '  height="400"\n'
            f'  src="{url}"\n'
            '  title="Screen recording"\n'
            '  frameborder="0"\n'
            '  allowfullscreen\n'
            '></iframe>'
        )

    return (
        '<iframe\n'
        '  width="100%"\n'
        '  height="400"\n'
        f'  src="{url}"\n'
        '  title="Embedded content"\n'
        '  frameborder="0"\n'
        '></iframe>'
    )


def convert_directives(content: str, config: ConvertConfig, qa_issues: Optional[list] = None) -> str:
    """Apply every template-tag converter in order."""
    content = convert_hints(content, config)
    content = convert_tabs(content)
    content = convert_stepper(content)
    content = convert_content_refs(content)
    content = convert_file_refs(content, config)
    content = convert_embeds(content, qa_issues)
    return content


def find_unconverted(content: str) -> list[str]:
    """Names of template markers still present after conversion."""
    return [
        ('end' if m.closing else '') + m.name
        for m in tokenize(content)
        if m.name != 'raw'
    ]
