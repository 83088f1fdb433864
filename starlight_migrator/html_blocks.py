"""Convert GitBook's raw HTML conventions to Starlight MDX.

GitBook stores card views, sized figures, aligned blocks, inline icons and
coloured text as HTML inside the markdown. MDX parses that HTML as JSX, so
each construct is rewritten to a component or a JSX-style attribute.
"""

import re

from bs4 import BeautifulSoup

from .config import ConvertConfig
from .utils import escape_attr


CARD_TABLE_RE = re.compile(r'<table\s+[^>]*data-view="cards"[^>]*>.*?</table>', re.IGNORECASE | re.DOTALL)
FIGURE_RE = re.compile(
    r'<figure>\s*<img\s+([^>]*)>\s*(?:<figcaption>(?:<p>)?([^<]*)(?:</p>)?</figcaption>)?\s*</figure>',
    re.IGNORECASE,
)
ALIGNED_DIV_RE = re.compile(r'<div\s+align="(\w+)">', re.IGNORECASE)
INLINE_IMG_RE = re.compile(r'<img\s+([^>]*data-size="line"[^>]*)>', re.IGNORECASE)
MARK_RE = re.compile(r'<mark\s+style="color:\s*([^"]+)">(.*?)</mark>', re.IGNORECASE | re.DOTALL)
EMPHASIS_RE = re.compile(r'</?(?:strong|b|em|i)>', re.IGNORECASE)


def _attr(attrs: str, name: str):
    match = re.search(rf'(?<![\w-]){name}="([^"]*)"', attrs, re.IGNORECASE)
    return match.group(1) if match else None


def convert_card_tables(content: str) -> str:
    """Convert <table data-view="cards"> to <CardGrid>/<Card>."""
    def replace_card_table(match):
        table_html = match.group(0)
        soup = BeautifulSoup(table_html, 'html.parser')
        tbody = soup.find('tbody')
        if tbody is None:
            return table_html

        rows = []
        for tr in tbody.find_all('tr'):
            cells = tr.find_all('td')
            if not cells:
                continue

            # First cell is title, second is link, third is cover image
            title = EMPHASIS_RE.sub('', cells[0].decode_contents()).strip()
            link = ''
            if len(cells) > 1:
                anchor = cells[1].find('a', href=True)
                if anchor is not None:
                    link = anchor['href']
            cover = ''
            if len(cells) > 2:
                anchor = cells[2].find('a', href=True)
                if anchor is not None:
                    cover = anchor['href']

            rows.append({'title': title, 'link': link, 'cover': cover})

        if not rows:
            return table_html

        cards = []
        for row in rows:
            href = re.sub(r'\.md(?=$|#)', '', row['link'])
            cards.append(f'  <Card title="{escape_attr(row["title"])}" href="{escape_attr(href)}" />')
        return '<CardGrid>\n' + '\n'.join(cards) + '\n</CardGrid>'

    return CARD_TABLE_RE.sub(replace_card_table, content)


def convert_figures(content: str, config: ConvertConfig) -> str:
    """Convert <figure><img width=...> to a figure with a max-width style."""
    def replace_figure(match):
        img_attrs = match.group(1).rstrip().rstrip('/')
        caption = match.group(2)

        src = _attr(img_attrs, 'src')
        if not src:
            return match.group(0)
        alt = _attr(img_attrs, 'alt')
        if alt is None:
            alt = caption or ''
        width = _attr(img_attrs, 'width')

        style = ''
        if width:
            max_width = width if width.endswith(('%', 'px')) else f'{width}px'
            style = f" style={{{{ maxWidth: '{max_width}' }}}}"

        caption_el = f'\n<figcaption>{caption}</figcaption>' if caption else ''
        return f'<figure>\n  <img src="{config.image_url(src)}" alt="{alt}"{style} />{caption_el}\n</figure>'

    return FIGURE_RE.sub(replace_figure, content)


def convert_aligned_divs(content: str) -> str:
    """Convert <div align="..."> to a text-align style."""
    return ALIGNED_DIV_RE.sub(lambda m: f"<div style={{{{ textAlign: '{m.group(1)}' }}}}>", content)


def convert_inline_images(content: str, config: ConvertConfig) -> str:
    """Convert <img data-size="line"> icons to inline-styled images."""
    def replace_inline(match):
        attrs = match.group(1)
        src = _attr(attrs, 'src')
        if not src:
            return match.group(0)
        alt = _attr(attrs, 'alt') or ''
        return (
            f'<img src="{config.image_url(src)}" alt="{alt}" '
            "style={{ display: 'inline', height: '1.2em', verticalAlign: 'middle' }} />"
        )

    return INLINE_IMG_RE.sub(replace_inline, content)


def convert_marks(content: str) -> str:
    """Convert <mark style="color:..."> to a coloured <span>."""
    def replace_mark(match):
        color = re.sub(r';$', '', match.group(1).strip())
        return f"<span style={{{{ color: '{color}' }}}}>{match.group(2)}</span>"

    return MARK_RE.sub(replace_mark, content)


def convert_html_blocks(content: str, config: ConvertConfig) -> str:
    """Apply every HTML converter in order."""
    content = convert_card_tables(content)
    content = convert_figures(content, config)
    content = convert_aligned_divs(content)
    content = convert_inline_images(content, config)
    content = convert_marks(content)
    return content
