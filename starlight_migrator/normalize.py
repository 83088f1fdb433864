"""Inline clean-ups that make GitBook markdown parse as MDX."""

import re

from .config import ConvertConfig


ENTITIES = {
    '&#x20;': ' ',
    '&#x3C;': '<',
    '&#x3c;': '<',
    '&#x3E;': '>',
    '&#x3e;': '>',
    '&#60;': '<',
    '&#62;': '>',
}

PRE_CODE_RE = re.compile(r'<pre([^>]*)>\s*<code([^>]*)>(.*?)</code>\s*</pre>', re.IGNORECASE | re.DOTALL)
INLINE_CODE_RE = re.compile(r'<code>([^<]*(?:<(?!/code>)[^<]*)*)</code>', re.IGNORECASE)
HIGHLIGHT_TAG_RE = re.compile(r'</?(?:strong|em|b|i)>', re.IGNORECASE)
LIST_FIGURE_RE = re.compile(r'^(\*\s+[^\n]+)<br\s*/?>\s*\n\n(\s{4}<figure>.*?</figure>)', re.MULTILINE | re.DOTALL)
ESCAPED_BRACKET_RE = re.compile(r'(?<!\\)((?:\\\\)*)\\([\[\]])')


def decode_entities(content: str) -> str:
    """Decode the numeric entities GitBook writes for spaces and angle brackets."""
    for entity, char in ENTITIES.items():
        content = content.replace(entity, char)
    return content


def fix_malformed_bold(content: str) -> str:
    """Repair ``**word **<`` left behind once &#x20; is decoded inside bold."""
    return re.sub(r'\*\*(\w+)\s+\*\*(?=<)', r'**\1** ', content)


def convert_pre_code_blocks(content: str) -> str:
    """Convert <pre><code> HTML blocks to fenced code blocks."""
    def replace_pre_code(match):
        attrs = match.group(1) + ' ' + match.group(2)
        lang_match = re.search(r'lang(?:uage)?-([\w+#-]+)', attrs)
        lang = lang_match.group(1) if lang_match else ''

        # GitBook wraps highlighted lines in <strong>/<em>
        code = HIGHLIGHT_TAG_RE.sub('', match.group(3)).strip()
        return f'```{lang}\n{code}\n```'

    return PRE_CODE_RE.sub(replace_pre_code, content)


def escape_inline_code(content: str) -> str:
    """Escape angle brackets inside inline <code> so MDX doesn't read them as JSX."""
    def replace_code(match):
        code = match.group(1)
        if '&lt;' in code or '&gt;' in code:
            return match.group(0)
        code = re.sub(r'<(?!\s)', '&lt;', code)
        code = re.sub(r'(?<!\s)>', '&gt;', code)
        return f'<code>{code}</code>'

    return INLINE_CODE_RE.sub(replace_code, content)


def unescape_brackets(content: str) -> str:
    """Convert GitBook's escaped \\[ and \\] back to plain brackets."""
    # An escaped backslash before a bracket (\\[) leaves the bracket alone
    return ESCAPED_BRACKET_RE.sub(r'\1\2', content)


def close_void_tags(content: str) -> str:
    """Make void HTML elements self-closing for MDX."""
    content = re.sub(r'<br\s*>', '<br />', content, flags=re.IGNORECASE)
    content = re.sub(r'<hr\s*>', '<hr />', content, flags=re.IGNORECASE)
    content = re.sub(r'<img\s+([^>]*[^/])>', r'<img \1 />', content, flags=re.IGNORECASE)
    return content


def fix_figures_in_lists(content: str) -> str:
    """Move figures indented under a list item out of the list.

    MDX doesn't accept block elements inside list items.
    """
    def replace(match):
        figure = re.sub(r'^\s{4}', '', match.group(2), flags=re.MULTILINE)
        return f'{match.group(1)}\n\n{figure}'

    return LIST_FIGURE_RE.sub(replace, content)


def fix_markdown_image_paths(content: str, config: ConvertConfig) -> str:
    """Rewrite ![alt](…/.gitbook/assets/…) images to the published asset path."""
    assets = re.escape(config.legacy_assets_dir)

    def replace_image(match):
        return f'![{match.group(1)}]({config.image_url(match.group(2))})'

    # ![alt](<../.gitbook/assets/file name.png>)
    content = re.sub(rf'!\[([^\]]*)\]\(<([^>]*{assets}[^>]+)>\)', replace_image, content)
    # ![alt](../.gitbook/assets/file.png)
    content = re.sub(rf'!\[([^\]]*)\]\(([^)]*{assets}[^)]+)\)', replace_image, content)
    return content


def normalize_inline(content: str, config: ConvertConfig) -> str:
    """Apply every inline normalizer in order."""
    content = decode_entities(content)
    content = fix_malformed_bold(content)
    content = convert_pre_code_blocks(content)
    content = escape_inline_code(content)
    content = unescape_brackets(content)
    content = close_void_tags(content)
    content = fix_figures_in_lists(content)
    content = fix_markdown_image_paths(content, config)
    return content
