"""Convert GitBook frontmatter to Starlight frontmatter.

GitBook preambles are read line by line with a three-state scanner instead of
a YAML parser. Only top-level scalar keys are kept; nested blocks such as
``layout:`` are consumed and dropped.
"""

import posixpath
import re
from dataclasses import dataclass, field
from typing import Optional

from .utils import escape_yaml, strip_md


FRONTMATTER_RE = re.compile(r'^---\n(.*?)\n---', re.DOTALL)
KEY_RE = re.compile(r'^(\w+):\s*(.*)$')
NESTED_KEY_RE = re.compile(r'^\s{2,}\w+:')
H1_RE = re.compile(r'^#\s+(.+)$', re.MULTILINE)

SEEKING = 'seeking-key'
SCALAR = 'accumulating-scalar'
NESTED = 'in-nested-block'

# Block scalar indicators → joiner for continuation lines
BLOCK_INDICATORS = {
    '>-': ' ',
    '>': ' ',
    '|': '\n',
    '|-': '\n',
}


@dataclass
class ScanState:
    """Where the scanner is, plus the key being collected."""
    mode: str = SEEKING
    key: Optional[str] = None
    buffer: list = field(default_factory=list)
    joiner: str = ' '


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in '"\'':
        return value[1:-1]
    return value


def _flush(state: ScanState, values: dict):
    if state.key is None or state.mode == NESTED:
        return
    if state.joiner == ' ':
        value = ' '.join(part for part in state.buffer if part)
    else:
        value = '\n'.join(state.buffer)
    values[state.key] = value.strip()


def _start_key(key: str, value: str, next_line: str) -> ScanState:
    if value in BLOCK_INDICATORS:
        return ScanState(SCALAR, key, [], BLOCK_INDICATORS[value])
    if not value and NESTED_KEY_RE.match(next_line):
        return ScanState(NESTED, key)
    return ScanState(SCALAR, key, [_unquote(value)] if value else [], ' ')


def _continuation(line: str, joiner: str) -> str:
    if joiner == ' ':
        return line.strip()
    # Literal blocks keep any indentation beyond the first level
    return line[2:].rstrip() if line.startswith('  ') else line.strip()


def parse_frontmatter(text: str) -> dict:
    """Parse GitBook frontmatter into a dict of top-level scalar values."""
    values = {}
    state = ScanState()
    lines = text.split('\n')

    for i, line in enumerate(lines):
        key_match = KEY_RE.match(line)
        if key_match:
            _flush(state, values)
            next_line = lines[i + 1] if i + 1 < len(lines) else ''
            state = _start_key(key_match.group(1), key_match.group(2).strip(), next_line)
        elif state.mode == SCALAR and (line.startswith('  ') or not line.strip()):
            if NESTED_KEY_RE.match(line):
                state = ScanState(NESTED, state.key)
            else:
                state.buffer.append(_continuation(line, state.joiner))

    _flush(state, values)
    return values


def extract_h1(content: str) -> str:
    """Extract the first H1 heading from content."""
    match = H1_RE.search(content)
    return match.group(1).strip() if match else ''


def build_frontmatter(values: dict, body: str, page_path: str) -> str:
    """Generate Starlight frontmatter from parsed GitBook values."""
    title = _unquote(values.get('title', '').strip())
    if not title:
        title = extract_h1(body) or strip_md(posixpath.basename(page_path))

    lines = ['---', f'title: "{escape_yaml(title)}"']
    description = values.get('description', '')
    if description:
        lines.append("description: '{}'".format(description.replace("'", "''")))
    if values.get('hidden') == 'true':
        lines.append('draft: true')
    if values.get('icon'):
        lines.append(f"# icon: {values['icon']}")
    lines.append('---')
    return '\n'.join(lines)


def transform_frontmatter(content: str, page_path: str) -> tuple[str, dict]:
    """Replace the GitBook preamble with a Starlight one.

    Returns the new text and the parsed source values. A document without a
    preamble gets one with a derived title.
    """
    match = FRONTMATTER_RE.match(content)
    if not match:
        return build_frontmatter({}, content, page_path) + '\n\n' + content, {}

    values = parse_frontmatter(match.group(1))
    body = content[match.end():]
    return build_frontmatter(values, body, page_path) + body, values
