"""
Inline normalizer tests
"""

import pytest

from starlight_migrator.config import ConvertConfig
from starlight_migrator.normalize import (
    close_void_tags,
    convert_pre_code_blocks,
    decode_entities,
    escape_inline_code,
    fix_figures_in_lists,
    fix_malformed_bold,
    fix_markdown_image_paths,
    normalize_inline,
    unescape_brackets,
)


@pytest.fixture
def config():
    return ConvertConfig()


class TestEntitiesAndBrackets:

    def test_decode_entities(self):
        assert decode_entities('a&#x20;b &#x3C;T&#x3E; &#60;x&#62;') == 'a b <T> <x>'

    def test_unescape_brackets(self):
        assert unescape_brackets(r'\[optional\]') == '[optional]'

    def test_malformed_bold(self):
        """Bold closed after a space before a tag is repaired"""
        assert fix_malformed_bold('**is **<br>') == '**is** <br>'

    def test_escaped_backslash_before_bracket(self):
        """Only the bracket's own escape is removed"""
        assert unescape_brackets(r'C:\\[dir] \[x\] \\\[y\]') == r'C:\\[dir] [x] \\[y]'

    @pytest.mark.parametrize('func', [decode_entities, close_void_tags, unescape_brackets])
    @pytest.mark.parametrize('text', [
        r'&#x20;x <br> <hr> <img src="a.png"> \[a\] &#x3C;b&#x3E;',
        r'C:\\[dir] \\\[y\]',
    ])
    def test_idempotent(self, func, text):
        """Applying a normalizer twice equals applying it once"""
        once = func(text)
        assert func(once) == once


class TestCode:

    def test_pre_code_with_language(self):
        """Highlight tags are stripped and the language kept"""
        content = '<pre class="language-javascript"><code class="lang-javascript">const a = 1;\n<strong>call(a);\n</strong></code></pre>'
        assert convert_pre_code_blocks(content) == '```javascript\nconst a = 1;\ncall(a);\n```'

    def test_pre_code_without_language(self):
        assert convert_pre_code_blocks('<pre><code>plain\n</code></pre>') == '```\nplain\n```'

    def test_inline_code_escaped(self):
        """Type parameters inside <code> don't read as JSX"""
        assert escape_inline_code('<code>Array<Vector3></code>') == '<code>Array&lt;Vector3&gt;</code>'

    def test_inline_code_already_escaped(self):
        content = '<code>Array&lt;T&gt;</code>'
        assert escape_inline_code(content) == content

    def test_inline_code_comparison_kept(self):
        """Spaced comparison operators are not escaped"""
        assert escape_inline_code('<code>a < b</code>') == '<code>a < b</code>'


class TestTagsAndLayout:

    def test_void_tags(self):
        assert close_void_tags('<br><hr><img src="a.png">') == '<br /><hr /><img src="a.png" />'

    def test_self_closed_img_untouched(self):
        content = "<img src=\"a.png\" style={{ display: 'inline' }} />"
        assert close_void_tags(content) == content

    def test_figure_moved_out_of_list(self):
        content = '* Select the tool<br>\n\n    <figure>\n    <img src="a.png" />\n    </figure>'
        assert fix_figures_in_lists(content) == '* Select the tool\n\n<figure>\n<img src="a.png" />\n</figure>'

    def test_markdown_image_paths(self, config):
        content = '![Shot](<../.gitbook/assets/image (1).png>) ![Icon](../.gitbook/assets/icon.png)'
        assert fix_markdown_image_paths(content, config) == (
            '![Shot](/assets/gitbook/image (1).png) ![Icon](/assets/gitbook/icon.png)'
        )

    def test_other_images_untouched(self, config):
        content = '![Logo](https://example.com/logo.png)'
        assert fix_markdown_image_paths(content, config) == content

    def test_normalize_inline(self, config):
        content = 'Use&#x20;<code>List<T></code> \\[x\\]<br>'
        assert normalize_inline(content, config) == 'Use <code>List&lt;T&gt;</code> [x]<br />'
