"""
Frontmatter conversion tests

The scanner's three states (seeking a key, collecting a scalar, skipping a
nested block) and the Starlight preamble built from the result.
"""

from starlight_migrator.frontmatter import (
    build_frontmatter,
    extract_h1,
    parse_frontmatter,
    transform_frontmatter,
)


class TestParse:
    """Reading GitBook preambles"""

    def test_plain_scalars(self):
        assert parse_frontmatter('title: Hello\nhidden: true') == {'title': 'Hello', 'hidden': 'true'}

    def test_quoted_scalar(self):
        assert parse_frontmatter('title: "Hello: world"') == {'title': 'Hello: world'}

    def test_folded_block(self):
        """>- joins continuation lines with spaces"""
        text = 'description: >-\n  Learn how to\n  import models\nicon: cube'
        assert parse_frontmatter(text) == {'description': 'Learn how to import models', 'icon': 'cube'}

    def test_literal_block(self):
        """| joins continuation lines with newlines"""
        text = 'description: |\n  Line one\n  Line two'
        assert parse_frontmatter(text) == {'description': 'Line one\nLine two'}

    def test_nested_block_dropped(self):
        """Nested objects and their keys never surface"""
        text = (
            'title: Intro\n'
            'layout:\n'
            '  title:\n'
            '    visible: false\n'
            '  outline:\n'
            '    visible: true\n'
            'description: After the block'
        )
        assert parse_frontmatter(text) == {'title': 'Intro', 'description': 'After the block'}

    def test_nested_block_at_end(self):
        """A trailing nested block is dropped on flush"""
        assert parse_frontmatter('title: A\ncover:\n  url: x.png') == {'title': 'A'}

    def test_nested_key_inside_scalar_drops_key(self):
        """An indented key while collecting a scalar switches to skipping"""
        text = 'description: >-\n  text\n  nested: value\ntitle: T'
        assert parse_frontmatter(text) == {'title': 'T'}

    def test_empty_value_without_nested_block(self):
        assert parse_frontmatter('icon:\ntitle: T') == {'icon': '', 'title': 'T'}


class TestBuild:
    """Writing Starlight preambles"""

    def test_only_known_keys(self):
        result = build_frontmatter({'title': 'Intro', 'description': 'Desc', 'layout': 'x'}, '', 'a.md')
        assert result == "---\ntitle: \"Intro\"\ndescription: 'Desc'\n---"

    def test_description_single_quotes_doubled(self):
        result = build_frontmatter({'title': 'T', 'description': "Vectary's editor"}, '', 'a.md')
        assert "description: 'Vectary''s editor'" in result

    def test_hidden_becomes_draft(self):
        assert 'draft: true' in build_frontmatter({'title': 'T', 'hidden': 'true'}, '', 'a.md')
        assert 'draft' not in build_frontmatter({'title': 'T', 'hidden': 'yes'}, '', 'a.md')

    def test_icon_commented_out(self):
        assert '# icon: cube' in build_frontmatter({'title': 'T', 'icon': 'cube'}, '', 'a.md')

    def test_title_from_heading(self):
        result = build_frontmatter({}, '\n# Getting Started\n\nText', 'guide/start.md')
        assert 'title: "Getting Started"' in result

    def test_title_from_filename(self):
        assert 'title: "light-sources"' in build_frontmatter({}, 'No heading', 'a/light-sources.md')

    def test_title_quotes_escaped(self):
        assert 'title: "Say \\"hi\\""' in build_frontmatter({'title': 'Say "hi"'}, '', 'a.md')

    def test_extract_h1(self):
        assert extract_h1('## Sub\n# Main\n') == 'Main'
        assert extract_h1('no heading') == ''


class TestTransform:
    """Whole-document preamble replacement"""

    def test_round_trip_drops_nested_keys(self):
        content = (
            '---\n'
            'title: Design mode\n'
            'description: >-\n'
            '  All about\n'
            '  design mode\n'
            'layout:\n'
            '  width: wide\n'
            '---\n'
            '\n'
            '# Design mode\n'
        )
        result, values = transform_frontmatter(content, 'design/README.md')
        assert result == (
            '---\n'
            'title: "Design mode"\n'
            "description: 'All about design mode'\n"
            '---\n'
            '\n'
            '# Design mode\n'
        )
        assert 'layout' not in values
        assert 'width' not in result

    def test_missing_frontmatter_added(self):
        result, values = transform_frontmatter('# Welcome\n\nHi', 'intro.md')
        assert result == '---\ntitle: "Welcome"\n---\n\n# Welcome\n\nHi'
        assert values == {}
