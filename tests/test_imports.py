"""
Component import tests
"""

from starlight_migrator.imports import add_imports, detect_components


class TestImports:

    def test_detects_each_family(self):
        content = '<Aside type="note">\nx\n</Aside>\n<Tabs>\n<TabItem label="A">\ny\n</TabItem>\n</Tabs>'
        assert detect_components(content) == [('Aside',), ('Tabs', 'TabItem')]

    def test_card_without_grid(self):
        """A lone <Card> still pulls in the card family"""
        assert detect_components('<Card title="x" />') == [('Card', 'CardGrid')]

    def test_inserted_after_frontmatter(self):
        content = '---\ntitle: "T"\n---\n\n<Aside type="tip">\nx\n</Aside>'
        assert add_imports(content) == (
            '---\ntitle: "T"\n---\n\n'
            "import { Aside } from '@astrojs/starlight/components';\n\n"
            '<Aside type="tip">\nx\n</Aside>'
        )

    def test_one_line_per_family(self):
        content = '---\ntitle: "T"\n---\n<CardGrid>\n  <Card title="a" href="b" />\n</CardGrid>\n<Aside>\n</Aside>'
        result = add_imports(content)
        assert "import { Aside } from '@astrojs/starlight/components';" in result
        assert "import { Card, CardGrid } from '@astrojs/starlight/components';" in result
        assert result.count('import {') == 2

    def test_no_components_unchanged(self):
        content = '---\ntitle: "T"\n---\n\nPlain text.'
        assert add_imports(content) == content

    def test_without_frontmatter_prepended(self):
        result = add_imports('<Tabs>\n</Tabs>', source='custom/components')
        assert result == "import { Tabs, TabItem } from 'custom/components';\n\n<Tabs>\n</Tabs>"
