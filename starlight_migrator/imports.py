"""Add Starlight component imports to converted MDX."""

# Component family → (exports, opening tags that signal it is used)
COMPONENT_FAMILIES = [
    (('Aside',), ('<Aside',)),
    (('Tabs', 'TabItem'), ('<Tabs', '<TabItem')),
    (('Card', 'CardGrid'), ('<CardGrid', '<Card ')),
]


def detect_components(content: str) -> list[tuple[str, ...]]:
    """Return the export lists of every component family used in ``content``."""
    return [
        exports for exports, tags in COMPONENT_FAMILIES
        if any(tag in content for tag in tags)
    ]


def add_imports(content: str, source: str = '@astrojs/starlight/components') -> str:
    """Insert import declarations after the frontmatter (or at the top)."""
    families = detect_components(content)
    if not families:
        return content

    imports = '\n'.join(
        f"import {{ {', '.join(exports)} }} from '{source}';" for exports in families
    )

    if content.startswith('---'):
        fence_end = content.find('\n---', 3)
        if fence_end != -1:
            split_at = fence_end + len('\n---')
            return content[:split_at] + '\n\n' + imports + content[split_at:]

    return imports + '\n\n' + content
