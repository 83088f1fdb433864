"""Static configuration for the GitBook → Starlight conversion."""

import json
import posixpath
from dataclasses import dataclass, field, fields


# GitBook hint styles → Starlight Aside types
HINT_MAP = {
    'success': 'tip',
    'info': 'note',
    'warning': 'caution',
    'danger': 'danger',
}

# GitBook tab anchors that have no heading of their own in the converted page
ANCHOR_MAP = {
    '#green-dot': '#project-tips',
    '#order-of-workspaces': '#workspace-tips',
    '#workspace-id': '#workspace-tips',
    '#project-movement': '#project-tips',
    '#project-selection': '#project-tips',
}


@dataclass
class ConvertConfig:
    """Tables and templates the converter reads but never mutates."""
    index_filename: str = 'README.md'
    landing_filename: str = 'index.mdx'
    output_extension: str = '.mdx'
    anchor_map: dict = field(default_factory=lambda: dict(ANCHOR_MAP))
    hint_map: dict = field(default_factory=lambda: dict(HINT_MAP))
    default_callout: str = 'note'
    legacy_assets_dir: str = '.gitbook/assets/'
    site_base: str = ''
    image_path_template: str = '{base}/assets/gitbook/{name}'
    file_path_template: str = '~/assets/gitbook/{name}'
    component_source: str = '@astrojs/starlight/components'

    @property
    def index_stem(self) -> str:
        return posixpath.splitext(self.index_filename)[0].lower()

    def is_index(self, filename: str) -> bool:
        """True if ``filename`` (a basename, with or without .md) is the index file."""
        name = filename.lower()
        return name == self.index_filename.lower() or name == self.index_stem

    def remap_anchor(self, anchor: str) -> str:
        """Map a legacy anchor to its replacement; unknown anchors pass through."""
        if not anchor:
            return ''
        lowered = {k.lower(): v for k, v in self.anchor_map.items()}
        return lowered.get(anchor.lower(), anchor)

    def is_legacy_asset(self, src: str) -> bool:
        return self.legacy_assets_dir in src

    def image_url(self, src: str) -> str:
        """Rewrite a legacy asset reference to its published image URL."""
        if not self.is_legacy_asset(src):
            return src
        name = posixpath.basename(src)
        return self.image_path_template.format(base=self.site_base.rstrip('/'), name=name)

    def download_url(self, src: str) -> str:
        """Rewrite a legacy asset reference to its download link target."""
        if not self.is_legacy_asset(src):
            return src
        name = posixpath.basename(src)
        return self.file_path_template.format(base=self.site_base.rstrip('/'), name=name)


def config_from_dict(data: dict) -> ConvertConfig:
    """Build a ConvertConfig from a mapping, rejecting unknown keys."""
    if not isinstance(data, dict):
        raise ValueError('Configuration must be a JSON object')

    known = {f.name for f in fields(ConvertConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")

    for key in ('anchor_map', 'hint_map'):
        if key in data and not isinstance(data[key], dict):
            raise ValueError(f'"{key}" must be an object')

    # Templates may only use {base} and {name}
    for key in ('image_path_template', 'file_path_template'):
        if key not in data:
            continue
        if not isinstance(data[key], str):
            raise ValueError(f'"{key}" must be a string')
        try:
            data[key].format(base='', name='x')
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(f'"{key}" is not a valid path template: {e!r}') from e

    return ConvertConfig(**data)


def load_config(path: str) -> ConvertConfig:
    """Load conversion settings from a JSON file."""
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    return config_from_dict(data)


def write_config(config: ConvertConfig, output_path: str):
    """Write the effective configuration to disk."""
    data = {f.name: getattr(config, f.name) for f in fields(ConvertConfig)}
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)
    print(f"  Generated {output_path}")
