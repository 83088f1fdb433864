#!/usr/bin/env python3
"""
GitBook to Starlight Migration Tool

Converts a local GitBook repository into Starlight MDX content: template
tags become Starlight components, internal links are rewritten for
Starlight's folder-style routing, and .gitbook/assets is copied for static
serving.

  python migrate.py ../gitbook-docs
  python migrate.py ../gitbook-docs --output ./src/content/docs --watch
"""

import argparse
import logging
import os
import shutil
import sys
from dataclasses import dataclass, field

from starlight_migrator.config import ConvertConfig, load_config, write_config
from starlight_migrator.markdown_converter import MarkdownConverter
from starlight_migrator.utils import ensure_dir, output_relpath, to_posix
from starlight_migrator.watch import run_watch_mode


DEFAULT_EXCLUDE_DIRS = ['.git', 'node_modules']
EXCLUDE_FILES = ['SUMMARY.md']


@dataclass
class MigrationResult:
    """What one pass over the source tree produced."""
    pages_written: list = field(default_factory=list)
    failed_pages: list = field(default_factory=list)  # (source path, reason)
    qa_issues: list = field(default_factory=list)  # (output path, issue)
    hidden_pages: list = field(default_factory=list)
    asset_count: int = 0


def copy_assets(source_dir: str, output_dir: str) -> int:
    """Copy GitBook assets flat into ``output_dir``; returns the file count."""
    if not os.path.isdir(source_dir):
        print("  ⚠ No .gitbook/assets directory found")
        return 0

    os.makedirs(output_dir, exist_ok=True)
    count = 0
    for fname in sorted(os.listdir(source_dir)):
        src = os.path.join(source_dir, fname)
        if not os.path.isfile(src):
            continue
        try:
            shutil.copy2(src, os.path.join(output_dir, fname))
            count += 1
        except OSError as e:
            print(f"  ⚠ Failed to copy {fname}: {e}")
    return count


def find_markdown_files(source_dir: str, config: ConvertConfig, exclude_dirs: list,
                        keep_root_readme: bool = False, skip_files: list = None) -> list[str]:
    """List source-relative .md paths to convert, in a stable order.

    ``skip_files`` holds paths the run writes itself (the QA report), which
    may sit inside the source tree.
    """
    skip_files = {os.path.abspath(p) for p in skip_files or []}
    pages = []
    for root, dirs, files in os.walk(source_dir):
        dirs[:] = sorted(d for d in dirs if d not in exclude_dirs and d != '.gitbook')
        rel_dir = os.path.relpath(root, source_dir)
        rel_dir = '' if rel_dir == '.' else to_posix(rel_dir)

        for fname in sorted(files):
            if not fname.endswith('.md') or fname in EXCLUDE_FILES:
                continue
            if os.path.abspath(os.path.join(root, fname)) in skip_files:
                continue
            # The Starlight site provides its own home page
            if not rel_dir and config.is_index(fname) and not keep_root_readme:
                continue
            pages.append(f'{rel_dir}/{fname}' if rel_dir else fname)
    return pages


def run_directory_migration(source_dir: str, output_dir: str, assets_output: str,
                            config: ConvertConfig, exclude_dirs: list = None,
                            keep_root_readme: bool = False, skip_files: list = None) -> MigrationResult:
    """Convert every page of a local GitBook repo."""
    exclude_dirs = DEFAULT_EXCLUDE_DIRS if exclude_dirs is None else exclude_dirs
    source_dir = os.path.abspath(source_dir)
    result = MigrationResult()

    print()
    print("[1/3] Copying assets...")
    result.asset_count = copy_assets(os.path.join(source_dir, '.gitbook', 'assets'), assets_output)
    if result.asset_count:
        print(f"  ✓ Copied {result.asset_count} assets to {assets_output}")

    print()
    pages = find_markdown_files(source_dir, config, exclude_dirs, keep_root_readme, skip_files)
    print(f"[2/3] Converting {len(pages)} pages...")
    converter = MarkdownConverter(config)

    for i, page_path in enumerate(pages):
        progress = f"  [{i+1}/{len(pages)}]"
        print(f"{progress} {page_path}...", end='', flush=True)

        try:
            with open(os.path.join(source_dir, page_path), 'r', encoding='utf-8') as f:
                md_content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            print(f" ✗ ({e})")
            result.failed_pages.append((page_path, str(e)))
            continue

        mdx = converter.convert(md_content, page_path)
        out_path = output_relpath(page_path, config)

        result.qa_issues.extend((out_path, issue) for issue in converter.qa_issues)
        if converter.page_hidden:
            result.hidden_pages.append(out_path)

        output_file = os.path.join(output_dir, out_path)
        try:
            ensure_dir(output_file)
            with open(output_file, 'w', encoding='utf-8') as f:
                f.write(mdx)
        except OSError as e:
            print(f" ✗ ({e})")
            result.failed_pages.append((page_path, str(e)))
            continue

        result.pages_written.append(out_path)
        print(" ✓")

    print(f"\n  ✓ Converted {len(result.pages_written)}/{len(pages)} pages")
    if result.failed_pages:
        print(f"  ⚠ Failed: {len(result.failed_pages)} pages")
    if result.hidden_pages:
        print(f"  ✓ Hidden pages (marked draft): {len(result.hidden_pages)}")

    return result


def generate_qa_report(result: MigrationResult, source: str) -> str:
    """Generate a QA report for the migration."""
    lines = [
        "# Migration QA Report",
        "",
        f"**Source:** {source}",
        f"**Pages migrated:** {len(result.pages_written)}",
        f"**Pages failed:** {len(result.failed_pages)}",
        f"**Assets copied:** {result.asset_count}",
        f"**Issues flagged:** {len(result.qa_issues)}",
        "",
    ]

    if result.failed_pages:
        lines.extend(["## Failed Pages (need manual migration)", ""])
        for page_path, reason in result.failed_pages:
            lines.append(f"- [ ] `{page_path}` — {reason}")
        lines.append("")

    if result.qa_issues:
        lines.extend(["## Content Issues", ""])
        for page_path, issue in result.qa_issues:
            lines.append(f"- [ ] `{page_path}`: {issue}")
        lines.append("")

    if result.hidden_pages:
        lines.extend(["## Draft Pages (hidden in GitBook)", ""])
        for page_path in sorted(result.hidden_pages):
            lines.append(f"- `{page_path}`")
        lines.append("")

    lines.extend([
        "## General QA Checklist",
        "",
        "- [ ] Run `astro dev` — does the site build without errors?",
        "- [ ] All internal links resolve correctly",
        "- [ ] All images render (no broken images)",
        "- [ ] Asides, tabs and card grids render with correct styling",
        "- [ ] No raw HTML or unconverted GitBook template tags visible",
        "",
        "## Pages Migrated",
        "",
    ])
    for path in sorted(result.pages_written):
        lines.append(f"- [x] `{path}`")

    lines.append("")
    return '\n'.join(lines)


def migrate(args, config: ConvertConfig) -> MigrationResult:
    """One full conversion pass, including the QA report."""
    result = run_directory_migration(
        args.source, args.output, args.assets_output, config,
        exclude_dirs=DEFAULT_EXCLUDE_DIRS + args.exclude_dir,
        keep_root_readme=args.keep_root_readme,
        skip_files=[args.qa_report],
    )

    print()
    print("[3/3] Writing QA report...")
    ensure_dir(args.qa_report)
    with open(args.qa_report, 'w', encoding='utf-8') as f:
        f.write(generate_qa_report(result, os.path.abspath(args.source)))
    print(f"  ✓ Generated {args.qa_report}")
    return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Migrate a GitBook repository to Starlight MDX',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python migrate.py ../gitbook-docs
  python migrate.py ../gitbook-docs --base /my-docs --assets-output ./public/assets/gitbook
  python migrate.py ../gitbook-docs --config migrate.json --watch
        """,
    )
    parser.add_argument('source', help='Local GitBook repository directory')
    parser.add_argument(
        '--output', '-o',
        default='./src/content/docs',
        help='Output directory for MDX pages (default: ./src/content/docs)',
    )
    parser.add_argument(
        '--assets-output',
        default='./public/assets/gitbook',
        help='Where .gitbook/assets is copied (default: ./public/assets/gitbook)',
    )
    parser.add_argument(
        '--base',
        default=None,
        help='Site base path prefixed to image URLs (e.g. /my-docs)',
    )
    parser.add_argument(
        '--config',
        default=None,
        help='JSON file overriding conversion settings (anchor map, templates, ...)',
    )
    parser.add_argument(
        '--write-config',
        default=None,
        metavar='FILE',
        help='Write the effective conversion settings to FILE and exit',
    )
    parser.add_argument(
        '--exclude-dir',
        action='append',
        default=[],
        help='Directory name to skip (repeatable)',
    )
    parser.add_argument(
        '--keep-root-readme',
        action='store_true',
        help='Also convert the root README.md (skipped by default)',
    )
    parser.add_argument(
        '--qa-report',
        default='QA-REPORT.md',
        help='Where to write the QA report (default: QA-REPORT.md)',
    )
    parser.add_argument(
        '--watch',
        action='store_true',
        help='Keep running and reconvert when source files change',
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config) if args.config else ConvertConfig()
    except (OSError, ValueError) as e:
        # json.JSONDecodeError is a ValueError
        print(f"Error: could not load config {args.config}: {e}")
        sys.exit(1)
    if args.base is not None:
        config.site_base = args.base

    if args.write_config:
        write_config(config, args.write_config)
        return

    if not os.path.isdir(args.source):
        print(f"  ✗ Source directory not found: {args.source}")
        sys.exit(1)

    print()
    print("=" * 60)
    print("  GitBook → Starlight Migration Tool")
    print("=" * 60)
    print(f"\n  Source: {os.path.abspath(args.source)}")
    print(f"  Output: {os.path.abspath(args.output)}")

    result = migrate(args, config)

    print()
    print("=" * 60)
    print("  Migration Complete!")
    print("=" * 60)
    print()
    print(f"  Pages converted:  {len(result.pages_written)}")
    print(f"  Assets copied:    {result.asset_count}")
    print(f"  QA issues found:  {len(result.qa_issues)}")
    print()

    if args.watch:
        logging.basicConfig(level=logging.INFO, format='  %(message)s')
        run_watch_mode(args.source, lambda: migrate(args, config), ignore_paths=[args.qa_report])


if __name__ == '__main__':
    main()
