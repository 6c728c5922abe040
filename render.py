#!/usr/bin/env python3
"""
Docs Markdown Renderer

Renders CMS-authored documentation Markdown (with callouts, tabs, cards and
API reference components) to HTML fragments ready for the docs site.

Supports three input modes:
  File mode:      python render.py ./docs/intro.md
  Directory mode: python render.py ./docs --output ./html
  CMS mode:       python render.py en/docs/intro.md --cms

CMS mode reads CMS_URL and CMS_API_KEY from the environment.
"""

import argparse
import json
import os
import sys
from typing import Optional

from docforge.cms import CMSClient
from docforge.config import Settings
from docforge.markdown_processor import MarkdownProcessor
from docforge.utils import extract_headings

MARKDOWN_EXTENSIONS = ('.md', '.mdx')


def _html_path(path: str) -> str:
    return os.path.splitext(path)[0] + '.html'


def write_page(html: str, output_path: str) -> None:
    """Write a rendered page, creating parent directories as needed."""
    parent = os.path.dirname(output_path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(html)


def write_toc(content: str, output_path: str) -> str:
    """Write <name>.toc.json next to the rendered page and return its path."""
    toc_path = os.path.splitext(output_path)[0] + '.toc.json'
    headings = [heading.to_dict() for heading in extract_headings(content)]
    with open(toc_path, 'w', encoding='utf-8') as f:
        json.dump(headings, f, indent=2)
    return toc_path


def render_page(processor: MarkdownProcessor, content: str, output_path: str, toc: bool) -> list:
    """Render one document to disk. Returns the QA issues it produced."""
    html = processor.process(content)
    write_page(html, output_path)
    if toc:
        write_toc(content, output_path)
    return list(processor.qa_issues)


def find_markdown_files(source_dir: str) -> list[str]:
    """Relative paths of every Markdown file under source_dir, sorted."""
    found = []
    for root, dirs, files in os.walk(source_dir):
        dirs[:] = sorted(d for d in dirs if not d.startswith('.'))
        for name in sorted(files):
            if name.lower().endswith(MARKDOWN_EXTENSIONS):
                found.append(os.path.relpath(os.path.join(root, name), source_dir))
    return found


def print_summary(pages_written: int, qa_issues: list) -> None:
    print()
    print(f"  Pages rendered:  {pages_written}")
    print(f"  QA issues found: {len(qa_issues)}")
    for page_path, issue in qa_issues:
        print(f"    - {page_path}: {issue}")
    print()


# ============================================================
#  FILE MODE
# ============================================================

def run_file(source: str, output: str, settings: Settings, toc: bool = False) -> str:
    output = output or _html_path(source)
    processor = MarkdownProcessor(settings)

    print(f"[1/1] {os.path.basename(source)}...", end='', flush=True)
    with open(source, 'r', encoding='utf-8') as f:
        content = f.read()
    issues = render_page(processor, content, output, toc)
    print(" ✓")

    print_summary(1, [(source, issue) for issue in issues])
    print(f"  Output: {os.path.abspath(output)}")
    return output


# ============================================================
#  DIRECTORY MODE
# ============================================================

def run_directory(source_dir: str, output_dir: str, settings: Settings, toc: bool = False) -> list[str]:
    output_dir = output_dir or './output'
    processor = MarkdownProcessor(settings)

    pages = find_markdown_files(source_dir)
    if not pages:
        print(f"  ✗ No Markdown files found in {source_dir}")
        return []

    written = []
    all_qa_issues = []
    for i, rel_path in enumerate(pages):
        progress = f"[{i + 1}/{len(pages)}]"
        print(f"{progress} {rel_path}...", end='', flush=True)

        try:
            with open(os.path.join(source_dir, rel_path), 'r', encoding='utf-8') as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            print(f" ✗ ({e})")
            continue

        output_path = os.path.join(output_dir, _html_path(rel_path))
        issues = render_page(processor, content, output_path, toc)
        all_qa_issues.extend((rel_path, issue) for issue in issues)
        written.append(output_path)
        print(" ✓")

    print_summary(len(written), all_qa_issues)
    print(f"  Output directory: {os.path.abspath(output_dir)}")
    return written


# ============================================================
#  CMS MODE
# ============================================================

def run_cms(doc_path: str, output: str, settings: Settings, toc: bool = False,
            client: Optional[CMSClient] = None) -> str:
    client = client or CMSClient(settings)
    output = output or _html_path(os.path.basename(doc_path))

    print(f"[1/2] Fetching {doc_path} from {settings.cms_url}...")
    document = client.get_document_by_path(doc_path)
    if not document:
        print(f"Error: could not fetch document '{doc_path}' from the CMS.")
        sys.exit(1)
    print(f"  ✓ {document.get('title') or doc_path}")

    print("[2/2] Rendering...", end='', flush=True)
    content = document.get('content') or ''
    issues = render_page(MarkdownProcessor(settings), content, output, toc)
    print(" ✓")

    print_summary(1, [(doc_path, issue) for issue in issues])
    print(f"  Output: {os.path.abspath(output)}")
    return output


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Render docs Markdown to HTML',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Input modes:
  File mode:      python render.py ./docs/intro.md
  Directory mode: python render.py ./docs
  CMS mode:       python render.py en/docs/intro.md --cms

Examples:
  python render.py ./docs/intro.md -o intro.html --toc
  python render.py ./docs --output ./html
        """,
    )
    parser.add_argument(
        'source',
        help='Markdown file, directory of Markdown files, or CMS document path (with --cms)',
    )
    parser.add_argument(
        '--output', '-o',
        default=None,
        help='Output file (file/CMS mode) or directory (directory mode, default: ./output)',
    )
    parser.add_argument(
        '--cms',
        action='store_true',
        help='Fetch SOURCE from the CMS (uses CMS_URL and CMS_API_KEY)',
    )
    parser.add_argument(
        '--toc',
        action='store_true',
        help='Also write the table of contents as <name>.toc.json',
    )

    args = parser.parse_args(argv)
    settings = Settings.from_env()

    if args.cms:
        run_cms(args.source, args.output, settings, toc=args.toc)
    elif os.path.isdir(args.source):
        run_directory(args.source, args.output, settings, toc=args.toc)
    elif os.path.isfile(args.source):
        run_file(args.source, args.output, settings, toc=args.toc)
    else:
        print(f"Error: '{args.source}' is not a file or directory.")
        print("  File mode: python render.py ./docs/intro.md")
        print("  Dir mode:  python render.py ./docs")
        sys.exit(1)


if __name__ == '__main__':
    main()
