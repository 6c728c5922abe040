"""Convert CMS-authored Markdown with custom components to HTML.

The CMS editor writes standard Markdown plus a small component syntax
(callouts, accordions, tabs, steps, cards, API reference tags). Custom blocks
are rendered first and stashed behind placeholders, then the remaining text
goes through the generic markdown engine, and finally the placeholders are
swapped back for the finished HTML.
"""

import re
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Optional

from .cms import resolve_media_url
from .config import Settings
from .engine import create_markdown_engine
from .frontmatter import split_frontmatter
from .icons import get_callout_icon, get_card_icon, CHEVRON_ICON, ARROW_ICON, COPY_ICON
from .scanner import process_api_components
from .stash import HtmlStash
from .utils import escape_html, parse_attributes, IdGenerator

CALLOUT_TYPES = ('info', 'warning', 'danger', 'tip', 'success', 'note')

# Placeholder lines left behind by the upstream API page generator
EMPTY_SECTION_LINES = (
    'No parameters',
    'No request body',
    'No responses',
    'No responses defined',
    'No security requirements',
    'No authentication required',
    'No headers',
)

_AUTO_MARKER_PATTERN = re.compile(r'<!--\s*AUTO:[^>]*?:(?:START|END)\s*-->[ \t]*\n?')
_EMPTY_SECTION_PATTERN = re.compile(
    r'^[ \t]*[_*]*(?:' + '|'.join(re.escape(line) for line in EMPTY_SECTION_LINES) + r')\.?[_*]*[ \t]*(?:\n|$)',
    re.MULTILINE,
)

# Fences at the left margin; indented ones belong to list items
_FENCED_CODE_PATTERN = re.compile(r'^(`{3,}|~{3,})[^\n]*\n.*?^\1[ \t]*$', re.MULTILINE | re.DOTALL)


@dataclass
class RenderState:
    """Per-document state: element ids, stashed blocks and collected issues."""
    ids: IdGenerator = field(default_factory=IdGenerator)
    stash: HtmlStash = field(default_factory=HtmlStash)
    issues: list = field(default_factory=list)


class MarkdownProcessor:
    """Renders one document's content string to an HTML string."""

    def __init__(self, settings: Optional[Settings] = None,
                 media_resolver: Optional[Callable[[str], str]] = None):
        """
        Args:
            settings: Renderer settings (CMS URL, media prefix, schema depth)
            media_resolver: Maps a reserved media path to an absolute URL
        """
        self.settings = settings or Settings()
        self.media_resolver = media_resolver or partial(
            resolve_media_url,
            cms_url=self.settings.cms_url,
            prefix=self.settings.media_prefix,
        )
        self.qa_issues = []
        self._md = create_markdown_engine()

    def process(self, content: Optional[str]) -> str:
        """Convert a document (optionally with frontmatter) to HTML."""
        self.qa_issues = []
        if not content:
            return ''

        state = RenderState()

        frontmatter, body = split_frontmatter(content)
        header = self._build_api_header(frontmatter)

        html = self._render(body, state)
        html = state.stash.restore(html)

        for token in state.stash.leftovers(html):
            state.issues.append(f'Unrestored placeholder: {token}')
        self.qa_issues = state.issues

        return header + html

    def render_fragment(self, content: str, state: RenderState) -> str:
        """Render an inner content region through the full pipeline.

        The result may still hold placeholders; they are restored with the
        rest of the document.
        """
        return self._render(content.strip(), state)

    def _render(self, text: str, state: RenderState) -> str:
        text = self._strip_authoring_artifacts(text)

        # Code is literal; component syntax inside a fence stays as written
        text = self._convert_titled_code_blocks(text, state)
        text = self._protect_fenced_code(text, state)

        # Block components; inner content is rendered before stashing
        text = self._convert_callouts(text, state)
        text = self._convert_accordions(text, state)
        text = self._convert_tabs(text, state)
        text = self._convert_steps(text, state)
        text = self._convert_card_groups(text, state)
        text = self._convert_cards(text, state)
        text = self._convert_api_endpoints(text, state)
        text = self._convert_parameter_tables(text, state)

        # API reference tags carry JSON payloads
        text = process_api_components(
            text, state.stash, state.ids, state.issues,
            max_depth=self.settings.max_schema_depth,
        )

        text = self._convert_child_grids(text, state)
        text = self._convert_browser_mockups(text, state)

        # Media paths must be absolute before the engine emits <img>
        text = self._rewrite_media_urls(text)

        return self._md.render(text)

    # ---- Frontmatter ----

    def _build_api_header(self, frontmatter: dict) -> str:
        """Endpoint header for API pages whose frontmatter names method and path."""
        method = frontmatter.get('method')
        path = frontmatter.get('path')
        if not isinstance(method, str) or not isinstance(path, str) or not method or not path:
            return ''

        base_url = frontmatter.get('base_url')
        base_url = base_url.rstrip('/') if isinstance(base_url, str) else ''
        method_class = re.sub(r'[^a-z]', '', method.lower())

        base_html = f'<span class="doc-api-base-url">{escape_html(base_url)}</span>' if base_url else ''
        return (
            f'<div class="doc-api-endpoint-header">'
            f'<span class="doc-api-method method-{method_class}">{escape_html(method.upper())}</span>'
            f'<code class="doc-api-url">{base_html}<span class="doc-api-path">{escape_html(path)}</span></code>'
            f'<button class="doc-api-copy" data-copy-text="{escape_html(base_url + path)}">{COPY_ICON}</button>'
            f'</div>\n'
        )

    def _strip_authoring_artifacts(self, content: str) -> str:
        """Remove AUTO:...:START/END markers and empty-section placeholder lines."""
        content = _AUTO_MARKER_PATTERN.sub('', content)
        content = _EMPTY_SECTION_PATTERN.sub('', content)
        return content

    # ---- Custom block components ----

    def _convert_callouts(self, content: str, state: RenderState) -> str:
        """Convert :::info ... ::: fences to callout cards."""
        def replace_callout(match):
            callout_type = match.group(1)
            inner = self.render_fragment(match.group(2), state)
            html = (
                f'<div class="callout callout-{callout_type}">'
                f'<div class="callout-icon">{get_callout_icon(callout_type)}</div>'
                f'<div class="callout-content">{inner}</div>'
                f'</div>'
            )
            return state.stash.store(html)

        pattern = r':::(' + '|'.join(CALLOUT_TYPES) + r')[ \t]*\n(.*?):::'
        return re.sub(pattern, replace_callout, content, flags=re.DOTALL)

    def _convert_accordions(self, content: str, state: RenderState) -> str:
        """Convert <Accordion title="..."> to a collapsible section."""
        def replace_accordion(match):
            title = match.group(1)
            inner = self.render_fragment(match.group(2), state)
            html = (
                f'<div class="doc-accordion" data-accordion>'
                f'<button class="doc-accordion-header" data-accordion-trigger>'
                f'<span>{escape_html(title)}</span>{CHEVRON_ICON}'
                f'</button>'
                f'<div class="doc-accordion-content" data-accordion-content>{inner}</div>'
                f'</div>'
            )
            return state.stash.store(html)

        pattern = r'<Accordion\s+title="([^"]*)"\s*>(.*?)</Accordion>'
        return re.sub(pattern, replace_accordion, content, flags=re.DOTALL)

    def _convert_tabs(self, content: str, state: RenderState) -> str:
        """Convert <Tabs>/<Tab title="..."> to a tab strip; the first tab is active."""
        def replace_tabs(match):
            tabs_content = match.group(1)

            tab_pattern = r'<Tab\s+title="([^"]*)"\s*>(.*?)</Tab>'
            tabs = re.findall(tab_pattern, tabs_content, flags=re.DOTALL)
            if not tabs:
                return tabs_content

            tab_id = state.ids.next('tabs')
            buttons = []
            panels = []
            for i, (title, body) in enumerate(tabs):
                active = ' active' if i == 0 else ''
                buttons.append(
                    f'<button class="doc-tab-button{active}" data-tab-trigger data-tab-index="{i}">'
                    f'{escape_html(title)}</button>'
                )
                panels.append(
                    f'<div class="doc-tab-panel{active}" data-tab-panel data-tab-index="{i}">'
                    f'{self.render_fragment(body, state)}</div>'
                )

            html = (
                f'<div class="doc-tabs" data-tabs id="{tab_id}">'
                f'<div class="doc-tabs-header">{"".join(buttons)}</div>'
                f'<div class="doc-tabs-content">{"".join(panels)}</div>'
                f'</div>'
            )
            return state.stash.store(html)

        pattern = r'<Tabs\s*>(.*?)</Tabs>'
        return re.sub(pattern, replace_tabs, content, flags=re.DOTALL)

    def _convert_steps(self, content: str, state: RenderState) -> str:
        """Convert <Steps>/<Step title="..."> to a numbered step list."""
        def replace_steps(match):
            steps_content = match.group(1)

            step_pattern = r'<Step\s+title="([^"]*)"\s*>(.*?)</Step>'
            steps = re.findall(step_pattern, steps_content, flags=re.DOTALL)
            if not steps:
                return steps_content

            parts = []
            for i, (title, body) in enumerate(steps):
                parts.append(
                    f'<div class="doc-step">'
                    f'<div class="doc-step-number">{i + 1}</div>'
                    f'<div class="doc-step-content">'
                    f'<div class="doc-step-title">{escape_html(title)}</div>'
                    f'<div class="doc-step-body">{self.render_fragment(body, state)}</div>'
                    f'</div>'
                    f'</div>'
                )
            return state.stash.store(f'<div class="doc-steps">{"".join(parts)}</div>')

        pattern = r'<Steps\s*>(.*?)</Steps>'
        return re.sub(pattern, replace_steps, content, flags=re.DOTALL)

    def _convert_card_groups(self, content: str, state: RenderState) -> str:
        """Convert <CardGroup cols={n}> to a card grid (2 columns by default)."""
        def replace_group(match):
            attrs = parse_attributes(match.group(1))
            cols = attrs.get('cols', '')
            cols = cols if cols.isdigit() else '2'
            inner = self.render_fragment(match.group(2), state)
            return state.stash.store(f'<div class="doc-card-group cols-{cols}">{inner}</div>')

        pattern = r'<CardGroup\b([^>]*)>(.*?)</CardGroup>'
        return re.sub(pattern, replace_group, content, flags=re.DOTALL)

    def _convert_cards(self, content: str, state: RenderState) -> str:
        """Convert <Card title="..." icon="..." href="..."> to a card; href makes it a link."""
        def replace_card(match):
            attrs = parse_attributes(match.group(1))
            title = attrs.get('title', '')
            href = attrs.get('href', '')
            icon_svg = get_card_icon(attrs.get('icon', ''))
            inner = self.render_fragment(match.group(2), state)

            if href:
                open_tag = f'<a class="doc-card" href="{escape_html(href)}">'
                close_tag = '</a>'
                arrow = ARROW_ICON
            else:
                open_tag = '<div class="doc-card">'
                close_tag = '</div>'
                arrow = ''

            html = (
                f'{open_tag}'
                f'<div class="doc-card-icon">{icon_svg}</div>'
                f'<div class="doc-card-body">'
                f'<div class="doc-card-title">{escape_html(title)}</div>'
                f'<div class="doc-card-description">{inner}</div>'
                f'</div>'
                f'{arrow}'
                f'{close_tag}'
            )
            return state.stash.store(html)

        pattern = r'<Card\b([^>]*)>(.*?)</Card>'
        return re.sub(pattern, replace_card, content, flags=re.DOTALL)

    def _convert_api_endpoints(self, content: str, state: RenderState) -> str:
        """Convert <APIEndpoint method=".." path=".."> to an endpoint block."""
        def replace_endpoint(match):
            attrs = parse_attributes(match.group(1))
            method = attrs.get('method', '')
            path = attrs.get('path', '')
            method_class = re.sub(r'[^a-z]', '', method.lower())
            inner = self.render_fragment(match.group(2), state)
            html = (
                f'<div class="doc-api-endpoint">'
                f'<div class="doc-api-header">'
                f'<span class="doc-api-method method-{method_class}">{escape_html(method.upper())}</span>'
                f'<code class="doc-api-path">{escape_html(path)}</code>'
                f'</div>'
                f'<div class="doc-api-content">{inner}</div>'
                f'</div>'
            )
            return state.stash.store(html)

        pattern = r'<APIEndpoint\b([^>]*)>(.*?)</APIEndpoint>'
        return re.sub(pattern, replace_endpoint, content, flags=re.DOTALL)

    def _convert_parameter_tables(self, content: str, state: RenderState) -> str:
        """Wrap <ParameterTable> content (usually a markdown table)."""
        def replace_table(match):
            inner = self.render_fragment(match.group(1), state)
            return state.stash.store(f'<div class="doc-parameter-table">{inner}</div>')

        pattern = r'<ParameterTable\s*>(.*?)</ParameterTable>'
        return re.sub(pattern, replace_table, content, flags=re.DOTALL)

    def _convert_child_grids(self, content: str, state: RenderState) -> str:
        """Convert <ChildGrid .../> to a marker div rendered client-side."""
        def replace_grid(match):
            attrs = parse_attributes(match.group(1))
            data = ['data-child-grid="true"']
            if attrs.get('path'):
                data.append(f'data-path="{escape_html(attrs["path"])}"')
            if attrs.get('columns', '').isdigit():
                data.append(f'data-columns="{attrs["columns"]}"')
            if attrs.get('filters') in ('true', 'false'):
                data.append(f'data-filters="{attrs["filters"]}"')
            return state.stash.store(f'<div {" ".join(data)}></div>')

        pattern = r'<ChildGrid\b([^>]*?)/?>'
        return re.sub(pattern, replace_grid, content)

    def _convert_browser_mockups(self, content: str, state: RenderState) -> str:
        """Convert <BrowserMockup url=".." theme=".."> to a browser-window frame."""
        def replace_mockup(match):
            attrs = parse_attributes(match.group(1))
            url = attrs.get('url', '')
            theme = re.sub(r'[^a-z-]', '', attrs.get('theme', 'light').lower()) or 'light'
            inner = self.render_fragment(match.group(2), state)
            html = (
                f'<div class="doc-browser-mockup theme-{theme}">'
                f'<div class="doc-browser-toolbar">'
                f'<span class="doc-browser-dots"><span></span><span></span><span></span></span>'
                f'<div class="doc-browser-url">{escape_html(url)}</div>'
                f'</div>'
                f'<div class="doc-browser-content">{inner}</div>'
                f'</div>'
            )
            return state.stash.store(html)

        pattern = r'<BrowserMockup\b([^>]*)>(.*?)</BrowserMockup>'
        return re.sub(pattern, replace_mockup, content, flags=re.DOTALL)

    def _convert_titled_code_blocks(self, content: str, state: RenderState) -> str:
        """Convert ```lang title="file" fences to a code block with a filename header."""
        def replace_code(match):
            language = match.group(1)
            filename = match.group(2)
            code = match.group(3).strip('\n')
            lang_class = f' class="language-{escape_html(language)}"' if language else ''
            html = (
                f'<div class="doc-code-block">'
                f'<div class="doc-code-header">'
                f'<span class="doc-code-filename">{escape_html(filename)}</span>'
                f'<button class="doc-code-copy" data-copy-code>{COPY_ICON}<span>Copy</span></button>'
                f'</div>'
                f'<pre><code{lang_class}>{escape_html(code)}</code></pre>'
                f'</div>'
            )
            return state.stash.store(html)

        pattern = r'```([\w+#.-]*)[ \t]+title="([^"]+)"[^\n]*\n(.*?)```'
        return re.sub(pattern, replace_code, content, flags=re.DOTALL)

    def _protect_fenced_code(self, content: str, state: RenderState) -> str:
        """Render plain fenced code blocks up front and stash them."""
        def replace_fence(match):
            return state.stash.store(self._md.render(match.group(0)))

        return _FENCED_CODE_PATTERN.sub(replace_fence, content)

    def _rewrite_media_urls(self, content: str) -> str:
        """Resolve reserved media paths in markdown images and <img src>."""
        prefix = re.escape(self.settings.media_prefix)

        def replace_url(match):
            return f'{match.group(1)}{self.media_resolver(match.group(2))}{match.group(3)}'

        content = re.sub(r'(!\[[^\]]*\]\()(' + prefix + r'[^)\s]+)([^)]*\))', replace_url, content)
        content = re.sub(r'''(<img\s[^>]*src=["'])(''' + prefix + r'''[^"']+)(["'])''', replace_url, content)
        return content
