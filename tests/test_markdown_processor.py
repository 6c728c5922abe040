from pathlib import Path

from bs4 import BeautifulSoup

from docforge.config import Settings
from docforge.icons import CARD_ICONS, DEFAULT_CARD_ICON
from docforge.markdown_processor import MarkdownProcessor

FIXTURES = Path(__file__).parent / "fixtures"


def _render(content, **kwargs):
    processor = MarkdownProcessor(**kwargs)
    return processor.process(content)


def _soup(html):
    return BeautifulSoup(html, 'lxml')


class TestProcessBasics:
    def test_empty_input(self):
        assert _render(None) == ''
        assert _render('') == ''

    def test_plain_markdown(self):
        html = _render('Hello **world**\n\n| a | b |\n|---|---|\n| 1 | 2 |\n\n~~gone~~')
        assert '<strong>world</strong>' in html
        assert '<table>' in html
        assert '<s>gone</s>' in html

    def test_heading_demotion_and_slug(self):
        html = _render('# Getting Started!\n\n### Next Steps')
        assert '<h2 id="getting-started">Getting Started!</h2>' in html
        assert '<h3 id="next-steps">Next Steps</h3>' in html
        assert '<h1' not in html

    def test_authoring_artifacts_are_stripped(self):
        html = _render('<!-- AUTO:PARAMS:START -->\nNo parameters.\n<!-- AUTO:PARAMS:END -->\n\nReal text')
        assert 'AUTO' not in html
        assert 'No parameters' not in html
        assert 'Real text' in html


class TestCallouts:
    def test_info_callout(self):
        html = _render(':::info\nHello **world**\n:::')
        soup = _soup(html)
        callout = soup.select_one('div.callout.callout-info')
        assert callout is not None
        assert callout.select_one('.callout-content strong').get_text() == 'world'
        assert ':::' not in html

    def test_all_variants(self):
        for callout_type in ('warning', 'danger', 'tip', 'success', 'note'):
            html = _render(f':::{callout_type}\nText\n:::')
            assert f'callout-{callout_type}' in html

    def test_unknown_variant_is_left_alone(self):
        html = _render(':::custom\nText\n:::')
        assert 'callout' not in html


class TestBlockComponents:
    def test_accordion(self):
        soup = _soup(_render('<Accordion title="Q&A <b>">\nSome *answer*\n</Accordion>'))
        accordion = soup.select_one('.doc-accordion')
        assert accordion.select_one('.doc-accordion-header span').get_text() == 'Q&A <b>'
        assert accordion.select_one('.doc-accordion-content em').get_text() == 'answer'

    def test_accordion_title_is_escaped(self):
        html = _render('<Accordion title="<script>">\nx\n</Accordion>')
        assert '<script>' not in html
        assert '&lt;script&gt;' in html

    def test_tabs(self):
        content = '<Tabs>\n<Tab title="Python">\n`pip install`\n</Tab>\n<Tab title="Node">\nnpm\n</Tab>\n</Tabs>'
        soup = _soup(_render(content))
        tabs = soup.select_one('.doc-tabs')
        assert tabs['id'] == 'tabs-1'
        buttons = tabs.select('.doc-tab-button')
        assert [b.get_text() for b in buttons] == ['Python', 'Node']
        assert 'active' in buttons[0]['class']
        assert 'active' not in buttons[1]['class']
        panels = tabs.select('.doc-tab-panel')
        assert panels[0].select_one('code').get_text() == 'pip install'

    def test_tab_ids_restart_per_document(self):
        processor = MarkdownProcessor()
        content = '<Tabs>\n<Tab title="A">\na\n</Tab>\n</Tabs>\n\n<Tabs>\n<Tab title="B">\nb\n</Tab>\n</Tabs>'
        first = processor.process(content)
        second = processor.process(content)
        assert first == second
        assert 'id="tabs-1"' in first and 'id="tabs-2"' in first

    def test_tabs_without_tab_keep_content(self):
        html = _render('<Tabs>\nJust text\n</Tabs>')
        assert 'Just text' in html
        assert 'Tabs>' not in html

    def test_steps(self):
        content = '<Steps>\n<Step title="Install">\nRun it\n</Step>\n<Step title="Configure">\nEdit it\n</Step>\n</Steps>'
        soup = _soup(_render(content))
        steps = soup.select('.doc-steps .doc-step')
        assert [s.select_one('.doc-step-number').get_text() for s in steps] == ['1', '2']
        assert [s.select_one('.doc-step-title').get_text() for s in steps] == ['Install', 'Configure']

    def test_card_with_href_defaults_icon_and_uses_anchor(self):
        html = _render('<Card title="X" href="/y">body</Card>')
        soup = _soup(html)
        card = soup.select_one('a.doc-card')
        assert card['href'] == '/y'
        assert card.select_one('.doc-card-title').get_text() == 'X'
        assert soup.select('div.doc-card') == []
        assert CARD_ICONS[DEFAULT_CARD_ICON] in html
        assert 'doc-card-arrow' in html

    def test_card_without_href_is_a_div(self):
        html = _render('<Card icon="rocket" title="Launch">Go</Card>')
        soup = _soup(html)
        assert soup.select_one('div.doc-card') is not None
        assert soup.select_one('a.doc-card') is None
        assert CARD_ICONS['rocket'] in html

    def test_unknown_card_icon_falls_back(self):
        html = _render('<Card title="X" icon="nonexistent">b</Card>')
        assert CARD_ICONS[DEFAULT_CARD_ICON] in html

    def test_card_group(self):
        content = '<CardGroup cols={3}>\n<Card title="A">a</Card>\n<Card title="B">b</Card>\n</CardGroup>'
        soup = _soup(_render(content))
        group = soup.select_one('.doc-card-group')
        assert 'cols-3' in group['class']
        assert len(group.select('.doc-card')) == 2

    def test_card_group_defaults_to_two_columns(self):
        soup = _soup(_render('<CardGroup>\n<Card title="A">a</Card>\n</CardGroup>'))
        assert 'cols-2' in soup.select_one('.doc-card-group')['class']

    def test_api_endpoint(self):
        soup = _soup(_render('<APIEndpoint method="get" path="/users/{id}">\nFetch a **user**\n</APIEndpoint>'))
        endpoint = soup.select_one('.doc-api-endpoint')
        method = endpoint.select_one('.doc-api-method')
        assert method.get_text() == 'GET'
        assert 'method-get' in method['class']
        assert endpoint.select_one('.doc-api-path').get_text() == '/users/{id}'
        assert endpoint.select_one('.doc-api-content strong').get_text() == 'user'

    def test_parameter_table(self):
        soup = _soup(_render('<ParameterTable>\n| Name | Type |\n|---|---|\n| id | string |\n</ParameterTable>'))
        assert soup.select_one('.doc-parameter-table table') is not None

    def test_child_grid(self):
        soup = _soup(_render('<ChildGrid filters={false} path="/guides" columns={3} />'))
        grid = soup.select_one('div[data-child-grid]')
        assert grid['data-path'] == '/guides'
        assert grid['data-columns'] == '3'
        assert grid['data-filters'] == 'false'

    def test_child_grid_without_attributes(self):
        soup = _soup(_render('<ChildGrid />'))
        grid = soup.select_one('div[data-child-grid]')
        assert grid is not None
        assert not grid.has_attr('data-path')

    def test_browser_mockup_is_stashed(self):
        html = _render('<BrowserMockup url="https://app.example.com?a=1&b=2" theme="dark">\n**Dashboard**\n</BrowserMockup>')
        soup = _soup(html)
        mockup = soup.select_one('.doc-browser-mockup')
        assert 'theme-dark' in mockup['class']
        assert mockup.select_one('.doc-browser-url').get_text() == 'https://app.example.com?a=1&b=2'
        assert mockup.select_one('.doc-browser-content strong').get_text() == 'Dashboard'
        assert '<br' not in html

    def test_titled_code_block(self):
        html = _render('```python title="app.py"\nprint("<hi>")\n```')
        soup = _soup(html)
        block = soup.select_one('.doc-code-block')
        assert block.select_one('.doc-code-filename').get_text() == 'app.py'
        code = block.select_one('pre code.language-python')
        assert code.get_text() == 'print("<hi>")'
        assert '&lt;hi&gt;' in html

    def test_plain_code_block_is_left_to_the_engine(self):
        html = _render('```python\nx = 1\n```')
        assert 'language-python' in html
        assert 'doc-code-block' not in html

    def test_component_syntax_inside_code_block_stays_literal(self):
        content = (
            'Example:\n\n```mdx\n:::info\nHeads up\n:::\n\n<Tabs>\n<Tab title="A">a</Tab>\n</Tabs>\n```\n\n'
            '~~~\n<ApiParams parameters={[{"name": "id"}]} />\n~~~\n'
        )
        processor = MarkdownProcessor()
        html = processor.process(content)
        soup = _soup(html)
        assert 'callout-info' not in html
        assert 'doc-tabs' not in html
        assert 'doc-api-params' not in html
        codes = soup.select('pre code')
        assert 'language-mdx' in codes[0]['class']
        assert ':::info' in codes[0].get_text()
        assert '<Tab title="A">' in codes[0].get_text()
        assert '<ApiParams' in codes[1].get_text()
        assert processor.qa_issues == []


class TestNesting:
    def test_callout_inside_accordion(self):
        soup = _soup(_render('<Accordion title="More">\n:::tip\nNested **tip**\n:::\n</Accordion>'))
        tip = soup.select_one('.doc-accordion .doc-accordion-content .callout-tip')
        assert tip.select_one('strong').get_text() == 'tip'

    def test_tabs_inside_accordion(self):
        content = '<Accordion title="Install">\n<Tabs>\n<Tab title="Mac">\nbrew\n</Tab>\n</Tabs>\n</Accordion>'
        soup = _soup(_render(content))
        assert soup.select_one('.doc-accordion .doc-tabs .doc-tab-button').get_text() == 'Mac'

    def test_no_placeholders_survive(self):
        content = (
            ':::note\nTop\n:::\n\n'
            '<Steps>\n<Step title="One">\n<Card title="C" href="/c">card</Card>\n</Step>\n</Steps>\n\n'
            '<CardGroup cols={2}>\n<Card title="A">a</Card>\n</CardGroup>\n\n'
            '```js title="x.js"\nconst a = 1;\n```\n'
        )
        processor = MarkdownProcessor()
        html = processor.process(content)
        assert 'DOCFORGESTASH' not in html
        assert processor.qa_issues == []


class TestMediaUrls:
    def test_markdown_image_and_img_tag(self):
        settings = Settings(cms_url='https://cms.example.com/')
        html = _render(
            '![Diagram](/_r2/img/a.png)\n\n<img src="/_r2/img/b.png" alt="b">\n\n![Other](https://cdn.example.com/c.png)',
            settings=settings,
        )
        assert 'src="https://cms.example.com/_r2/img/a.png"' in html
        assert 'src="https://cms.example.com/_r2/img/b.png"' in html
        assert 'src="https://cdn.example.com/c.png"' in html

    def test_media_inside_component(self):
        settings = Settings(cms_url='https://cms.example.com')
        html = _render(':::info\n![x](/_r2/a.png)\n:::', settings=settings)
        assert 'https://cms.example.com/_r2/a.png' in html

    def test_custom_resolver(self):
        html = _render('![x](/_r2/a.png)', media_resolver=lambda url: 'https://media.test' + url)
        assert 'src="https://media.test/_r2/a.png"' in html


class TestApiPages:
    def test_api_response_scenario(self):
        html = _render('<ApiResponse responses={{"200":{"description":"OK"}}} />')
        soup = _soup(html)
        items = soup.select('.doc-api-response')
        assert len(items) == 1
        badge = items[0].select_one('.doc-api-status-badge')
        assert badge.get_text() == '200'
        assert 'status-2xx' in badge['class']
        assert soup.select_one('.doc-schema-block') is None

    def test_api_header_from_frontmatter(self):
        content = '---\ntitle: Create\nmethod: post\npath: /users/{id}\nbase_url: https://api.example.com/\n---\n\nBody'
        html = _render(content)
        assert html.startswith('<div class="doc-api-endpoint-header">')
        soup = _soup(html)
        method = soup.select_one('.doc-api-endpoint-header .doc-api-method')
        assert method.get_text() == 'POST'
        assert 'method-post' in method['class']
        assert soup.select_one('.doc-api-base-url').get_text() == 'https://api.example.com'
        assert soup.select_one('.doc-api-copy')['data-copy-text'] == 'https://api.example.com/users/{id}'
        assert 'title:' not in html

    def test_no_header_without_path(self):
        html = _render('---\nmethod: GET\n---\nBody')
        assert 'doc-api-endpoint-header' not in html
        assert '<p>Body</p>' in html

    def test_malformed_payload_is_reported(self):
        processor = MarkdownProcessor()
        html = processor.process('Intro\n\n<ApiParams parameters={[{"name": }]} />\n\nOutro')
        assert 'Could not parse parameters (invalid JSON)' in html
        assert 'Outro' in html
        assert len(processor.qa_issues) == 1

        processor.process('Fine')
        assert processor.qa_issues == []

    def test_unexpected_field_types_do_not_break_the_page(self):
        processor = MarkdownProcessor()
        html = processor.process(
            'Intro\n\n<ApiParams parameters={[{"name": "id", "in": ["path"]}]} />\n\n'
            '<ApiRequest requestBody={{"content": {"application/json": {"schema": '
            '{"type": "object", "required": [{"x": 1}], "properties": {"a": {"type": "string"}}}}}}} />\n\nOutro'
        )
        soup = _soup(html)
        assert soup.select_one('.doc-api-request-body .doc-schema-property-name').get_text() == 'a'
        assert 'Outro' in html
        assert processor.qa_issues == []

    def test_request_ids_are_unique_across_endpoints(self):
        content = ''.join(
            f'<APIEndpoint method="get" path="/{name}">\n'
            f'<ApiParams parameters={{[{{"name": "{name}"}}]}} />\n'
            f'</APIEndpoint>\n\n'
            for name in ('users', 'teams')
        )
        soup = _soup(_render(content))
        ids = [h['id'] for h in soup.select('.doc-api-request h2')]
        assert ids == ['request-1', 'request-2']

    def test_full_endpoint_document(self):
        processor = MarkdownProcessor()
        html = processor.process((FIXTURES / "endpoint.md").read_text())
        soup = _soup(html)

        assert 'DOCFORGESTASH' not in html
        assert processor.qa_issues == []
        assert '<Api' not in html
        assert 'No responses defined' not in html

        assert soup.select_one('.doc-api-endpoint-header .doc-api-path').get_text() == '/users/{org_id}'
        assert soup.select_one('h2#create-a-user') is not None

        request = soup.select_one('.doc-api-request')
        assert request.select_one('h2#request-1') is not None
        assert len(request.select('.doc-api-security-card')) == 2
        assert request.select_one('.doc-api-params-path .doc-badge-required') is not None
        body = request.select_one('.doc-api-request-body')
        names = [n.get_text() for n in body.select('.doc-schema-property-name')]
        assert names == ['email', 'roles']
        assert 'Login e-mail {unique}' in body.get_text()

        badges = [b.get_text() for b in soup.select('.doc-api-responses .doc-api-status-badge')]
        assert badges == ['201', '404']
        assert soup.select_one('.doc-api-responses .doc-api-header-name').get_text() == 'Location'
        assert html.index('id="request-1"') < html.index('doc-api-responses')
