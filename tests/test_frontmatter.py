from docforge.frontmatter import split_frontmatter, parse_frontmatter


class TestSplitFrontmatter:
    def test_no_frontmatter(self):
        assert split_frontmatter('# Hello') == ({}, '# Hello')

    def test_flat_keys_and_quotes(self):
        fm, body = split_frontmatter('---\ntitle: "Create a user"\nmethod: POST\n---\nBody text')
        assert fm == {'title': 'Create a user', 'method': 'POST'}
        assert body == 'Body text'

    def test_value_with_colon(self):
        fm, _ = split_frontmatter('---\nbase_url: https://api.example.com\n---\n')
        assert fm['base_url'] == 'https://api.example.com'

    def test_unterminated_block_is_left_alone(self):
        content = '---\ntitle: X\nno closing delimiter'
        assert split_frontmatter(content) == ({}, content)

    def test_none(self):
        assert split_frontmatter(None) == ({}, '')

    def test_crlf_line_endings(self):
        fm, body = split_frontmatter('---\r\ntitle: Windows\r\n---\r\nBody')
        assert fm == {'title': 'Windows'}
        assert body == 'Body'


class TestParseFrontmatter:
    def test_list_items(self):
        fm = parse_frontmatter('tags:\n  - users\n  - "admin"\ntitle: X')
        assert fm == {'tags': ['users', 'admin'], 'title': 'X'}

    def test_folded_strip(self):
        fm = parse_frontmatter('description: >-\n  Folded text\n  over lines.\ntitle: X')
        assert fm['description'] == 'Folded text over lines.'
        assert fm['title'] == 'X'

    def test_folded_keep_final_newline(self):
        fm = parse_frontmatter('description: >\n  Folded text\n  over lines.')
        assert fm['description'] == 'Folded text over lines.\n'

    def test_folded_paragraph_break(self):
        fm = parse_frontmatter('description: >-\n  First\n\n  Second')
        assert fm['description'] == 'First\nSecond'

    def test_literal(self):
        fm = parse_frontmatter('notes: |\n  Line one\n  Line two')
        assert fm['notes'] == 'Line one\nLine two\n'

    def test_literal_strip(self):
        fm = parse_frontmatter('notes: |-\n  Line one\n  Line two\n')
        assert fm['notes'] == 'Line one\nLine two'

    def test_irregular_lines_are_skipped(self):
        fm = parse_frontmatter('just some text\n: no key\ntitle: X\n# comment: here\nempty:')
        assert fm == {'title': 'X'}
