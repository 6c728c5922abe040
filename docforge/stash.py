"""Placeholder stash that shields finished HTML from the markdown pass."""


class HtmlStash:
    """Ordered placeholder → HTML mapping for one render call.

    Placeholders are plain alphanumeric tokens so the markdown engine leaves
    them alone; a placeholder on its own line may come back wrapped in
    ``<p>...</p>``, so both forms are restored.
    """

    PREFIX = 'DOCFORGESTASH'
    SUFFIX = 'END'

    def __init__(self):
        self._blocks = {}

    def __len__(self):
        return len(self._blocks)

    def store(self, html: str) -> str:
        """Stash ``html`` and return its placeholder as a standalone block."""
        token = f'{self.PREFIX}{len(self._blocks)}{self.SUFFIX}'
        self._blocks[token] = html
        return f'\n\n{token}\n\n'

    def restore(self, text: str) -> str:
        """Replace every placeholder with its HTML.

        Blocks are restored newest first: an outer block is stashed after the
        blocks nested inside it, so restoring it first exposes the inner
        placeholders before they are processed.
        """
        for token, html in reversed(list(self._blocks.items())):
            text = text.replace(f'<p>{token}</p>', html)
            text = text.replace(token, html)
        return text

    def leftovers(self, text: str) -> list[str]:
        """Placeholders still present in ``text``."""
        return [token for token in self._blocks if token in text]
