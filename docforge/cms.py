"""CMS access: media URL resolution and single-document fetches."""

from typing import Optional

import requests

from .config import Settings, DEFAULT_MEDIA_PREFIX


def resolve_media_url(url: Optional[str], cms_url: str, prefix: str = DEFAULT_MEDIA_PREFIX) -> str:
    """Resolve a reserved-prefix media path (e.g. /_r2/...) to an absolute CMS URL.

    The reserved paths are served by the CMS backend, not the static site.
    """
    if not url:
        return ''
    trimmed = url.strip()
    if not trimmed or trimmed.lower() in ('null', 'undefined'):
        return ''
    if trimmed.startswith(prefix):
        return f"{cms_url.rstrip('/')}{trimmed}"
    return trimmed


def create_session(api_key: str = '') -> requests.Session:
    """Create an HTTP session with the CMS API headers."""
    session = requests.Session()
    session.headers.update({
        'User-Agent': 'docforge-render',
        'Accept': 'application/json',
        'Content-Type': 'application/json',
    })
    if api_key:
        session.headers['Authorization'] = f'Bearer {api_key}'
        session.headers['x-api-key'] = api_key
    return session


class CMSClient:
    """Fetches individual documents from the CMS API."""

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.base_url = settings.cms_url.rstrip('/')
        self.session = session or create_session(settings.cms_api_key)

    def get_document(self, doc_id: str) -> Optional[dict]:
        """Fetch a single document by id."""
        data = self._get(f'/api/documents/{doc_id}')
        if isinstance(data, dict) and isinstance(data.get('document'), dict):
            return data['document']
        return None

    def get_document_by_path(self, path: str) -> Optional[dict]:
        """Fetch a single document by its content path (e.g. 'en/docs/intro.md')."""
        data = self._get('/api/documents', params={'path': path})
        if not isinstance(data, dict):
            return None
        if isinstance(data.get('document'), dict):
            return data['document']
        documents = data.get('documents')
        if isinstance(documents, list) and documents and isinstance(documents[0], dict):
            return documents[0]
        return None

    def _get(self, endpoint: str, params: Optional[dict] = None):
        url = f'{self.base_url}{endpoint}'
        try:
            resp = self.session.get(url, params=params, timeout=15)
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as e:
            print(f"    Warning: Failed to fetch {url}: {e}")
        except ValueError as e:
            print(f"    Warning: Invalid JSON from {url}: {e}")
        return None
