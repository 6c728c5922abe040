"""Renderer settings."""

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_CMS_URL = 'http://localhost:3000'
DEFAULT_MEDIA_PREFIX = '/_r2/'
DEFAULT_MAX_SCHEMA_DEPTH = 4


@dataclass
class Settings:
    """Configuration shared by the renderer, the media resolver and the CMS client."""
    cms_url: str = DEFAULT_CMS_URL
    cms_api_key: str = ''
    media_prefix: str = DEFAULT_MEDIA_PREFIX
    max_schema_depth: int = DEFAULT_MAX_SCHEMA_DEPTH

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> 'Settings':
        """Build settings from CMS_URL, CMS_API_KEY and the DOCFORGE_* variables."""
        env = os.environ if environ is None else environ

        depth = DEFAULT_MAX_SCHEMA_DEPTH
        raw_depth = (env.get('DOCFORGE_MAX_SCHEMA_DEPTH') or '').strip()
        if raw_depth:
            try:
                depth = int(raw_depth)
            except ValueError:
                depth = DEFAULT_MAX_SCHEMA_DEPTH

        return cls(
            cms_url=(env.get('CMS_URL') or '').strip() or DEFAULT_CMS_URL,
            cms_api_key=(env.get('CMS_API_KEY') or '').strip(),
            media_prefix=(env.get('DOCFORGE_MEDIA_PREFIX') or '').strip() or DEFAULT_MEDIA_PREFIX,
            max_schema_depth=depth,
        )
