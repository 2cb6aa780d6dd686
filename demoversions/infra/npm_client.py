"""
npm registry client infrastructure for demoversions.

Reads the dist-tags (``latest``, ``next``, ...) a package currently
publishes. Public API, no authentication needed.
"""

import logging
from typing import Dict
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)

# npm public registry base URL
NPM_REGISTRY_URL = "https://registry.npmjs.org"


class NpmRegistryClient:
    """
    Client for the npm registry dist-tag endpoint.

    Example:
        client = NpmRegistryClient()
        client.dist_tags("polen")   # {"latest": "1.2.0", "next": "1.3.0-beta.2"}
    """

    def __init__(self, registry_url: str = NPM_REGISTRY_URL, timeout: int = 10):
        """
        Initialize NpmRegistryClient.

        Args:
            registry_url: Registry base URL
            timeout: HTTP request timeout in seconds
        """
        self.registry_url = registry_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            'Accept': 'application/json',
        })

    def dist_tags_url(self, package: str) -> str:
        # Scoped names keep their "@" but the slash must be encoded.
        return f"{self.registry_url}/-/package/{quote(package, safe='@')}/dist-tags"

    def dist_tags(self, package: str) -> Dict[str, str]:
        """
        Fetch the dist-tag mapping for a package.

        Args:
            package: npm package name, e.g. "polen" or "@scope/name"

        Returns:
            Mapping of dist-tag name to version; empty on any failure
        """
        try:
            response = self.session.get(self.dist_tags_url(package), timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.warning(f"npm registry request failed for {package}: {e}")
            return {}
        except ValueError as e:
            logger.warning(f"npm registry returned invalid JSON for {package}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"npm registry returned unexpected payload for {package}")
            return {}

        return {str(name): str(version) for name, version in data.items() if isinstance(version, str)}
