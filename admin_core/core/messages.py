# File: admin_core/core/messages.py
"""
Message catalog for human-readable service responses.

Bundles are JSON files under ``admin_core/i18n/<version>/<locale>.json``. The
catalog is built once at startup and handed to services; it never changes
afterwards.
"""

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from admin_core.core.exceptions import ConfigurationException

logger = logging.getLogger(__name__)

BUNDLE_ROOT = Path(__file__).resolve().parent.parent / "i18n"


class MessageCatalog:
    """Immutable lookup of message templates per locale."""

    def __init__(
        self,
        bundles: Mapping[str, Mapping[str, str]],
        default_locale: str = "en",
        version: str = "v1",
    ):
        if default_locale not in bundles:
            raise ConfigurationException(
                f"Default locale '{default_locale}' has no message bundle",
                details={"version": version, "available": sorted(bundles)},
            )
        self._bundles = MappingProxyType(
            {locale: MappingProxyType(dict(messages)) for locale, messages in bundles.items()}
        )
        self.default_locale = default_locale
        self.version = version

    @classmethod
    def load(
        cls,
        version: str = "v1",
        default_locale: str = "en",
        root: Optional[Path] = None,
    ) -> "MessageCatalog":
        """
        Load every locale bundle of a version.

        Args:
            version: Bundle version directory name
            default_locale: Locale used when a key is missing in the requested one
            root: Directory containing the version folders

        Returns:
            A frozen catalog

        Raises:
            ConfigurationException: If the version directory is missing
        """
        bundle_dir = (root or BUNDLE_ROOT) / version
        if not bundle_dir.is_dir():
            raise ConfigurationException(
                f"Message bundle version '{version}' not found",
                details={"path": str(bundle_dir)},
            )

        bundles: Dict[str, Dict[str, str]] = {}
        for path in sorted(bundle_dir.glob("*.json")):
            with open(path, "r", encoding="utf-8") as f:
                bundles[path.stem] = json.load(f)

        logger.info(
            f"Loaded message bundle {version} with locales: {', '.join(sorted(bundles))}"
        )
        return cls(bundles, default_locale=default_locale, version=version)

    @property
    def locales(self):
        return tuple(self._bundles)

    def get(self, key: str, locale: Optional[str] = None, **params: Any) -> str:
        """
        Resolve and format a message.

        Falls back to the default locale, then to the key itself.
        """
        template = None
        if locale and locale in self._bundles:
            template = self._bundles[locale].get(key)
        if template is None:
            template = self._bundles[self.default_locale].get(key)
        if template is None:
            logger.debug(f"Missing message key: {key}")
            return key

        try:
            return template.format(**params)
        except (KeyError, IndexError):
            logger.warning(f"Message '{key}' could not be formatted with {params}")
            return template
