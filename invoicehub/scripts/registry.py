"""Provider key -> site script class registry.

Scripts are registered programmatically or discovered from installed
packages through the ``invoicehub.site_scripts`` entry-point group:

    [project.entry-points."invoicehub.site_scripts"]
    spotify = "invoicehub_spotify:SpotifyScript"
"""

import logging
from importlib.metadata import entry_points

from invoicehub.errors import UnsupportedProviderError
from invoicehub.scripts.base import SiteScript

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "invoicehub.site_scripts"


class ScriptRegistry:
    """Maps provider keys to SiteScript subclasses."""

    def __init__(self) -> None:
        self._scripts: dict[str, type[SiteScript]] = {}

    def register(self, provider: str, script_cls: type[SiteScript]) -> None:
        if not (isinstance(script_cls, type) and issubclass(script_cls, SiteScript)):
            raise TypeError(f"{script_cls!r} is not a SiteScript subclass")
        if provider in self._scripts:
            logger.warning("Replacing site script for provider %s", provider)
        self._scripts[provider] = script_cls

    def get(self, provider: str) -> type[SiteScript]:
        """Return the script class for a provider key.

        Raises:
            UnsupportedProviderError: If no script is registered.
        """
        try:
            return self._scripts[provider]
        except KeyError:
            raise UnsupportedProviderError(provider) from None

    def keys(self) -> list[str]:
        return sorted(self._scripts)

    def __contains__(self, provider: object) -> bool:
        return provider in self._scripts

    def load_entry_points(self, group: str = ENTRY_POINT_GROUP) -> int:
        """Register every script advertised under ``group``.

        Entry points that fail to load are logged and skipped.

        Returns:
            Number of scripts registered.
        """
        loaded = 0
        for ep in entry_points(group=group):
            try:
                script_cls = ep.load()
                self.register(ep.name, script_cls)
            except Exception:
                logger.exception("Failed to load site script %s", ep.name)
                continue
            loaded += 1
        logger.info("Loaded %d site script(s) from %s", loaded, group)
        return loaded
