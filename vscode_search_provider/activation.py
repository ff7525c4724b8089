"""Provider activation.

Creates and registers one search provider object for every known VSCode
variant that is installed. A variant that is not installed is skipped; most
users have only one of them.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional

from gi.repository import Gio
from xdg.BaseDirectory import xdg_config_home

from .errors import RegistrationError
from .providers import PROVIDERS, ProviderDefinition
from .search_provider import SearchProvider
from .source import VscodeWorkspacesSource

logger = logging.getLogger(__name__)

AppLookup = Callable[[str], Optional[Gio.AppInfo]]


@dataclass
class ActivatedProvider:
    """A provider whose application is installed and whose object is registered."""

    definition: ProviderDefinition
    app_id: str
    config_dir: Path
    search_provider: SearchProvider
    registration: Any = None


def find_installed_app(desktop_id: str) -> Optional[Gio.AppInfo]:
    """Look up an installed application by desktop file ID."""
    return Gio.DesktopAppInfo.new(desktop_id)


def user_config_home() -> Path:
    """The user's configuration root ($XDG_CONFIG_HOME or ~/.config)."""
    return Path(xdg_config_home)


def activate_providers(
    bus: Any,
    providers: Iterable[ProviderDefinition] = PROVIDERS,
    config_home: Optional[Path] = None,
    find_app: AppLookup = find_installed_app,
) -> List[ActivatedProvider]:
    """Register a search provider for every installed application.

    Args:
        bus: pydbus bus to register provider objects on
        providers: Provider definitions to activate
        config_home: User configuration root (defaults to XDG config home)
        find_app: Looks up an installed application by desktop ID

    Returns:
        Activated providers, in definition order

    Raises:
        RegistrationError: If registering any provider object fails
    """
    if config_home is None:
        config_home = user_config_home()

    activated = []
    for definition in providers:
        app = find_app(definition.desktop_id)
        if app is None:
            logger.debug(f"Skipping {definition.desktop_id}: application not installed")
            continue

        app_id = app.get_id()
        config_dir = config_home / definition.config_dirname
        source = VscodeWorkspacesSource(app_id=app_id, config_dir=config_dir)
        search_provider = SearchProvider(app, source)

        logger.info(f"Registering provider for {definition.desktop_id} at {definition.objpath}")
        try:
            registration = bus.register_object(definition.objpath, search_provider, None)
        except Exception as e:
            raise RegistrationError(definition.objpath, definition.desktop_id, str(e)) from e

        activated.append(ActivatedProvider(
            definition=definition,
            app_id=app_id,
            config_dir=config_dir,
            search_provider=search_provider,
            registration=registration,
        ))

    logger.info(f"Registered {len(activated)} provider(s)")
    return activated
