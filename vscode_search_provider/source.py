"""Recent workspaces as searchable items."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict

from .errors import ItemExtractionError
from .storage import Storage

logger = logging.getLogger(__name__)

ITEM_ID_NAMESPACE = "vscode-search-provider"


@dataclass(frozen=True)
class RecentItem:
    """A recent workspace of a VSCode variant.

    Attributes:
        id: Result identifier handed to GNOME Shell
        name: Human readable name, the last segment of the URL
        path: The workspace URL, passed to the app on activation
    """

    id: str
    name: str
    path: str


def item_id(app_id: str, url: str) -> str:
    """Stable result identifier for a workspace URL of the given app."""
    return f"{ITEM_ID_NAMESPACE}-{app_id}-{url}"


def workspace_name(url: str) -> str:
    """Extract the workspace name from its URL.

    Raises:
        ItemExtractionError: If the URL has no non-empty last segment
    """
    name = url.rsplit("/", 1)[-1]
    if not name:
        raise ItemExtractionError(url)
    return name


def recent_item(app_id: str, url: str) -> RecentItem:
    """Create the recent item for a workspace URL of the given app."""
    return RecentItem(id=item_id(app_id, url), name=workspace_name(url), path=url)


class ItemsSource(ABC):
    """A source of recent items for a search provider."""

    @abstractmethod
    def find_recent_items(self) -> Dict[str, RecentItem]:
        """Find all current items, keyed by item id.

        Raises:
            WorkspaceReadError: If the underlying history cannot be read
        """


class VscodeWorkspacesSource(ItemsSource):
    """Recent workspaces from the storage.json of a VSCode variant."""

    def __init__(self, app_id: str, config_dir: Path):
        self.app_id = app_id
        self.config_dir = config_dir

    def find_recent_items(self) -> Dict[str, RecentItem]:
        logger.info(f"Finding recent workspaces for {self.app_id}")
        urls = Storage.from_dir(self.config_dir).into_workspace_urls()

        items: Dict[str, RecentItem] = {}
        for url in urls:
            try:
                item = recent_item(self.app_id, url)
            except ItemExtractionError as e:
                logger.warning(f"Skipping workspace: {e}")
                continue
            items[item.id] = item

        logger.info(f"Found {len(items)} workspace(s) for {self.app_id}")
        return items

    def __repr__(self) -> str:
        return f"VscodeWorkspacesSource(app_id={self.app_id!r}, config_dir={str(self.config_dir)!r})"
