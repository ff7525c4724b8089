"""GNOME Shell search provider D-Bus object for recent items.

Implements org.gnome.Shell.SearchProvider2 on top of an ItemsSource. The
source is queried fresh on every call, so result identifiers must be stable
across calls for GetResultMetas and ActivateResult to find the items again.
"""

import functools
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from gi.repository import GLib, Gio

from .errors import DispatchError
from .source import ItemsSource, RecentItem

logger = logging.getLogger(__name__)

SEARCH_PROVIDER_INTERFACE = "org.gnome.Shell.SearchProvider2"

# Score contribution of a single term found in the item name or path
NAME_MATCH_SCORE = 10
PATH_MATCH_SCORE = 1


def score_item(item: RecentItem, terms: Sequence[str]) -> int:
    """Score how well an item matches all search terms.

    Every term must occur in the name or the path, case-insensitively;
    otherwise the item does not match and scores 0. Terms found in the name
    weigh more than terms found in the path.
    """
    name = item.name.lower()
    path = item.path.lower()
    score = 0
    for term in (t.lower() for t in terms):
        in_name = term in name
        in_path = term in path
        if not in_name and not in_path:
            return 0
        if in_name:
            score += NAME_MATCH_SCORE
        if in_path:
            score += PATH_MATCH_SCORE
    return score


def find_matching_items(items: Iterable[RecentItem], terms: Sequence[str]) -> List[str]:
    """Ids of all items matching the terms, best match first."""
    scored = [(score_item(item, terms), item) for item in items]
    matches = [(score, item) for score, item in scored if score > 0]
    matches.sort(key=lambda pair: (-pair[0], pair[1].name))
    return [item.id for _, item in matches]


def describe_path(url: str) -> str:
    """Human readable location of a workspace URL.

    Local file URLs become paths with the home directory abbreviated to ``~``;
    other URLs are shown as they are.
    """
    local_path = Gio.File.new_for_uri(url).get_path() if url.startswith("file://") else None
    if local_path is None:
        return url

    home = str(Path.home())
    if local_path == home or local_path.startswith(home + "/"):
        return "~" + local_path[len(home):]
    return local_path


def handles_dispatch_errors(method: Callable) -> Callable:
    """Turn any failure of a D-Bus method into a logged DispatchError.

    pydbus replies to the caller with the error and the object stays
    registered for the next call.
    """

    @functools.wraps(method)
    def wrapper(self: "SearchProvider", *args: Any) -> Any:
        try:
            return method(self, *args)
        except DispatchError:
            raise
        except Exception as e:
            logger.error(f"{method.__name__} failed for {self.app_id}: {e}")
            raise DispatchError(method.__name__, self.app_id, str(e)) from e

    return wrapper


class SearchProvider:
    """Search provider exposing the recent items of one application."""

    dbus = """
    <node>
      <interface name="org.gnome.Shell.SearchProvider2">
        <method name="GetInitialResultSet">
          <arg type="as" name="terms" direction="in" />
          <arg type="as" name="results" direction="out" />
        </method>
        <method name="GetSubsearchResultSet">
          <arg type="as" name="previous_results" direction="in" />
          <arg type="as" name="terms" direction="in" />
          <arg type="as" name="results" direction="out" />
        </method>
        <method name="GetResultMetas">
          <arg type="as" name="identifiers" direction="in" />
          <arg type="aa{sv}" name="metas" direction="out" />
        </method>
        <method name="ActivateResult">
          <arg type="s" name="identifier" direction="in" />
          <arg type="as" name="terms" direction="in" />
          <arg type="u" name="timestamp" direction="in" />
        </method>
        <method name="LaunchSearch">
          <arg type="as" name="terms" direction="in" />
          <arg type="u" name="timestamp" direction="in" />
        </method>
      </interface>
    </node>
    """

    def __init__(self, app: Gio.AppInfo, source: ItemsSource):
        """Initialize search provider.

        Args:
            app: The application to launch recent items with
            source: Source of recent items, queried on every call
        """
        self.app = app
        self.source = source

    @property
    def app_id(self) -> str:
        return self.app.get_id()

    def _icon_string(self) -> Optional[str]:
        icon = self.app.get_icon()
        return icon.to_string() if icon is not None else None

    @handles_dispatch_errors
    def GetInitialResultSet(self, terms: List[str]) -> List[str]:
        logger.debug(f"Searching {self.app_id} for {terms}")
        items = self.source.find_recent_items()
        results = find_matching_items(items.values(), terms)
        logger.debug(f"Found {len(results)} result(s) for {terms} in {self.app_id}")
        return results

    @handles_dispatch_errors
    def GetSubsearchResultSet(self, previous_results: List[str], terms: List[str]) -> List[str]:
        logger.debug(f"Refining {len(previous_results)} result(s) of {self.app_id} with {terms}")
        items = self.source.find_recent_items()
        candidates = [items[item_id] for item_id in previous_results if item_id in items]
        return find_matching_items(candidates, terms)

    @handles_dispatch_errors
    def GetResultMetas(self, identifiers: List[str]) -> List[Dict[str, GLib.Variant]]:
        items = self.source.find_recent_items()
        icon = self._icon_string()
        metas = []
        for identifier in identifiers:
            item = items.get(identifier)
            if item is None:
                logger.debug(f"No item with id {identifier} for {self.app_id}")
                continue
            meta = {
                "id": GLib.Variant("s", item.id),
                "name": GLib.Variant("s", item.name),
                "description": GLib.Variant("s", describe_path(item.path)),
            }
            if icon is not None:
                meta["gicon"] = GLib.Variant("s", icon)
            metas.append(meta)
        return metas

    @handles_dispatch_errors
    def ActivateResult(self, identifier: str, terms: List[str], timestamp: int) -> None:
        item = self.source.find_recent_items().get(identifier)
        if item is None:
            logger.warning(f"Cannot activate unknown item {identifier} of {self.app_id}")
            return
        logger.info(f"Launching {self.app_id} with {item.path}")
        self.app.launch_uris([item.path], None)

    @handles_dispatch_errors
    def LaunchSearch(self, terms: List[str], timestamp: int) -> None:
        logger.info(f"Launching {self.app_id} for search {terms}")
        self.app.launch_uris([], None)
