"""VSCode workspace history reader.

VSCode keeps the list of recently opened folders and files in ``storage.json``
inside its configuration directory. Two shapes of that list exist:

- up to VSCode 1.54: ``openedPathsList.workspaces3``, a flat list of folder URLs
- from VSCode 1.55: ``openedPathsList.entries``, a list of objects carrying
  either ``folderUri`` or ``fileUri``

Both shapes are read and normalized into a single list of folder URLs.
"""

import logging
from pathlib import Path
from typing import BinaryIO, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import WorkspaceIOError, WorkspaceParseError

logger = logging.getLogger(__name__)

STORAGE_FILENAME = "storage.json"


class OpenedPathsEntry(BaseModel):
    """A single entry of the recently opened list (VSCode >= 1.55)."""

    model_config = ConfigDict(populate_by_name=True)

    folder_uri: Optional[str] = Field(default=None, alias="folderUri")
    file_uri: Optional[str] = Field(default=None, alias="fileUri")


class OpenedPathsList(BaseModel):
    """The recently opened list in either shape."""

    # Up to VSCode 1.54
    workspaces3: Optional[List[str]] = None
    # From VSCode 1.55
    entries: Optional[List[OpenedPathsEntry]] = None


class Storage(BaseModel):
    """The parts of VSCode's storage.json this service cares about."""

    model_config = ConfigDict(populate_by_name=True)

    opened_paths_list: Optional[OpenedPathsList] = Field(default=None, alias="openedPathsList")

    @classmethod
    def read(cls, stream: BinaryIO) -> "Storage":
        """Read a storage document from a binary stream.

        Raises:
            WorkspaceParseError: If the stream is not valid JSON or known keys
                have an unexpected type
        """
        try:
            return cls.model_validate_json(stream.read())
        except ValidationError as e:
            raise WorkspaceParseError(str(e)) from e

    @classmethod
    def from_dir(cls, config_dir: Union[str, Path]) -> "Storage":
        """Read the ``storage.json`` file in the given configuration directory.

        Raises:
            WorkspaceIOError: If the file cannot be opened
            WorkspaceParseError: If the file cannot be parsed
        """
        path = Path(config_dir) / STORAGE_FILENAME
        try:
            stream = open(path, "rb")
        except OSError as e:
            raise WorkspaceIOError(path, e.strerror or str(e)) from e

        with stream:
            try:
                return cls.read(stream)
            except WorkspaceParseError as e:
                raise WorkspaceParseError(e.context["reason"], path=path) from e

    def into_workspace_urls(self) -> List[str]:
        """Folder URLs of all recent workspaces.

        Folder entries of the current shape come first, in order, followed by
        the legacy ``workspaces3`` list. File-only entries are dropped and
        duplicates across both shapes are kept.
        """
        paths = self.opened_paths_list
        if paths is None:
            return []

        urls = [entry.folder_uri for entry in paths.entries or [] if entry.folder_uri is not None]
        urls.extend(paths.workspaces3 or [])
        return urls
