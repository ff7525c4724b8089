"""
Unit tests for the VSCode storage.json reader.

Tests cover:
- Legacy (VSCode <= 1.54) and current (VSCode >= 1.55) document shapes
- Ordering of URLs across both shapes
- Missing history sections
- IO and parse failures with path context
"""

import io
import json

import pytest

from vscode_search_provider.errors import WorkspaceIOError, WorkspaceParseError, WorkspaceReadError
from vscode_search_provider.storage import Storage

EXPECTED_URLS = [
    "file:///home/foo//mdcat",
    "file:///home/foo//gnome-jetbrains-search-provider",
    "file:///home/foo//gnome-shell",
    "file:///home/foo//sbctl",
]


def read_document(document) -> Storage:
    return Storage.read(io.BytesIO(json.dumps(document).encode()))


class TestStorageRead:
    """Test reading storage documents from streams."""

    def test_read_recent_workspaces_code_1_54(self, fixtures_dir):
        """Test the legacy workspaces3 list."""
        with open(fixtures_dir / "code_1_54_storage.json", "rb") as f:
            storage = Storage.read(f)

        assert storage.opened_paths_list is not None, "opened paths list missing"
        assert storage.opened_paths_list.workspaces3 is not None, "workspaces3 missing"
        assert storage.into_workspace_urls() == EXPECTED_URLS

    def test_read_recent_workspaces_code_1_55(self, fixtures_dir):
        """Test the entries list; the file entry is dropped."""
        with open(fixtures_dir / "code_1_55_storage.json", "rb") as f:
            storage = Storage.read(f)

        assert storage.opened_paths_list is not None, "opened paths list missing"
        assert storage.opened_paths_list.entries is not None, "entries missing"
        assert storage.into_workspace_urls() == EXPECTED_URLS

    def test_invalid_json_is_a_parse_error(self):
        """Test that a malformed document fails as a whole."""
        with pytest.raises(WorkspaceParseError):
            Storage.read(io.BytesIO(b'{"openedPathsList": {'))

    def test_wrong_type_is_a_parse_error(self):
        """Test that known keys with a wrong type are rejected."""
        with pytest.raises(WorkspaceParseError):
            read_document({"openedPathsList": {"workspaces3": "file:///home/foo/x"}})

    def test_unknown_keys_are_ignored(self):
        """Test that unrelated storage keys do not matter."""
        storage = read_document({
            "theme": "vs-dark",
            "openedPathsList": {"entries": [{"folderUri": "file:///a", "label": "a", "remoteAuthority": "ssh"}]},
        })
        assert storage.into_workspace_urls() == ["file:///a"]


class TestIntoWorkspaceUrls:
    """Test normalization of both shapes into folder URLs."""

    def test_missing_history_section(self):
        """Test that an absent openedPathsList yields no URLs."""
        assert read_document({}).into_workspace_urls() == []

    def test_null_history_section(self):
        assert read_document({"openedPathsList": None}).into_workspace_urls() == []

    def test_empty_history_section(self):
        assert read_document({"openedPathsList": {}}).into_workspace_urls() == []

    def test_entries_before_legacy_list(self):
        """Test that folder entries come first, then workspaces3, in order."""
        storage = read_document({
            "openedPathsList": {
                "workspaces3": ["file:///legacy/1", "file:///legacy/2"],
                "entries": [
                    {"folderUri": "file:///current/1"},
                    {"fileUri": "file:///current/file.txt"},
                    {"folderUri": "file:///current/2", "fileUri": "file:///current/other.txt"},
                ],
            }
        })
        assert storage.into_workspace_urls() == [
            "file:///current/1",
            "file:///current/2",
            "file:///legacy/1",
            "file:///legacy/2",
        ]

    def test_duplicates_across_shapes_are_kept(self):
        """Test that no deduplication happens."""
        storage = read_document({
            "openedPathsList": {
                "workspaces3": ["file:///home/foo/x"],
                "entries": [{"folderUri": "file:///home/foo/x"}],
            }
        })
        assert storage.into_workspace_urls() == ["file:///home/foo/x", "file:///home/foo/x"]

    def test_legacy_and_current_shapes_agree(self):
        """Test that both shapes normalize to the same URLs for the same folders."""
        folders = ["file:///home/foo/a", "file:///home/foo/b"]
        legacy = read_document({"openedPathsList": {"workspaces3": folders}})
        current = read_document({"openedPathsList": {"entries": [{"folderUri": f} for f in folders]}})
        assert legacy.into_workspace_urls() == current.into_workspace_urls() == folders


class TestStorageFromDir:
    """Test reading storage.json from a configuration directory."""

    def test_reads_storage_json(self, write_storage):
        config_dir = write_storage({"openedPathsList": {"workspaces3": ["file:///home/foo/mdcat"]}})
        assert Storage.from_dir(config_dir).into_workspace_urls() == ["file:///home/foo/mdcat"]

    def test_missing_file_is_an_io_error(self, tmp_path):
        """Test that the attempted path is part of the error."""
        with pytest.raises(WorkspaceIOError) as exc_info:
            Storage.from_dir(tmp_path / "Code")

        assert exc_info.value.path == tmp_path / "Code" / "storage.json"
        assert str(tmp_path / "Code" / "storage.json") in str(exc_info.value)
        assert isinstance(exc_info.value, WorkspaceReadError)

    def test_malformed_file_is_a_parse_error_with_path(self, write_storage):
        config_dir = write_storage("not json at all")

        with pytest.raises(WorkspaceParseError) as exc_info:
            Storage.from_dir(config_dir)

        assert exc_info.value.path == config_dir / "storage.json"
        assert exc_info.value.context["path"] == str(config_dir / "storage.json")
        assert isinstance(exc_info.value, WorkspaceReadError)
