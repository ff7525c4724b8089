"""Known VSCode variants and their provider manifests.

For each definition in PROVIDERS a corresponding manifest must exist in
``providers/`` at the repository root, referring to the same desktop ID and
the same object path. Object paths are unique per desktop ID so that every
search provider launches the right application.
"""

import configparser
import logging
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Sequence

from .errors import ManifestError

logger = logging.getLogger(__name__)

# The name to request on the bus
BUSNAME = "de.swsnr.searchprovider.VSCode"

# Object paths of all providers live below this prefix
OBJECT_PATH_PREFIX = "/de/swsnr/searchprovider/vscode"

# Version of the GNOME Shell search provider interface declared in manifests
MANIFEST_VERSION = "2"
MANIFEST_SECTION = "Shell Search Provider"


@dataclass(frozen=True)
class ProviderDefinition:
    """A search provider to expose from this service.

    Attributes:
        label: Human readable label for this provider
        desktop_id: ID (that is, the filename) of the app's desktop file
        relative_obj_path: Object path of the provider, relative to OBJECT_PATH_PREFIX
        config_dirname: Name of the app's directory below the user config home
    """

    label: str
    desktop_id: str
    relative_obj_path: str
    config_dirname: str

    @property
    def objpath(self) -> str:
        """Full object path for this provider."""
        return f"{OBJECT_PATH_PREFIX}/{self.relative_obj_path}"


PROVIDERS: Sequence[ProviderDefinition] = (
    ProviderDefinition(
        label="Code OSS (Arch Linux)",
        desktop_id="code-oss.desktop",
        relative_obj_path="arch/codeoss",
        config_dirname="Code - OSS",
    ),
    # The binary AUR package for visual studio code: https://aur.archlinux.org/packages/visual-studio-code-bin/
    ProviderDefinition(
        label="Visual Studio Code (AUR package)",
        desktop_id="visual-studio-code.desktop",
        relative_obj_path="aur/visualstudiocode",
        config_dirname="Code",
    ),
)


def provider_labels(providers: Iterable[ProviderDefinition] = PROVIDERS) -> List[str]:
    """Labels of all providers, sorted."""
    return sorted(provider.label for provider in providers)


def validate_providers(providers: Iterable[ProviderDefinition] = PROVIDERS) -> List[str]:
    """Check the structural invariants of a provider table.

    Returns:
        List of violation messages (empty if the table is valid)
    """
    providers = list(providers)
    errors = []

    for desktop_id, count in Counter(p.desktop_id for p in providers).items():
        if count > 1:
            errors.append(f"Desktop ID {desktop_id} used by {count} providers")

    for objpath, count in Counter(p.objpath for p in providers).items():
        if count > 1:
            errors.append(f"Object path {objpath} used by {count} providers")

    return errors


@dataclass(frozen=True)
class ProviderManifest:
    """The contents of a GNOME Shell search provider .ini file."""

    path: Path
    desktop_id: str
    object_path: str
    bus_name: str
    version: str


def load_provider_manifest(path: Path) -> ProviderManifest:
    """Load a single search provider manifest.

    Raises:
        ManifestError: If the file cannot be parsed or lacks a required key
    """
    parser = configparser.ConfigParser(interpolation=None)
    # Keys are CamelCase in manifests
    parser.optionxform = str
    try:
        with open(path) as f:
            parser.read_file(f)
    except (OSError, configparser.Error) as e:
        raise ManifestError(path, str(e)) from e

    if not parser.has_section(MANIFEST_SECTION):
        raise ManifestError(path, f"section [{MANIFEST_SECTION}] missing")

    section = parser[MANIFEST_SECTION]
    values: Dict[str, str] = {}
    for key in ("DesktopId", "ObjectPath", "BusName", "Version"):
        if key not in section:
            raise ManifestError(path, f"{key} missing")
        values[key] = section[key]

    return ProviderManifest(
        path=path,
        desktop_id=values["DesktopId"],
        object_path=values["ObjectPath"],
        bus_name=values["BusName"],
        version=values["Version"],
    )


def load_provider_manifests(directory: Path) -> List[ProviderManifest]:
    """Load all ``*.ini`` manifests in a directory, sorted by filename."""
    manifests = [load_provider_manifest(path) for path in sorted(directory.glob("*.ini"))]
    logger.debug(f"Loaded {len(manifests)} provider manifest(s) from {directory}")
    return manifests
