"""
Setup configuration for the VSCode search provider.

GNOME Shell search provider for recent workspaces of VSCode variants.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read requirements
requirements_file = Path(__file__).parent / "requirements.txt"
requirements = requirements_file.read_text().strip().split("\n") if requirements_file.exists() else []

# Read long description from README if it exists
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

setup(
    name="vscode-search-provider",
    version="1.4.1",
    description="Gnome search providers for recent workspaces in VSCode variants",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=requirements,
    python_requires=">=3.11",
    entry_points={
        "console_scripts": [
            "vscode-search-provider=vscode_search_provider.__main__:main",
        ],
    },
    data_files=[
        ("share/gnome-shell/search-providers", [str(p) for p in sorted(Path("providers").glob("*.ini"))]),
        ("share/dbus-1/services", ["dbus-1/de.swsnr.searchprovider.VSCode.service"]),
        ("lib/systemd/user", ["systemd/vscode-search-provider.service"]),
    ],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: No Input/Output (Daemon)",
        "License :: OSI Approved :: Mozilla Public License 2.0 (MPL 2.0)",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
    extras_require={
        "systemd": [
            "systemd-python>=235",
        ],
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },
)
