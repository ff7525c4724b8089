"""
VSCode Search Provider

GNOME Shell search provider for recent workspaces of VSCode variants.
Exposes one org.gnome.Shell.SearchProvider2 object per installed variant.
"""

__version__ = "1.4.1"
