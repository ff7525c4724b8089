"""
Unit tests for provider activation.

Tests cover:
- Skipping providers whose application is not installed
- Binding sources to the resolved app ID and config directory
- Fatal registration failures
"""

from pathlib import Path

import pytest

from vscode_search_provider import activation
from vscode_search_provider.activation import activate_providers, user_config_home
from vscode_search_provider.errors import RegistrationError
from vscode_search_provider.providers import PROVIDERS
from vscode_search_provider.search_provider import SearchProvider


class TestActivateProviders:
    """Test activate_providers."""

    def test_no_installed_apps(self, mock_bus, app_lookup, tmp_path):
        """Test that nothing is registered when no known app is installed."""
        activated = activate_providers(mock_bus, config_home=tmp_path, find_app=app_lookup([]))

        assert activated == []
        mock_bus.register_object.assert_not_called()

    def test_only_installed_apps_are_registered(self, mock_bus, app_lookup, tmp_path):
        activated = activate_providers(
            mock_bus, config_home=tmp_path, find_app=app_lookup(["visual-studio-code.desktop"])
        )

        assert len(activated) == 1
        provider = activated[0]
        assert provider.definition.desktop_id == "visual-studio-code.desktop"
        assert provider.config_dir == tmp_path / "Code"
        mock_bus.register_object.assert_called_once_with(
            "/de/swsnr/searchprovider/vscode/aur/visualstudiocode", provider.search_provider, None
        )

    def test_all_installed_apps_in_definition_order(self, mock_bus, app_lookup, tmp_path):
        installed = [p.desktop_id for p in PROVIDERS]
        activated = activate_providers(mock_bus, config_home=tmp_path, find_app=app_lookup(installed))

        assert [p.definition for p in activated] == list(PROVIDERS)
        assert [call.args[0] for call in mock_bus.register_object.call_args_list] == [
            p.objpath for p in PROVIDERS
        ]

    def test_source_uses_resolved_app_id(self, mock_bus, app_factory, tmp_path):
        """Test the app ID reported by Gio wins over the table's desktop ID."""
        app = app_factory("code-oss-custom.desktop")
        activated = activate_providers(
            mock_bus,
            config_home=tmp_path,
            find_app=lambda desktop_id: app if desktop_id == "code-oss.desktop" else None,
        )

        [provider] = activated
        assert provider.app_id == "code-oss-custom.desktop"
        assert isinstance(provider.search_provider, SearchProvider)
        source = provider.search_provider.source
        assert source.app_id == "code-oss-custom.desktop"
        assert source.config_dir == tmp_path / "Code - OSS"

    def test_registration_failure_is_fatal(self, mock_bus, app_lookup, tmp_path):
        mock_bus.register_object.side_effect = RuntimeError("An object is already exported")

        with pytest.raises(RegistrationError) as exc_info:
            activate_providers(mock_bus, config_home=tmp_path, find_app=app_lookup(["code-oss.desktop"]))

        assert exc_info.value.context["object_path"] == "/de/swsnr/searchprovider/vscode/arch/codeoss"
        assert exc_info.value.context["desktop_id"] == "code-oss.desktop"

    def test_default_config_home(self, mock_bus, app_lookup, tmp_path, monkeypatch):
        monkeypatch.setattr(activation, "xdg_config_home", str(tmp_path / "config"))

        [provider] = activate_providers(mock_bus, find_app=app_lookup(["code-oss.desktop"]))

        assert provider.config_dir == tmp_path / "config" / "Code - OSS"


def test_user_config_home_is_a_path():
    assert isinstance(user_config_home(), Path)
