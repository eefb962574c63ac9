"""Roblox-Studio-Plugin: Installation und Deinstallation."""

from .installer import (
    PluginInstaller,
    get_plugin_path,
    get_plugins_dir,
    install_plugin,
    is_plugin_installed,
    uninstall_plugin,
)

__all__ = [
    "PluginInstaller",
    "get_plugin_path",
    "get_plugins_dir",
    "install_plugin",
    "is_plugin_installed",
    "uninstall_plugin",
]
