"""Tests for PluginManager."""

from __future__ import annotations

import pluggy

from bldctl.plugins.manager import PluginManager

hookimpl = pluggy.HookimplMarker("bldctl")


class _Packager:
    @hookimpl
    def bldctl_package(self, environment, metadata, metadata_path) -> str:
        return "first.whl"


class _OtherPackager:
    @hookimpl
    def bldctl_package(self, environment, metadata, metadata_path) -> str:
        return "second.whl"


class TestPluginManager:
    def test_hookspecs_registered(self) -> None:
        pm = PluginManager()
        for name in ("bldctl_package", "bldctl_install", "bldctl_publish", "bldctl_post_build"):
            assert hasattr(pm.hook, name)

    def test_register_default_name(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_Packager())
        assert pm.list_plugin_names() == ["_Packager"]

    def test_register_explicit_name(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_Packager(), name="wheel")
        assert pm.list_plugin_names() == ["wheel"]

    def test_unregister(self) -> None:
        pm = PluginManager()
        plugin = _Packager()
        pm.register_plugin(plugin)
        pm.unregister(plugin)
        assert pm.list_plugin_names() == []

    def test_package_is_first_result(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_Packager())
        pm.register_plugin(_OtherPackager())
        # pluggy calls the most recently registered implementation first
        artifact = pm.hook.bldctl_package(environment=None, metadata=None, metadata_path=None)
        assert artifact == "second.whl"

    def test_discover_without_entry_points(self) -> None:
        pm = PluginManager()
        assert pm.discover() == pm.list_plugin_names()
