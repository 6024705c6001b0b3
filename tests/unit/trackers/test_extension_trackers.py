"""
Unit tests for the Plugin, Theme, Widget and Core Trackers
"""

import pytest

from logify.app.trackers import Observation
from tests.fixtures.json_loader import TestDataLoader

TWENTY_FOUR = {"stylesheet": "twentytwentyfour", "Name": "Twenty Twenty-Four", "Version": "1.1"}
TWENTY_THREE = {"stylesheet": "twentytwentythree", "Name": "Twenty Twenty-Three", "Version": "1.4"}


def _saved(event_store, event_type):
    return [event for event in event_store.values() if event.event_type == event_type]


# ----------------------------------------------------------------------------
# Plugins
# ----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_network_activation_is_recorded(run_unit, event_store, catalog):
    catalog.put("plugin", "akismet", TestDataLoader.get_copy("plugin"))

    await run_unit(
        Observation(
            name="activated_plugin", object_type="plugin", subject={"slug": "akismet"}, args={"network_wide": True}
        ),
    )

    event = _saved(event_store, "Plugin Activated")[0]
    assert event.object_name == "Akismet Anti-spam"
    assert event.get_meta_val("network_wide") is True


@pytest.mark.asyncio
async def test_uploading_a_newer_plugin_is_an_upgrade(run_unit, event_store, catalog):
    catalog.put("plugin", "akismet", TestDataLoader.get_copy("plugin"))

    await run_unit(
        Observation(
            name="plugin_installed",
            object_type="plugin",
            subject={"slug": "akismet"},
            args={"old_version": "5.2", "new_version": "5.3"},
        ),
    )

    event = _saved(event_store, "Plugin Upgraded")[0]
    version = event.get_prop("Version")
    assert (version.value, version.new_value) == ("5.2", "5.3")


@pytest.mark.asyncio
async def test_fresh_plugin_install(run_unit, event_store, catalog):
    plugin = TestDataLoader.get_copy("plugin")
    catalog.put("plugin", "akismet", plugin)

    await run_unit(Observation(name="plugin_installed", object_type="plugin", subject=plugin))

    event = _saved(event_store, "Plugin Installed")[0]
    assert event.get_prop_val("Version") == "5.3"
    assert not event.has_changes()


@pytest.mark.asyncio
async def test_deleted_plugin_is_forgotten(run_unit, event_store, catalog):
    catalog.put("plugin", "akismet", TestDataLoader.get_copy("plugin"))

    await run_unit(Observation(name="deleted_plugin", object_type="plugin", subject={"slug": "akismet"}))

    assert len(_saved(event_store, "Plugin Deleted")) == 1
    assert catalog.get("plugin", "akismet") is None


# ----------------------------------------------------------------------------
# Themes
# ----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_theme_switch_remembers_the_old_theme(run_unit, event_store):
    await run_unit(
        Observation(name="switch_theme", object_type="theme", subject=dict(TWENTY_FOUR), prior=dict(TWENTY_THREE)),
    )

    event = _saved(event_store, "Theme Switched")[0]
    assert event.object_key == "twentytwentyfour"
    old_theme = event.get_meta_val("old_theme")
    assert (old_theme.key, old_theme.name) == ("twentytwentythree", "Twenty Twenty-Three")


@pytest.mark.asyncio
async def test_installing_an_older_theme_is_a_downgrade(run_unit, event_store):
    await run_unit(
        Observation(
            name="theme_installed",
            object_type="theme",
            subject=dict(TWENTY_FOUR),
            args={"old_version": "1.2", "new_version": "1.1"},
        ),
    )

    event = _saved(event_store, "Theme Downgraded")[0]
    assert event.get_prop("Version").new_value == "1.1"


# ----------------------------------------------------------------------------
# Widgets
# ----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_widget_update_records_only_changed_settings(run_unit, event_store):
    old_settings = {"title": "About", "text": "Hi", "filter": True}
    new_settings = {"title": "About", "text": "Hello there", "filter": True}

    await run_unit(
        Observation(
            name="update_widget",
            object_type="widget",
            subject={"id": "text-2", "title": "About", "settings": new_settings},
            prior={"id": "text-2", "settings": old_settings},
            args={"sidebar": "sidebar-1"},
        ),
    )

    event = _saved(event_store, "Widget Updated")[0]
    text = event.get_prop("text")
    assert (text.source, text.value, text.new_value) == ("widgets", "Hi", "Hello there")
    assert not event.has_prop("title")
    assert not event.has_prop("filter")
    assert event.get_meta_val("sidebar") == "sidebar-1"


@pytest.mark.asyncio
async def test_widget_saved_without_changes_logs_nothing(run_unit, event_store):
    settings = {"title": "About", "text": "Hi"}

    await run_unit(
        Observation(
            name="update_widget",
            object_type="widget",
            subject={"id": "text-2", "settings": dict(settings)},
            prior={"id": "text-2", "settings": dict(settings)},
        ),
    )

    assert event_store == {}


# ----------------------------------------------------------------------------
# Core
# ----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_core_update_logs_version_change_and_moves_the_running_version(run_unit, event_store, catalog):
    catalog.put("core", "core", {"version": "6.4.3"})

    await run_unit(Observation(name="core_updated", object_type="core", args={"new_version": "6.5"}))

    event = _saved(event_store, "Core Upgraded")[0]
    assert event.object_key == "6.5"
    assert event.object_name == "WordPress"
    version = event.get_prop("version")
    assert (version.value, version.new_value) == ("6.4.3", "6.5")
    assert catalog.get("core", "core") == {"version": "6.5"}


@pytest.mark.asyncio
async def test_core_reinstall(run_unit, event_store):
    await run_unit(
        Observation(name="core_updated", object_type="core", args={"old_version": "6.5", "new_version": "6.5"}),
    )

    assert len(_saved(event_store, "Core Re-installed")) == 1
