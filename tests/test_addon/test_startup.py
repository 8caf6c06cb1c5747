"""test loading `hideloginnotice.addon` into the client"""

import json

import pytest

from hideloginnotice import (
    addon,
    host,
)

from tests import (
    ADDON_MODULE,
    DISPLAY_NAME_1,
    OTHER_ADDON_NAME,
    logged_off,
    logged_on,
    run_cmd,
    write_saved_variables,
)

SUPPRESSED = (addon.suppressed_status_handler,
              addon.suppressed_status_handler)
# pylint:disable=redefined-outer-name


def get_addon(client):
    """load the addon into the client

    Args:
        client (tests.fixtures.TestClient): current test instance

    Returns:
        hideloginnotice.addon.HideLoginNotice: the loaded addon
    """
    assert client.load_addon(ADDON_MODULE)
    return client.addons[addon.ADDON_NAME]


def count_initialize(monkeypatch):
    calls = []
    initialize = addon.ToggleController.initialize

    def _initialize(self):
        calls.append(self)
        initialize(self)

    monkeypatch.setattr(addon.ToggleController, 'initialize', _initialize)
    return calls


def test_load_awaits_host_signal(client):
    addon_ = get_addon(client)

    assert addon_.state == addon.STATE_AWAITING_HOST_LOAD
    assert client.event_manager.is_registered(addon.ADDON_NAME,
                                              host.EVENT_ADD_ON_LOADED)
    assert addon_.controller is None
    assert client.status_handlers == client.originals
    assert addon.COMMAND not in client.slash_commands.commands


def test_state_before_load():
    assert addon.HideLoginNotice().state == addon.STATE_UNLOADED


@pytest.mark.asyncio
async def test_signal_of_other_addon_is_ignored(client):
    addon_ = get_addon(client)

    await client.event_manager.fire(host.EVENT_ADD_ON_LOADED, OTHER_ADDON_NAME)

    assert addon_.state == addon.STATE_AWAITING_HOST_LOAD
    assert client.event_manager.is_registered(addon.ADDON_NAME,
                                              host.EVENT_ADD_ON_LOADED)
    assert client.status_handlers == client.originals


@pytest.mark.asyncio
async def test_default_state_after_start(client):
    addon_ = get_addon(client)
    await client.start()

    assert addon_.state == addon.STATE_INITIALISED
    assert addon_.controller.enabled is True
    assert client.status_handlers == SUPPRESSED
    assert client.saved_variables[addon.ADDON_NAME] == {
        'version': addon.SETTINGS_VERSION,
        'enabled': True,
    }
    assert addon.COMMAND in client.slash_commands.commands


@pytest.mark.asyncio
async def test_load_signal_fires_once(client, monkeypatch):
    calls = count_initialize(monkeypatch)
    addon_ = get_addon(client)

    await client.start()
    await client.event_manager.fire(host.EVENT_ADD_ON_LOADED,
                                    addon.ADDON_NAME)
    await client.event_manager.fire(host.EVENT_ADD_ON_LOADED,
                                    OTHER_ADDON_NAME)

    assert calls == [addon_.controller]
    assert not client.event_manager.is_registered(addon.ADDON_NAME,
                                                  host.EVENT_ADD_ON_LOADED)
    assert addon_.state == addon.STATE_INITIALISED


@pytest.mark.asyncio
async def test_hidden_notices_do_not_reach_the_chat(client):
    get_addon(client)
    await client.start()

    await client.friend_status_changed(*logged_on())
    await client.friend_status_changed(*logged_off())

    assert client.chat.messages == []
    assert client.notifications == []


@pytest.mark.asyncio
async def test_scenario_toggle_shows_notices(client):
    get_addon(client)
    await client.start()
    assert client.status_handlers == SUPPRESSED

    assert await run_cmd(client, addon.COMMAND) == 'Login notifications: shown'

    chat_system, chat_router = client.status_handlers
    assert chat_system is client.ORIGINAL_CHAT_SYSTEM_HANDLER
    assert chat_router is client.ORIGINAL_CHAT_ROUTER_FORMATTER

    await client.friend_status_changed(*logged_on())
    assert client.chat.last_message == '%s has logged on.' % DISPLAY_NAME_1
    assert client.notifications == ['%s has logged on.' % DISPLAY_NAME_1]

    assert await run_cmd(client, addon.COMMAND) == 'Login notifications: hidden'
    assert client.status_handlers == SUPPRESSED


@pytest.mark.asyncio
async def test_scenario_persisted_setting_is_honoured(client):
    write_saved_variables(client.saved_variables.filename, {
        addon.ADDON_NAME: {
            'version': addon.SETTINGS_VERSION,
            'enabled': False,
        },
    })
    client.saved_variables.load()

    addon_ = get_addon(client)
    await client.start()

    assert addon_.controller.enabled is False
    assert client.status_handlers == client.originals
    assert client.chat.messages == []

    await client.friend_status_changed(*logged_off())
    assert client.chat.last_message == '%s has logged off.' % DISPLAY_NAME_1


@pytest.mark.asyncio
async def test_toggle_is_saved(client):
    get_addon(client)
    await client.start()

    await client.handle_input(addon.COMMAND)

    with open(client.saved_variables.filename) as file:
        saved = json.load(file)
    assert saved[addon.ADDON_NAME]['enabled'] is False


@pytest.mark.asyncio
async def test_command_ignores_arguments(client):
    get_addon(client)
    await client.start()

    assert (await run_cmd(client, '/HideLoginNotice please')
            == 'Login notifications: shown')
