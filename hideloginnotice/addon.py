"""hide the chat notices of friends logging on or off

The addon swaps the friend status handler of the chat system and the
message formatter of the chat router for a no-op handler. The original
handlers are captured once, after the client signalled that the addon
is loaded, and restored when the suppression is toggled off with
/hideloginnotice.
"""

import logging

from hideloginnotice import host
from hideloginnotice.exceptions import (
    AlreadyInitialised,
    HandlerMissing,
    NotInitialised,
)


logger = logging.getLogger(__name__)

ADDON_NAME = 'HideLoginNotice'
SETTINGS_VERSION = 1
DEFAULT_SETTINGS = {
    # True: the notices are hidden
    'enabled': True,
}
COMMAND = '/hideloginnotice'

STATE_UNLOADED = 'unloaded'
STATE_AWAITING_HOST_LOAD = 'awaiting host load'
STATE_INITIALISED = 'initialised'


def suppressed_status_handler(*args):
    """drop a friend status change"""


class ToggleController:
    """swap the friend status handlers in lockstep based on a setting

    Args:
        chat_system_handlers (dict): event code -> chat system handler
        chat_router_formatters (dict): event code -> chat router formatter
        settings (dict): mutable settings with the key 'enabled'
        output (callable): receives the feedback line of a toggle
        on_change (callable): called without arguments after a toggle
        event_code (str): the registry key of the notification
    """

    def __init__(self, chat_system_handlers, chat_router_formatters, settings,
                 output=None, on_change=None,
                 event_code=host.EVENT_FRIEND_PLAYER_STATUS_CHANGED):
        self.chat_system_handlers = chat_system_handlers
        self.chat_router_formatters = chat_router_formatters
        self.settings = settings
        self.output = output or logger.info
        self.on_change = on_change
        self.event_code = event_code

        self.chat_system_original = None
        self.chat_router_original = None
        self._initialised = False

    @property
    def enabled(self):
        """whether the notices are hidden

        Returns:
            bool: the current setting
        """
        return bool(self.settings.get('enabled', DEFAULT_SETTINGS['enabled']))

    @property
    def initialised(self):
        return self._initialised

    def _capture(self, registry):
        handler = registry.get(self.event_code)
        if handler is None:
            raise HandlerMissing(getattr(registry, 'name', 'registry'),
                                 self.event_code)
        return handler

    def initialize(self):
        """capture the current handlers and apply the setting

        Raises:
            AlreadyInitialised: the handlers were captured before
            HandlerMissing: a registry has no handler for the event
        """
        if self._initialised:
            raise AlreadyInitialised(ADDON_NAME)

        # capture both before modifying either registry
        chat_system_original = self._capture(self.chat_system_handlers)
        chat_router_original = self._capture(self.chat_router_formatters)

        self.chat_system_original = chat_system_original
        self.chat_router_original = chat_router_original
        self._initialised = True
        logger.info('captured original handlers for %s', self.event_code)

        self.apply()

    def apply(self):
        """write the no-op handler or the originals into both registries

        Raises:
            NotInitialised: the original handlers were not captured yet
        """
        if not self._initialised:
            raise NotInitialised(ADDON_NAME)

        if self.enabled:
            chat_system = chat_router = suppressed_status_handler
        else:
            chat_system = self.chat_system_original
            chat_router = self.chat_router_original

        self.chat_system_handlers[self.event_code] = chat_system
        self.chat_router_formatters[self.event_code] = chat_router
        logger.debug('%s: notices %s', self.event_code,
                     'suppressed' if self.enabled else 'restored')

    def toggle(self):
        """flip the setting, apply it and report the new state

        Returns:
            bool: the new setting

        Raises:
            NotInitialised: the original handlers were not captured yet
        """
        if not self._initialised:
            raise NotInitialised(ADDON_NAME)

        self.settings['enabled'] = not self.enabled
        self.apply()
        if self.on_change is not None:
            try:
                self.on_change()
            except OSError:
                # the new state stays active for this session
                logger.exception('failed to save the settings')
        self.output('Login notifications: %s'
                    % ('hidden' if self.enabled else 'shown'))
        return self.enabled


class HideLoginNotice:
    """the addon: wait for the load signal, then set up the controller

    Args:
        name (str): the addon name the load signal is matched against
    """

    def __init__(self, name=ADDON_NAME):
        self.name = name
        self.state = STATE_UNLOADED
        self.client = None
        self.settings = None
        self.controller = None

    def register(self, client):
        """listen for the load signal of this addon

        Args:
            client (hideloginnotice.host.Client): the running client
        """
        self.client = client
        client.event_manager.register_for_event(
            self.name, host.EVENT_ADD_ON_LOADED, self.on_addon_loaded)
        self.state = STATE_AWAITING_HOST_LOAD

    def on_addon_loaded(self, event_code, addon_name):
        """initialise once the client loaded this addon

        Args:
            event_code (str): EVENT_ADD_ON_LOADED
            addon_name (str): the addon that finished loading
        """
        # pylint:disable=unused-argument
        if addon_name != self.name:
            return

        self.client.event_manager.unregister_for_event(
            self.name, host.EVENT_ADD_ON_LOADED)
        self.initialise()

    def initialise(self):
        client = self.client
        saved_variables = client.saved_variables
        self.settings = saved_variables.new_account_wide(
            self.name, SETTINGS_VERSION, DEFAULT_SETTINGS)

        self.controller = ToggleController(
            client.chat_system_handlers,
            client.chat_router_formatters,
            self.settings,
            output=client.chat.add_message,
            on_change=saved_variables.save,
        )
        self.controller.initialize()

        client.slash_commands.register(COMMAND, self.toggle_command)
        self.state = STATE_INITIALISED
        logger.info('%s initialised, notices %s', self.name,
                    'hidden' if self.controller.enabled else 'shown')

    def toggle_command(self, arguments=''):
        """toggle the login notices on or off"""
        # pylint:disable=unused-argument
        return self.controller.toggle()


def _initialise(client):
    """register for the load signal

    Args:
        client (hideloginnotice.host.Client): the running client

    Returns:
        HideLoginNotice: the addon instance
    """
    addon = HideLoginNotice()
    addon.register(client)
    return addon
