"""a minimal game client that hosts addons

The client provides what an addon expects from the game: an event manager
with per-namespace registrations, the chat system event handlers and the
chat router message formatters, slash commands, the chat window and the
saved variables.
"""

import asyncio
import importlib
import inspect
import logging

from hideloginnotice.exceptions import (
    AlreadyLoaded,
    UnknownCommand,
)
from hideloginnotice.utils import (
    call_maybe_async,
    callable_name,
)


logger = logging.getLogger(__name__)

EVENT_ADD_ON_LOADED = 'EVENT_ADD_ON_LOADED'
EVENT_FRIEND_PLAYER_STATUS_CHANGED = 'EVENT_FRIEND_PLAYER_STATUS_CHANGED'

PLAYER_STATUS_ONLINE = 'online'
PLAYER_STATUS_AWAY = 'away'
PLAYER_STATUS_DO_NOT_DISTURB = 'do not disturb'
PLAYER_STATUS_OFFLINE = 'offline'

CHAT_SYSTEM_NAMESPACE = 'ChatSystem'


class HandlerRegistry(dict):
    """map an event code to the one active handler for it

    Args:
        name (str): label for logging
    """
    def __init__(self, name):
        super().__init__()
        self.name = name

    def __repr__(self):
        return '<%s %s: %s>' % (self.__class__.__name__, self.name,
                                {key: callable_name(value)
                                 for key, value in self.items()})


class EventManager:
    """deliver host events to the callbacks registered per namespace"""

    def __init__(self):
        self._registrations = {}

    def register_for_event(self, namespace, event_code, callback):
        """register a callback for an event

        Args:
            namespace (str): unique owner of the registration, the addon name
            event_code (str): the event to listen for
            callback (callable): function or coroutine function with the
                signature `callback(event_code, *args)`

        Returns:
            bool: False if the namespace is already registered for the event
        """
        registrations = self._registrations.setdefault(event_code, {})
        if namespace in registrations:
            logger.warning('%s is already registered for %s',
                           namespace, event_code)
            return False
        registrations[namespace] = callback
        logger.debug('%s registered for %s: %s',
                     namespace, event_code, callable_name(callback))
        return True

    def unregister_for_event(self, namespace, event_code):
        """remove the registration of a namespace for an event

        Args:
            namespace (str): the owner of the registration
            event_code (str): the event

        Returns:
            bool: True if a registration was removed
        """
        registrations = self._registrations.get(event_code, {})
        if registrations.pop(namespace, None) is None:
            return False
        logger.debug('%s unregistered from %s', namespace, event_code)
        return True

    def is_registered(self, namespace, event_code):
        return namespace in self._registrations.get(event_code, {})

    async def fire(self, event_code, *args):
        """deliver an event to all registered callbacks in order

        A callback may unregister itself while the event is delivered.

        Args:
            event_code (str): the event
            args (mixed): the event payload

        Raises:
            CancelledError: shutdown in progress
        """
        registrations = list(self._registrations.get(event_code, {}).items())
        for namespace, callback in registrations:
            try:
                await call_maybe_async(callback, event_code, *args)
            except asyncio.CancelledError:
                raise
            except Exception:  # addon-error - pylint:disable=broad-except
                logger.exception('%s: callback of %s failed',
                                 event_code, namespace)


class ChatLog:
    """the chat window, keeps every line that was shown"""

    def __init__(self):
        self.messages = []
        self._logger = logging.getLogger(__name__ + '.chat')

    def add_message(self, text):
        self.messages.append(text)
        self._logger.info(text)

    @property
    def last_message(self):
        """get the most recent chat line

        Returns:
            str: the line or None if the chat is empty
        """
        return self.messages[-1] if self.messages else None


class SlashCommands:
    """register slash commands and run them

    Args:
        chat (ChatLog): the chat to report failing commands to
    """

    def __init__(self, chat):
        self.commands = {}
        self.chat = chat

    def register(self, name, function):
        """register a slash command

        Args:
            name (str): the command including the leading slash
            function (callable): function or coroutine function that takes
                the argument string of the command

        Raises:
            ValueError: the name has no leading slash
        """
        if not name.startswith('/'):
            raise ValueError('slash command %r needs a leading slash' % name)
        self.commands[name.lower()] = function
        logger.debug('registered %s: %s', name, callable_name(function))

    async def run(self, text):
        """run the slash command in the given text

        An error raised by the command is logged and shown in the chat.

        Args:
            text (str): the command line, e.g. '/hideloginnotice'

        Returns:
            mixed: the command result

        Raises:
            UnknownCommand: the command is not registered
            CancelledError: shutdown in progress
        """
        name, _, arguments = text.strip().partition(' ')
        name = name.lower()
        function = self.commands.get(name)
        if function is None:
            raise UnknownCommand(name)

        logger.info('command run %s: %r', name, arguments)
        try:
            return await call_maybe_async(function, arguments.strip())
        except asyncio.CancelledError:
            raise
        except Exception as err:  # addon-error - pylint:disable=broad-except
            logger.exception('command run %s: low level error', name)
            self.chat.add_message('%s failed: %s' % (name, type(err).__name__))
        return None


def format_friend_status(display_name, character_name, old_status,
                         new_status):
    """message formatter for a friend going on- or offline

    Args:
        display_name (str): account name of the friend
        character_name (str): the character the friend plays
        old_status (str): one of the PLAYER_STATUS_ constants
        new_status (str): one of the PLAYER_STATUS_ constants

    Returns:
        str: the chat line or None for status changes between online states
    """
    # pylint:disable=unused-argument
    was_online = old_status != PLAYER_STATUS_OFFLINE
    is_online = new_status != PLAYER_STATUS_OFFLINE
    if is_online and not was_online:
        return '%s has logged on.' % display_name
    if was_online and not is_online:
        return '%s has logged off.' % display_name
    return None


class Client:
    """the game client: addon loading and event routing

    Args:
        saved_variables (hideloginnotice.storage.SavedVariables): the loaded
            storage for addon settings
    """

    def __init__(self, saved_variables):
        self.saved_variables = saved_variables
        self.event_manager = EventManager()
        self.chat = ChatLog()
        self.notifications = []
        self.slash_commands = SlashCommands(self.chat)
        self.addons = {}
        self._module_paths = {}

        self.chat_system_handlers = HandlerRegistry('chat system')
        self.chat_router_formatters = HandlerRegistry('chat router')
        self.chat_system_handlers[EVENT_FRIEND_PLAYER_STATUS_CHANGED] = (
            self._notify_friend_status)
        self.chat_router_formatters[EVENT_FRIEND_PLAYER_STATUS_CHANGED] = (
            format_friend_status)

        self.event_manager.register_for_event(
            CHAT_SYSTEM_NAMESPACE, EVENT_FRIEND_PLAYER_STATUS_CHANGED,
            self._route_chat_event)

    def _notify_friend_status(self, *args):
        """chat system handler: show a status change as a notification"""
        text = format_friend_status(*args)
        if text is not None:
            self.notifications.append(text)

    async def _route_chat_event(self, event_code, *args):
        """pass an event to the chat system handler and the chat router"""
        handler = self.chat_system_handlers.get(event_code)
        if handler is not None:
            await call_maybe_async(handler, *args)

        formatter = self.chat_router_formatters.get(event_code)
        if formatter is None:
            return
        text = await call_maybe_async(formatter, *args)
        if text is not None:
            self.chat.add_message(text)

    def load_addon(self, module_path):
        """import an addon module and run its `_initialise` hook

        accepted hook signatures: `_initialise(client)` and `_initialise()`,
        the return value of the hook is kept in `.addons`

        Args:
            module_path (str): python import path of the addon module

        Returns:
            bool: True if the addon was loaded successfully

        Raises:
            AlreadyLoaded: the addon is already loaded
        """
        if module_path in self._module_paths:
            raise AlreadyLoaded(module_path)

        try:
            module = importlib.import_module(module_path)
        except Exception:  # addon-error - pylint:disable=broad-except
            logger.exception('load_addon %s: import', module_path)
            return False

        name = getattr(module, 'ADDON_NAME', module_path.split('.')[-1])
        hook = getattr(module, '_initialise', None)

        result = None
        if hook is not None:
            expected = list(inspect.signature(hook).parameters)
            if len(expected) > 1 or (expected and expected[0] != 'client'):
                logger.warning('%s: the initialise hook of %s has an '
                               'unsupported signature', name, module_path)
                return False
            try:
                result = hook(self) if expected else hook()
            except Exception:  # addon-error - pylint:disable=broad-except
                logger.exception('error on addon init: %s', module_path)
                return False

        self._module_paths[module_path] = name
        self.addons[name] = result
        logger.info('%s loaded from %s', name, module_path)
        return True

    async def start(self):
        """signal every loaded addon that its data is available"""
        for name in list(self.addons):
            logger.debug('firing %s for %s', EVENT_ADD_ON_LOADED, name)
            await self.event_manager.fire(EVENT_ADD_ON_LOADED, name)

    async def friend_status_changed(self, display_name, character_name,
                                    old_status, new_status):
        """a friend changed the online status"""
        await self.event_manager.fire(EVENT_FRIEND_PLAYER_STATUS_CHANGED,
                                      display_name, character_name,
                                      old_status, new_status)

    async def handle_input(self, text):
        """process a line typed into the chat

        Args:
            text (str): the raw input

        Returns:
            bool: True if the text was a slash command
        """
        text = text.strip()
        if not text.startswith('/'):
            return False
        try:
            await self.slash_commands.run(text)
        except UnknownCommand as err:
            logger.info(repr(err))
            self.chat.add_message('Unknown command: %s' % err.args[0])
        return True

    def shutdown(self):
        """write the saved variables to disk"""
        logger.info('shutdown')
        self.saved_variables.flush()
