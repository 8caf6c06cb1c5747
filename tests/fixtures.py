"""fixtures for testing"""

__all__ = (
    'client',
    'registries',
    'saved_variables',
    'saved_variables_path',
)

import logging

import pytest

from hideloginnotice import (
    host,
    storage,
)


logger = logging.getLogger('tests')


def original_chat_system_handler(*args):
    """stand-in for the chat system handler installed by the game"""


def original_chat_router_formatter(*args):
    """stand-in for the chat router formatter installed by the game"""
    return 'formatted %s' % (args,)


class TestClient(host.Client):
    """Client that remembers the handlers it was started with"""

    def __init__(self, saved_variables):
        super().__init__(saved_variables)
        self.ORIGINAL_CHAT_SYSTEM_HANDLER = self.chat_system_handlers[
            host.EVENT_FRIEND_PLAYER_STATUS_CHANGED]
        self.ORIGINAL_CHAT_ROUTER_FORMATTER = self.chat_router_formatters[
            host.EVENT_FRIEND_PLAYER_STATUS_CHANGED]

    @property
    def status_handlers(self):
        """get the active friend status handlers

        Returns:
            tuple[callable, callable]: chat system handler, router formatter
        """
        event_code = host.EVENT_FRIEND_PLAYER_STATUS_CHANGED
        return (self.chat_system_handlers[event_code],
                self.chat_router_formatters[event_code])

    @property
    def originals(self):
        return (self.ORIGINAL_CHAT_SYSTEM_HANDLER,
                self.ORIGINAL_CHAT_ROUTER_FORMATTER)


@pytest.fixture
def saved_variables_path(tmp_path):
    return str(tmp_path / 'saved_variables.json')


@pytest.fixture
def saved_variables(saved_variables_path):
    """get loaded saved variables, the file is written by the test first"""
    storage_ = storage.SavedVariables(saved_variables_path)
    storage_.load()
    return storage_


@pytest.fixture
def client(saved_variables):
    """get a fresh TestClient per test"""
    logger.info('new client on %s', saved_variables.filename)
    return TestClient(saved_variables)


@pytest.fixture
def registries():
    """get the two friend status registries with their original handlers

    Returns:
        tuple[host.HandlerRegistry, host.HandlerRegistry]: chat system
            handlers and chat router formatters
    """
    event_code = host.EVENT_FRIEND_PLAYER_STATUS_CHANGED
    chat_system = host.HandlerRegistry('chat system')
    chat_system[event_code] = original_chat_system_handler
    chat_router = host.HandlerRegistry('chat router')
    chat_router[event_code] = original_chat_router_formatter
    return chat_system, chat_router
