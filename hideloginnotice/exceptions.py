"""Exceptions used by the addon and the client"""

from hideloginnotice.utils import FormatBaseException


class AlreadyInitialised(FormatBaseException):
    """the handlers of an addon were captured before"""
    _template = '"%s" is already initialised'


class NotInitialised(FormatBaseException):
    """the handlers were not captured yet"""
    _template = '"%s" is not initialised yet'


class HandlerMissing(FormatBaseException):
    """a registry has no handler to capture for the given event"""
    _template = 'the %s has no handler registered for %s'


class AlreadyLoaded(FormatBaseException):
    """Tried to load an addon which is already loaded"""
    _template = 'Tried to load the addon "%s" that is already loaded'


class UnknownCommand(FormatBaseException):
    """Tried to run a slash command which is not registered"""
    _template = 'the command "%s" is not registered'
