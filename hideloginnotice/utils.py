"""utils used by the addon and the client"""

import inspect


class FormatBaseException(Exception):
    """A base Exception which uses %s formatting for the string representation

    requires a `._template` member to pass the provided arguments into it
    """
    _template = 'Template is missing'
    def __str__(self):
        base = '%s: %s' % (self.__class__.__name__, self._template)
        required_args = base.count('%s')
        args = self.args + ('<missing>',) * (required_args - len(self.args))
        return base % args[:required_args]

    def __repr__(self):
        return self.__str__()


async def call_maybe_async(function, *args):
    """run a function or coroutine function with the given args

    Args:
        function (callable): a plain function or a coroutine function
        args (mixed): positional arguments for the function

    Returns:
        mixed: the result of the function
    """
    result = function(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def callable_name(function):
    """get a readable name of a callable for logging

    Args:
        function (callable): any callable

    Returns:
        str: module and qualified name of the callable
    """
    module = getattr(function, '__module__', None) or '<unknown>'
    name = getattr(function, '__qualname__', None) or repr(function)
    return '%s.%s' % (module, name)
