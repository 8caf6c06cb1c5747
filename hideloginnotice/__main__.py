"""entrypoint to start the client with the addon"""

import argparse
import asyncio
import logging
import logging.config
import os
import sys
import threading

import appdirs

from hideloginnotice import (
    host,
    storage,
    version,
)


logger = logging.getLogger(__name__)

ADDON_MODULE = 'hideloginnotice.addon'

STATUS_ALIASES = {
    'on': host.PLAYER_STATUS_ONLINE,
    'online': host.PLAYER_STATUS_ONLINE,
    'away': host.PLAYER_STATUS_AWAY,
    'dnd': host.PLAYER_STATUS_DO_NOT_DISTURB,
    'off': host.PLAYER_STATUS_OFFLINE,
    'offline': host.PLAYER_STATUS_OFFLINE,
}

USAGE = ('commands:\n'
         '  /hideloginnotice         toggle the login notices\n'
         '  friend <name> on|off|away|dnd\n'
         '                           simulate a friend status change\n'
         '  quit                     save and exit')


def configure_logging(args):
    """Configure Logging

    Use the `logging` entry of the saved variables file if present,
    otherwise log to the console and the log file.
    """
    log_level = 'DEBUG' if args.debug else 'INFO'

    logging_config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'console': {
                'format': '%(levelname)s %(name)s: %(message)s',
            },
            'default': {
                'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'stream': 'ext://sys.stderr',
                'level': 'DEBUG' if args.debug else 'WARNING',
                'formatter': 'console',
            },
            'file': {
                'class': 'logging.FileHandler',
                'filename': args.log,
                'level': 'DEBUG',
                'formatter': 'default',
            },
        },
        'loggers': {
            # base config, applies to all logger
            '': {
                'handlers': ['file', 'console'],
                'level': log_level,
            },
            'asyncio': {'level': 'WARNING'},
        },
    }

    # peek into the saved variables for a custom logging config
    boot_storage = storage.SavedVariables(args.saved_variables)
    try:
        boot_storage.load(create=False)
    except (OSError, IOError, ValueError):
        pass
    else:
        if isinstance(boot_storage.get_option('logging'), dict):
            logging_config = boot_storage['logging']

    logging.config.dictConfig(logging_config)


def _start_reader(loop, stream):
    """read lines from a stream in a daemon thread

    The thread does not block the interpreter exit while it waits for input.
    An empty string marks the end of the stream.

    Args:
        loop (asyncio.AbstractEventLoop): the loop to deliver the lines to
        stream (io.TextIOBase): the stream to read from

    Returns:
        asyncio.Queue: receives each line
    """
    lines = asyncio.Queue()

    def _deliver(line):
        try:
            loop.call_soon_threadsafe(lines.put_nowait, line)
        except RuntimeError:
            # the loop is closed
            return False
        return True

    def _read():
        for line in iter(stream.readline, ''):
            if not _deliver(line):
                return
        _deliver('')

    threading.Thread(target=_read, name='stdin-reader', daemon=True).start()
    return lines


async def _repl(client):
    """read chat input from stdin until `quit` or EOF

    Args:
        client (hideloginnotice.host.Client): the running client
    """
    lines = _start_reader(asyncio.get_running_loop(), sys.stdin)
    seen = 0
    while True:
        line = await lines.get()
        if not line or line.strip() == 'quit':
            break

        words = line.split()
        if not words:
            continue

        if words[0] == 'friend':
            if len(words) != 3 or words[2] not in STATUS_ALIASES:
                print(USAGE)
                continue
            new_status = STATUS_ALIASES[words[2]]
            old_status = (host.PLAYER_STATUS_OFFLINE
                          if new_status != host.PLAYER_STATUS_OFFLINE
                          else host.PLAYER_STATUS_ONLINE)
            await client.friend_status_changed(words[1], words[1],
                                               old_status, new_status)
        elif not await client.handle_input(line):
            print(USAGE)
            continue

        for message in client.chat.messages[seen:]:
            print(message)
        seen = len(client.chat.messages)


async def _run(client):
    client.load_addon(ADDON_MODULE)
    await client.start()
    print(USAGE)
    try:
        await _repl(client)
    finally:
        client.shutdown()


def main():
    """Main entry point"""
    user_dirs = appdirs.AppDirs('hideloginnotice')
    default_base_dir = user_dirs.user_data_dir
    files = {
        'log': 'hideloginnotice.log',
        'saved_variables': 'saved_variables.json',
    }

    def get_path(file, base=default_base_dir):
        """Create the full path for a given file

        Args:
            file (str): one of `log`, `saved_variables`
            base (str): a custom base dir

        Returns:
            str: the full path
        """
        return os.path.join(base, files[file])

    parser = argparse.ArgumentParser(
        prog='hideloginnotice',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    parser.add_argument('-d', '--debug', action='store_true',
                        help='log detailed debugging messages')
    parser.add_argument('--base_dir', default=default_base_dir,
                        help='base dir for the log- and saved variables-path')
    parser.add_argument('--log', default=get_path('log'),
                        help='log file path')
    parser.add_argument('--saved_variables',
                        default=get_path('saved_variables'),
                        help='saved variables storage path')
    parser.add_argument('--version', action='version',
                        version='%(prog)s {}'.format(version.__version__),
                        help="show program's version number and exit")
    args = parser.parse_args()

    # Update the paths for all files in case they are not specified explicit
    if args.base_dir != default_base_dir:
        for item in ('log', 'saved_variables'):
            if getattr(args, item) == get_path(item):
                setattr(args, item, get_path(item, args.base_dir))

    for path in (args.log, args.saved_variables):
        directory = os.path.dirname(path)
        if directory and not os.path.isdir(directory):
            try:
                os.makedirs(directory)
            except OSError as err:
                sys.exit('Failed to create directory: %s' % err)

    configure_logging(args)

    saved_variables = storage.SavedVariables(args.saved_variables,
                                             failsafe_backups=3)
    try:
        saved_variables.load()
    except (OSError, IOError, ValueError):
        logger.exception('FAILED TO LOAD/RECOVER THE SAVED VARIABLES')
        sys.exit(1)

    client = host.Client(saved_variables)

    loop = asyncio.new_event_loop()
    task = loop.create_task(_run(client))
    try:
        loop.run_until_complete(task)
    except KeyboardInterrupt:
        # `_run` flushes the saved variables on the way out
        task.cancel()
        try:
            loop.run_until_complete(task)
        except asyncio.CancelledError:
            pass
    finally:
        loop.close()


if __name__ == '__main__':
    main()
