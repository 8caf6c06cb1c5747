"""utils for testing"""

__all__ = (
    'StatusChange',
    'logged_off',
    'logged_on',
    'run_cmd',
    'write_saved_variables',
)

import json
from collections import namedtuple

from hideloginnotice import host
from tests.constants import (
    CHARACTER_NAME_1,
    DISPLAY_NAME_1,
)


StatusChange = namedtuple('StatusChange', ('display_name', 'character_name',
                                           'old_status', 'new_status'))


def logged_on(display_name=DISPLAY_NAME_1, character_name=CHARACTER_NAME_1):
    """get the payload of a friend coming online"""
    return StatusChange(display_name, character_name,
                        host.PLAYER_STATUS_OFFLINE, host.PLAYER_STATUS_ONLINE)


def logged_off(display_name=DISPLAY_NAME_1, character_name=CHARACTER_NAME_1):
    """get the payload of a friend going offline"""
    return StatusChange(display_name, character_name,
                        host.PLAYER_STATUS_ONLINE, host.PLAYER_STATUS_OFFLINE)


def write_saved_variables(path, data):
    """dump the data as the saved variables file

    Args:
        path (str): target file
        data (dict): the saved variables
    """
    with open(path, 'w') as file:
        json.dump(data, file, indent=2, sort_keys=True)


async def run_cmd(client, text):
    """run a chat line and return the chat line it produced

    Args:
        client (hideloginnotice.host.Client): the running client
        text (str): the chat input, e.g. '/hideloginnotice'

    Returns:
        str: the most recent chat line
    """
    await client.handle_input(text)
    return client.chat.last_message
