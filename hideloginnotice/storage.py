"""json file backed storage for addon settings that survive a restart"""

import asyncio
import collections.abc
import functools
import glob
import json
import logging
import operator
import os
import shutil
import time
from datetime import datetime


logger = logging.getLogger(__name__)

VERSION_KEY = 'version'


class SavedVariables(collections.abc.MutableMapping):
    """Saved variables storage, one namespace per addon

    Args:
        path (str): file path of the json file
        failsafe_backups (int): amount of backups that should be kept
        save_delay (int): time in second a dump should be delayed
    """
    default = None

    def __init__(self, path, failsafe_backups=0, save_delay=0):
        self.filename = path
        self.data = {}
        self.failsafe_backups = failsafe_backups
        self.save_delay = save_delay
        self._last_dump = None
        self._timer_save = None

    @property
    def _changed(self):
        """return whether the data changed since the last dump

        Returns:
            bool: True if the data differs from the last dump, otherwise False
        """
        try:
            current_state = json.dumps(self.data, indent=2, sort_keys=True)
        except TypeError:
            # a value that json can not handle
            return True
        return current_state != self._last_dump

    def _backup_paths(self):
        return sorted(glob.glob(self.filename + '.*.bak'))

    def _make_failsafe_backup(self):
        """remove old backups above the limit and copy the current file

        Returns:
            bool: True on a successful new backup, otherwise False
        """
        try:
            with open(self.filename) as file:
                json.load(file)
        except IOError:
            return False
        except ValueError:
            logger.warning('%s is corrupted, aborting backup', self.filename)
            return False

        existing = self._backup_paths()
        while len(existing) > (self.failsafe_backups - 1):
            path = existing.pop(0)
            try:
                os.remove(path)
            except IOError:
                logger.warning('Failed to remove %s, check permissions', path)

        backup_file = '%s.%s.bak' % (
            self.filename, datetime.now().strftime('%Y%m%d%H%M%S%f'))
        shutil.copy2(self.filename, backup_file)
        return True

    def _recover_from_failsafe(self):
        """restore the data from the most recent readable backup

        Returns:
            bool: True if a backup could be loaded, otherwise False
        """
        existing = self._backup_paths()
        while existing:
            recovery_filename = existing.pop()
            try:
                with open(recovery_filename) as file:
                    data = file.read()
                self._update_deep(data)
            except IOError:
                logger.warning('Failed to read %s, check permissions',
                               recovery_filename)
            except ValueError:
                logger.warning('corrupted recovery: %s', recovery_filename)
            else:
                self.save(delay=False)
                logger.warning('recovered %s successful from %s',
                               self.filename, recovery_filename)
                return True
        return False

    def load(self, create=True):
        """Load the saved variables from file

        Args:
            create (bool): set to False to leave a missing file missing

        Raises:
            OSError: the existing file is not readable, the file is missing
                and `create` is False, or no new file can be saved to the
                configured path
            ValueError: the file is not a valid json and no backups are
                available
        """
        try:
            with open(self.filename) as file:
                data = file.read()
            self._update_deep(data)
        except IOError:
            if create and not os.path.isfile(self.filename):
                self.data = {}
                self.save(delay=False)
                return
            raise
        except ValueError:
            if self.failsafe_backups and self._recover_from_failsafe():
                return
            raise
        else:
            self._last_dump = data
            logger.info('%s read', self.filename)

    def _update_deep(self, json_str):
        """Update the data from a JSON string

        Only changed entries are replaced, namespaces handed out by
        `new_account_wide` stay valid.

        Args:
            json_str (str): a json formatted string that overrides the data

        Raises:
            ValueError: the string is not a valid json representing of a dict
        """

        def _deep_replace(old, new):
            old_keys = set(old)
            new_keys = set(new)

            for key in old_keys - new_keys:
                old.pop(key)

            for key in new_keys - old_keys:
                old[key] = new[key]

            for key in old_keys & new_keys:
                old_value = old[key]
                new_value = new[key]

                if not isinstance(old_value, type(new_value)):
                    old[key] = new_value
                elif isinstance(old_value, dict):
                    _deep_replace(old_value, new_value)
                elif isinstance(old_value, list):
                    old_value.clear()
                    old_value.extend(new_value)
                else:
                    old[key] = new_value

        new_data = json.loads(json_str)
        if not isinstance(new_data, dict):
            raise ValueError('%s does not contain a json object'
                             % self.filename)
        _deep_replace(self.data, new_data)

    def save(self, delay=True):
        """dump the cached data to file

        Args:
            delay (bool): set to False to force an immediate dump

        Raises:
            IOError: the data can not be saved to the configured path
        """
        if self._timer_save is not None:
            self._timer_save.cancel()
            self._timer_save = None

        if not self._changed:
            # the file is already up to date
            return

        if self.save_delay and delay:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                # no loop to schedule on, dump now
                pass
            else:
                self._timer_save = loop.call_later(
                    self.save_delay, self.save, False)
                return

        start_time = time.time()

        if self.failsafe_backups:
            self._make_failsafe_backup()

        try:
            dump = json.dumps(self.data, indent=2, sort_keys=True)
        except TypeError:
            logger.error('bad value stored in %s, restoring', self.filename)
            self._recover_from_failsafe()
            return

        with open(self.filename, 'w') as file:
            file.write(dump)
        self._last_dump = dump

        interval = time.time() - start_time
        logger.info('%s write %s', self.filename, interval)

    def flush(self):
        """force an immediate dump to file"""
        logger.info('flushing %s', self.filename)
        self.save(delay=False)

    @property
    def pending(self):
        """whether a delayed dump is scheduled

        Returns:
            bool: True if a dump is scheduled
        """
        return self._timer_save is not None

    def new_account_wide(self, name, version, defaults):
        """get the settings namespace of an addon

        A stored namespace of a different version is dropped in favour of
        the defaults, missing entries are added from the defaults.

        Args:
            name (str): the namespace, usually the addon name
            version (int): version of the settings layout
            defaults (dict): default values for the settings

        Returns:
            dict: the live namespace, changes are picked up by `.save()`
        """
        namespace = self.data.get(name)
        if (not isinstance(namespace, dict)
                or namespace.get(VERSION_KEY) != version):
            if namespace is not None:
                logger.info('%s: resetting the stored settings to version %r',
                            name, version)
            namespace = self.data[name] = {}

        self.validate(defaults, [name])
        namespace[VERSION_KEY] = version
        return namespace

    def get_by_path(self, keys_list):
        """Get an item from .data by path

        Args:
            keys_list (list[str]): describing the path to the value

        Returns:
            mixed: the requested value

        Raises:
            KeyError: the path does not exist
        """
        try:
            return self._get_by_path(self.data, keys_list)
        except (KeyError, TypeError):
            raise KeyError('%s has no path %s'
                           % (self.filename, keys_list)) from None

    def set_by_path(self, keys_list, value, create_path=True):
        """set an item in .data by path

        Args:
            keys_list (list[str]): describing the path to the value
            value (mixed): the new value
            create_path (bool): toggle to ensure an existing path

        Raises:
            KeyError: the path does not exist
        """
        if create_path:
            self.ensure_path(keys_list[:-1])
        self.get_by_path(keys_list[:-1])[keys_list[-1]] = value

    @staticmethod
    def _get_by_path(source, path):
        if not path:
            return source
        return functools.reduce(operator.getitem, path[:-1], source)[path[-1]]

    def get_option(self, keyname):
        """get a top level entry or .default if the key does not exist"""
        try:
            return self.get_by_path([keyname])
        except KeyError:
            return self.default

    def exists(self, keys_list):
        """check if a path exists

        Args:
            keys_list (list[str]): describing the path

        Returns:
            bool: True if the full path is resolvable, otherwise False
        """
        try:
            self.get_by_path(keys_list)
        except KeyError:
            return False
        return True

    def ensure_path(self, path):
        """create a path of dicts if the given path does not exist

        Args:
            path (list[str]): describing the path

        Returns:
            bool: True if the path did not exist before, otherwise False

        Raises:
            AttributeError: on attempting to override an entry that is not
                a dict
        """
        if self.exists(path):
            return False

        base = self.data
        last_key = None
        try:
            for level in path:
                base = base.setdefault(level, {})
                last_key = level
        except AttributeError:
            raise AttributeError('%s has no dict at "%s" in the path %s' %
                                 (self.filename, last_key, path)) from None
        return True

    def validate(self, source, path=None):
        """ensure that the entries in source are all available in the data

        Missing entries and entries of a different type are replaced with
        the value from the source.

        Args:
            source (dict): default dict structure with values
            path (list[str]): list of keys to the dict to validate
        """
        if path is None:
            path = []
        for key, value in source.items():
            if not self.exists(path + [key]):
                self.set_by_path(path + [key], value)

            elif not isinstance(self.get_by_path(path + [key]), type(value)):
                self.set_by_path(path + [key], value)

            elif isinstance(value, dict) and value:
                self.validate(value, path + [key])

    def __getitem__(self, key):
        return self.get_option(key)

    def __setitem__(self, key, value):
        self.data[key] = value

    def __delitem__(self, key):
        del self.data[key]

    def __iter__(self):
        return iter(self.data)

    def __len__(self):
        return len(self.data)
