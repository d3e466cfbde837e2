""" Runtime settings for amilink. Every setting has a built-in default,
    which can be overridden by a ``settings.json`` file in the amilink
    home directory, then by ``AMILINK_<NAME>`` environment variables, and
    finally by keyword arguments passed directly to :class:`Settings`.
"""

import os
import threading

from . import json


_cache = dict()
_cache_lock = threading.Lock()

ack_policies = ('assume', 'retry', 'fail')

defaults = dict()
defaults['address'] = 'localhost'
defaults['port'] = 5555
defaults['bind_address'] = '*'
defaults['connect_timeout'] = 5.0
defaults['ack_timeout'] = 5.0
defaults['probe_timeout'] = 2.0
defaults['poll_interval'] = 1.0
defaults['stop_timeout'] = 2.0
defaults['max_workers'] = 8
defaults['send_workers'] = 4
defaults['ack_policy'] = 'assume'
defaults['retries'] = 1
defaults['minimum_port'] = 10079
defaults['maximum_port'] = 13679
defaults['key'] = 'UTFPR-COMUNICACAO-DE-DADOS'


class Settings:
    """ A convenience class to represent amilink settings. Each setting is
        available as an attribute, or via dictionary-style lookup. The
        *environ* argument is a mapping used in place of :data:`os.environ`,
        and *filename* is the JSON file to consult; by default this is
        ``settings.json`` in :func:`directory`. Any additional keyword
        arguments take precedence over all other sources.
    """

    def __init__(self, filename=None, environ=None, **overrides):

        if environ is None:
            environ = os.environ

        values = dict(defaults)

        if filename is None:
            filename = os.path.join(directory(), 'settings.json')

        values.update(self._load_file(filename))
        values.update(self._load_environment(environ))

        for name in overrides:
            if name not in defaults:
                raise TypeError('unknown setting: ' + repr(name))

        values.update(overrides)

        for name, value in values.items():
            setattr(self, name, _coerce(name, value))

        self._check()


    def __contains__(self, name):
        return name in defaults


    def __getitem__(self, name):
        if name not in defaults:
            raise KeyError('unknown setting: ' + repr(name))
        return getattr(self, name)


    def __repr__(self):
        return 'Settings(%s)' % (', '.join('%s=%r' % (name, value) for name, value in self.items()))


    def items(self):
        return [(name, getattr(self, name)) for name in defaults]


    def replace(self, **overrides):
        """ Return a new :class:`Settings` instance with the same values as
            this one, except for the supplied *overrides*.
        """

        values = dict(self.items())
        values.update(overrides)
        return Settings(filename='', environ={}, **values)


    @property
    def ack_timeout_ms(self):
        return int(self.ack_timeout * 1000)


    @property
    def poll_interval_ms(self):
        return int(self.poll_interval * 1000)


    def _check(self):

        if self.ack_policy not in ack_policies:
            raise ValueError('ack_policy must be one of %s, not %r' % (', '.join(ack_policies), self.ack_policy))

        if self.port < 0 or self.port > 65535:
            raise ValueError('port out of range: %d' % (self.port))

        if self.minimum_port > self.maximum_port:
            raise ValueError('minimum_port cannot exceed maximum_port')

        if self.max_workers < 1 or self.send_workers < 1:
            raise ValueError('worker counts must be at least 1')

        if self.retries < 0:
            raise ValueError('retries cannot be negative')

        for name in ('connect_timeout', 'ack_timeout', 'probe_timeout', 'poll_interval', 'stop_timeout'):
            if getattr(self, name) <= 0:
                raise ValueError(name + ' must be positive')

        if not self.key:
            raise ValueError('the cipher key cannot be empty')


    def _load_environment(self, environ):

        values = dict()

        for name in defaults:
            variable = 'AMILINK_' + name.upper()
            try:
                values[name] = environ[variable]
            except KeyError:
                continue

        return values


    def _load_file(self, filename):

        if not filename:
            return dict()

        try:
            file = open(filename, 'rb')
        except FileNotFoundError:
            return dict()

        with file:
            contents = file.read()

        try:
            loaded = json.loads(contents)
        except (json.DecodeError, ValueError) as e:
            raise ValueError('invalid JSON in %s: %s' % (filename, str(e))) from e

        if not isinstance(loaded, dict):
            raise ValueError('%s must contain a JSON object' % (filename))

        for name in loaded:
            if name not in defaults:
                raise ValueError('unknown setting in %s: %r' % (filename, name))

        return loaded


# end of class Settings



def _coerce(name, value):
    """ Translate *value* to the type of the default for the setting *name*.
        Environment variables always arrive as strings.
    """

    default = defaults[name]
    kind = type(default)

    if isinstance(value, kind) and not isinstance(value, bool):
        return value

    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ValueError('invalid value for %s: %r' % (name, value)) from e



def directory(default=None):
    """ Return the directory location where amilink settings are found.
        The default is ``$HOME/.amilink``, which can be overridden by setting
        the ``AMILINK_HOME`` environment variable, or by passing a *default*
        here, which sets ``AMILINK_HOME`` for any subprocesses.
    """

    if default is not None:
        os.environ['AMILINK_HOME'] = default

    try:
        return os.environ['AMILINK_HOME']
    except KeyError:
        pass

    try:
        home = os.environ['HOME']
    except KeyError:
        raise RuntimeError('AMILINK_HOME and HOME environment variables not set, cannot determine amilink settings directory')

    return os.path.join(home, '.amilink')



def get():
    """ Return the process-wide :class:`Settings` instance, loading it on
        first use.
    """

    with _cache_lock:
        try:
            return _cache['settings']
        except KeyError:
            pass

        settings = Settings()
        _cache['settings'] = settings
        return settings



def reset():
    """ Discard the cached :class:`Settings`; the next call to :func:`get`
        will load them again.
    """

    with _cache_lock:
        _cache.clear()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
