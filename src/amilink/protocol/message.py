""" A class representation of an amilink message: the text that was sent,
    each intermediate form it took on the way to the line, and the time it
    was created.
"""

import time as timemodule

from .. import json
from ..codec import ami
from . import fields


class ProtocolError(ValueError):
    """ A received record could not be interpreted as a :class:`Message`.
    """


class Message:
    """ The :class:`Message` carries every stage of the transformation of a
        single piece of text: the *original_text*, the *encrypted_text* (None
        if no cipher was applied), the *binary_string* derived from it, and
        the *encoded_signal* produced by the line coder. The *timestamp* is
        an integer number of milliseconds since the UNIX epoch, and defaults
        to the current time.

        Once a :class:`Message` has been encapsulated for transmission it is
        frozen; any attempt to modify it raises :class:`AttributeError`.
    """

    def __init__(self, original_text, encrypted_text=None, binary_string='', encoded_signal=(), timestamp=None):

        if timestamp is None:
            timestamp = int(timemodule.time() * 1000)

        self._encapsulated = None

        self.original_text = original_text
        self.encrypted_text = encrypted_text
        self.binary_string = binary_string
        self.encoded_signal = list(encoded_signal)
        self.timestamp = int(timestamp)


    def __setattr__(self, name, value):

        if name != '_encapsulated' and getattr(self, '_encapsulated', None) is not None:
            raise AttributeError('message is frozen after encapsulation, cannot set ' + name)

        object.__setattr__(self, name, value)


    def __eq__(self, other):
        if not isinstance(other, Message):
            return NotImplemented
        return self.to_dict() == other.to_dict()


    def __repr__(self):
        text = self.original_text
        if len(text) > 20:
            text = text[:20] + '...'

        return 'Message(original_text=%r, bits=%d, levels=%d, timestamp=%d)' % (text, len(self.binary_string), len(self.encoded_signal), self.timestamp)


    @property
    def frozen(self):
        return self._encapsulated is not None


    def to_dict(self):
        """ Return the fields of this :class:`Message` as a dictionary
            suitable for JSON serialization.
        """

        payload = dict()
        payload[fields.ORIGINAL_TEXT] = self.original_text
        payload[fields.ENCRYPTED_TEXT] = self.encrypted_text
        payload[fields.BINARY_STRING] = self.binary_string
        payload[fields.ENCODED_SIGNAL] = list(self.encoded_signal)
        payload[fields.TIMESTAMP] = self.timestamp
        return payload


    @classmethod
    def from_dict(cls, payload):
        """ Construct a :class:`Message` from a dictionary, as produced by
            :func:`to_dict`. A :class:`ProtocolError` is raised if a field is
            missing or has the wrong type, or if a signal level is
            not one of -1, 0, or +1.
        """

        if not isinstance(payload, dict):
            raise ProtocolError('message payload must be a JSON object, not ' + type(payload).__name__)

        original_text = _field(payload, fields.ORIGINAL_TEXT, str)
        encrypted_text = _field(payload, fields.ENCRYPTED_TEXT, str, optional=True)
        binary_string = _field(payload, fields.BINARY_STRING, str)
        encoded_signal = _field(payload, fields.ENCODED_SIGNAL, list)
        timestamp = _field(payload, fields.TIMESTAMP, int)

        for level in encoded_signal:
            if isinstance(level, bool) or not isinstance(level, int):
                raise ProtocolError('encoded_signal must contain only integers, found %r' % (level,))
            if level not in ami.levels:
                raise ProtocolError('encoded_signal level out of range: %r' % (level,))

        return cls(original_text, encrypted_text, binary_string, encoded_signal, timestamp)


    def encapsulate(self):
        """ Return the JSON encoding of this :class:`Message` as bytes.
            Calling this method multiple times will return the cached
            encapsulation rather than generate it anew.
        """

        if self._encapsulated is not None:
            return self._encapsulated

        self._encapsulated = json.dumps(self.to_dict())
        return self._encapsulated


# end of class Message



def _field(payload, name, kind, optional=False):

    try:
        value = payload[name]
    except KeyError:
        raise ProtocolError('message payload is missing the %r field' % (name))

    if value is None and optional:
        return None

    if isinstance(value, bool) or not isinstance(value, kind):
        raise ProtocolError('message field %r must be %s, not %s' % (name, kind.__name__, type(value).__name__))

    return value


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
