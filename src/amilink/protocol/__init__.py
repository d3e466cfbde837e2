""" The amilink message envelope, and its representation on the wire.
    Nothing in this package depends on a particular transport; the
    :mod:`amilink.transport` package moves the frames produced here.
"""

from . import fields
from . import message
from . import wire
from . import factory

from .message import Message
from .message import ProtocolError

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
