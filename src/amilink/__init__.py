""" Python implementation of amilink: AMI pseudoternary line coding, and a
    request/acknowledgment link that carries the encoded signal from a
    sender to a receiver.
"""

# Utility components.

from . import json
from . import config

# Submodules used by multiple other components.

from . import codec
from . import protocol
from . import transport

# Primary public-facing interfaces.

from .codec.ami import encode, decode, validate
from .protocol.message import Message
from .protocol.factory import compose, recover
from .transport import Receiver, Sender

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
