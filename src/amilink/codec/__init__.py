""" Line coding, and the text transformations that feed it.
"""

from . import ami
from . import binary
from . import cipher

from .ami import InvalidInput, InvalidSignal, encode, decode, validate
from .cipher import Cipher, CipherError

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
