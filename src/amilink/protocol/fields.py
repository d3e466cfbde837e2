"""Protocol constants.

Keep these in one place to avoid stringly-typed message handling.
"""

# Version of the on-the-wire protocol, identified by a single byte.
VERSION = b"a"

MSG = b"MSG"
ACK = b"ACK"
ERR = b"ERR"

TYPES = (MSG, ACK, ERR)

# Field names of a serialized Message.
ORIGINAL_TEXT = "original_text"
ENCRYPTED_TEXT = "encrypted_text"
BINARY_STRING = "binary_string"
ENCODED_SIGNAL = "encoded_signal"
TIMESTAMP = "timestamp"
