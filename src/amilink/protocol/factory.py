""" Convenience constructors that run text through the full transmission
    pipeline (cipher, binary conversion, line coding) and back again.
"""

from ..codec import ami
from ..codec import binary
from ..codec.cipher import Cipher
from .message import Message


def compose(text, key=None, timestamp=None):
    """ Return a :class:`Message` for the supplied *text*. If a *key* is
        provided the text is encrypted first, and the binary string is
        derived from the ciphertext; otherwise the binary string is derived
        from the text directly.
    """

    if key is None:
        encrypted = None
        coded = text
    else:
        encrypted = Cipher(key).encrypt(text)
        coded = encrypted

    bits = binary.text_to_bits(coded)
    signal = ami.encode(bits)

    return Message(text, encrypted, bits, signal, timestamp)



def recover(message, key=None):
    """ Return the text carried by the signal of *message*, reversing the
        steps of :func:`compose`. The signal, not the accompanying text
        fields, is the authoritative content: this is what the receiving end
        of the line would reconstruct.
    """

    bits = ami.decode(message.encoded_signal)
    text = binary.bits_to_text(bits)

    if key is not None:
        text = Cipher(key).decrypt(text)

    return text


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
