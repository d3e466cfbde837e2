""" A reversible repeating-key XOR cipher. The ciphertext is base64 encoded
    so that it remains printable and can be embedded in a text record.

    This is an obfuscation step for the demonstration pipeline, not a
    cryptographic protection of any kind.
"""

import base64
import binascii


class CipherError(ValueError):
    """ Ciphertext could not be decoded or decrypted.
    """


def encrypt_bytes(data, key):
    """ XOR each byte of *data* against the repeating bytes of *key*.
    """

    if not key:
        raise ValueError('the key cannot be empty')

    try:
        key = key.encode('utf-8')
    except AttributeError:
        # Assume it is already bytes.
        pass

    length = len(key)
    return bytes(byte ^ key[index % length] for index, byte in enumerate(data))


# XOR is its own inverse.
decrypt_bytes = encrypt_bytes



class Cipher:
    """ Apply the XOR transform to text using a fixed *key*. If no *key* is
        provided the configured default is used.
    """

    def __init__(self, key=None):

        if key is None:
            from .. import config
            key = config.get().key

        self.key = key


    @property
    def key(self):
        return self._key


    @key.setter
    def key(self, key):
        if not key:
            raise ValueError('the key cannot be empty')

        self._key = key
        self._key_bytes = key.encode('utf-8')


    @property
    def masked_key(self):
        """ The key with all but the first and last two characters hidden.
        """

        key = self._key

        if len(key) <= 4:
            return '****'

        return key[:2] + '****' + key[-2:]


    def encrypt(self, text):
        """ Return the base64-armored encryption of *text*.
        """

        if text == '':
            return ''

        encrypted = encrypt_bytes(text.encode('utf-8'), self._key_bytes)
        return base64.b64encode(encrypted).decode('ascii')


    def decrypt(self, text):
        """ Return the plain text for the base64-armored *text*. A
            :class:`CipherError` is raised if *text* is not valid base64,
            or if the decrypted bytes are not valid UTF-8.
        """

        if text == '':
            return ''

        try:
            encrypted = base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError) as e:
            raise CipherError('ciphertext is not valid base64: ' + str(e)) from e

        decrypted = decrypt_bytes(encrypted, self._key_bytes)

        try:
            return decrypted.decode('utf-8')
        except UnicodeDecodeError as e:
            raise CipherError('decrypted text is not valid UTF-8, is the key correct?') from e


# end of class Cipher


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
