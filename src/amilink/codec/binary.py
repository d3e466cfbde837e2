""" Conversion between text and binary strings. Text is encoded as UTF-8,
    and each byte becomes eight characters of '0' or '1', most significant
    bit first.
"""

from .ami import InvalidInput


def text_to_bits(text):
    """ Return the binary string representation of *text*.
    """

    bits = list()
    for byte in text.encode('utf-8'):
        bits.append(format(byte, '08b'))

    return ''.join(bits)



def bits_to_text(bits):
    """ Return the text represented by the binary string *bits*. The length
        of *bits* must be a multiple of eight, and the resulting bytes must
        be valid UTF-8; an :class:`InvalidInput` exception is raised
        otherwise.
    """

    if len(bits) % 8 != 0:
        raise InvalidInput('binary string length must be a multiple of 8, not %d' % (len(bits)))

    for position, bit in enumerate(bits):
        if bit != '0' and bit != '1':
            raise InvalidInput("invalid bit %r at position %d, expected '0' or '1'" % (bit, position))

    data = bytearray()
    for start in range(0, len(bits), 8):
        data.append(int(bits[start:start + 8], 2))

    try:
        return data.decode('utf-8')
    except UnicodeDecodeError as e:
        raise InvalidInput('binary string is not valid UTF-8: ' + str(e)) from e



def is_valid_bits(bits):
    """ Return True if *bits* is a non-empty binary string whose length is
        a multiple of eight.
    """

    if not bits or len(bits) % 8 != 0:
        return False

    return set(bits) <= set('01')



def format_bits(bits):
    """ Return *bits* with a space between each group of eight.
    """

    groups = [bits[start:start + 8] for start in range(0, len(bits), 8)]
    return ' '.join(groups)



def describe(text):
    """ Return a dictionary with the character, byte, and bit counts for
        the conversion of *text*.
    """

    encoded = text.encode('utf-8')

    result = dict()
    result['characters'] = len(text)
    result['bytes'] = len(encoded)
    result['bits'] = len(encoded) * 8
    return result


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
