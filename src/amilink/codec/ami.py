""" AMI pseudoternary line coding. A logical 1 is transmitted as zero
    voltage; a logical 0 is transmitted as a pulse whose polarity alternates
    with every 0 bit. This is the inverse of conventional AMI, where the
    marks (1 bits) carry the alternating pulses.

    The alternation removes any DC component from the line, and it doubles
    as an error check: two consecutive pulses of the same polarity cannot
    be produced by a correct encoder, so a receiver seeing one knows the
    signal was damaged in transit.

    Signal levels are represented as integers::

        +1  positive voltage (+V)
         0  zero voltage
        -1  negative voltage (-V)
"""

levels = (-1, 0, 1)


class InvalidInput(ValueError):
    """ A bit string contained something other than '0' or '1'.
    """


class InvalidSignal(ValueError):
    """ A signal contained a level other than -1, 0, or +1.
    """


def encode(bits):
    """ Encode the binary string *bits* as a list of signal levels. The
        returned list is the same length as the input. The first 0 bit in
        any input is always encoded as +1; subsequent 0 bits alternate.
        An :class:`InvalidInput` exception is raised if *bits* contains any
        character other than '0' or '1'.
    """

    signal = list()

    # The polarity state is local to each call, so that every message
    # starts fresh and concurrent callers cannot interfere with each other.

    last_level = -1

    for position, bit in enumerate(bits):
        if bit == '1':
            signal.append(0)
        elif bit == '0':
            last_level = -last_level
            signal.append(last_level)
        else:
            raise InvalidInput("invalid bit %r at position %d, expected '0' or '1'" % (bit, position))

    return signal



def decode(signal):
    """ Decode a sequence of signal levels back into a binary string. Any
        non-zero level is a 0 bit regardless of polarity; decoding does not
        check the alternation, use :func:`validate` for that. An
        :class:`InvalidSignal` exception is raised for any level that is
        not -1, 0, or +1.
    """

    bits = list()

    for position, level in enumerate(signal):
        if level == 0:
            bits.append('1')
        elif level == 1 or level == -1:
            bits.append('0')
        else:
            raise InvalidSignal('invalid level %r at position %d, expected -1, 0, or +1' % (level, position))

    return ''.join(bits)



def validate(signal):
    """ Return True if *signal* is a well-formed AMI pseudoternary signal:
        every level is -1, 0, or +1, and no two consecutive non-zero levels
        share the same polarity. An empty signal is valid.
    """

    for level in signal:
        if level not in levels:
            return False

    if violations(signal):
        return False

    return True



def violations(signal):
    """ Return a list of the positions in *signal* where a non-zero level
        repeats the polarity of the previous non-zero level. Levels outside
        the valid set are ignored here; see :func:`validate`.
    """

    found = list()
    previous = 0

    for position, level in enumerate(signal):
        if level == 0 or level not in levels:
            continue

        if level == previous:
            found.append(position)

        previous = level

    return found



def format_signal(signal):
    """ Return a human-readable rendering of *signal*, such as
        ``[ 0, +V,  0, -V]``. Unrecognized levels are shown as ``?``.
    """

    symbols = {1: '+V', 0: ' 0', -1: '-V'}

    rendered = list()
    for level in signal:
        try:
            rendered.append(symbols[level])
        except (KeyError, TypeError):
            rendered.append(' ?')

    return '[' + ', '.join(rendered) + ']'



def statistics(signal):
    """ Return a dictionary describing the level distribution of *signal*:
        the total number of levels, and the count and percentage of each
        of the positive, zero, and negative levels.
    """

    total = len(signal)
    positive = 0
    zero = 0
    negative = 0

    for level in signal:
        if level > 0:
            positive += 1
        elif level == 0:
            zero += 1
        else:
            negative += 1

    def percent(count):
        if total == 0:
            return 0.0
        return count * 100.0 / total

    result = dict()
    result['total'] = total
    result['positive'] = positive
    result['zero'] = zero
    result['negative'] = negative
    result['positive_percent'] = percent(positive)
    result['zero_percent'] = percent(zero)
    result['negative_percent'] = percent(negative)

    # A balanced signal has equal positive and negative pulses, or differs
    # by one when the count of 0 bits is odd.

    result['dc_balance'] = positive - negative

    return result


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
