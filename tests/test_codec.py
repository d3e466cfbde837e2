import itertools
import pytest

from amilink.codec import ami


def test_reference_vectors():
    assert ami.encode('10110001') == [0, 1, 0, 0, -1, 1, -1, 0]
    assert ami.encode('11111111') == [0, 0, 0, 0, 0, 0, 0, 0]
    assert ami.encode('00000000') == [1, -1, 1, -1, 1, -1, 1, -1]


def test_empty():
    assert ami.encode('') == []
    assert ami.decode([]) == ''
    assert ami.validate([]) == True


def test_invalid_input():
    with pytest.raises(ami.InvalidInput):
        ami.encode('102')

    with pytest.raises(ami.InvalidInput):
        ami.encode('01 1')

    # The exception is a ValueError, for callers that don't care about
    # the specific flavor.

    with pytest.raises(ValueError):
        ami.encode('x')


def test_invalid_signal():
    with pytest.raises(ami.InvalidSignal):
        ami.decode([2])

    with pytest.raises(ami.InvalidSignal):
        ami.decode([0, 1, -2])


def test_round_trip():
    """ Exhaustively check every bit string up to ten bits long.
    """

    for length in range(11):
        for combination in itertools.product('01', repeat=length):
            bits = ''.join(combination)
            signal = ami.encode(bits)

            assert len(signal) == len(bits)
            assert ami.decode(signal) == bits
            assert ami.validate(signal) == True


def test_first_zero_is_positive():
    for bits in ('0', '10', '1110', '111111110101'):
        signal = ami.encode(bits)
        first = bits.index('0')
        assert signal[first] == 1


def test_alternation():
    signal = ami.encode('0110100111000101')
    pulses = [level for level in signal if level != 0]

    assert len(pulses) == 8
    for previous, current in zip(pulses, pulses[1:]):
        assert previous == -current


def test_encode_is_independent_per_call():
    # An odd number of zeros leaves the last pulse positive; the next call
    # must still start at +1.

    assert ami.encode('0') == [1]
    assert ami.encode('0') == [1]
    assert ami.encode('000') == [1, -1, 1]
    assert ami.encode('10') == [0, 1]


def test_validate_rejects():
    assert ami.validate([1, 1]) == False
    assert ami.validate([1, 0, 0, 1]) == False
    assert ami.validate([-1, 0, -1]) == False
    assert ami.validate([0, 2, 0]) == False
    assert ami.validate([1, 0, -1, 0, 1]) == True

    # Decoding ignores alternation entirely.
    assert ami.decode([1, 1]) == '00'


def test_violations():
    assert ami.violations([1, -1, 1]) == []
    assert ami.violations([1, 0, 1, -1, -1]) == [2, 4]
    assert ami.violations([]) == []


def test_format_signal():
    assert ami.format_signal([]) == '[]'
    assert ami.format_signal([0, 1, -1]) == '[ 0, +V, -V]'
    assert ami.format_signal([5]) == '[ ?]'


def test_statistics():
    stats = ami.statistics(ami.encode('10110001'))

    assert stats['total'] == 8
    assert stats['positive'] == 2
    assert stats['negative'] == 2
    assert stats['zero'] == 4
    assert stats['zero_percent'] == 50.0
    assert stats['dc_balance'] == 0

    empty = ami.statistics([])
    assert empty['total'] == 0
    assert empty['zero_percent'] == 0.0


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
