import pytest

from amilink.codec import binary
from amilink.codec.ami import InvalidInput


def test_text_to_bits():
    assert binary.text_to_bits('') == ''
    assert binary.text_to_bits('A') == '01000001'
    assert binary.text_to_bits('Hi') == '0100100001101001'

    # Multi-byte UTF-8 characters contribute eight bits per byte.
    assert len(binary.text_to_bits('ç')) == 16


def test_bits_to_text():
    assert binary.bits_to_text('') == ''
    assert binary.bits_to_text('01000001') == 'A'

    for text in ('hello', 'Teste de Criptografia com Acentos: áéíóú ãõ çÇ', '\x00\x7f'):
        assert binary.bits_to_text(binary.text_to_bits(text)) == text


def test_bits_to_text_rejects():
    with pytest.raises(InvalidInput):
        binary.bits_to_text('0100000')

    with pytest.raises(InvalidInput):
        binary.bits_to_text('0100000x')

    # A lone continuation byte is not valid UTF-8.
    with pytest.raises(InvalidInput):
        binary.bits_to_text('10000000')


def test_is_valid_bits():
    assert binary.is_valid_bits('01000001') == True
    assert binary.is_valid_bits('') == False
    assert binary.is_valid_bits('0100') == False
    assert binary.is_valid_bits('0100000a') == False


def test_format_and_describe():
    assert binary.format_bits('0100100001101001') == '01001000 01101001'
    assert binary.format_bits('0101') == '0101'
    assert binary.format_bits('') == ''

    info = binary.describe('ação')
    assert info['characters'] == 4
    assert info['bytes'] == 6
    assert info['bits'] == 48


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
