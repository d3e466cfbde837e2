import json
import amilink


def test_json_encode_and_decode():
    encode_and_decode(json.dumps, json.loads, dump_is_bytes=False)


def test_amilink_encode_and_decode():
    encode_and_decode(amilink.json.dumps, amilink.json.loads)
    assert amilink.json.backend in ('msgspec', 'orjson', 'json')


def test_message_encode():
    message = amilink.compose('json')
    decoded = amilink.json.loads(message.encapsulate())

    assert decoded['original_text'] == 'json'
    assert decoded['encrypted_text'] is None
    assert decoded['encoded_signal'] == message.encoded_signal


def encode_and_decode(dumps, loads, dump_is_bytes=True):

    input_dictionary = dict()
    input_dictionary['list'] = [1, 0, -1, 'a', 'b', None, 'c', 'z']
    input_dictionary['text'] = 'Olá'
    input_dictionary['none'] = None
    input_dictionary['true'] = True
    input_dictionary['false'] = False

    encoded = dumps(input_dictionary)

    if dump_is_bytes:
        assert isinstance(encoded, bytes)
    else:
        assert isinstance(encoded, str)

    # It won't do to compare the encoded JSON against a pre-set notion of
    # what the encoded output should look like, as there is variance in
    # the handling of whitespace between the different modules used here.

    decoded = loads(encoded)
    assert isinstance(decoded, dict)
    assert decoded == input_dictionary


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
