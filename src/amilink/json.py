''' Serialization wrapper: :func:`dumps` and :func:`loads` backed by the
    fastest JSON library available. msgspec is preferred when installed,
    then orjson (a declared dependency); the standard library module is
    the last resort. :func:`dumps` always returns bytes, whichever library
    is in use, and :data:`DecodeError` is the exception raised by
    :func:`loads` for malformed input.
'''

backend = None


def _select_msgspec():
    import msgspec

    encoder = msgspec.json.Encoder()
    decoder = msgspec.json.Decoder()
    return 'msgspec', encoder.encode, decoder.decode, msgspec.DecodeError


def _select_orjson():
    import orjson

    return 'orjson', orjson.dumps, orjson.loads, orjson.JSONDecodeError


def _select_json():
    import json

    def json_dumps(*args, **kwargs):
        return json.dumps(*args, **kwargs).encode()

    return 'json', json_dumps, json.loads, json.JSONDecodeError


for _select in (_select_msgspec, _select_orjson, _select_json):
    try:
        backend, dumps, loads, DecodeError = _select()
    except ImportError:
        continue
    break

del _select

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
