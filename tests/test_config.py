import json
import os

import pytest

import amilink
from amilink import config


def test_defaults():
    settings = config.Settings(filename='', environ={})

    assert settings.address == 'localhost'
    assert settings.port == 5555
    assert settings.ack_policy == 'assume'
    assert settings['max_workers'] == 8
    assert settings.ack_timeout_ms == 5000
    assert 'port' in settings
    assert 'nonsense' not in settings

    with pytest.raises(KeyError):
        settings['nonsense']


def test_precedence(tmp_path):
    filename = tmp_path / 'settings.json'
    filename.write_text(json.dumps({'port': 6000, 'ack_timeout': 0.5, 'retries': 3}))

    environ = {'AMILINK_PORT': '7000', 'AMILINK_ACK_POLICY': 'retry'}

    settings = config.Settings(filename=str(filename), environ=environ, retries=2)

    assert settings.port == 7000
    assert settings.ack_timeout == 0.5
    assert settings.ack_policy == 'retry'
    assert settings.retries == 2


def test_coercion():
    environ = {'AMILINK_ACK_TIMEOUT': '2', 'AMILINK_MAX_WORKERS': '3'}
    settings = config.Settings(filename='', environ=environ)

    assert settings.ack_timeout == 2.0
    assert isinstance(settings.ack_timeout, float)
    assert settings.max_workers == 3

    with pytest.raises(ValueError):
        config.Settings(filename='', environ={'AMILINK_PORT': 'eighty'})


def test_invalid():
    with pytest.raises(ValueError):
        config.Settings(filename='', environ={}, ack_policy='sometimes')

    with pytest.raises(ValueError):
        config.Settings(filename='', environ={}, port=70000)

    with pytest.raises(ValueError):
        config.Settings(filename='', environ={}, ack_timeout=0)

    with pytest.raises(ValueError):
        config.Settings(filename='', environ={}, max_workers=0)

    with pytest.raises(TypeError):
        config.Settings(filename='', environ={}, colour='blue')


def test_invalid_file(tmp_path):
    filename = tmp_path / 'settings.json'

    filename.write_text('{not json')
    with pytest.raises(ValueError):
        config.Settings(filename=str(filename), environ={})

    filename.write_text(json.dumps({'colour': 'blue'}))
    with pytest.raises(ValueError):
        config.Settings(filename=str(filename), environ={})

    filename.write_text(json.dumps([1, 2]))
    with pytest.raises(ValueError):
        config.Settings(filename=str(filename), environ={})


def test_replace():
    settings = config.Settings(filename='', environ={})
    changed = settings.replace(port=6001)

    assert changed.port == 6001
    assert settings.port == 5555
    assert changed.key == settings.key


def test_directory_and_cache(tmp_path, monkeypatch):
    monkeypatch.setenv('AMILINK_HOME', str(tmp_path))
    assert config.directory() == str(tmp_path)

    (tmp_path / 'settings.json').write_text(json.dumps({'port': 6123}))

    config.reset()
    try:
        first = config.get()
        assert first.port == 6123
        assert config.get() is first
    finally:
        config.reset()


def test_home_fallback(monkeypatch):
    monkeypatch.delenv('AMILINK_HOME', raising=False)
    monkeypatch.setenv('HOME', '/home/someone')

    assert config.directory() == os.path.join('/home/someone', '.amilink')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
