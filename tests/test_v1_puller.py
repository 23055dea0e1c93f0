"""Tests for the v1_puller command-line tool."""

import json
import tarfile
from unittest import mock

import pytest

from conftest import serve_image
from dockerfetch.tools import v1_puller_


def _run(fake, argv):
  with mock.patch.object(v1_puller_.httplib2, 'Http', return_value=fake):
    v1_puller_.main(argv)


def test_requires_name_and_directory(tmp_path):
  with pytest.raises(Exception, match='required'):
    v1_puller_.main(['--directory', str(tmp_path)])


def test_pulls_into_directory(fake_http, tmp_path):
  serve_image(fake_http, ['c', 'b'])
  serve_image(fake_http, ['c', 'b'], tag='1.0')
  tarball = tmp_path / 'image.tar'

  _run(fake_http, [
      '--name', 'registry.example.com/foo/bar',
      '--name', 'registry.example.com/foo/bar:1.0',
      '--directory', str(tmp_path / 'out'),
      '--tarball', str(tarball),
      '--verbosity', 'debug',
  ])

  assert (tmp_path / 'out' / 'b' / 'layer.tar').exists()
  repositories = json.loads((tmp_path / 'out' / 'repositories').read_text())
  assert repositories == {'foo/bar': {'latest': 'c', '1.0': 'c'}}

  # Both names share a host, so only one token is negotiated.
  token_requests = [u for u in fake_http.urls() if u.endswith('/images')]
  assert len(token_requests) == 1

  with tarfile.open(str(tarball)) as tar:
    assert 'c/json' in tar.getnames()


def test_creates_directory_for_empty_ancestry(fake_http, tmp_path):
  serve_image(fake_http, ['c'])
  fake_http.add('https://registry.example.com/v1/images/c/ancestry',
                body=b'[]')
  out = tmp_path / 'missing' / 'out'

  _run(fake_http, [
      '--name', 'registry.example.com/foo/bar',
      '--directory', str(out),
  ])

  assert json.loads((out / 'repositories').read_text()) == {
      'foo/bar': {'latest': 'c'}}
