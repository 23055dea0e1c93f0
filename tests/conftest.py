"""Shared fixtures: a stand-in for httplib2.Http that serves canned replies."""

import http.client

import httplib2
import pytest


class FakeHttp(object):
  """Serves canned responses keyed by URL and records every request."""

  def __init__(self):
    self.routes = {}
    self.requests = []

  def add(self, url, status=200, headers=None, body=b''):
    self.routes[url] = (status, headers or {}, body)

  def urls(self):
    return [uri for _, uri, _ in self.requests]

  def request(self, uri, method='GET', body=None, headers=None, **unused):
    self.requests.append((method, uri, dict(headers or {})))
    status, headers, content = self.routes.get(uri, (404, {}, b''))
    info = {'status': str(status), 'reason': http.client.responses[status]}
    info.update(headers)
    resp = httplib2.Response(info)
    resp.reason = info['reason']
    return resp, content


@pytest.fixture
def fake_http():
  return FakeHttp()


REGISTRY = 'https://registry.example.com/v1'
TOKEN = 'signature=abc,repository="foo/bar",access=read'


def serve_image(fake, ancestry, name='foo/bar', tag='latest',
                registry=REGISTRY, endpoint=None):
  """Registers the full set of replies needed to pull one image."""
  headers = {'X-Docker-Token': TOKEN}
  serving = registry
  if endpoint:
    headers['X-Docker-Endpoints'] = endpoint
    serving = 'https://%s/v1' % endpoint

  fake.add('%s/repositories/%s/images' % (registry, name), headers=headers)
  fake.add('%s/repositories/%s/tags/%s' % (serving, name, tag),
           body=('"%s"' % ancestry[0]).encode('utf8'))
  fake.add('%s/images/%s/ancestry' % (serving, ancestry[0]),
           body=('[%s]' % ', '.join('"%s"' % x for x in ancestry)).encode())
  for layer_id in ancestry:
    fake.add('%s/images/%s/json' % (serving, layer_id),
             body=('{"id": "%s"}' % layer_id).encode('utf8'))
    fake.add('%s/images/%s/layer' % (serving, layer_id),
             body=b'tar bytes of ' + layer_id.encode('utf8'))
