# Copyright 2017 Google Inc. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""This package manages pulls from a v1 Docker Registry."""



import json
import logging
import os

from dockerfetch.client import docker_creds
from dockerfetch.client.v1 import docker_http


DEFAULT_REGISTRY_HOST = 'index.docker.io'

_TOKEN_HEADER = 'x-docker-token'
_ENDPOINTS_HEADER = 'x-docker-endpoints'


class TokenHeaderEmptyException(Exception):
  """Raised when the registry did not hand us an X-Docker-Token."""


def CheckLayerId(layer_id):
  """Checks a layer id can safely name a directory beneath the pull target.

  Args:
    layer_id: an id from a registry's ancestry response.

  Raises:
    BadStateException: the id is empty, or would escape the pull target.
  """
  separators = [sep for sep in ('/', '\\', os.sep, os.altsep) if sep]
  if (not layer_id or layer_id in ('.', '..') or
      any(sep in layer_id for sep in separators)):
    raise docker_http.BadStateException(
        'Invalid layer id in ancestry: %r' % layer_id)


class Session(object):
  """Pulls images from a single v1 registry host.

  A session caches one token per repository and the serving endpoints the
  registry announces, so it should be reused for every image on that host.
  It is not safe for concurrent use.
  """

  def __init__(
      self,
      host,
      creds=None,
      transport=None
  ):
    """Constructor.

    Args:
      host: the registry host, e.g. registry.example.com:5000
      creds: the docker_creds.Provider presented when requesting tokens.
      transport: the httplib2.Http-like object used to issue requests.
    """
    if host == 'docker.io':
      host = DEFAULT_REGISTRY_HOST
    self._host = host
    self._creds = creds or docker_creds.Anonymous()
    self._transport = docker_http.Transport(transport)
    self._tokens = {}
    self._endpoints = []

  @property
  def host(self):
    return self._host

  @property
  def tokens(self):
    return dict(self._tokens)

  @property
  def endpoints(self):
    return list(self._endpoints)

  def _endpoint(self):
    if self._endpoints:
      return self._endpoints[0]
    return self._host

  def _get(self, ref, path):
    token = self.token(ref)
    return self._transport.Request(
        docker_http.Url(self._endpoint(), path),
        headers={'authorization': token.Get()})

  def token(self, ref):
    """Returns the token for ref's repository, requesting one if needed.

    Args:
      ref: the docker_name.ImageReference whose repository we need.

    Raises:
      TokenHeaderEmptyException: the registry replied without a token.

    Returns:
      The docker_creds.Token for ref.name.
    """
    name = ref.name
    if name in self._tokens:
      return self._tokens[name]

    headers = {'x-docker-token': 'true'}
    auth = self._creds.Get()
    if auth:
      headers['authorization'] = auth

    url = docker_http.Url(self._host,
                          'repositories/{name}/images'.format(name=name))
    resp, unused_content = self._transport.Request(url, headers=headers)

    raw = resp.get(_TOKEN_HEADER, '')
    if not raw:
      raise TokenHeaderEmptyException(
          'HTTP Header X-Docker-Token is empty in the response to %s' % url)

    endpoints = resp.get(_ENDPOINTS_HEADER, '')
    for endpoint in endpoints.split(','):
      endpoint = endpoint.strip()
      if endpoint:
        logging.info('Registry %s redirects to %s', self._host, endpoint)
        self._endpoints.append(endpoint)

    self._tokens[name] = docker_creds.Token(raw)
    return self._tokens[name]

  def resolve_id(self, ref):
    """Resolves the content id that ref's tag points at.

    Args:
      ref: the docker_name.ImageReference to resolve.

    Raises:
      BadStateException: the registry replied with an empty id.

    Returns:
      ref itself when it is already resolved, otherwise a copy holding the
      content id.
    """
    if ref.content_id:
      return ref

    _, content = self._get(ref, 'repositories/{name}/tags/{tag}'.format(
        name=ref.name, tag=ref.tag))
    content_id = content.decode('utf8').strip().strip('"')
    if not content_id:
      raise docker_http.BadStateException(
          'Empty image id for %s' % ref)
    logging.info('Resolved %s to %s', ref, content_id)
    return ref.with_content_id(content_id)

  def resolve_ancestry(self, ref):
    """Resolves the ids of ref's image and all of its ancestors.

    The order is whatever the registry returns.

    Args:
      ref: the docker_name.ImageReference to resolve.

    Raises:
      ValueError: the response was not valid JSON.
      BadStateException: the response was not a list of ids, or an id
          cannot name a directory.

    Returns:
      A reference holding both its content id and its ancestry.
    """
    if ref.ancestry:
      return ref
    ref = self.resolve_id(ref)

    _, content = self._get(ref, 'images/{id}/ancestry'.format(
        id=ref.content_id))
    ancestry = json.loads(content.decode('utf8'))
    if (not isinstance(ancestry, list) or
        not all(isinstance(x, str) for x in ancestry)):
      raise docker_http.BadStateException(
          'Malformed JSON response: %s' % content)
    for layer_id in ancestry:
      CheckLayerId(layer_id)
    return ref.with_ancestry(ancestry)

  def _download(self, ref, path, filename):
    # httplib2 has no streaming mode, so the whole blob is held in memory
    # before it is written out.
    _, content = self._get(ref, path)
    with open(filename, 'wb') as writer:
      writer.write(content)

  def fetch_layers(self, ref, directory):
    """Downloads the metadata and layer of every image in ref's ancestry.

    Each ancestor is written to {directory}/{id}/json and
    {directory}/{id}/layer.tar.  The first failure aborts the pull, leaving
    whatever was already written in place.

    Args:
      ref: the docker_name.ImageReference to pull.
      directory: where to write the layers.

    Returns:
      The fully resolved reference.
    """
    ref = self.resolve_ancestry(ref)
    # The ancestry may have been supplied by the caller.
    for layer_id in ref.ancestry:
      CheckLayerId(layer_id)

    for layer_id in ref.ancestry:
      logging.info('Fetching layer %s', layer_id)
      layer_dir = os.path.join(directory, layer_id)
      os.makedirs(layer_dir, mode=0o755, exist_ok=True)

      self._download(ref, 'images/{id}/json'.format(id=layer_id),
                     os.path.join(layer_dir, 'json'))
      self._download(ref, 'images/{id}/layer'.format(id=layer_id),
                     os.path.join(layer_dir, 'layer.tar'))

    return ref
