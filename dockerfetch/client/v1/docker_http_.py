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

"""This package facilitates HTTP requests against a v1 Docker registry."""



import http.client
import logging

from dockerfetch.client import docker_name
import httplib2


class BadStateException(Exception):
  """Exceptions when we have entered an unexpected state."""


class BadStatusException(Exception):
  """Exceptions when a registry replies with an unexpected status code."""

  def __init__(self, url, status, reason):
    super(BadStatusException, self).__init__(
        'Get("%s") returned "%d %s"' % (url, status, reason))
    self._url = url
    self._status = status
    self._reason = reason

  @property
  def url(self):
    return self._url

  @property
  def status(self):
    return self._status

  @property
  def reason(self):
    return self._reason


def Url(endpoint, path):
  return 'https://{endpoint}/v1/{path}'.format(endpoint=endpoint, path=path)


class Transport(object):
  """HTTP wrapper that checks status codes and sets common headers."""

  def __init__(
      self,
      transport=None
  ):
    """Constructor.

    Args:
      transport: the httplib2.Http-like object used to issue requests.
    """
    self._transport = transport or httplib2.Http()

  def Request(
      self,
      url,
      accepted_codes=None,
      method=None,
      headers=None
  ):
    """Wrapper containing much of the boilerplate REST logic for registries.

    Args:
      url: the URL to which to talk
      accepted_codes: the list of acceptable http status codes
      method: the HTTP method to use (defaults to GET)
      headers: additional request headers, e.g. Authorization

    Raises:
      BadStatusException: the status code was not in accepted_codes.

    Returns:
      The response of the HTTP request, and its contents.
    """
    if not method:
      method = 'GET'
    if accepted_codes is None:
      accepted_codes = [http.client.OK]

    request_headers = {'user-agent': docker_name.USER_AGENT}
    request_headers.update(headers or {})

    logging.debug('%s %s', method, url)
    resp, content = self._transport.request(
        url, method, headers=request_headers)

    if resp.status not in accepted_codes:
      raise BadStatusException(url, resp.status, resp.reason)

    return resp, content
