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

"""This package exposes credentials for talking to a Docker registry."""



import abc
import base64


class Provider(object, metaclass=abc.ABCMeta):
  """Interface for providing User Credentials for use with a Docker Registry."""

  @abc.abstractmethod
  def Get(self):
    """Produces a value suitable for use in the Authorization header."""


class Anonymous(Provider):
  """Implementation for anonymous access."""

  def Get(self):
    """Implement anonymous authentication."""
    return ''


class SchemeProvider(Provider):
  """Implementation for providing a challenge response credential."""

  def __init__(self, scheme):
    self._scheme = scheme

  @property
  @abc.abstractmethod
  def suffix(self):
    """Returns the authentication payload to follow the auth scheme."""

  def Get(self):
    """Gets the credential in a form suitable for an Authorization header."""
    return '%s %s' % (self._scheme, self.suffix)


class Basic(SchemeProvider):
  """Implementation for providing a username/password-based creds."""

  def __init__(self, username, password):
    super(Basic, self).__init__('Basic')
    self._username = username
    self._password = password

  @property
  def username(self):
    return self._username

  @property
  def password(self):
    return self._password

  @property
  def suffix(self):
    raw = (self.username + ':' + self.password).encode('utf8')
    return base64.b64encode(raw).decode('ascii')


class Token(SchemeProvider):
  """A repository-scoped access token issued by a v1 registry.

  The raw value comes from the X-Docker-Token response header, e.g.
    signature=4709c3e8d9,repository="library/busybox",access=read
  """

  def __init__(self, raw):
    super(Token, self).__init__('Token')
    self._raw = raw

  @property
  def suffix(self):
    return self._raw

  @property
  def signature(self):
    return self._field('signature')

  @property
  def repository(self):
    return self._field('repository')

  @property
  def access(self):
    return self._field('access')

  def _field(self, key):
    key = key.lower()
    for part in self._raw.split(','):
      part = part.strip()
      if not part.lower().startswith(key):
        continue
      # Unparseable segments are skipped rather than treated as errors.
      if part.count('=') != 1:
        continue
      return part.split('=', 1)[1]
    return ''

  def __str__(self):
    return self._raw

  def __eq__(self, other):
    return isinstance(other, Token) and self._raw == other._raw

  def __ne__(self, other):
    return not self.__eq__(other)

  def __hash__(self):
    return hash(self._raw)
