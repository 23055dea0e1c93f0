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

"""This package defines ImageReference a way of representing an image uri."""



import os
import sys



class BadNameException(Exception):
  """Exceptions when a bad docker name is supplied."""


class AmbiguousReferenceException(BadNameException):
  """Raised when a reference has too many colons to split name from tag."""


class AlreadyResolvedException(Exception):
  """Raised when a resolved reference is given a conflicting resolution."""


DEFAULT_HUB_NAMESPACE = 'docker.io'
DEFAULT_TAG = 'latest'

_TAG_CHARS = 'abcdefghijklmnopqrstuvwxyz0123456789_-.ABCDEFGHIJKLMNOPQRSTUVWXYZ'
# These have the form: sha256:<hex string>
_DIGEST_CHARS = 'sh:0123456789abcdef'

_APP = os.path.basename(sys.argv[0]) if sys.argv[0] else 'console'
USER_AGENT = '//dockerfetch/client:%s' % _APP


def _check_element(
    name,
    element,
    characters,
    min_len,
    max_len
):
  """Checks a given named element matches character and length restrictions.

  Args:
    name: the name of the element being validated
    element: the actual element being checked
    characters: acceptable characters for this element, or None
    min_len: minimum element length, or None
    max_len: maximum element length, or None

  Raises:
    BadNameException: one of the restrictions was not met.
  """
  length = len(element)
  if min_len and length < min_len:
    raise BadNameException('Invalid %s: %s, must be at least %s characters'
                           % (name, element, min_len))

  if max_len and length > max_len:
    raise BadNameException('Invalid %s: %s, must be at most %s characters'
                           % (name, element, max_len))

  if element.strip(characters):
    raise BadNameException('Invalid %s: %s, acceptable characters include: %s'
                           % (name, element, characters))


def _check_tag(tag):
  _check_element('tag', tag, _TAG_CHARS, 1, 127)


def _check_digest(digest):
  _check_element('digest', digest, _DIGEST_CHARS, 7 + 64, 7 + 64)


class ImageReference(object):
  """Stores a human-typed image reference in a structured form.

  The host, name and tag are derived from the original string on every
  access, so they never drift from it.  The content id and ancestry are
  filled in by a registry session, which hands back a new reference rather
  than modifying this one.
  """

  def __init__(
      self,
      original,
      tag=None,
      digest=None,
      content_id=None,
      ancestry=None
  ):
    if not original:
      raise BadNameException('An image reference must be specified')

    if tag:
      _check_tag(tag)
    if digest:
      _check_digest(digest)

    self._original = original
    self._tag = tag or ''
    self._digest = digest or ''
    self._content_id = content_id or ''
    self._ancestry = tuple(ancestry or ())

  def _ambiguous(self):
    return AmbiguousReferenceException(
        'Image reference is ambiguous, expected at most one tag separator '
        'after the registry host, saw: %s' % self._original)

  @property
  def original(self):
    return self._original

  @property
  def host(self):
    if '/' in self._original:
      first = self._original.split('/')[0]
      # It looks like an address, or it is localhost.
      if '.' in first or ':' in first or first == 'localhost':
        return first
    return DEFAULT_HUB_NAMESPACE

  @property
  def name(self):
    name = self._original
    prefix = self.host + '/'
    if name.startswith(prefix):
      name = name[len(prefix):]

    count = name.count(':')
    if count == 0:
      return name
    if count == 1:
      return name.split(':')[0]
    raise self._ambiguous()

  @property
  def tag(self):
    if self._tag:
      return self._tag

    count = self._original.count(':')
    if count == 0:
      return DEFAULT_TAG

    if '/' in self._original:
      last = self._original.split('/')[-1]
      if ':' in last:
        return last.split(':')[1]
      return DEFAULT_TAG

    if count == 1:
      return self._original.split(':')[1]
    raise self._ambiguous()

  @property
  def digest(self):
    return self._digest

  @property
  def content_id(self):
    return self._content_id

  @property
  def ancestry(self):
    return self._ancestry

  def _replace(self, content_id, ancestry):
    return ImageReference(self._original,
                          tag=self._tag,
                          digest=self._digest,
                          content_id=content_id,
                          ancestry=ancestry)

  def with_content_id(self, content_id):
    """Returns a copy of this reference resolved to content_id.

    Args:
      content_id: the registry's id for the image this reference names.

    Returns:
      A new ImageReference, or this one when it already holds content_id.

    Raises:
      AlreadyResolvedException: this reference holds a different id.
    """
    if self._content_id == content_id:
      return self
    if self._content_id:
      raise AlreadyResolvedException(
          '%s is already resolved to %s, refusing %s'
          % (self, self._content_id, content_id))
    return self._replace(content_id, self._ancestry)

  def with_ancestry(self, ancestry):
    """Returns a copy of this reference holding the given ancestry."""
    ancestry = tuple(ancestry)
    if self._ancestry == ancestry:
      return self
    if self._ancestry:
      raise AlreadyResolvedException(
          '%s already has an ancestry of %d layers'
          % (self, len(self._ancestry)))
    return self._replace(self._content_id, ancestry)

  def __str__(self):
    return '{host}/{name}:{tag}'.format(
        host=self.host, name=self.name, tag=self.tag)

  def __repr__(self):
    return 'ImageReference(%r)' % self._original

  def __eq__(self, other):
    return (isinstance(other, ImageReference) and
            self.host == other.host and self.name == other.name and
            self.tag == other.tag and self.digest == other.digest)

  def __ne__(self, other):
    return not self.__eq__(other)

  def __hash__(self):
    return hash((self.host, self.name, self.tag, self.digest))
