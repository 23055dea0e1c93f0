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

"""This package provides tools for saving pulled docker images."""



import io
import json
import os
import tarfile

from dockerfetch.client.v1 import docker_session



def _resolve(refs, transport):
  resolved = []
  for ref in refs:
    if not ref.content_id:
      # Callers sharing a host should pass resolved references instead.
      session = docker_session.Session(ref.host, transport=transport)
      ref = session.resolve_id(ref)
    resolved.append(ref)
  return resolved


def repositories(
    refs,
    transport=None
):
  """Produce the contents of a "repositories" file for the references.

  Args:
    refs: the docker_name.ImageReferences to include.
    transport: the httplib2.Http-like object used for any reference that
        still needs its content id resolved.

  Returns:
    The JSON mapping of repository name to tag to content id.
  """
  mapping = {}
  for ref in _resolve(refs, transport):
    tags = mapping.get(ref.name, {})
    tags[ref.tag] = ref.content_id
    mapping[ref.name] = tags
  return json.dumps(mapping, sort_keys=True)


def write_repositories(
    directory,
    refs,
    transport=None
):
  """Write the "repositories" file for the references into directory."""
  filename = os.path.join(directory, 'repositories')
  with open(filename, 'w') as writer:
    writer.write(repositories(refs, transport=transport))
  return filename


def tarball(
    refs,
    directory,
    tar
):
  """Produce a "docker load" compatible tarball from fetched layers.

  Args:
    refs: the docker_name.ImageReferences, each holding its ancestry, whose
        layers were fetched into directory.
    directory: where Session.fetch_layers wrote the layers.
    tar: the open tarfile into which we are writing the image tarball.
  """
  def add_file(filename, contents):
    info = tarfile.TarInfo(filename)
    info.size = len(contents)
    tar.addfile(tarinfo=info, fileobj=io.BytesIO(contents))

  def read_file(layer_id, filename):
    with open(os.path.join(directory, layer_id, filename), 'rb') as reader:
      return reader.read()

  seen = set()
  # Each layer is encoded as a directory in the larger tarball of the form:
  #  {layer_id}\
  #    layer.tar
  #    VERSION
  #    json
  for ref in refs:
    if not ref.ancestry:
      raise ValueError('%s has not had its ancestry resolved' % ref)

    for layer_id in ref.ancestry:
      # Add each layer_id exactly once.
      if layer_id in seen:
        continue
      seen.add(layer_id)
      docker_session.CheckLayerId(layer_id)

      add_file(layer_id + '/VERSION', b'1.0')
      add_file(layer_id + '/layer.tar', read_file(layer_id, 'layer.tar'))
      add_file(layer_id + '/json', read_file(layer_id, 'json'))

  # Add the metadata tagging the top layer.
  add_file('repositories', repositories(refs).encode('utf8'))
