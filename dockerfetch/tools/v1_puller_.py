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
"""This package pulls images from a v1 Docker Registry.

Each layer is written to --directory as {id}/json and {id}/layer.tar,
alongside a "repositories" file naming the pulled tags.
"""



import argparse
import logging
import os
import tarfile

from dockerfetch.client import docker_creds
from dockerfetch.client import docker_name
from dockerfetch.client.v1 import docker_session
from dockerfetch.client.v1 import save
from dockerfetch.tools import logging_setup

import httplib2

parser = argparse.ArgumentParser(
    description='Pull images from a v1 Docker Registry.')

parser.add_argument('--name', action='append',
                    help=('The name of a docker image to pull, e.g. '
                          'library/busybox:latest. May be repeated.'))

parser.add_argument('--directory', action='store',
                    help='Where to save the image\'s files.')

parser.add_argument('--tarball', action='store',
                    help='Where to optionally save a "docker load" tarball.')

parser.add_argument('--username', action='store',
                    help='The username to present when requesting tokens.')

parser.add_argument('--password', action='store',
                    help='The password to present when requesting tokens.')

logging_setup.DefineCommandLineArgs(parser)


def main(argv=None):
  args = parser.parse_args(argv)
  logging_setup.Init(args=args)

  if not args.name or not args.directory:
    raise Exception('--name and --directory are required arguments.')

  creds = docker_creds.Anonymous()
  if args.username or args.password:
    creds = docker_creds.Basic(args.username or '', args.password or '')

  os.makedirs(args.directory, exist_ok=True)
  transport = httplib2.Http()

  # One session per registry host, so tokens are negotiated only once.
  sessions = {}
  refs = []
  for name in args.name:
    ref = docker_name.ImageReference(name)
    if ref.host not in sessions:
      sessions[ref.host] = docker_session.Session(
          ref.host, creds=creds, transport=transport)
    logging.info('Pulling %s', ref)
    refs.append(sessions[ref.host].fetch_layers(ref, args.directory))

  save.write_repositories(args.directory, refs)

  if args.tarball:
    with tarfile.open(name=args.tarball, mode='w') as tar:
      save.tarball(refs, args.directory, tar)


if __name__ == '__main__':
  main()
