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
"""This package sets up logging for the command-line tools."""



import logging

_LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warning': logging.WARNING,
    'error': logging.ERROR,
}


def DefineCommandLineArgs(argparser):
  argparser.add_argument('--verbosity', action='store', default='info',
                         choices=sorted(_LEVELS),
                         help='The minimum level of log messages to print.')


def Init(args=None):
  """Configures the root logger from the parsed command-line args."""
  verbosity = getattr(args, 'verbosity', None) or 'info'
  logging.basicConfig(
      format='%(asctime)s %(levelname)s %(message)s',
      level=_LEVELS[verbosity])
