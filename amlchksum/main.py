#! /usr/bin/env python3
#
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import errno
import sys

import click

from amlchksum import image, amlchksum_version
from amlchksum.dumpinfo import dump_imginfo

MIN_PYTHON_VERSION = (3, 6)
if sys.version_info < MIN_PYTHON_VERSION:
    sys.exit("Python %s.%s or newer is required by amlchksum."
             % MIN_PYTHON_VERSION)

valid_endians = ['little', 'big']


class ArgumentError(click.UsageError):
    exit_code = errno.EINVAL


class ImageIOError(click.ClickException):
    """Reports an OS error and exits with its errno."""

    def __init__(self, err):
        super().__init__(str(err))
        self.exit_code = err.errno or 1


@click.argument('imgfile', required=False)
@click.option('-s', '--silent', default=False, is_flag=True,
              help='Do not print header fields and digests')
@click.option('-e', '--endian', type=click.Choice(valid_endians),
              default='little', help="Select little or big endian")
@click.command(help='''Write the SD header at 0x200 and re-checksum the
               primary header of a boot image in place\n
               IMGFILE is modified in place''',
               context_settings=dict(help_option_names=['-h', '--help']))
def sign(imgfile, endian, silent):
    if imgfile is None:
        raise ArgumentError("Missing filename.")
    try:
        with image.Image(imgfile, endian=endian, silent=silent) as img:
            img.update()
    except OSError as e:
        raise ImageIOError(e)


@click.argument('imgfile')
@click.option('-e', '--endian', type=click.Choice(valid_endians),
              default='little', help="Select little or big endian")
@click.command(help="Check the digests of the primary and SD headers")
def verify(imgfile, endian):
    try:
        with image.Image(imgfile, endian=endian, mode='rb') as img:
            ret, digests = img.verify()
    except OSError as e:
        raise ImageIOError(e)
    if ret == image.VerifyResult.OK:
        print("Image was correctly validated")
        print("Primary digest: {}".format(digests[0].hex()))
        print("SD digest: {}".format(digests[1].hex()))
        return
    elif ret == image.VerifyResult.INVALID_MAGIC:
        print("Invalid header magic; is this an Amlogic boot image?")
    elif ret == image.VerifyResult.INVALID_HEADER:
        print("Unsupported primary header")
    elif ret == image.VerifyResult.INVALID_HASH:
        print("Primary header has an invalid hash")
    elif ret == image.VerifyResult.INVALID_SD_HEADER:
        print("No valid SD header found")
    elif ret == image.VerifyResult.INVALID_SD_HASH:
        print("SD header has an invalid hash")
    else:
        print("Unknown return code: {}".format(ret))
    sys.exit(1)


@click.argument('imgfile')
@click.option('-e', '--endian', type=click.Choice(valid_endians),
              default='little', help="Select little or big endian")
@click.option('-o', '--outfile', metavar='filename', required=False,
              help='Save header information to outfile in YAML format')
@click.option('-s', '--silent', default=False, is_flag=True,
              help='Do not print header information to output')
@click.command(help='Print the primary and SD header records of an image')
def dumpinfo(imgfile, outfile, silent, endian):
    dump_imginfo(imgfile, outfile, silent, endian)
    if not silent:
        print("dumpinfo has run successfully")


class AliasesGroup(click.Group):

    _aliases = {
        "update": "sign",
    }

    def list_commands(self, ctx):
        cmds = [k for k in self.commands]
        aliases = [k for k in self._aliases]
        return sorted(cmds + aliases)

    def get_command(self, ctx, cmd_name):
        rv = click.Group.get_command(self, ctx, cmd_name)
        if rv is not None:
            return rv
        if cmd_name in self._aliases:
            return click.Group.get_command(self, ctx, self._aliases[cmd_name])
        return None


@click.command(help='Print amlchksum version information')
def version():
    print(amlchksum_version)


@click.command(cls=AliasesGroup,
               context_settings=dict(help_option_names=['-h', '--help']))
def amlchksum():
    pass


amlchksum.add_command(sign)
amlchksum.add_command(verify)
amlchksum.add_command(dumpinfo)
amlchksum.add_command(version)


if __name__ == '__main__':
    amlchksum()
