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

"""
Amlogic boot block header layout.

Every header record in a boot image is 112 bytes: a 16-byte preamble left to
the boot stub, the 64-byte block header and the SHA-256 digest that protects
it.  The primary record lives at file offset 0, the SD record at 0x200.
"""

import errno
import struct
from collections import namedtuple

import click

SD_OFFSET = 512
HEADER_OFFSET = 16
HEADER_SIZE = 64
CHKSUM_SIZE = 32
HEADER_READ_SIZE = HEADER_OFFSET + HEADER_SIZE + CHKSUM_SIZE

BLK_MAGIC = 0x4C4D4140  # "@AML"
BLK_VER_MAJOR = 1
BLK_VER_MINOR = 0

STRUCT_ENDIAN_DICT = {
        'little': '<',
        'big':    '>'
}

HEADER_FIELDS = (
        'magic',
        'total_size',
        'header_size',
        'root_key_index',
        'version_major',
        'version_minor',
        'padding1',
        'sig_type',
        'sig_offset',
        'sig_len',
        'chk_start',
        'puk_type',
        'puk_offset',
        'puk_data_len',
        'chk_size',
        'data_type',
        'data_offset',
        'data_len',
        'padding3',
)

HEADER_FMT = (
        # struct st_aml_block_header {
        'I' +     # magic           uint32  @0
        'I' +     # total_size      uint32  @4
        'B' +     # header_size     uint8   @8
        'B' +     # root_key_index  uint8   @9
        'B' +     # version_major   uint8   @10
        'B' +     # version_minor   uint8   @11
        '4s' +    # padding1        [4]     @12
        'I' +     # sig_type        uint32  @16
        'I' +     # sig_offset      uint32  @20
        'I' +     # sig_len         uint32  @24
        'I' +     # chk_start       uint32  @28
        'I' +     # puk_type        uint32  @32
        'I' +     # puk_offset      uint32  @36
        'I' +     # puk_data_len    uint32  @40
        'I' +     # chk_size        uint32  @44
        'I' +     # data_type       uint32  @48
        'I' +     # data_offset     uint32  @52
        'I' +     # data_len        uint32  @56
        '4s'      # padding3        [4]     @60
        )  # }

BlockHeader = namedtuple('BlockHeader', HEADER_FIELDS)


class FormatError(click.ClickException):
    """Raised when a block header is malformed or cannot be rewritten."""
    exit_code = errno.EINVAL


def header_struct(endian='little'):
    try:
        e = STRUCT_ENDIAN_DICT[endian]
    except KeyError:
        raise click.BadParameter("Invalid endianness: {}".format(endian))
    fmt = struct.Struct(e + HEADER_FMT)
    assert fmt.size == HEADER_SIZE
    return fmt


def decode_header(buf, endian='little'):
    """Decode the 64-byte block header found in buf."""
    if len(buf) != HEADER_SIZE:
        raise FormatError("Block header must be {} bytes, got {}".format(
            HEADER_SIZE, len(buf)))
    return BlockHeader(*header_struct(endian).unpack(bytes(buf)))


def encode_header(header, endian='little'):
    try:
        return header_struct(endian).pack(*header)
    except struct.error as e:
        raise FormatError("Cannot encode block header: {}".format(e))


def validate_header(header):
    """Check that the header is an unsigned block header this tool
    can rewrite.  The first mismatching field raises FormatError."""
    if header.magic != BLK_MAGIC:
        raise FormatError("Bad header: magic {:#010x} (expected {:#010x})"
                          .format(header.magic, BLK_MAGIC))
    if (header.version_major, header.version_minor) != (BLK_VER_MAJOR,
                                                       BLK_VER_MINOR):
        raise FormatError("Bad header: version {}.{} (expected {}.{})".format(
            header.version_major, header.version_minor,
            BLK_VER_MAJOR, BLK_VER_MINOR))
    if header.header_size != HEADER_SIZE:
        raise FormatError("Bad header: header size {} (expected {})".format(
            header.header_size, HEADER_SIZE))
    if header.sig_type != 0:
        raise FormatError("Bad header: signed images are not supported "
                          "(sig_type {})".format(header.sig_type))
    if header.puk_type != 0:
        raise FormatError("Bad header: public key blocks are not supported "
                          "(puk_type {})".format(header.puk_type))
    if header.chk_start + header.chk_size > header.total_size:
        raise FormatError("Bad header: checksum region {}+{} exceeds total "
                          "size {}".format(header.chk_start, header.chk_size,
                                           header.total_size))


class BlockRecord(namedtuple('BlockRecord', ['preamble', 'header', 'digest'])):
    """A header record as stored on disk: preamble, header and digest."""
    __slots__ = ()

    @classmethod
    def from_bytes(cls, buf, endian='little'):
        if len(buf) != HEADER_READ_SIZE:
            raise FormatError("Header record must be {} bytes, got {}".format(
                HEADER_READ_SIZE, len(buf)))
        hdr_end = HEADER_OFFSET + HEADER_SIZE
        return cls(bytes(buf[:HEADER_OFFSET]),
                   decode_header(buf[HEADER_OFFSET:hdr_end], endian),
                   bytes(buf[hdr_end:]))

    def to_bytes(self, endian='little'):
        buf = self.preamble + encode_header(self.header, endian) + self.digest
        assert len(buf) == HEADER_READ_SIZE
        return buf
