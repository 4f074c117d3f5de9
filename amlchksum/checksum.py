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
SHA-256 over a block header and the region it protects.
"""

import errno

from cryptography.hazmat.primitives import hashes

from .header import HEADER_OFFSET, HEADER_SIZE, encode_header


def digest_of(header_bytes, data):
    """Hash the encoded header followed by the protected data.

    Each call runs its own hashing session.
    """
    if len(header_bytes) != HEADER_SIZE:
        raise ValueError("Header must be {} bytes, got {}".format(
            HEADER_SIZE, len(header_bytes)))
    sha = hashes.Hash(hashes.SHA256())
    sha.update(bytes(header_bytes))
    sha.update(bytes(data))
    return sha.finalize()


def checksum_region(record_offset, header):
    """File offset and length of the bytes protected by header."""
    return record_offset + HEADER_OFFSET + header.chk_start, header.chk_size


def read_region(f, offset, size):
    f.seek(offset)
    data = f.read(size)
    if len(data) != size:
        raise OSError(errno.EIO,
                      "Short read at offset {:#x}: wanted {} bytes, got {}"
                      .format(offset, size, len(data)))
    return data


def record_digest(f, record_offset, header, endian='little'):
    """Digest for the header record stored at record_offset, with the
    protected data read fresh from f."""
    offset, size = checksum_region(record_offset, header)
    data = read_region(f, offset, size)
    return digest_of(encode_header(header, endian), data)
