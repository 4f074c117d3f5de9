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
Boot image header rewriting and verification.
"""

import errno
import os
from enum import Enum

from .checksum import checksum_region, read_region, record_digest
from .header import BLK_MAGIC, HEADER_READ_SIZE, SD_OFFSET, BlockRecord, \
    FormatError, header_struct, validate_header
from .transform import derive_primary_header, derive_sd_header

PRIMARY_OFFSET = 0
REPORT_FIELDS = ('total_size', 'chk_start', 'chk_size', 'data_offset',
                 'data_len')

VerifyResult = Enum('VerifyResult',
                    ['OK', 'INVALID_MAGIC', 'INVALID_HEADER', 'INVALID_HASH',
                     'INVALID_SD_HEADER', 'INVALID_SD_HASH'])


class Image:

    def __init__(self, path, endian="little", mode="r+b", silent=False):
        header_struct(endian)
        self.path = path
        self.endian = endian
        self.mode = mode
        self.silent = silent
        self.f = None

    def __repr__(self):
        return "<Image path={}, endian={}, mode={}>".format(
            self.path, self.endian, self.mode)

    def __enter__(self):
        self.f = open(self.path, self.mode)
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.f.close()
        self.f = None

    def report(self, header):
        if self.silent:
            return
        for name in REPORT_FIELDS:
            print("{}={}".format(name, getattr(header, name)))

    def report_sum(self, name, digest):
        if not self.silent:
            print("{}={}".format(name, digest.hex()))

    def read_record(self, offset):
        """Read the header record stored at offset."""
        buf = read_region(self.f, offset, HEADER_READ_SIZE)
        return BlockRecord.from_bytes(buf, self.endian)

    def load(self):
        """Read and validate the primary header record."""
        record = self.read_record(PRIMARY_OFFSET)
        validate_header(record.header)
        return record

    def digest(self, offset, header):
        return record_digest(self.f, offset, header, self.endian)

    def write_record(self, offset, record):
        buf = record.to_bytes(self.endian)
        self.f.seek(offset)
        written = self.f.write(buf)
        if written != len(buf):
            raise OSError(errno.EIO,
                          "Short write at offset {:#x}: wrote {} of {} bytes"
                          .format(offset, written, len(buf)))
        self.f.flush()

    def check_extent(self, *records):
        """Make sure every checksum region lies inside the file before
        anything gets written."""
        size = os.fstat(self.f.fileno()).st_size
        for offset, header in records:
            start, length = checksum_region(offset, header)
            if start + length > size:
                raise OSError(errno.EIO,
                              "Image is {} bytes but the header at {:#x} "
                              "protects up to {}".format(size, offset,
                                                         start + length))

    def update(self):
        """Write the SD header record and re-checksum the primary one.

        Returns the as-read record with its recomputed digest, the SD
        record and the new primary record.
        """
        orig = self.load()
        self.report(orig.header)
        self.report_sum("orig_sum", orig.digest)
        gen_sum = self.digest(PRIMARY_OFFSET, orig.header)
        self.report_sum("gen_sum", gen_sum)

        sd_header = derive_sd_header(orig.header)
        new_header = derive_primary_header(orig.header)
        self.check_extent((SD_OFFSET, sd_header),
                          (PRIMARY_OFFSET, new_header))

        self.report(sd_header)
        sd = orig._replace(header=sd_header,
                           digest=self.digest(SD_OFFSET, sd_header))
        self.report_sum("sd_sum", sd.digest)
        self.write_record(SD_OFFSET, sd)

        # The new primary region starts at the SD record just written.
        self.report(new_header)
        new = orig._replace(header=new_header,
                            digest=self.digest(PRIMARY_OFFSET, new_header))
        self.report_sum("new_sum", new.digest)
        self.write_record(PRIMARY_OFFSET, new)

        return orig._replace(digest=gen_sum), sd, new

    def verify(self):
        """Check the stored digests of the primary and SD records.

        Returns the result and, when both match, their digests.
        """
        checks = ((PRIMARY_OFFSET, VerifyResult.INVALID_HEADER,
                   VerifyResult.INVALID_HASH),
                  (SD_OFFSET, VerifyResult.INVALID_SD_HEADER,
                   VerifyResult.INVALID_SD_HASH))
        size = os.fstat(self.f.fileno()).st_size
        digests = []
        for offset, bad_header, bad_hash in checks:
            # The primary record is always read so a short file still
            # fails as an I/O error.
            if offset != PRIMARY_OFFSET and offset + HEADER_READ_SIZE > size:
                return bad_header, None
            record = self.read_record(offset)
            if offset == PRIMARY_OFFSET and record.header.magic != BLK_MAGIC:
                return VerifyResult.INVALID_MAGIC, None
            try:
                validate_header(record.header)
            except FormatError:
                return bad_header, None
            start, length = checksum_region(offset, record.header)
            if start + length > size:
                return bad_hash, None
            digest = self.digest(offset, record.header)
            if digest != record.digest:
                return bad_hash, None
            digests.append(digest)
        return VerifyResult.OK, tuple(digests)
