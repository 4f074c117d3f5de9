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
Derive the SD and primary header variants from the header read from disk.

The SD header is what BL1 finds when booting from the secondary media
offset: sizes are re-based to 0x200 and the protected region starts right
after its own header and digest.  The new primary header protects
everything from 0x200 onwards so the first sector stays free for an MBR.
"""

from .header import CHKSUM_SIZE, HEADER_OFFSET, HEADER_SIZE, SD_OFFSET, \
    FormatError

# Boot ROM requires the protected region to begin at 496 or later.
PRIMARY_CHK_START = SD_OFFSET - HEADER_OFFSET
SD_CHK_START = HEADER_SIZE + CHKSUM_SIZE
# Points at the stub that copies BL2 from 4608 to 4096.
PRIMARY_DATA_OFFSET = 1024 - HEADER_OFFSET


def _sub(name, value, amount):
    if amount > value:
        raise FormatError("Cannot derive {}: {} - {} underflows".format(
            name, value, amount))
    return value - amount


def derive_sd_header(header):
    if header.total_size <= SD_OFFSET:
        raise FormatError("Image too small for an SD header: total size {} "
                          "must exceed {}".format(header.total_size,
                                                  SD_OFFSET))
    total_size = header.total_size - SD_OFFSET
    return header._replace(
        total_size=total_size,
        data_len=_sub("SD data_len", header.data_len, SD_OFFSET),
        chk_start=SD_CHK_START,
        chk_size=_sub("SD chk_size", total_size, SD_CHK_START))


def derive_primary_header(header):
    return header._replace(
        chk_start=PRIMARY_CHK_START,
        chk_size=_sub("chk_size", header.total_size, PRIMARY_CHK_START),
        data_offset=PRIMARY_DATA_OFFSET,
        data_len=_sub("data_len", header.total_size, PRIMARY_DATA_OFFSET))
