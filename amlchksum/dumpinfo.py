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
Parse and print the primary and SD header records of a boot image.
"""
import os.path

import click
import yaml

from amlchksum import header as hdr

RECORDS = (("primary", "Primary header", 0),
           ("sd", "SD header", hdr.SD_OFFSET))
_LINE_LENGTH = 60


def print_in_frame(header_text, content):
    sepc = " "
    header = "#### " + header_text + sepc
    post_header = "#" * (_LINE_LENGTH - len(header))
    print(header + post_header)

    print("|", sepc * (_LINE_LENGTH - 2), "|", sep="")
    offset = (_LINE_LENGTH - len(content)) // 2
    pre = "|" + (sepc * (offset - 1))
    post = sepc * (_LINE_LENGTH - len(pre) - len(content) - 1) + "|"
    print(pre, content, post, sep="")
    print("|", sepc * (_LINE_LENGTH - 2), "|", sep="")
    print("#" * _LINE_LENGTH)


def print_in_row(row_text):
    row_text = "#### " + row_text + " "
    fill = "#" * (_LINE_LENGTH - len(row_text))
    print(row_text + fill)


def parse_record(b, offset, endian):
    """Decode the record at offset, or None if there is no block header."""
    raw = b[offset:offset + hdr.HEADER_READ_SIZE]
    if len(raw) != hdr.HEADER_READ_SIZE:
        return None
    record = hdr.BlockRecord.from_bytes(raw, endian)
    if record.header.magic != hdr.BLK_MAGIC:
        return None
    fields = {}
    for key, value in record.header._asdict().items():
        fields[key] = value.hex() if isinstance(value, bytes) else value
    fields["digest"] = record.digest.hex()
    return fields


def dump_imginfo(imgfile, outfile=None, silent=False, endian="little"):
    """Parse a boot image and print/save its header records."""
    try:
        with open(imgfile, "rb") as f:
            b = f.read()
    except FileNotFoundError:
        raise click.UsageError("Image file not found ({})".format(imgfile))

    records = {}
    for key, _, offset in RECORDS:
        records[key] = parse_record(b, offset, endian)

    if outfile is not None:
        with open(outfile, "w") as outf:
            yaml.dump(records, outf, sort_keys=False)

    if silent:
        return records

    print("Printing header records of boot image:", os.path.basename(imgfile),
          "\n")
    for key, title, offset in RECORDS:
        section_name = "{} (offset: {})".format(title, hex(offset))
        fields = records[key]
        if fields is None:
            print_in_frame(section_name, "no block header")
            continue
        print_in_row(section_name)
        for name, value in fields.items():
            if name == "magic":
                value = hex(value)
            print(name, ":", " " * (19 - len(name)), value, sep="")
        print("#" * _LINE_LENGTH)

    print_in_row("End of Image ")
    return records
