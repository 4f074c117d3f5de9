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

import pytest
from click.testing import CliRunner

from amlchksum.image import Image, VerifyResult
from amlchksum.main import amlchksum

ASSERT_VALID = "Image was correctly validated"


def signed(make_image, **kwargs):
    path = make_image(**kwargs)
    with Image(str(path), silent=True) as img:
        img.update()
    return path


def corrupt(path, offset):
    b = bytearray(path.read_bytes())
    b[offset] ^= 0xff
    path.write_bytes(bytes(b))


class TestVerify:
    runner = CliRunner()

    def test_verify_signed(self, make_image):
        path = signed(make_image)
        with Image(str(path), mode="rb") as img:
            ret, digests = img.verify()
        assert ret == VerifyResult.OK
        b = path.read_bytes()
        assert digests == (b[80:112], b[592:624])

        result = self.runner.invoke(amlchksum, ["verify", str(path)])
        assert result.exit_code == 0
        assert ASSERT_VALID in result.output
        assert "SD digest: " + b[592:624].hex() in result.output

    def test_verify_unsigned(self, make_image):
        """A fresh build has no SD header and a stale digest"""
        path = make_image()
        with Image(str(path), mode="rb") as img:
            assert img.verify() == (VerifyResult.INVALID_HASH, None)
        result = self.runner.invoke(amlchksum, ["verify", str(path)])
        assert result.exit_code == 1
        assert "Primary header has an invalid hash" in result.output

    def test_verify_bad_magic(self, make_image):
        path = make_image(magic=0x40414d4c)
        result = self.runner.invoke(amlchksum, ["verify", str(path)])
        assert result.exit_code == 1
        assert "Invalid header magic" in result.output

    def test_verify_unsupported_header(self, make_image):
        path = make_image(sig_type=1)
        with Image(str(path), mode="rb") as img:
            assert img.verify()[0] == VerifyResult.INVALID_HEADER

    @pytest.mark.parametrize("offset,resign,expected", (
        (100, False, VerifyResult.INVALID_HASH),
        (4000, False, VerifyResult.INVALID_HASH),
        (4000, True, VerifyResult.INVALID_SD_HASH),
        (600, True, VerifyResult.INVALID_SD_HASH),
        (528, True, VerifyResult.INVALID_SD_HEADER),
    ))
    def test_verify_corrupted(self, make_image, offset, resign, expected):
        path = signed(make_image)
        corrupt(path, offset)
        if resign:
            # keep the primary digest in step so the SD record is reached
            with Image(str(path), silent=True) as img:
                record = img.read_record(0)
                img.write_record(0, record._replace(
                    digest=img.digest(0, record.header)))
        with Image(str(path), mode="rb") as img:
            assert img.verify()[0] == expected

    @pytest.mark.parametrize("size,expected", (
        (4000, VerifyResult.INVALID_HASH),
        (600, VerifyResult.INVALID_HASH),
    ))
    def test_verify_truncated(self, make_image, size, expected):
        path = signed(make_image)
        path.write_bytes(path.read_bytes()[:size])
        with Image(str(path), mode="rb") as img:
            assert img.verify() == (expected, None)
        result = self.runner.invoke(amlchksum, ["verify", str(path)])
        assert result.exit_code == 1
        assert "Primary header has an invalid hash" in result.output

    def test_verify_short_file(self, make_image):
        path = make_image(size=64)
        result = self.runner.invoke(amlchksum, ["verify", str(path)])
        assert result.exit_code == errno.EIO

    def test_verify_does_not_write(self, make_image):
        path = make_image()
        before = path.read_bytes()
        self.runner.invoke(amlchksum, ["verify", str(path)])
        assert path.read_bytes() == before

    def test_verify_missing(self, tmp_path):
        result = self.runner.invoke(amlchksum,
                                    ["verify", str(tmp_path / "none.bin")])
        assert result.exit_code != 0
