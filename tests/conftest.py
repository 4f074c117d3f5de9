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

import pytest

from tests.constants import make_image_bytes, tmp_name


@pytest.fixture
def make_image(tmp_path):
    """Write a synthetic boot image and return its path."""

    def _make_image(name="u-boot", endian="little", size=None, **overrides):
        path = tmp_name(tmp_path, name, ".bin")
        path.write_bytes(make_image_bytes(endian, size, **overrides))
        return path

    return _make_image
