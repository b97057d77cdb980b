# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
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
Parsers for version-control references.
Accepts short names ('main', 'v1.2.3') as well as fully qualified git refs
('refs/heads/main', 'refs/tags/v1.2.3').
"""
import logging
import re

from ..exceptions import InvalidInputError
from ..MODELS.reference import BranchReference, Reference, TagReference

logger = logging.getLogger(__name__)

# Release tags only, ASCII digits: pre-release or build suffixes are not production releases
VERSION_TAG_PATTERN = re.compile(r"^v[0-9]+\.[0-9]+\.[0-9]+$")

UNSAFE_CHARS_PATTERN = re.compile(r"[^A-Za-z0-9._-]")

REF_PREFIXES = ("refs/heads/", "refs/tags/")

INVALID_REF_PATTERN = re.compile(r"[\s\x00-\x1f\x7f]|\.\.")


def sanitize(name: str) -> str:
    """
    Replaces every character outside [A-Za-z0-9._-] with '-'.

    >>> sanitize("feature/add-x")
    'feature-add-x'
    """
    return UNSAFE_CHARS_PATTERN.sub("-", name)


def strip_ref_prefix(reference: str) -> str:
    for prefix in REF_PREFIXES:
        if reference.startswith(prefix):
            return reference[len(prefix):]
    return reference


def is_version_tag(name: str) -> bool:
    return VERSION_TAG_PATTERN.match(name) is not None


def parse_reference(reference: str) -> Reference:
    """
    Classifies a reference as a release tag or a branch.

    :param reference: Branch or tag name, optionally fully qualified.
    :return: TagReference when the name matches v<major>.<minor>.<patch>,
             BranchReference otherwise.
    :raises InvalidInputError: If the reference is empty or not a valid ref name.
    """
    if reference is None or not reference.strip():
        raise InvalidInputError("Reference must not be empty")

    if INVALID_REF_PATTERN.search(reference):
        raise InvalidInputError(f"Malformed reference: {reference!r}")

    name = strip_ref_prefix(reference)
    if not name:
        raise InvalidInputError(f"Reference has no name: {reference!r}")

    if is_version_tag(name):
        logger.debug("Reference %s classified as release tag", reference)
        return TagReference(name)

    logger.debug("Reference %s classified as branch", reference)
    return BranchReference(name)
