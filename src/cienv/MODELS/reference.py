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
Version-control references that trigger a pipeline run.

A reference is either a release tag or anything else, which is treated as a branch.
"""
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class TagReference:
    """A tag following the release convention, e.g. 'v1.2.3'."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class BranchReference:
    """
    Any reference that is not a release tag.
    Includes plain branches and tags outside the release convention.
    """

    name: str

    def __str__(self) -> str:
        return self.name


Reference = Union[TagReference, BranchReference]
