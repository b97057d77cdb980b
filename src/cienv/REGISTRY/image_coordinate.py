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
Image coordinate handling.
Builds fully qualified references like
'nexus-docker-hosted.stg.example.com/org/repo/api:main-a1b2c3d'.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ImageCoordinate:
    """
    Fully qualified location of one pushed image.

    Examples:
        - registry.example.com/org/repo/api:v1.2.3
          -> registry='registry.example.com', image_repository='org/repo',
             service_name='api', tag='v1.2.3'
    """

    registry: str
    image_repository: str
    service_name: str
    tag: str

    @property
    def name(self) -> str:
        """Get the image name without tag."""
        return f"{self.registry}/{self.image_repository}/{self.service_name}"

    @property
    def full_name(self) -> str:
        """Get full image name with registry and tag."""
        return f"{self.name}:{self.tag}"

    def __str__(self) -> str:
        return self.full_name

    def __repr__(self) -> str:
        return f"ImageCoordinate({self.full_name})"
