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
Builders for the image coordinates and build arguments of each service.
"""
import logging
from typing import Dict, FrozenSet, Iterable, List, Optional

from ..exceptions import InvalidInputError
from ..MODELS.resolved_environment import ResolvedEnvironment
from ..REGISTRY.image_coordinate import ImageCoordinate

logger = logging.getLogger(__name__)

LATEST_TAG = "latest"


def _require(value: Optional[str], what: str) -> str:
    if value is None or not value.strip():
        raise InvalidInputError(f"{what} must not be empty")
    return value


def build_tags(resolved: ResolvedEnvironment,
               image_repository: str,
               service_name: str) -> FrozenSet[ImageCoordinate]:
    """
    Returns the two coordinates every service is pushed under: the run's
    version and 'latest'.

    :param resolved: Output of the environment resolver.
    :param image_repository: Repository path inside the registry, e.g. 'org/repo'.
    :param service_name: Name of the service image.
    :raises InvalidInputError: If image_repository or service_name is empty.
    """
    _require(image_repository, "Image repository")
    _require(service_name, "Service name")

    coordinates = frozenset(
        ImageCoordinate(
            registry=resolved.registry,
            image_repository=image_repository,
            service_name=service_name,
            tag=tag,
        )
        for tag in (resolved.version, LATEST_TAG)
    )
    logger.debug("Tags for %s: %s", service_name, sorted(map(str, coordinates)))
    return coordinates


def ordered_tags(coordinates: Iterable[ImageCoordinate]) -> List[ImageCoordinate]:
    """
    Version tags first, 'latest' last, so that 'latest' never points at an
    image whose version tag was not pushed.
    """
    return sorted(coordinates, key=lambda c: (c.tag == LATEST_TAG, c.full_name))


def build_matrix(resolved: ResolvedEnvironment,
                 image_repository: str,
                 services: Iterable[str]) -> Dict[str, FrozenSet[ImageCoordinate]]:
    """
    Applies build_tags to every service of a build matrix.

    :raises InvalidInputError: If the service list is empty or contains duplicates.
    """
    services = list(services)
    if not services:
        raise InvalidInputError("At least one service is required")

    duplicates = sorted({s for s in services if services.count(s) > 1})
    if duplicates:
        raise InvalidInputError(f"Duplicate services: {', '.join(duplicates)}")

    return {service: build_tags(resolved, image_repository, service) for service in services}


def build_args(resolved: ResolvedEnvironment,
               dependency_build_arg: Optional[str] = None) -> Dict[str, str]:
    """
    Build-time parameters handed to the external image builder.

    The dependency image tag is passed through unchanged under the caller's
    argument name, only when both the tag and the name are present.
    """
    args = {
        "HTTP_PROXY": resolved.proxy_url,
        "HTTPS_PROXY": resolved.proxy_url,
        "DOCKER_MIRROR": resolved.docker_mirror,
    }
    if dependency_build_arg and resolved.dependency_image_tag:
        args[dependency_build_arg] = resolved.dependency_image_tag
    return args
