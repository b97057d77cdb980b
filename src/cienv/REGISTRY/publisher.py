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
Publishing of a service's image coordinates through an external push collaborator.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List

from ..BUILDERS.image_builder import ordered_tags
from ..exceptions import PartialPublishError
from ..REGISTRY.image_coordinate import ImageCoordinate

logger = logging.getLogger(__name__)

PushFunction = Callable[[str], None]


@dataclass
class PublishResult:
    """Outcome of pushing every tag of one service."""

    service_name: str
    pushed: List[ImageCoordinate] = field(default_factory=list)
    failed: Dict[ImageCoordinate, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return not self.failed

    def raise_for_failure(self) -> None:
        """
        Raises PartialPublishError unless every tag was pushed.
        """
        if self.failed:
            raise PartialPublishError(
                self.service_name,
                pushed=[str(c) for c in self.pushed],
                failed={str(c): err for c, err in self.failed.items()},
            )


def publish(coordinates: Iterable[ImageCoordinate], push: PushFunction) -> PublishResult:
    """
    Pushes every coordinate of one service.

    Each tag is attempted even if an earlier one failed. Pushed tags are never
    rolled back; the result reports the service as failed if any push failed.

    :param coordinates: Coordinates of a single service, as returned by build_tags.
    :param push: Collaborator pushing one fully qualified reference.
    """
    ordered = ordered_tags(coordinates)
    if not ordered:
        raise ValueError("Nothing to publish")
    services = {c.service_name for c in ordered}
    if len(services) > 1:
        raise ValueError(f"Coordinates span several services: {', '.join(sorted(services))}")

    result = PublishResult(service_name=ordered[0].service_name)
    for coordinate in ordered:
        try:
            push(str(coordinate))
        except Exception as e:
            logger.error("Push of %s failed: %s", coordinate, e)
            result.failed[coordinate] = str(e)
        else:
            logger.info("Pushed %s", coordinate)
            result.pushed.append(coordinate)
    return result
