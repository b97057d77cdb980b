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
Models for the resolved deployment environment of a pipeline run.
"""
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict


class Environment(str, Enum):
    """
    Deployment targets a reference can resolve to.
    """
    STAGING = "staging"
    PRODUCTION = "production"


class ResolvedEnvironment(BaseModel):
    """
    Everything downstream build steps need to know about the current run.
    Created once per run and shared read-only by every matrix entry.
    """
    model_config = ConfigDict(frozen=True)

    environment: Environment
    version: str
    registry: str
    proxy_url: str
    docker_mirror: str
    dependency_image_tag: Optional[str] = None

    def as_outputs(self) -> Dict[str, str]:
        """
        Flattens the resolved values into the key/value pairs published as step outputs.
        """
        outputs = {
            "environment": self.environment.value,
            "version": self.version,
            "registry": self.registry,
            "proxy_url": self.proxy_url,
            "docker_mirror": self.docker_mirror,
        }
        if self.dependency_image_tag:
            outputs["image_tag"] = self.dependency_image_tag
        return outputs
