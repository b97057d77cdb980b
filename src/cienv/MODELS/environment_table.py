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
Static registry/proxy configuration per deployment environment.
"""
from types import MappingProxyType
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict

from .resolved_environment import Environment

DEFAULT_DOCKER_MIRROR = "nexus-docker-proxy.example.com"


class EndpointConfig(BaseModel):
    """
    Registry hostname and proxy used by one environment.
    """
    model_config = ConfigDict(frozen=True)

    registry: str
    proxy: str


DEFAULT_ENDPOINTS = {
    Environment.STAGING: EndpointConfig(
        registry="nexus-docker-hosted.stg.example.com",
        proxy="staging-proxy:3128",
    ),
    Environment.PRODUCTION: EndpointConfig(
        registry="nexus-docker-hosted.prd.example.com",
        proxy="production-proxy:3128",
    ),
}


class EnvironmentTable:
    """
    Immutable lookup from environment to its endpoints, plus the shared docker mirror.
    Loaded once at start-up; every environment must be present.
    """

    def __init__(self,
                 endpoints: Optional[Mapping[Environment, EndpointConfig]] = None,
                 docker_mirror: str = DEFAULT_DOCKER_MIRROR):
        endpoints = dict(DEFAULT_ENDPOINTS if endpoints is None else endpoints)
        missing = [env.value for env in Environment if env not in endpoints]
        if missing:
            raise ValueError(f"No endpoints configured for: {', '.join(missing)}")
        self._endpoints = MappingProxyType(endpoints)
        self._docker_mirror = docker_mirror

    @property
    def docker_mirror(self) -> str:
        return self._docker_mirror

    @property
    def endpoints(self) -> Mapping[Environment, EndpointConfig]:
        return self._endpoints

    def __getitem__(self, environment: Environment) -> EndpointConfig:
        return self._endpoints[environment]

    def __repr__(self) -> str:
        envs = ", ".join(f"{env.value}={cfg.registry}" for env, cfg in self._endpoints.items())
        return f"EnvironmentTable({envs}, mirror={self._docker_mirror})"


DEFAULT_TABLE = EnvironmentTable()
