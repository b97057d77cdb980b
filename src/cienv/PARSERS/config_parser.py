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
Parsers for cienv YAML configuration files.

Example::

    docker_mirror: ${DOCKER_MIRROR:-nexus-docker-proxy.example.com}
    environments:
      staging:
        registry: nexus-docker-hosted.stg.example.com
        proxy: staging-proxy:3128
      production:
        registry: nexus-docker-hosted.prd.example.com
"""
import logging
import os
from typing import Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from ..exceptions import ConfigError
from ..MODELS.environment_table import DEFAULT_ENDPOINTS, DEFAULT_DOCKER_MIRROR, EnvironmentTable
from ..MODELS.resolved_environment import Environment
from ..UTILS.string_interpolation import EnvironmentInterpolator

logger = logging.getLogger(__name__)


class EndpointOverride(BaseModel):
    model_config = ConfigDict(extra="forbid")

    registry: Optional[str] = None
    proxy: Optional[str] = None


class ConfigFile(BaseModel):
    """
    Schema of a configuration file. Every key is optional; omitted keys keep the defaults.
    """
    model_config = ConfigDict(extra="forbid")

    docker_mirror: Optional[str] = None
    environments: Dict[Environment, EndpointOverride] = {}


class ConfigParser:
    """
    Parser for cienv configuration files.
    """
    def __init__(self, context: Optional[Mapping[str, str]] = None):
        """
        Initializes the parser with an optional variable context for interpolation.

        :param context: Variables for ${VAR} interpolation, defaults to os.environ.
        """
        self.context = dict(os.environ) if context is None else context

    def parse(self, config_path: str) -> EnvironmentTable:
        """
        Parses a configuration file from a path.

        :param config_path: Path to the YAML file.
        :return: The resulting environment table.
        :raises ConfigError: If the file cannot be read or is invalid.
        """
        try:
            with open(config_path, 'r') as f:
                content = f.read()
        except OSError as e:
            raise ConfigError(f"Cannot read config file {config_path}: {e}") from e
        logger.debug("Loading environment table from %s", config_path)
        return self.parse_from_string(content)

    def parse_from_string(self, content: str) -> EnvironmentTable:
        """
        Parses a configuration document from a string.

        :param content: YAML content.
        :return: The resulting environment table.
        :raises ConfigError: On unset variables, invalid YAML or unknown keys.
        """
        try:
            content = EnvironmentInterpolator.interpolate(content, self.context)
        except KeyError as e:
            raise ConfigError(f"Variable {e.args[0]} not set and has no default") from e

        try:
            data = yaml.safe_load(content) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a mapping")

        try:
            config = ConfigFile.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

        return self._build_table(config)

    def _build_table(self, config: ConfigFile) -> EnvironmentTable:
        endpoints = {}
        for env, default in DEFAULT_ENDPOINTS.items():
            override = config.environments.get(env)
            if override is None:
                endpoints[env] = default
                continue
            endpoints[env] = default.model_copy(
                update=override.model_dump(exclude_none=True)
            )

        for env, endpoint in endpoints.items():
            if not endpoint.registry or not endpoint.proxy:
                raise ConfigError(f"Empty registry or proxy for {env.value}")

        docker_mirror = config.docker_mirror or DEFAULT_DOCKER_MIRROR
        return EnvironmentTable(endpoints, docker_mirror=docker_mirror)
