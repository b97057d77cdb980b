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
Resolution of the deployment environment and version of a pipeline run.
"""
import logging
from typing import Optional

from ..exceptions import InvalidInputError
from ..MODELS.environment_table import DEFAULT_TABLE, EnvironmentTable
from ..MODELS.reference import BranchReference, Reference, TagReference
from ..MODELS.resolved_environment import Environment, ResolvedEnvironment
from ..PARSERS.reference_parser import parse_reference, sanitize

logger = logging.getLogger(__name__)

DEPENDENCY_IMAGE_NAME = "deps"


def format_version(reference: Reference, short_commit_sha: str) -> str:
    """
    Release tags are used verbatim; branches become '<sanitized-branch>-<sha>'.
    """
    if isinstance(reference, TagReference):
        return reference.name
    if not short_commit_sha or not short_commit_sha.strip():
        raise InvalidInputError("Short commit SHA must not be empty for branch references")
    return f"{sanitize(reference.name)}-{short_commit_sha}"


def classify(reference: Reference) -> Environment:
    if isinstance(reference, TagReference):
        return Environment.PRODUCTION
    if isinstance(reference, BranchReference):
        return Environment.STAGING
    raise TypeError(f"Unsupported reference type: {type(reference).__name__}")


def dependency_image_tag(registry: str, repository: str, version: str) -> str:
    return f"{registry}/{repository}/{DEPENDENCY_IMAGE_NAME}:{version}"


class EnvironmentResolver:
    """
    Maps a version-control reference onto an environment and its endpoints.
    Stateless apart from the immutable environment table, so one instance can be
    shared between concurrent callers.
    """
    def __init__(self, table: Optional[EnvironmentTable] = None):
        """
        :param table: Endpoint configuration, defaults to the built-in table.
        """
        self.table = table or DEFAULT_TABLE

    def resolve(self,
                reference: str,
                short_commit_sha: str,
                repository: Optional[str] = None,
                build_dependencies: bool = False) -> ResolvedEnvironment:
        """
        Resolves the environment of a run.

        :param reference: Branch or tag name that triggered the run.
        :param short_commit_sha: Abbreviated commit hash, used in staging versions.
        :param repository: Repository identifier, e.g. 'org/repo'. Required when
                           build_dependencies is set.
        :param build_dependencies: Whether to compute the dependency image tag.
        :return: The resolved environment.
        :raises InvalidInputError: On empty or malformed input.
        """
        parsed = parse_reference(reference)
        if build_dependencies and not (repository and repository.strip()):
            raise InvalidInputError("Repository must be given to build the dependency image")

        environment = classify(parsed)
        version = format_version(parsed, short_commit_sha)
        endpoint = self.table[environment]

        deps_tag = None
        if build_dependencies:
            deps_tag = dependency_image_tag(endpoint.registry, repository, version)

        resolved = ResolvedEnvironment(
            environment=environment,
            version=version,
            registry=endpoint.registry,
            proxy_url=endpoint.proxy,
            docker_mirror=self.table.docker_mirror,
            dependency_image_tag=deps_tag,
        )
        logger.debug("Resolved %s to %s %s", reference, environment.value, version)
        return resolved


def resolve(reference: str,
            short_commit_sha: str,
            repository: Optional[str] = None,
            build_dependencies: bool = False) -> ResolvedEnvironment:
    """Resolves against the built-in environment table."""
    return EnvironmentResolver().resolve(
        reference, short_commit_sha, repository=repository,
        build_dependencies=build_dependencies,
    )
