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
Exception hierarchy shared by the resolver, the tag builder and the publisher.
"""
from typing import Dict, List


class CienvError(Exception):
    """Base class for all cienv errors."""


class InvalidInputError(CienvError, ValueError):
    """
    Raised when a caller hands in an empty or malformed value.
    No partial output is produced and the build must not proceed.
    """


class ConfigError(CienvError):
    """Raised when the environment table configuration cannot be loaded."""


class DockerCommandError(CienvError):
    """Raised when the docker executable exits with a non-zero status."""

    def __init__(self, command: List[str], returncode: int, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        message = f"'{' '.join(command)}' exited with status {returncode}"
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)


class PartialPublishError(CienvError):
    """
    Raised when not every tag of a service could be pushed.

    Tags that were already pushed are left in place; retrying is up to the caller.
    """

    def __init__(self, service_name: str, pushed: List[str], failed: Dict[str, str]):
        self.service_name = service_name
        self.pushed = pushed
        self.failed = failed
        failures = ", ".join(f"{ref} ({err})" for ref, err in failed.items())
        super().__init__(
            f"Publishing {service_name} failed for {failures}; "
            f"{len(pushed)} tag(s) already pushed"
        )
