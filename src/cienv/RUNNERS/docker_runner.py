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
Thin wrapper around the docker executable used to build and push images.
"""
import logging
import subprocess
from typing import Dict, Iterable, List, Optional

from tenacity import before_sleep_log, retry, retry_if_exception, stop_after_attempt, wait_exponential

from ..exceptions import DockerCommandError

logger = logging.getLogger(__name__)

PUSH_ATTEMPTS = 3

# Exit status of a command that could not be found
COMMAND_NOT_FOUND = 127


def is_transient(error: BaseException) -> bool:
    """A failed docker call is worth retrying unless docker itself is missing."""
    return isinstance(error, DockerCommandError) and error.returncode != COMMAND_NOT_FOUND


class DockerCli:
    """
    Runs docker build/push with parameters resolved by cienv.
    """
    def __init__(self, executable: str = "docker", dry_run: bool = False):
        """
        Args:
            executable (str): docker binary to call.
            dry_run (bool): Only log the commands instead of running them.
        """
        self.executable = executable
        self.dry_run = dry_run

    def _run(self, args: List[str]) -> None:
        command = [self.executable] + args
        logger.info("Running: %s", " ".join(command))
        if self.dry_run:
            return

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                # Avoid shell=True for security reasons (CWE-78)
                shell=False,
            )
        except FileNotFoundError as e:
            raise DockerCommandError(command, COMMAND_NOT_FOUND, str(e)) from e

        if result.returncode != 0:
            raise DockerCommandError(command, result.returncode, result.stderr)

    def build(self,
              context: str,
              tags: Iterable[str],
              dockerfile: Optional[str] = None,
              build_args: Optional[Dict[str, str]] = None) -> None:
        """
        Builds one image and applies every tag to it.

        Args:
            context (str): Build context directory.
            tags (Iterable[str]): Fully qualified references to tag the image with.
            dockerfile (Optional[str]): Dockerfile path, docker's default when omitted.
            build_args (Optional[Dict[str, str]]): --build-arg values.
        """
        args = ["build"]
        for tag in tags:
            args += ["--tag", tag]
        if dockerfile:
            args += ["--file", dockerfile]
        for key, value in sorted((build_args or {}).items()):
            args += ["--build-arg", f"{key}={value}"]
        args.append(context)
        self._run(args)

    @retry(
        retry=retry_if_exception(is_transient),
        stop=stop_after_attempt(PUSH_ATTEMPTS),
        wait=wait_exponential(multiplier=1, max=10),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    def push(self, reference: str) -> None:
        """
        Pushes one reference, retrying transient failures.

        Args:
            reference (str): Fully qualified image reference.
        """
        self._run(["push", reference])
