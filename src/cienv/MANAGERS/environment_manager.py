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
Builds the variable context used to interpolate configuration files.
"""
import logging
import os
from typing import Dict, List, Mapping, Optional

from dotenv import dotenv_values

logger = logging.getLogger(__name__)


class EnvironmentManager:
    """
    Merges process environment variables with values from .env files.
    """
    def get_context(self,
                    env_files: Optional[List[str]] = None,
                    environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        """
        Returns the merged variables: .env files first (later files win),
        then the process environment, which overrides everything.

        :param env_files: Paths to .env files; missing files are skipped.
        :param environ: Process environment, defaults to os.environ.
        :return: A dictionary containing the merged variables.
        """
        context: Dict[str, str] = {}

        for file_path in env_files or []:
            if not os.path.exists(file_path):
                logger.warning("Env file %s not found, skipping", file_path)
                continue
            values = dotenv_values(file_path)
            context.update({k: v for k, v in values.items() if v is not None})
            logger.debug("Loaded %d variables from %s", len(values), file_path)

        context.update(os.environ if environ is None else environ)
        return context
