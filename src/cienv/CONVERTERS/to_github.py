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
Converters for publishing resolved values to GitHub Actions step files.
"""
import logging
from typing import Dict, Iterable, Mapping, Optional

from jinja2 import Template

from ..MODELS.resolved_environment import ResolvedEnvironment
from ..REGISTRY.image_coordinate import ImageCoordinate

logger = logging.getLogger(__name__)

SUMMARY_TEMPLATE = """
### Resolved environment

| key | value |
|---|---|
{% for key, value in outputs.items() -%}
| {{ key }} | `{{ value }}` |
{% endfor %}
{%- if images %}

### Images
{% for service, refs in images.items() %}
- **{{ service }}**: {% for ref in refs %}`{{ ref }}`{% if not loop.last %}, {% endif %}{% endfor %}
{%- endfor %}
{% endif %}
"""


def format_outputs(outputs: Mapping[str, str]) -> str:
    """
    Renders key=value lines in the GITHUB_OUTPUT file format.
    """
    lines = []
    for key, value in outputs.items():
        if "\n" in value:
            raise ValueError(f"Output {key} must be a single line")
        lines.append(f"{key}={value}\n")
    return "".join(lines)


class GithubOutputConverter:
    """
    Appends resolved values to the files GitHub Actions reads after a step.
    """

    def __init__(self, resolved: ResolvedEnvironment):
        """
        :param resolved: The environment resolved for this run.
        """
        self.resolved = resolved
        self.template = Template(SUMMARY_TEMPLATE)

    def write_outputs(self, output_path: str) -> str:
        """
        Appends the step outputs to output_path (usually $GITHUB_OUTPUT).

        :return: The path written to.
        """
        with open(output_path, "a") as f:
            f.write(format_outputs(self.resolved.as_outputs()))
        logger.debug("Step outputs written to %s", output_path)
        return output_path

    def render_summary(self,
                       images: Optional[Mapping[str, Iterable[ImageCoordinate]]] = None) -> str:
        """
        Renders a markdown summary of the resolved values and, optionally, the images per service.
        """
        rendered_images: Dict[str, list] = {
            service: [str(c) for c in coordinates]
            for service, coordinates in (images or {}).items()
        }
        return self.template.render(outputs=self.resolved.as_outputs(), images=rendered_images)

    def write_summary(self,
                      summary_path: str,
                      images: Optional[Mapping[str, Iterable[ImageCoordinate]]] = None) -> str:
        """
        Appends the markdown summary to summary_path (usually $GITHUB_STEP_SUMMARY).
        """
        with open(summary_path, "a") as f:
            f.write(self.render_summary(images))
        return summary_path
