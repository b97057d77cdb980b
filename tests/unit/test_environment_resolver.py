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
Unit tests for the environment resolver.
"""
import pytest
from cienv.exceptions import InvalidInputError
from cienv.MODELS.environment_table import EndpointConfig, EnvironmentTable
from cienv.MODELS.resolved_environment import Environment
from cienv.RESOLVERS.environment_resolver import EnvironmentResolver, resolve

PRD_REGISTRY = "nexus-docker-hosted.prd.example.com"
STG_REGISTRY = "nexus-docker-hosted.stg.example.com"


class TestResolve:
    """Tests for resolving with the built-in table."""

    def test_release_tag_is_production(self):
        """Test a release tag resolves to production with the tag as version."""
        resolved = resolve("v1.2.3", "a1b2c3d")
        assert resolved.environment == Environment.PRODUCTION
        assert resolved.version == "v1.2.3"
        assert resolved.registry == PRD_REGISTRY
        assert resolved.proxy_url == "production-proxy:3128"

    def test_main_branch_is_staging(self):
        """Test a branch resolves to staging with branch-sha version."""
        resolved = resolve("main", "a1b2c3d")
        assert resolved.environment == Environment.STAGING
        assert resolved.version == "main-a1b2c3d"
        assert resolved.registry == STG_REGISTRY
        assert resolved.proxy_url == "staging-proxy:3128"

    def test_branch_with_slash_is_sanitized(self):
        resolved = resolve("feature/add-x", "deadbee")
        assert resolved.version == "feature-add-x-deadbee"

    def test_pre_release_tag_is_staging(self):
        """Test that pre-release tags are not production releases."""
        resolved = resolve("v1.0.0-rc1", "deadbee")
        assert resolved.environment == Environment.STAGING
        assert resolved.version == "v1.0.0-rc1-deadbee"

    def test_fully_qualified_refs(self):
        assert resolve("refs/tags/v2.0.0", "abc1234").version == "v2.0.0"
        assert resolve("refs/heads/dev", "abc1234").version == "dev-abc1234"

    def test_docker_mirror_is_shared(self):
        """Test both environments use the same mirror."""
        assert resolve("v1.0.0", "abc1234").docker_mirror == resolve("main", "abc1234").docker_mirror

    def test_tag_does_not_need_sha(self):
        assert resolve("v1.0.0", "").version == "v1.0.0"

    def test_branch_requires_sha(self):
        with pytest.raises(InvalidInputError):
            resolve("main", "")

    def test_branch_rejects_whitespace_sha(self):
        with pytest.raises(InvalidInputError):
            resolve("main", "   ")

    def test_non_ascii_digit_tag_is_staging(self):
        """Test that only ASCII release tags reach production."""
        resolved = resolve("v١.٢.٣", "abc1234")
        assert resolved.environment == Environment.STAGING
        assert resolved.registry == STG_REGISTRY

    def test_empty_reference_raises(self):
        with pytest.raises(InvalidInputError):
            resolve("", "abc1234")

    def test_sha_length_not_validated(self):
        assert resolve("main", "a1").version == "main-a1"

    def test_no_dependency_tag_by_default(self):
        assert resolve("main", "abc1234", repository="org/repo").dependency_image_tag is None

    def test_dependency_tag_staging(self):
        resolved = resolve("main", "abc1234", repository="org/repo", build_dependencies=True)
        assert resolved.dependency_image_tag == f"{STG_REGISTRY}/org/repo/deps:main-abc1234"

    def test_dependency_tag_production(self):
        resolved = resolve("v1.2.3", "abc1234", repository="org/repo", build_dependencies=True)
        assert resolved.dependency_image_tag == f"{PRD_REGISTRY}/org/repo/deps:v1.2.3"

    def test_dependency_tag_requires_repository(self):
        with pytest.raises(InvalidInputError):
            resolve("main", "abc1234", build_dependencies=True)

    def test_result_is_immutable(self):
        resolved = resolve("main", "abc1234")
        with pytest.raises(Exception):
            resolved.version = "other"

    def test_deterministic(self):
        assert resolve("feature/x", "abc1234") == resolve("feature/x", "abc1234")


def test_resolver_uses_custom_table():
    table = EnvironmentTable(
        {
            Environment.STAGING: EndpointConfig(registry="stg.local", proxy="p1:1"),
            Environment.PRODUCTION: EndpointConfig(registry="prd.local", proxy="p2:2"),
        },
        docker_mirror="mirror.local",
    )
    resolver = EnvironmentResolver(table)
    resolved = resolver.resolve("v3.0.0", "abc1234")
    assert resolved.registry == "prd.local"
    assert resolved.proxy_url == "p2:2"
    assert resolved.docker_mirror == "mirror.local"


def test_table_requires_every_environment():
    with pytest.raises(ValueError):
        EnvironmentTable({Environment.STAGING: EndpointConfig(registry="r", proxy="p")})


def test_table_is_read_only():
    table = EnvironmentTable()
    with pytest.raises(TypeError):
        table.endpoints[Environment.STAGING] = EndpointConfig(registry="x", proxy="y")


def test_as_outputs():
    resolved = resolve("main", "abc1234", repository="org/repo", build_dependencies=True)
    outputs = resolved.as_outputs()
    assert outputs["environment"] == "staging"
    assert outputs["version"] == "main-abc1234"
    assert outputs["image_tag"] == resolved.dependency_image_tag
    assert "image_tag" not in resolve("main", "abc1234").as_outputs()
