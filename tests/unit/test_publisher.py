import pytest
from cienv.BUILDERS.image_builder import build_tags
from cienv.exceptions import DockerCommandError, PartialPublishError
from cienv.MODELS.resolved_environment import Environment, ResolvedEnvironment
from cienv.REGISTRY.publisher import publish


@pytest.fixture
def coordinates():
    resolved = ResolvedEnvironment(
        environment=Environment.STAGING,
        version="main-abc1234",
        registry="R",
        proxy_url="staging-proxy:3128",
        docker_mirror="mirror",
    )
    return build_tags(resolved, "org/repo", "api")


def test_publish_pushes_both_tags_version_first(coordinates):
    pushed = []
    result = publish(coordinates, pushed.append)
    assert pushed == ["R/org/repo/api:main-abc1234", "R/org/repo/api:latest"]
    assert result.succeeded
    assert result.service_name == "api"
    result.raise_for_failure()


def test_partial_failure_is_reported(coordinates):
    pushed = []

    def push(ref):
        if ref.endswith(":latest"):
            raise DockerCommandError(["docker", "push", ref], 1, "denied")
        pushed.append(ref)

    result = publish(coordinates, push)
    assert not result.succeeded
    assert [str(c) for c in result.pushed] == ["R/org/repo/api:main-abc1234"]
    # Already pushed tag is not rolled back
    assert pushed == ["R/org/repo/api:main-abc1234"]

    with pytest.raises(PartialPublishError) as exc_info:
        result.raise_for_failure()
    assert exc_info.value.pushed == ["R/org/repo/api:main-abc1234"]
    assert "R/org/repo/api:latest" in exc_info.value.failed


def test_later_tags_attempted_after_failure(coordinates):
    attempted = []

    def push(ref):
        attempted.append(ref)
        raise DockerCommandError(["docker", "push", ref], 1)

    result = publish(coordinates, push)
    assert len(attempted) == 2
    assert len(result.failed) == 2
    assert result.pushed == []


def test_publish_rejects_mixed_services(coordinates):
    resolved = ResolvedEnvironment(
        environment=Environment.STAGING, version="v", registry="R",
        proxy_url="p", docker_mirror="m",
    )
    other = build_tags(resolved, "org/repo", "worker")
    with pytest.raises(ValueError):
        publish(set(coordinates) | set(other), lambda ref: None)


def test_publish_rejects_empty():
    with pytest.raises(ValueError):
        publish([], lambda ref: None)


def test_unexpected_push_error_still_tries_every_tag(coordinates):
    attempted = []

    def push(ref):
        attempted.append(ref)
        if ref.endswith(":main-abc1234"):
            raise RuntimeError("connection reset")

    result = publish(coordinates, push)
    assert attempted == ["R/org/repo/api:main-abc1234", "R/org/repo/api:latest"]
    assert [str(c) for c in result.pushed] == ["R/org/repo/api:latest"]
    assert list(result.failed.values()) == ["connection reset"]
    with pytest.raises(PartialPublishError):
        result.raise_for_failure()
