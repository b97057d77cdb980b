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
Command Line Interface for cienv.
"""
import json
import logging
import os

import click

from ..BUILDERS.image_builder import build_args, build_matrix, build_tags, ordered_tags
from ..CONVERTERS.to_github import GithubOutputConverter, format_outputs
from ..exceptions import ConfigError, DockerCommandError, InvalidInputError, PartialPublishError
from ..MANAGERS.environment_manager import EnvironmentManager
from ..MODELS.environment_table import DEFAULT_TABLE
from ..PARSERS.config_parser import ConfigParser
from ..REGISTRY.publisher import publish as publish_tags
from ..RESOLVERS.environment_resolver import EnvironmentResolver
from ..RUNNERS.docker_runner import DockerCli
from ..UTILS.logging_config import setup_logging

logger = logging.getLogger(__name__)

DEFAULT_SHA_LENGTH = 7


# GITHUB_HEAD_REF is only set on pull request events, where GITHUB_REF is refs/pull/N/merge
REF_ENVVARS = ['GITHUB_HEAD_REF', 'GITHUB_REF', 'GITHUB_REF_NAME']

RESOLVE_OPTIONS = [
    click.option('--ref', 'reference', envvar=REF_ENVVARS, required=True,
                 help='Branch or tag that triggered the run '
                      '[env: GITHUB_HEAD_REF, then GITHUB_REF]'),
    click.option('--sha', envvar='GITHUB_SHA', required=True,
                 help='Commit SHA, shortened to --sha-length [env: GITHUB_SHA]'),
    click.option('--sha-length', default=DEFAULT_SHA_LENGTH, show_default=True,
                 type=click.IntRange(min=1), help='Characters of the SHA to keep'),
    click.option('--repository', envvar='GITHUB_REPOSITORY',
                 help='Repository identifier, e.g. org/repo [env: GITHUB_REPOSITORY]'),
    click.option('--build-dependencies', is_flag=True,
                 help='Also compute the dependency image tag'),
]


def resolve_options(f):
    """Options shared by every command that resolves the current run."""
    for option in reversed(RESOLVE_OPTIONS):
        f = option(f)
    return f


def _resolve(ctx, reference, sha, sha_length, repository, build_dependencies):
    resolver = EnvironmentResolver(ctx.obj['table'])
    try:
        return resolver.resolve(
            reference,
            sha[:sha_length],
            repository=repository,
            build_dependencies=build_dependencies,
        )
    except InvalidInputError as e:
        raise click.UsageError(str(e), ctx=ctx)


@click.group()
@click.option('--config', '-c', 'config_path', envvar='CIENV_CONFIG',
              type=click.Path(dir_okay=False), help='Environment table YAML file')
@click.option('--env-file', 'env_files', multiple=True,
              help='.env file with variables for config interpolation')
@click.option('--log-level', envvar='CIENV_LOG_LEVEL',
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False))
@click.pass_context
def cli(ctx, config_path, env_files, log_level):
    """
    cienv - CI environment and image reference resolution.

    Derives environment, version and registry endpoints from the triggering
    git reference and builds the image tags pushed for each service.
    """
    setup_logging(log_level)
    ctx.ensure_object(dict)
    ctx.obj['table'] = DEFAULT_TABLE
    if config_path:
        context = EnvironmentManager().get_context(list(env_files))
        try:
            ctx.obj['table'] = ConfigParser(context).parse(config_path)
        except ConfigError as e:
            raise click.ClickException(str(e))
        logger.debug("Using %r", ctx.obj['table'])


@cli.command()
@resolve_options
@click.option('--format', '-o', 'output_format', default='text', show_default=True,
              type=click.Choice(['text', 'json', 'github']), help='Output format')
@click.pass_context
def resolve(ctx, reference, sha, sha_length, repository, build_dependencies, output_format):
    """Resolve environment, version and endpoints of the current run."""
    resolved = _resolve(ctx, reference, sha, sha_length, repository, build_dependencies)
    outputs = resolved.as_outputs()

    if output_format == 'json':
        click.echo(json.dumps(outputs, indent=2))
        return
    if output_format == 'text':
        click.echo(format_outputs(outputs), nl=False)
        return

    output_path = os.environ.get('GITHUB_OUTPUT')
    if not output_path:
        raise click.UsageError('GITHUB_OUTPUT is not set', ctx=ctx)
    converter = GithubOutputConverter(resolved)
    converter.write_outputs(output_path)
    summary_path = os.environ.get('GITHUB_STEP_SUMMARY')
    if summary_path:
        converter.write_summary(summary_path)
    click.echo(f"Outputs written to {output_path}")


@cli.command()
@resolve_options
@click.option('--image-repository', help='Repository path in the registry, defaults to --repository')
@click.option('--service', 'services', multiple=True, required=True, help='Service name (repeatable)')
@click.pass_context
def matrix(ctx, reference, sha, sha_length, repository, build_dependencies,
           image_repository, services):
    """
    Print the image tags of every service as JSON.

    Also appends a summary of the images to $GITHUB_STEP_SUMMARY when it is set.
    """
    resolved = _resolve(ctx, reference, sha, sha_length, repository, build_dependencies)
    try:
        images = build_matrix(resolved, image_repository or repository, services)
    except InvalidInputError as e:
        raise click.UsageError(str(e), ctx=ctx)

    ordered = {service: ordered_tags(coords) for service, coords in images.items()}
    summary_path = os.environ.get('GITHUB_STEP_SUMMARY')
    if summary_path:
        GithubOutputConverter(resolved).write_summary(summary_path, ordered)

    click.echo(json.dumps(
        {service: [str(c) for c in coords] for service, coords in ordered.items()},
        indent=2,
    ))


@cli.command()
@resolve_options
@click.option('--image-repository', help='Repository path in the registry, defaults to --repository')
@click.option('--service', required=True, help='Service name')
@click.option('--context', 'build_context', default='.', show_default=True, help='Build context')
@click.option('--dockerfile', help='Dockerfile of the service')
@click.option('--dependencies-dockerfile', help='Dockerfile of the dependency image')
@click.option('--dependency-build-arg', help='Build argument receiving the dependency image tag')
@click.option('--docker', 'docker_executable', default='docker', show_default=True)
@click.option('--dry-run', is_flag=True, help='Only print the docker commands')
@click.pass_context
def publish(ctx, reference, sha, sha_length, repository, build_dependencies, image_repository,
            service, build_context, dockerfile, dependencies_dockerfile, dependency_build_arg,
            docker_executable, dry_run):
    """Build one service and push it under its version and 'latest' tags."""
    resolved = _resolve(ctx, reference, sha, sha_length, repository, build_dependencies)
    try:
        coordinates = build_tags(resolved, image_repository or repository, service)
    except InvalidInputError as e:
        raise click.UsageError(str(e), ctx=ctx)
    if resolved.dependency_image_tag and not dependencies_dockerfile:
        raise click.UsageError(
            '--dependencies-dockerfile is required with --build-dependencies', ctx=ctx
        )

    docker = DockerCli(docker_executable, dry_run=dry_run)
    try:
        if resolved.dependency_image_tag:
            docker.build(build_context, [resolved.dependency_image_tag],
                         dockerfile=dependencies_dockerfile, build_args=build_args(resolved))
            docker.push(resolved.dependency_image_tag)

        refs = [str(c) for c in ordered_tags(coordinates)]
        docker.build(build_context, refs, dockerfile=dockerfile,
                     build_args=build_args(resolved, dependency_build_arg))
        result = publish_tags(coordinates, docker.push)
        result.raise_for_failure()
    except (DockerCommandError, PartialPublishError) as e:
        raise click.ClickException(str(e))

    for coordinate in result.pushed:
        click.echo(str(coordinate))


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()
