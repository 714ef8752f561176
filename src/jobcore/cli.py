# cli.py
from __future__ import annotations

import sys
from pathlib import Path

import click

from jobcore import settings
from jobcore.dsl import job
from jobcore.errors import DecodeError, EncodeError, ExecutionFailure
from jobcore.loader import load_handlers, resolve_handler
from jobcore.model import COMMAND_NOT_FOUND, Job
from jobcore.ui.console import Console, get_console, set_console


def _parse_env_pairs(ctx, param, values):
    for raw in values:
        if "=" not in raw:
            raise click.BadParameter(f"expected KEY=VALUE, got {raw!r}")
    return list(values)


def discover_handlers(handlers_arg: str | None) -> dict:
    """
    Load handlers from the given file, or from the default file if present.

    A missing default file means no handlers at all; a missing explicit file
    is an error.

    Raises:
        SystemExit: If the handlers cannot be loaded
    """
    console = get_console()

    if handlers_arg is None:
        default_path = Path(settings.HANDLERS_FILE)
        if not default_path.exists():
            console.print_debug(f"No handlers file at {default_path}, running unbound")
            return {}
        handlers_arg = str(default_path)

    try:
        handlers = load_handlers(handlers_arg)
    except (FileNotFoundError, ValueError, TypeError) as e:
        console.print_error(
            "Failed to load handlers",
            f"Could not load handlers from {handlers_arg}",
            details=[str(e)],
            suggestion="Define HANDLERS = {\"name\": fn} in the file, or pass --handlers my_handlers.py",
        )
        sys.exit(1)

    console.print_debug(f"Loaded {len(handlers)} handler(s) from {handlers_arg}")
    return handlers


def _load_env(j: Job, env_json, env_pairs: list[str]) -> None:
    console = get_console()
    if env_json is not None:
        try:
            j.decode_env(env_json)
        except DecodeError as e:
            console.print_error(
                "Invalid environment file",
                f"Could not decode {env_json.name}",
                details=[str(e)],
                suggestion="The file must hold a single JSON object.",
            )
            sys.exit(1)
    # flags override the file
    j.env.extend(env_pairs)


env_option = click.option(
    "--env",
    "env_pairs",
    multiple=True,
    callback=_parse_env_pairs,
    metavar="KEY=VALUE",
    help="Environment entry (repeatable, later entries win)",
)
env_json_option = click.option(
    "--env-json",
    type=click.File("rb"),
    default=None,
    help="JSON object file decoded into the environment",
)


@click.group()
@click.option(
    "--debug/--no-debug",
    default=settings.DEBUG,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """jobcore: run named jobs with a structured environment."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.argument("name")
@click.argument("args", nargs=-1)
@click.option(
    "--handlers",
    default=None,
    help=f"Handlers file path (defaults to {settings.HANDLERS_FILE} if present)",
)
@env_option
@env_json_option
@click.option("--dump-env/--no-dump-env", default=False, help="Write the final environment as JSON to stderr")
@click.pass_context
def run(ctx, name, args, handlers, env_pairs, env_json, dump_env):
    """Run job NAME with ARGS."""
    console = get_console()

    table = discover_handlers(handlers)
    stderr = click.get_binary_stream("stderr")

    j = job(
        name,
        *args,
        handler=resolve_handler(table, name),
        stdin=click.get_binary_stream("stdin"),
        stdout=click.get_binary_stream("stdout"),
        stderr=stderr,
    )
    _load_env(j, env_json, env_pairs)

    console.print_job_started(str(j), handlers)

    exit_code = 0
    try:
        j.run()
        console.print_job_result(str(j), j.status)
    except ExecutionFailure as e:
        console.print_job_result(str(j), j.status)
        hint = None
        if j.status == COMMAND_NOT_FOUND:
            hint = f"No handler named {name!r}. Check the handlers file."
        console.print_failure(e.job, e.status, hint=hint)
        exit_code = 1
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)

    if dump_env:
        try:
            j.encode_env(stderr)
        except EncodeError as e:
            console.print_exception(e)
            exit_code = 1

    sys.exit(exit_code)


@cli.command()
@env_option
@env_json_option
def env(env_pairs, env_json):
    """Print the encoded environment built from --env-json and --env."""
    console = get_console()
    j = job("env")
    _load_env(j, env_json, env_pairs)
    try:
        j.encode_env(click.get_binary_stream("stdout"))
    except EncodeError as e:
        console.print_exception(e)
        sys.exit(1)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
