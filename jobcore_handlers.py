# jobcore_handlers.py
# Demo handlers picked up by `jobcore run` when this file is in the current directory.
#
#   jobcore run echo hello world
#   jobcore run config --env-json settings.json --dump-env
from __future__ import annotations


def echo(job):
    sep = job.getenv("SEP") or " "
    job.stdout.write((sep.join(job.args) + "\n").encode("utf-8"))
    return "0"


def config(job):
    """Print the structured environment the job was given."""
    job.logf("%d key(s)", len(job.environ()))
    for key, value in sorted(job.export_env().items()):
        job.logf("%s = %r", key, value)
    return "0"


def cat(job):
    data = job.stdin.read()
    if not data and job.getenv_bool("STRICT"):
        job.errorf("no input")
        return "empty input"
    job.stdout.write(data)
    return "0"


HANDLERS = {
    "echo": echo,
    "config": config,
    "cat": cat,
}
