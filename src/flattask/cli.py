"""
Command Line Interface for flattask.

The tools are installed separately (``mktask``, ``addtask``, ``rmtask``,
``lstask``) and also bundled under the ``flattask`` group.
"""

import click
from .version import VERSION
from .commands import (
    EXIT_FAILURE,
    EXIT_SUCCESS,
    build_task,
    describe,
    import_sources,
    load_tasks,
    read_body,
    remove_tasks,
)
from .codec import write_task
from .config import resolve_store_dir
from .logs import setup_logging
from .recovery import ConfigError, FileOperationError, TaskError
from .store import TaskStore


def store_option(f):
    return click.option(
        '-s', '--store', 'store_dir',
        type=click.Path(file_okay=False),
        default=None,
        help='Task directory (default: $FLATTASK_STORE, $XDG_DATA_HOME/tasks or ~/.tasks)',
    )(f)


def _fail(ctx, message):
    click.echo(f"❌ {ctx.info_name}: {message}", err=True)
    ctx.exit(EXIT_FAILURE)


def _open_store(ctx, store_dir, create):
    try:
        store = TaskStore(resolve_store_dir(store_dir))
        if create:
            store.ensure()
    except (ConfigError, FileOperationError) as e:
        _fail(ctx, e)

    if not store.root.is_dir():
        _fail(ctx, f"no task directory at {store.root}")
    return store


def _single(ctx, values, flag):
    if len(values) > 1:
        raise click.UsageError(f"{flag} may only be given once", ctx=ctx)
    return values[0] if values else None


@click.command()
@click.option('-a', '--after', multiple=True, metavar='TIME', help='Start of the task window')
@click.option('-o', '--on', 'on', multiple=True, metavar='TIME', help='Start and end of the task window')
@click.option('-u', '--until', multiple=True, metavar='TIME', help='End of the task window')
@click.option('-w', '--save', is_flag=True, help='Save the task in the store instead of printing it')
@store_option
@click.argument('title')
@click.argument('authors', nargs=-1)
@click.version_option(version=VERSION, prog_name="mktask")
@click.pass_context
def mktask(ctx, after, on, until, save, store_dir, title, authors):
    """
    Build a task record and write it to standard output.

    The body is read from standard input. TIME is either 'HH:MM YYYY-MM-DD'
    (UTC) or a short expression: '.', '.^', '.$', or a day offset such as
    '3', '-2^' or '+1$'.
    """
    setup_logging()

    after = _single(ctx, after, '-a')
    on = _single(ctx, on, '-o')
    until = _single(ctx, until, '-u')

    if on is not None and (after is not None or until is not None):
        raise click.UsageError("-o cannot be combined with -a or -u", ctx=ctx)
    if after is None and on is None and until is None:
        raise click.UsageError("one of -a, -o or -u is required", ctx=ctx)

    start = on if on is not None else after
    end = on if on is not None else until

    try:
        body = read_body(click.get_binary_stream('stdin'))
        record = build_task(title, authors, start=start, end=end, body=body)
    except (TaskError, OSError) as e:
        _fail(ctx, e)

    if save:
        store = _open_store(ctx, store_dir, create=True)
        try:
            path = store.add(record)
        except TaskError as e:
            _fail(ctx, e)
        click.echo(f"✅ Saved task as {path}", err=True)
        return

    write_task(record, click.get_binary_stream('stdout'))


@click.command()
@store_option
@click.argument('sources', nargs=-1, type=click.Path(allow_dash=True))
@click.version_option(version=VERSION, prog_name="addtask")
@click.pass_context
def addtask(ctx, store_dir, sources):
    """
    Add task records to the store.

    Each SOURCE (standard input when none is given, or for '-') must hold a
    record as written by mktask. Tasks are saved under sequential numbers.
    """
    setup_logging()
    store = _open_store(ctx, store_dir, create=True)
    ctx.exit(import_sources(store, sources, click.get_binary_stream('stdin')))


@click.command()
@store_option
@click.argument('tasks', nargs=-1, required=True)
@click.version_option(version=VERSION, prog_name="rmtask")
@click.pass_context
def rmtask(ctx, store_dir, tasks):
    """Remove tasks from the store."""
    setup_logging()
    store = _open_store(ctx, store_dir, create=False)
    ctx.exit(remove_tasks(store, tasks))


@click.command()
@store_option
@click.version_option(version=VERSION, prog_name="lstask")
@click.pass_context
def lstask(ctx, store_dir):
    """List the tasks in the store: name, start, end and title."""
    setup_logging()
    store = _open_store(ctx, store_dir, create=False)

    status = EXIT_SUCCESS
    try:
        for name, record, error in load_tasks(store):
            if error is not None:
                click.echo(f"⚠️  {name}: {error}", err=True)
                status = EXIT_FAILURE
                continue
            click.echo(describe(name, record))
    except TaskError as e:
        _fail(ctx, e)
    ctx.exit(status)


@click.group()
@click.version_option(version=VERSION, prog_name="flattask")
def main():
    """
    flattask - a personal task tracker kept as one file per task.
    """
    pass


main.add_command(mktask, name="make")
main.add_command(addtask, name="add")
main.add_command(rmtask, name="rm")
main.add_command(lstask, name="ls")


if __name__ == "__main__":
    main()
