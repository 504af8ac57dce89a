import pathlib
import click
from autoinject import injector
from ossdir.storage import StorageController, OssAdapter
from ossdir.util import OSSDirError


def run():
    from ossdir.boot.boot import init_ossdir
    init_ossdir("cli")
    main()


@click.group
@click.option("--adapter", default="default", help="Name of the [ossdir.adapters] configuration section")
@click.pass_context
def main(ctx, adapter: str):
    ctx.obj = adapter


@injector.inject
def _get_adapter(ctx: click.Context, storage: StorageController = None) -> OssAdapter:
    try:
        return storage.get_adapter(ctx.obj)
    except OSSDirError as ex:
        _fail(ctx, ex)


def _fail(ctx: click.Context, ex: Exception):
    print(f"{ex.__class__.__name__}: {str(ex)}")
    ctx.exit(1)


@main.command
@click.argument("directory", default="")
@click.option("--recursive", "-r", is_flag=True, default=False)
@click.pass_context
def ls(ctx, directory: str, recursive: bool):
    adapter = _get_adapter(ctx)
    for entry in adapter.list_contents(directory, recursive):
        if entry.is_dir():
            print(f"{'DIR': >12}  {'': <20}  {entry.path}/")
        else:
            modified = entry.modified_datetime()
            print(f"{entry.size: >12}  {modified.strftime('%Y-%m-%d %H:%M:%S') if modified else '': <20}  {entry.path}")


@main.command
@click.argument("path")
@click.pass_context
def cat(ctx, path: str):
    adapter = _get_adapter(ctx)
    try:
        click.echo(adapter.read(path), nl=False)
    except OSSDirError as ex:
        _fail(ctx, ex)


@main.command
@click.argument("local_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("path")
@click.option("--overwrite", is_flag=True, default=False)
@click.option("--visibility", type=click.Choice(["public", "private"]), default=None)
@click.option("--content-type", default=None)
@click.pass_context
def put(ctx, local_file: str, path: str, overwrite: bool, visibility: str, content_type: str):
    adapter = _get_adapter(ctx)
    options = {}
    if visibility:
        options['visibility'] = visibility
    if content_type:
        options['content-type'] = content_type
    try:
        result = adapter.upload(pathlib.Path(local_file), path, allow_overwrite=overwrite, options=options)
        print(f"Uploaded {result['size']} bytes to {path}")
    except OSSDirError as ex:
        _fail(ctx, ex)


@main.command
@click.argument("path")
@click.argument("local_file")
@click.option("--overwrite", is_flag=True, default=False)
@click.pass_context
def get(ctx, path: str, local_file: str, overwrite: bool):
    adapter = _get_adapter(ctx)
    try:
        adapter.download(path, pathlib.Path(local_file), allow_overwrite=overwrite)
        print(f"Downloaded {path} to {local_file}")
    except OSSDirError as ex:
        _fail(ctx, ex)


@main.command
@click.argument("path")
@click.pass_context
def rm(ctx, path: str):
    adapter = _get_adapter(ctx)
    try:
        adapter.delete(path)
        print(f"Removed {path}")
    except OSSDirError as ex:
        _fail(ctx, ex)


@main.command
@click.argument("path")
@click.pass_context
def mkdir(ctx, path: str):
    adapter = _get_adapter(ctx)
    try:
        adapter.create_directory(path)
        print(f"Created {path}/")
    except OSSDirError as ex:
        _fail(ctx, ex)


@main.command
@click.argument("path")
@click.pass_context
def rmdir(ctx, path: str):
    adapter = _get_adapter(ctx)
    try:
        adapter.delete_directory(path)
        print(f"Removed {path}/")
    except OSSDirError as ex:
        _fail(ctx, ex)


@main.command
@click.argument("source")
@click.argument("target")
@click.pass_context
def mv(ctx, source: str, target: str):
    adapter = _get_adapter(ctx)
    try:
        adapter.rename(source, target)
        print(f"Moved {source} to {target}")
    except OSSDirError as ex:
        _fail(ctx, ex)


@main.command
@click.argument("source")
@click.argument("target")
@click.pass_context
def cp(ctx, source: str, target: str):
    adapter = _get_adapter(ctx)
    try:
        adapter.copy(source, target)
        print(f"Copied {source} to {target}")
    except OSSDirError as ex:
        _fail(ctx, ex)


@main.command
@click.argument("path")
@click.option("--public", is_flag=True, default=False, help="Print the URL without signature parameters")
@click.option("--expires", type=int, default=None, help="Seconds the signed URL stays valid")
@click.pass_context
def url(ctx, path: str, public: bool, expires: int):
    adapter = _get_adapter(ctx)
    try:
        if public:
            print(adapter.public_url(path))
        else:
            print(adapter.temporary_url(path, expires))
    except OSSDirError as ex:
        _fail(ctx, ex)


@main.command
@click.argument("path")
@click.argument("new_visibility", required=False, type=click.Choice(["public", "private"]))
@click.pass_context
def visibility(ctx, path: str, new_visibility: str):
    adapter = _get_adapter(ctx)
    try:
        if new_visibility:
            adapter.set_visibility(path, new_visibility)
        print(adapter.get_visibility(path).value)
    except OSSDirError as ex:
        _fail(ctx, ex)
