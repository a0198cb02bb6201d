import asyncio

import click
from autoinject import injector

from storetree.boot.boot import init_storetree
from storetree.storage import ConnectorRegistry
from storetree.tree import PathResolver, StorageEntry, UnresolvedConnector, get_entry


@click.group
def main():
    init_storetree("cli")


@main.command
@click.argument("path")
@click.option("--kind", default=None, help="Storage type to use when PATH has no scheme")
@injector.inject
def resolve(path, kind, resolver: PathResolver = None):
    try:
        resolved = resolver.resolve(path, kind)
    except UnresolvedConnector as ex:
        raise click.ClickException(str(ex))
    print(f"kind     : {resolved.kind.value}")
    print(f"root     : {resolved.root_path}")
    print(f"scheme   : {resolved.original_scheme or ''}")
    print(f"segments : {'/'.join(resolved.segments)}")


@main.command
@click.argument("path")
@click.option("--kind", default=None, help="Storage type to use when PATH has no scheme")
def walk(path, kind):
    entry = _get_entry(path, kind, open_entry=True)
    print(f"reached  : {entry.kind.value}:{entry.path}")
    print(f"segments : {'/'.join(entry.hierarchy())}")
    if entry.has_error:
        print(f"error    : {entry.error_text}")
    _print_children(entry)


@main.command
@click.argument("path")
@click.option("--kind", default=None, help="Storage type to use when PATH has no scheme")
@click.option("--filter", "filter_text", default="", help="Server-side name filter")
@click.option("--pages", default=1, type=int, help="Maximum number of pages to list")
def ls(path, kind, filter_text, pages):
    entry = _get_entry(path, kind)
    asyncio.run(_load_pages(entry, filter_text, pages))
    if entry.has_error:
        print(f"error: {entry.error_text}")
    _print_children(entry)


@main.command
@injector.inject
def kinds(connectors: ConnectorRegistry = None):
    for kind, root_path in connectors.connectors():
        print(f"{kind.value: <6}: {root_path or '(empty)'}")


def _get_entry(path, kind, open_entry: bool = False) -> StorageEntry:
    try:
        return asyncio.run(_resolve_entry(path, kind, open_entry))
    except UnresolvedConnector as ex:
        raise click.ClickException(str(ex))


async def _resolve_entry(path, kind, open_entry: bool) -> StorageEntry:
    entry = await get_entry(path, kind)
    if open_entry:
        await entry.open()
    return entry


async def _load_pages(entry: StorageEntry, filter_text: str, pages: int):
    if filter_text:
        await entry.set_filter(filter_text)
    elif not entry.loaded:
        await entry.load_page(1)
    while entry.current_page < pages and entry.has_more_pages:
        if not await entry.fetch_more():
            break


def _print_children(entry: StorageEntry):
    for child in entry.children:
        marker = "d" if child.is_dir else "-"
        size = "" if child.definition.size is None else str(child.definition.size)
        print(f"{marker} {size: >12} {child.name}")
    if entry.has_more_pages and entry.loaded:
        print("...")
