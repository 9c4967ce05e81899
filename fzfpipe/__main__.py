"""
fzfpipe — listener CLI

Usage:
    python -m fzfpipe [--env-file .env] [--print-commands] [-v] [--debug]

Creates the endpoint, prints its name and the finder command lines to
stderr, and reports editor actions as JSON lines on stdout until
interrupted. On POSIX, SIGHUP reloads the settings.
"""

import argparse
import asyncio
import logging
import signal
import sys
from functools import partial

from .config import SettingsStore, load_settings
from .editor import JsonLinesEditor
from .host import FzfPipeHost


def _print_startup(host: FzfPipeHost, print_commands: bool):
    out = sys.stderr
    name = host.endpoint.name
    print("fzfpipe — finder selection listener", file=out)
    if name is None:
        print("  Endpoint: unavailable (finder events disabled)", file=out)
        return
    print(f"  Endpoint: {name}", file=out)
    print(f"  Working directory: {host.working_directory}", file=out)
    if print_commands and host.commands is not None:
        commands = host.commands
        print("  Commands:", file=out)
        print(f"    open:   {commands.open_file}", file=out)
        print(f"    add:    {commands.add_folder}", file=out)
        print(f"    search: {commands.search}", file=out)
        if commands.find_directories:
            print(f"    dirs:   {commands.find_directories}", file=out)
    print(file=out)


async def _run(host: FzfPipeHost, print_commands: bool):
    await host.activate()
    _print_startup(host, print_commands)

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()

    if sys.platform != 'win32':
        def shutdown(sig):
            print(f"\nShutting down (signal {sig})...", file=sys.stderr)
            stop.set()

        def reload(sig):
            logging.getLogger("fzfpipe").info("Reloading settings")
            host.reload_settings()

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, shutdown, sig)
        loop.add_signal_handler(signal.SIGHUP, reload, signal.SIGHUP)

    try:
        await stop.wait()
    finally:
        await host.deactivate()


def main():
    parser = argparse.ArgumentParser(
        description="Receive fzf selections through a FIFO or named pipe"
    )
    parser.add_argument(
        '--env-file', metavar='PATH',
        help='Load settings from this .env file'
    )
    parser.add_argument(
        '--print-commands', action='store_true',
        help='Print the finder command lines on startup'
    )
    parser.add_argument(
        '--verbose', '-v', action='store_true',
        help='Enable verbose logging'
    )
    parser.add_argument(
        '--debug', action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args()

    level = logging.WARNING
    if args.verbose:
        level = logging.INFO
    if args.debug:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format='%(asctime)s %(name)s %(levelname)s %(message)s',
        datefmt='%H:%M:%S',
        stream=sys.stderr,
    )

    try:
        store = SettingsStore(loader=partial(load_settings, args.env_file))
        host = FzfPipeHost(JsonLinesEditor(), store=store)
        asyncio.run(_run(host, args.print_commands))
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logging.getLogger("fzfpipe").debug("Setup failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
