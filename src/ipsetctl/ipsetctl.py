# SPDX-License-Identifier: BSD-2-Clause

import argparse
import json
import logging
import sys

from rich.logging import RichHandler

from ipsetctl.config import Config, IPSetDefinition, IPSetType, read_config
from ipsetctl.errors import IPSetError
from ipsetctl.executor import Executor
from ipsetctl.handler import IPAddressHandler, IPNetHandler, read_lines


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog='ipsetctl')

    parser.add_argument('--debug', '-D', action='store_true', default=False,
                        help='Enable debug logging')

    parser.add_argument('--config', '-c',
                        help='Path to config file')

    commands = parser.add_subparsers(dest='command', required=True)

    commands.add_parser('sync', help='Load every configured ipset from its source file')

    list_parser = commands.add_parser('list', help='Show sets as JSON')
    list_parser.add_argument('name', nargs='?', help='Only show this set')
    list_parser.add_argument('--terse', '-t', action='store_true', default=False,
                             help='Omit set members')

    commands.add_parser('names', help='Show set names')

    entries_parser = commands.add_parser('entries', help='Show the entries of a set')
    entries_parser.add_argument('name')

    refresh_parser = commands.add_parser('refresh', help='Replace the entries of a set')
    refresh_parser.add_argument('name')
    refresh_parser.add_argument('entries', nargs='*')
    refresh_parser.add_argument('--from-file', '-f',
                                help='Read entries from a file, one per line')

    references_parser = commands.add_parser('references', help='Show the reference count of a set')
    references_parser.add_argument('name')

    return parser.parse_args(argv)


def setup_logging(debug: bool, color: bool):
    if color:
        handlers = [RichHandler(enable_link_path=False)]
        log_format = '%(message)s'
    else:
        handlers = [RichHandler(show_path=False, omit_repeated_times=False)]
        log_format = '%(filename)s:%(lineno)s %(levelname)s: %(message)s'

    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO,
                        format=log_format,
                        datefmt='[%Y-%m-%d %H:%M:%S]',
                        handlers=handlers)


def process_ipset(executor: Executor, ipset: IPSetDefinition) -> None:
    logging.info(f"Processing ipset '{ipset.name}'")

    match ipset.type:
        case IPSetType.IP:
            handler = IPAddressHandler
        case IPSetType.NET:
            handler = IPNetHandler
        case _:
            raise ValueError(f"Unexpected ipset type: {ipset.type}")

    handler.ensure_kernel_ipset_exists(executor, ipset.name, ipset.kernel_opts)
    current_items = handler.read_from_kernel_ipset(executor, ipset.name)

    new_items = handler.preprocess_item_set(handler.read_from_file(ipset.source))

    logging.info(f"Current set: {len(current_items)} items, new set: {len(new_items)} items (+{len(new_items - current_items)}, -{len(current_items - new_items)})")

    handler.update_kernel_ipset(executor, ipset.name, new_items)


def run_command(args, config: Config) -> None:
    executor = Executor(config=config)

    match args.command:
        case 'sync':
            for ipset in config.ipsets:
                process_ipset(executor, ipset)
        case 'list':
            if args.name:
                sets = [executor.list_set(args.name, suppress_members=args.terse)]
            else:
                sets = executor.list_sets(suppress_members=args.terse)
            print(json.dumps([ipset.model_dump(mode='json') for ipset in sets], indent=2))
        case 'names':
            for name in executor.list_set_names():
                print(name)
        case 'entries':
            for entry in executor.list_entries(args.name):
                print(entry)
        case 'refresh':
            entries = list(args.entries)
            if args.from_file:
                entries.extend(read_lines(args.from_file))
            executor.refresh(args.name, entries)
            logging.info(f"Refreshed ipset '{args.name}' with {len(entries)} entries")
        case 'references':
            print(executor.get_references(args.name))


def main(argv=None):
    args = parse_args(argv)
    setup_logging(debug=args.debug,
                  color=sys.stdout.isatty())
    config = read_config(args.config) if args.config else Config()

    try:
        run_command(args, config)
    except IPSetError as e:
        logging.error(str(e).strip())
        sys.exit(1)


if __name__ == '__main__':
    main()
