# SPDX-License-Identifier: BSD-2-Clause

import logging
import os
import secrets
import shutil
import threading
from collections.abc import Iterable
from contextlib import contextmanager
from os import PathLike

from ipsetctl.config import ExecutorConfig, read_config
from ipsetctl.decoder import decode_sets
from ipsetctl.errors import AmbiguousResultError, BinaryNotFoundError, ElementNotFoundError, IPSetError
from ipsetctl.models import SetCollection, SetRecord
from ipsetctl.options import Options, serialize_options
from ipsetctl.runner import CommandRunner

MAX_SET_NAME_LENGTH = 31


def find_binary(binary: str, search_path: str | None = None) -> str:
    found = shutil.which(binary, path=search_path)
    if found is None:
        raise BinaryNotFoundError(binary, search_path)
    return os.path.abspath(found)


class Executor:
    def __init__(self, binary_path: str | None = None, config: ExecutorConfig | None = None,
                 cancel_event: threading.Event | None = None):
        self.config = config or ExecutorConfig()
        self._binary_path = find_binary(binary_path or self.config.binary, self.config.search_path)
        self._runner = CommandRunner(self._binary_path, timeout=self.config.timeout, cancel_event=cancel_event)

    @classmethod
    def from_config_file(cls, config_file: str | PathLike, **kwargs) -> 'Executor':
        return cls(config=read_config(config_file), **kwargs)

    @property
    def binary_path(self) -> str:
        return self._binary_path

    def _run(self, *args: str) -> None:
        self._runner.run(*args)

    def create(self, name: str, set_type: str, options: Options = None, exist: bool = False) -> None:
        flags = ['-exist'] if exist else []
        self._run('create', name, set_type, *flags, *serialize_options(options))

    def add(self, name: str, entry: str, options: Options = None) -> None:
        self._run('add', name, entry, *serialize_options(options))

    def add_unique(self, name: str, entry: str, options: Options = None) -> None:
        self._run('add', name, entry, '-exist', *serialize_options(options))

    def delete(self, name: str, entry: str, options: Options = None) -> None:
        self._run('del', name, entry, *serialize_options(options))

    def test(self, name: str, entry: str, options: Options = None) -> None:
        self._run('test', name, entry, *serialize_options(options))

    def contains(self, name: str, entry: str, options: Options = None) -> bool:
        try:
            self.test(name, entry, options)
        except ElementNotFoundError:
            return False
        return True

    def destroy(self, name: str | None = None) -> None:
        self._run('destroy', *([name] if name else []))

    def flush(self, name: str | None = None) -> None:
        self._run('flush', *([name] if name else []))

    def rename(self, from_name: str, to_name: str) -> None:
        self._run('rename', from_name, to_name)

    def swap(self, from_name: str, to_name: str) -> None:
        self._run('swap', from_name, to_name)

    def save(self, name: str | None, filename: str | PathLike) -> None:
        self._run('save', *([name] if name else []), '-file', os.fspath(filename))

    def restore(self, filename: str | PathLike, exist: bool = False) -> None:
        self._run('restore', '-file', os.fspath(filename), *(['-exist'] if exist else []))

    def version(self) -> str:
        return self._runner.run('version', capture_output=True).decode(errors='replace').strip()

    def _list_xml(self, suppress_members: bool, *args: str) -> SetCollection:
        flags = ['-t'] if suppress_members else []
        return decode_sets(self._runner.run('list', '-o', 'xml', *flags, *args, capture_output=True))

    def list_sets(self, suppress_members: bool = False) -> SetCollection:
        return self._list_xml(suppress_members)

    def list_set(self, name: str, suppress_members: bool = False) -> SetRecord:
        sets = self._list_xml(suppress_members, name)
        if len(sets) != 1:
            raise AmbiguousResultError(name, len(sets))
        return sets[0]

    def list_entries(self, name: str) -> list[str]:
        return self.list_set(name).entries

    def list_set_names(self) -> list[str]:
        return [ipset.name for ipset in decode_sets(self._runner.run('list', '-n', '-o', 'xml', capture_output=True))]

    def get_references(self, name: str) -> int:
        return self.list_set(name, suppress_members=True).header.reference_count

    def temporary_name(self, name: str) -> str:
        if self.config.unique_temp_names:
            token = secrets.token_hex(4)
            return f"{name[:MAX_SET_NAME_LENGTH - len(token) - 1]}-{token}"
        return f"{name}{self.config.temp_suffix}"

    @contextmanager
    def temporary_set(self, name: str, set_type: str, options: Options = None):
        self.create(name, set_type, options)
        try:
            yield name
        except BaseException:
            try:
                self.destroy(name)
            except IPSetError as e:
                logging.warning(f"Failed to destroy temporary set '{name}': {e}")
            raise
        self.destroy(name)

    def refresh(self, name: str, entries: Iterable[str]) -> None:
        current = self.list_set(name, suppress_members=True)
        header = current.header
        options = {
            'family': header.family,
            'hashsize': header.hash_size,
            'maxelem': header.max_elements,
            'range': header.range,
            'size': header.size,
            'timeout': header.timeout,
            'netmask': header.netmask,
            'markmask': header.markmask,
            'bucketsize': header.bucketsize,
            'counters': header.counters,
            'comment': header.comment,
            'skbinfo': header.skbinfo,
            'forceadd': header.forceadd,
        }

        with self.temporary_set(self.temporary_name(name), current.type, options) as temp_name:
            for entry in entries:
                self.add_unique(temp_name, entry)
            self.swap(temp_name, name)
