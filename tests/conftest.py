# SPDX-License-Identifier: BSD-2-Clause

import subprocess
from xml.sax.saxutils import escape, quoteattr

import pytest

from ipsetctl.config import ExecutorConfig
from ipsetctl.executor import Executor

PREFIX = "ipset v7.15: "


class FakeKernel:
    """In-memory stand-in for the ipset binary and the kernel sets behind it."""

    def __init__(self):
        self.sets = {}
        self.calls = []
        self.fail_on = {}

    def new_set(self, name, set_type="hash:ip", members=(), **header):
        self.sets[name] = {
            'type': set_type,
            'header': {'family': 'inet', 'hashsize': '1024', 'maxelem': '65536', 'references': '0', **header},
            'members': list(members),
        }

    def execute(self, argv):
        args = list(argv[1:])
        self.calls.append(args)
        if args and args[0] in self.fail_on:
            return 1, b'', self.fail_on[args[0]].encode()
        exist = '-exist' in args
        args = [arg for arg in args if arg != '-exist']
        try:
            stdout = getattr(self, f"cmd_{args[0]}")(exist, *args[1:])
        except FakeFailure as e:
            return 1, b'', (PREFIX + str(e) + "\n").encode()
        return 0, (stdout or '').encode(), b''

    def _get(self, name):
        if name not in self.sets:
            raise FakeFailure("The set with the given name does not exist")
        return self.sets[name]

    def cmd_create(self, exist, name, set_type, *options):
        if name in self.sets:
            if exist:
                return
            raise FakeFailure("Set cannot be created: set with the same name already exists")
        header = {}
        tokens = list(options)
        while tokens:
            key = tokens.pop(0)
            if key in ('counters', 'comment', 'skbinfo', 'forceadd'):
                header[key] = ''
                continue
            if not tokens:
                raise FakeFailure(f"Syntax error: option {key} requires a value")
            header[key] = tokens.pop(0)
        self.new_set(name, set_type, **header)

    def cmd_add(self, exist, name, entry, *options):
        members = self._get(name)['members']
        if entry in members:
            if exist:
                return
            raise FakeFailure("Element cannot be added to the set: it's already added")
        members.append(entry)

    def cmd_del(self, exist, name, entry, *options):
        members = self._get(name)['members']
        if entry not in members:
            if exist:
                return
            raise FakeFailure("Element cannot be deleted from the set: it's not added")
        members.remove(entry)

    def cmd_test(self, exist, name, entry, *options):
        if entry not in self._get(name)['members']:
            raise FakeFailure(f"{entry} is NOT in set {name}.")

    def cmd_destroy(self, exist, name=None):
        if name is None:
            self.sets.clear()
            return
        self._get(name)
        del self.sets[name]

    def cmd_flush(self, exist, name=None):
        for ipset in ([self._get(name)] if name else self.sets.values()):
            ipset['members'].clear()

    def cmd_rename(self, exist, from_name, to_name):
        self._get(from_name)
        if to_name in self.sets:
            raise FakeFailure("A set with the new name already exists")
        self.sets[to_name] = self.sets.pop(from_name)

    def cmd_swap(self, exist, from_name, to_name):
        first, second = self._get(from_name), self._get(to_name)
        self.sets[from_name], self.sets[to_name] = second, first

    def cmd_save(self, exist, *args):
        names = [args[0]] if args[0] != '-file' else list(self.sets)
        lines = []
        for name in names:
            ipset = self._get(name)
            lines.append(f"create {name} {ipset['type']}")
            lines.extend(f"add {name} {member}" for member in ipset['members'])
        with open(args[-1], 'w') as outfile:
            outfile.write("\n".join(lines) + "\n")

    def cmd_restore(self, exist, flag, filename):
        with open(filename) as infile:
            for line in infile:
                command, *rest = line.split()
                getattr(self, f"cmd_{command}")(exist, *rest)

    def cmd_version(self, exist):
        return "ipset v7.15, protocol version: 7\n"

    def cmd_list(self, exist, *args):
        args = list(args)
        terse = '-t' in args
        names_only = '-n' in args
        args = [arg for arg in args if arg not in ('-t', '-n', '-o', 'xml')]
        names = [args[0]] if args else list(self.sets)
        for name in names:
            self._get(name)

        out = ["<ipsets>"]
        for name in names:
            if names_only:
                out.append(f"<ipset name={quoteattr(name)}/>")
                continue
            ipset = self.sets[name]
            out.append(f"<ipset name={quoteattr(name)}>")
            out.append(f"<type>{ipset['type']}</type>")
            out.append("<revision>4</revision>")
            out.append("<header>")
            for key, value in ipset['header'].items():
                out.append(f"<{key}/>" if value == '' else f"<{key}>{escape(value)}</{key}>")
            out.append("<memsize>296</memsize>")
            out.append(f"<numentries>{len(ipset['members'])}</numentries>")
            out.append("</header>")
            if not terse:
                out.append("<members>")
                out.extend(f"<member><elem>{escape(member)}</elem></member>" for member in ipset['members'])
                out.append("</members>")
            out.append("</ipset>")
        out.append("</ipsets>")
        return "\n".join(out) + "\n"


class FakeFailure(Exception):
    pass


class FakePopen:
    kernel = None

    def __init__(self, argv, stdin=None, stdout=None, stderr=None):
        self.args = argv
        self.returncode, self._stdout, self._stderr = self.kernel.execute(argv)
        self._capture = stdout == subprocess.PIPE

    def communicate(self, timeout=None):
        return (self._stdout if self._capture else None), self._stderr

    def kill(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


def make_binary(directory, name="ipset", script="exit 0\n"):
    binary = directory / name
    binary.write_text("#!/bin/sh\n" + script)
    binary.chmod(0o755)
    return binary


@pytest.fixture
def ipset_binary(tmp_path):
    return make_binary(tmp_path)


@pytest.fixture
def kernel(monkeypatch):
    fake = FakeKernel()
    monkeypatch.setattr(FakePopen, 'kernel', fake)
    monkeypatch.setattr(subprocess, 'Popen', FakePopen)
    return fake


@pytest.fixture
def executor(kernel, ipset_binary):
    return Executor(config=ExecutorConfig(search_path=str(ipset_binary.parent)))
