# SPDX-License-Identifier: BSD-2-Clause


class IPSetError(Exception):
    pass


class BinaryNotFoundError(IPSetError):
    def __init__(self, binary: str, search_path: str | None = None):
        self.binary = binary
        self.search_path = search_path
        where = f" in '{search_path}'" if search_path else ""
        super().__init__(f"'{binary}' executable not found{where}")


class OptionsError(IPSetError, ValueError):
    pass


class DecodeError(IPSetError):
    pass


class AmbiguousResultError(IPSetError):
    def __init__(self, name: str, count: int):
        self.name = name
        self.count = count
        super().__init__(f"Listing set '{name}' returned {count} results, expected exactly one")


class CommandError(IPSetError):
    def __init__(self, argv: list[str], returncode: int, stderr: str):
        self.argv = argv
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(stderr)


class SetNotFoundError(CommandError):
    pass


class SetExistsError(CommandError):
    pass


class ElementExistsError(CommandError):
    pass


class ElementNotFoundError(CommandError):
    pass


class CommandTimeoutError(IPSetError, TimeoutError):
    def __init__(self, argv: list[str], timeout: float):
        self.argv = argv
        self.timeout = timeout
        super().__init__(f"'{' '.join(argv)}' did not finish within {timeout} seconds")


class CommandCancelledError(IPSetError):
    def __init__(self, argv: list[str]):
        self.argv = argv
        super().__init__(f"'{' '.join(argv)}' was cancelled")


_KNOWN_MESSAGES = [
    ("the set with the given name does not exist", SetNotFoundError),
    ("set with the same name already exists", SetExistsError),
    ("a set with the new name already exists", SetExistsError),
    ("it's already added", ElementExistsError),
    ("it's not added", ElementNotFoundError),
    ("is not in set", ElementNotFoundError),
]


def classify_error(argv: list[str], returncode: int, stderr: str) -> CommandError:
    lowered = stderr.lower()
    for fragment, error_class in _KNOWN_MESSAGES:
        if fragment in lowered:
            return error_class(argv, returncode, stderr)
    return CommandError(argv, returncode, stderr)
