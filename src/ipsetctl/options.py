# SPDX-License-Identifier: BSD-2-Clause

from collections.abc import Mapping, Sequence
from typing import Union

from ipsetctl.errors import OptionsError

OptionValue = Union[str, int, float, bool, None]
Options = Union[Mapping[str, OptionValue], Sequence[str], None]


def serialize_options(options: Options) -> list[str]:
    match options:
        case None:
            return []
        case Mapping():
            argv = []
            for key, value in options.items():
                if value is None or value is False:
                    continue
                argv.append(str(key))
                if value is not True:
                    argv.append(str(value))
            return argv
        case str() | bytes():
            raise TypeError(f"Options must be a mapping or a sequence of tokens, got {options!r}")
        case Sequence():
            tokens = [str(token) for token in options]
            if len(tokens) % 2:
                raise OptionsError(f"Options must come in key/value pairs, got {len(tokens)} tokens: {tokens}")
            return tokens
        case _:
            raise TypeError(f"Unsupported options type: {type(options)}")
