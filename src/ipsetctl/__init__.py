# SPDX-License-Identifier: BSD-2-Clause

from ipsetctl.config import Config, ExecutorConfig, IPSetDefinition, IPSetType, read_config
from ipsetctl.decoder import decode_sets
from ipsetctl.errors import (AmbiguousResultError, BinaryNotFoundError, CommandCancelledError, CommandError,
                             CommandTimeoutError, DecodeError, ElementExistsError, ElementNotFoundError, IPSetError,
                             OptionsError, SetExistsError, SetNotFoundError)
from ipsetctl.executor import Executor, find_binary
from ipsetctl.models import MemberEntry, SetCollection, SetHeader, SetRecord
from ipsetctl.options import serialize_options
from ipsetctl.runner import CommandRunner
