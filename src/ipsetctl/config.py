# SPDX-License-Identifier: BSD-2-Clause

from enum import Enum
from os import PathLike
from pathlib import Path
from typing import Dict, List, Optional, Union

import toml
from pydantic import BaseModel, ConfigDict, Field, PositiveFloat


class IPSetType(str, Enum):
    NET = "net"
    IP = "ip"


class IPSetDefinition(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    type: IPSetType
    kernel_opts: Dict[str, Union[str, int, bool]] = Field(default_factory=dict, alias='kernel-opts')
    source: Path


class ExecutorConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    binary: str = "ipset"
    search_path: Optional[str] = Field(None, alias='search-path')
    timeout: Optional[PositiveFloat] = None
    temp_suffix: str = Field("-swptemp", alias='temp-suffix')
    unique_temp_names: bool = Field(False, alias='unique-temp-names')


class Config(ExecutorConfig):
    ipsets: List[IPSetDefinition] = Field(default_factory=list)


def read_config(config_file: str | PathLike) -> Config:
    with open(config_file, 'r') as infile:
        raw_config = toml.load(infile)
    return Config(**raw_config)
