# SPDX-License-Identifier: BSD-2-Clause

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SetHeader(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    family: Optional[str] = None
    hash_size: Optional[int] = Field(None, alias='hashsize')
    max_elements: Optional[int] = Field(None, alias='maxelem')
    mem_size: int = Field(0, alias='memsize')
    reference_count: int = Field(0, alias='references')
    num_entries: int = Field(0, alias='numentries')
    range: Optional[str] = None
    size: Optional[int] = None
    timeout: Optional[int] = None
    netmask: Optional[int] = None
    markmask: Optional[str] = None
    bucketsize: Optional[int] = None
    counters: bool = False
    comment: bool = False
    skbinfo: bool = False
    forceadd: bool = False


class MemberEntry(BaseModel):
    elem: str
    timeout: Optional[int] = None
    packets: Optional[int] = None
    bytes: Optional[int] = None
    comment: Optional[str] = None


class SetRecord(BaseModel):
    name: str
    type: str = ""
    revision: str = ""
    header: SetHeader = Field(default_factory=SetHeader)
    members: Optional[List[MemberEntry]] = None

    @property
    def entries(self) -> list[str]:
        return [member.elem for member in self.members or []]


SetCollection = List[SetRecord]
