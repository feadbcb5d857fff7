# SPDX-License-Identifier: BSD-2-Clause

from abc import ABC, abstractmethod
from os import PathLike

from netaddr.ip import IPAddress, IPNetwork, cidr_merge

from ipsetctl.executor import Executor


def read_lines(file_name: str | PathLike) -> list[str]:
    items = []
    with open(file_name, 'r') as infile:
        for line in infile:
            line = line.split('#', 1)[0].strip()
            if line:
                items.append(line)
    return items


class IPSetHandler(ABC):
    @staticmethod
    @abstractmethod
    def set_type() -> type:
        pass

    @staticmethod
    @abstractmethod
    def kernel_ipset_type() -> str:
        pass

    @classmethod
    @abstractmethod
    def preprocess_item_set(cls, new_items):
        pass

    @classmethod
    def parse_items(cls, items) -> set[IPAddress | IPNetwork]:
        elem_type = cls.set_type()
        return {elem_type(item) for item in items}

    @classmethod
    def read_from_file(cls, file_name: str | PathLike) -> set[IPAddress | IPNetwork]:
        return cls.parse_items(read_lines(file_name))

    @classmethod
    def read_from_kernel_ipset(cls, executor: Executor, ipset_name: str) -> set[IPAddress | IPNetwork]:
        return cls.parse_items(executor.list_entries(ipset_name))

    @classmethod
    def ensure_kernel_ipset_exists(cls, executor: Executor, ipset_name: str, kernel_opts) -> None:
        executor.create(ipset_name, cls.kernel_ipset_type(), kernel_opts, exist=True)

    @classmethod
    def update_kernel_ipset(cls, executor: Executor, set_name: str, new_items: set[IPAddress | IPNetwork]) -> None:
        executor.refresh(set_name, [str(item) for item in sorted(new_items)])


class IPAddressHandler(IPSetHandler):
    @classmethod
    def preprocess_item_set(cls, new_items):
        return new_items

    @staticmethod
    def kernel_ipset_type() -> str:
        return "hash:ip"

    @staticmethod
    def set_type() -> type:
        return IPAddress


class IPNetHandler(IPSetHandler):
    @classmethod
    def preprocess_item_set(cls, new_items):
        return set(cidr_merge(new_items))

    @staticmethod
    def kernel_ipset_type() -> str:
        return "hash:net"

    @staticmethod
    def set_type() -> type:
        return IPNetwork
