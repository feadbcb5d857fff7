# SPDX-License-Identifier: BSD-2-Clause

from xml.etree import ElementTree

from pydantic import ValidationError

from ipsetctl.errors import DecodeError
from ipsetctl.models import MemberEntry, SetCollection, SetHeader, SetRecord

HEADER_FLAGS = frozenset({'counters', 'comment', 'skbinfo', 'forceadd'})


def _text_fields(element: ElementTree.Element) -> dict[str, str]:
    return {child.tag: child.text.strip() for child in element if child.text is not None and child.text.strip()}


def _decode_header(element: ElementTree.Element | None) -> SetHeader:
    if element is None:
        return SetHeader()
    fields = _text_fields(element)
    for flag in HEADER_FLAGS:
        if element.find(flag) is not None:
            fields[flag] = True
    return SetHeader.model_validate(fields)


def _decode_members(element: ElementTree.Element | None) -> list[MemberEntry] | None:
    if element is None:
        return None
    return [MemberEntry.model_validate(_text_fields(member)) for member in element.findall('member')]


def _decode_set(element: ElementTree.Element) -> SetRecord:
    name = element.get('name')
    if not name:
        raise DecodeError("<ipset> element without a name attribute")

    try:
        return SetRecord(name=name,
                         type=element.findtext('type', default='').strip(),
                         revision=element.findtext('revision', default='').strip(),
                         header=_decode_header(element.find('header')),
                         members=_decode_members(element.find('members')))
    except ValidationError as e:
        raise DecodeError(f"Invalid listing for set '{name}': {e}") from e


def decode_sets(data: bytes) -> SetCollection:
    if not data.strip():
        return []

    try:
        root = ElementTree.fromstring(data)
    except ElementTree.ParseError as e:
        raise DecodeError(f"Malformed XML listing: {e}") from e

    if root.tag != 'ipsets':
        raise DecodeError(f"Unexpected root element <{root.tag}>, expected <ipsets>")

    return [_decode_set(element) for element in root.findall('ipset')]
