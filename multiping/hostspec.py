# Copyright 2025 icecake0141
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# This file was created or modified with the assistance of an AI (Large Language Model).
# Review for correctness and security.

"""
Host list parsing for MultiPing.

A host list is a comma-separated string of host spec tokens. Each token is
either a bare address or hostname, or carries a ``prefix:`` annotation that
requests DNS expansion or the IPv6 ping variant:

    A:example.com       resolve A records, ping each address
    AAAA:example.com    resolve AAAA records, ping6 each address
    6:example.com       ping6 the name directly, no resolution
    MX:example.com      resolve records of the given type verbatim
    2001:db8::1         bare IPv6 literal, ping6 directly
    192.0.2.1           bare address or name, ping directly

Only the first ``:`` separates the prefix, so IPv6 literals survive.
"""

import enum
import re
from dataclasses import dataclass
from typing import List, Optional

# A prefix made only of hex digits is taken to be the first group of an IPv6
# literal. This misclassifies tokens such as "ad:example.com" or "ff:db8::1"
# whose prefix could also be read as a record type.
_HEX_PREFIX_RE = re.compile(r"^[0-9A-Fa-f]*$")


class ResolveMode(enum.Enum):
    """How a host spec must be expanded before probing."""

    NONE = "none"
    A = "A"
    AAAA = "AAAA"
    CUSTOM = "custom"


@dataclass(frozen=True)
class HostSpec:
    """One parsed entry of the configured host list."""

    raw_token: str
    address: str
    resolve_mode: ResolveMode = ResolveMode.NONE
    record_type: Optional[str] = None
    force_ipv6: bool = False

    @property
    def needs_resolution(self) -> bool:
        return self.resolve_mode is not ResolveMode.NONE


def parse_host_spec(token: str) -> HostSpec:
    """
    Parse a single host spec token.

    Args:
        token: One entry of the host list, already stripped of whitespace

    Returns:
        HostSpec describing the address, resolution mode and ping variant
    """
    if ":" not in token:
        return HostSpec(raw_token=token, address=token)

    prefix, remainder = token.split(":", 1)
    if prefix == "A":
        return HostSpec(raw_token=token, address=remainder, resolve_mode=ResolveMode.A, record_type="A")
    if prefix == "AAAA":
        return HostSpec(
            raw_token=token,
            address=remainder,
            resolve_mode=ResolveMode.AAAA,
            record_type="AAAA",
            force_ipv6=True,
        )
    if prefix == "6":
        return HostSpec(raw_token=token, address=remainder, force_ipv6=True)
    if _HEX_PREFIX_RE.match(prefix):
        return HostSpec(raw_token=token, address=token, force_ipv6=True)
    return HostSpec(raw_token=token, address=remainder, resolve_mode=ResolveMode.CUSTOM, record_type=prefix)


def split_list(raw: Optional[str]) -> List[str]:
    """Split a comma-separated config value, dropping blank entries."""
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def parse_host_list(raw_hosts: Optional[str]) -> List[HostSpec]:
    """
    Parse a comma-separated host list into host specs.

    The result keeps input order; callers zip it positionally against the
    configured names.
    """
    return [parse_host_spec(token) for token in split_list(raw_hosts)]
