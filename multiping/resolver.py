#!/usr/bin/env python3
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
# Review required for correctness, security, and licensing.

"""
DNS expansion for MultiPing.

This module resolves annotated host specs by running the external ``host``
utility and scraping the addresses out of its line-oriented output:

    example.com has address 192.0.2.10
    example.com has IPv6 address 2001:db8::10

Every line containing the word ``address`` contributes the token that follows
it. Other lines (aliases, mail handlers, errors) are skipped.
"""

import logging
import re
import subprocess
from typing import List, Optional

logger = logging.getLogger(__name__)

_ADDRESS_RE = re.compile(r"\baddress\s+(\S+)")


def parse_resolver_output(output: str) -> List[str]:
    """
    Extract resolved addresses from ``host`` output.

    Args:
        output: Raw stdout of the resolver command

    Returns:
        Addresses in output order; empty if no line matched
    """
    addresses = []
    for line in output.splitlines():
        match = _ADDRESS_RE.search(line)
        if match:
            addresses.append(match.group(1))
    return addresses


def resolve_addresses(
    record_type: str,
    hostname: str,
    host_command: str = "host",
    timeout: Optional[float] = None,
) -> List[str]:
    """
    Resolve a hostname to one address per DNS record of the given type.

    Failures never raise: a missing binary, a non-zero exit or a timeout all
    yield whatever addresses could be parsed, which is usually none.

    Args:
        record_type: DNS record type passed to ``host -t``
        hostname: Name to resolve
        host_command: Resolver executable (default: host)
        timeout: Optional limit in seconds for the resolver process

    Returns:
        List of address strings, possibly empty
    """
    cmd_args = [host_command, "-t", record_type, hostname]
    try:
        result = subprocess.run(
            cmd_args,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        logger.warning("Resolver timed out for %s %s", record_type, hostname)
        return []
    except OSError as e:
        logger.warning("Could not run resolver '%s': %s", host_command, e)
        return []

    addresses = parse_resolver_output(result.stdout or "")
    if result.returncode != 0:
        logger.debug("Resolver exited with %d for %s %s", result.returncode, record_type, hostname)
    if not addresses:
        logger.info("No %s records found for %s", record_type, hostname)
    return addresses
