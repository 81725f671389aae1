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
Python wrapper for the system ping utilities.

The command line is assembled as::

    <ping_command> <pre_args...> <address> <post_args...>

``post_args`` exists for ping implementations that expect count or interval
options after the target. The wrapper returns the unparsed stdout of the
process. There is no separate error channel: a failed or missing ping shows up
as output that the parser cannot match.
"""

import logging
import shlex
import subprocess
from typing import List, Optional

logger = logging.getLogger(__name__)


def build_ping_command(ping_command: str, pre_args: str, address: str, post_args: str = "") -> List[str]:
    """Assemble the argument vector for a single ping invocation."""
    return [ping_command, *shlex.split(pre_args or ""), address, *shlex.split(post_args or "")]


def _decode(output) -> str:
    """Normalize partial output captured from an interrupted process."""
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output


def probe(
    ping_command: str,
    pre_args: str,
    address: str,
    post_args: str = "",
    timeout: Optional[float] = None,
) -> str:
    """
    Ping an address once with the external ping utility.

    Args:
        ping_command: Ping executable (e.g. ping or ping6)
        pre_args: Arguments placed before the address
        address: Target address or hostname
        post_args: Arguments placed after the address
        timeout: Optional supervisory limit in seconds; the process is killed
                 when it expires and any partial output is returned

    Returns:
        The stdout of the ping process, or an empty string if it could not run

    Examples:
        >>> output = probe("ping", "-c 2 -w 1", "127.0.0.1")
        >>> "packet loss" in output
        True
    """
    cmd_args = build_ping_command(ping_command, pre_args, address, post_args)
    logger.debug("Running %s", " ".join(cmd_args))
    try:
        result = subprocess.run(
            cmd_args,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,  # Non-zero exit still carries parsable statistics
        )
    except subprocess.TimeoutExpired as e:
        logger.warning("Ping to %s killed after %s seconds", address, timeout)
        return _decode(e.stdout)
    except OSError as e:
        logger.warning("Could not run '%s' for %s: %s", ping_command, address, e)
        return ""

    if result.returncode != 0:
        stderr = result.stderr.strip() if result.stderr else ""
        logger.debug("%s exited with %d for %s: %s", ping_command, result.returncode, address, stderr)
    return result.stdout or ""

