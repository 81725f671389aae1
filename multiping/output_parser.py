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
Ping output parsing for MultiPing.

The ping utilities are not under our control, so the accepted patterns are
kept deliberately small and documented here:

Latency: a statistics summary with a ``min/avg/max`` triple, e.g.

    rtt min/avg/max/mdev = 10.0/25.5/40.0/5.0 ms           (iputils)
    round-trip min/avg/max/stddev = 1.1/2.2/3.3/0.4 ms     (BSD, macOS)
    round-trip min/avg/max = 1/2/3 ms                      (busybox)

Only the average is captured; it is converted from milliseconds to seconds.

Packet loss: a number immediately followed by ``% packet loss``, e.g.

    2 packets transmitted, 2 received, 0% packet loss, time 1001ms
    3 packets transmitted, 2 packets received, 33.3% packet loss

A missing match yields None, which is distinct from a measured 0.
"""

import enum
import re
from typing import Optional

_NUMBER = r"\d+(?:\.\d+)?"

LATENCY_RE = re.compile(r"min/avg/max\S*\s*=\s*" + _NUMBER + r"/(" + _NUMBER + r")/" + _NUMBER)
PACKET_LOSS_RE = re.compile(r"(" + _NUMBER + r")% packet loss")


class MetricMode(enum.Enum):
    """Which statistic is reported for every target."""

    LATENCY = "latency"
    PACKET_LOSS = "packetloss"

    @classmethod
    def from_invocation_name(cls, name: str) -> "MetricMode":
        """Select packet loss when the program was invoked under a *packetloss* name."""
        if "packetloss" in name.lower():
            return cls.PACKET_LOSS
        return cls.LATENCY


def parse_latency(output: str) -> Optional[float]:
    """
    Extract the average round-trip time in seconds.

    Args:
        output: Raw ping stdout

    Returns:
        Average RTT in seconds, or None if no summary line was found
    """
    match = LATENCY_RE.search(output or "")
    if match is None:
        return None
    return float(match.group(1)) / 1000.0


def parse_packet_loss(output: str) -> Optional[float]:
    """
    Extract the packet loss percentage.

    Returns:
        Loss percentage (0-100), or None if no loss figure was found
    """
    match = PACKET_LOSS_RE.search(output or "")
    if match is None:
        return None
    text = match.group(1)
    if "." in text:
        return float(text)
    return int(text)


def parse_output(output: str, mode: MetricMode) -> Optional[float]:
    """Extract the statistic selected by ``mode`` from ping output."""
    if mode is MetricMode.PACKET_LOSS:
        return parse_packet_loss(output)
    return parse_latency(output)
