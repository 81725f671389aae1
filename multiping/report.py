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
Munin plugin output for MultiPing.

``config`` mode describes the graph and one data series per target.
``fetch`` mode prints one ``<field>.value <number>`` line per target that
produced a value; targets without a value print nothing for this cycle.
"""

import re
from typing import Dict, List, Optional, Sequence

from multiping.core import ProbeResult, ProbeTarget
from multiping.output_parser import MetricMode

_GRAPH_SETTINGS: Dict[MetricMode, Dict[str, str]] = {
    MetricMode.LATENCY: {
        "graph_title": "Ping times",
        "graph_args": "--base 1000 -l 0",
        "graph_vlabel": "seconds",
        "graph_category": "network",
        "graph_info": "This graph shows average ping round-trip times.",
    },
    MetricMode.PACKET_LOSS: {
        "graph_title": "Packet loss",
        "graph_args": "--base 1000 -l 0 -u 100",
        "graph_vlabel": "%",
        "graph_category": "network",
        "graph_info": "This graph shows ping packet loss.",
    },
}

_SERIES_INFO = {
    MetricMode.LATENCY: "Ping RTT statistics for {label}.",
    MetricMode.PACKET_LOSS: "Packet loss statistics for {label}.",
}


def clean_fieldname(label: str) -> str:
    """Convert a label into a valid munin field name."""
    if not label:
        return "_"
    name = re.sub(r"^[^A-Za-z_]", "_", label)
    return re.sub(r"[^A-Za-z0-9_]", "_", name)


def format_value(value: float) -> str:
    """Render a metric value without a trailing ``.0`` or float noise."""
    return f"{value:g}"


def format_config(targets: Sequence[ProbeTarget], mode: MetricMode) -> List[str]:
    """Build the ``config`` mode lines for the given targets."""
    lines = [f"{key} {value}" for key, value in _GRAPH_SETTINGS[mode].items()]
    for target in targets:
        field = clean_fieldname(target.label)
        lines.append(f"{field}.label {target.label}")
        lines.append(f"{field}.info {_SERIES_INFO[mode].format(label=target.address)}")
        lines.append(f"{field}.draw LINE2")
    return lines


def format_fetch(results: Sequence[ProbeResult]) -> List[str]:
    """Build the ``fetch`` mode lines, skipping targets without a value."""
    lines = []
    for result in results:
        if result.value is None:
            continue
        lines.append(f"{clean_fieldname(result.target.label)}.value {format_value(result.value)}")
    return lines


def format_autoconf(ping_path: Optional[str], ping_command: str) -> str:
    """Answer munin's ``autoconf`` probe."""
    if ping_path:
        return "yes"
    return f"no ({ping_command} not found)"
