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
Core functionality for MultiPing.

This module turns the configured host list into a flat list of probe targets
and runs one ping per target, either sequentially or with one worker per
target when forking is enabled. Results always come back in target order.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from multiping.config import ProbeConfig
from multiping.hostspec import HostSpec, parse_host_list, split_list
from multiping.output_parser import MetricMode, parse_output
from multiping.ping_wrapper import probe
from multiping.resolver import resolve_addresses

logger = logging.getLogger(__name__)

MAX_PROBE_WORKERS = 128  # Hard cap to avoid unbounded thread growth.

Resolver = Callable[[str, str], List[str]]
Prober = Callable[..., str]


@dataclass(frozen=True)
class ProbeTarget:
    """One concrete address to ping, with its display label."""

    label: str
    address: str
    ping_command: str


@dataclass(frozen=True)
class ProbeResult:
    """Parsed outcome of one probe. ``value`` is None when nothing matched."""

    target: ProbeTarget
    value: Optional[float]


def resolve_labels(specs: Sequence[HostSpec], names: Sequence[str]) -> List[str]:
    """
    Pair host specs with their configured names.

    When the counts differ the names are ignored and every spec is labelled
    with its address.
    """
    if not names:
        return [spec.address for spec in specs]
    if len(names) != len(specs):
        logger.warning(
            "Configured %d names for %d hosts; using addresses as labels instead.",
            len(names),
            len(specs),
        )
        return [spec.address for spec in specs]
    return list(names)


def build_probe_targets(
    specs: Sequence[HostSpec],
    labels: Sequence[str],
    ping_command: str = "ping",
    ping6_command: str = "ping6",
    resolver: Optional[Resolver] = None,
) -> List[ProbeTarget]:
    """
    Expand host specs into probe targets.

    A spec without resolution yields exactly one target. A resolved spec yields
    one target per returned address, labelled ``"<label> (<address>)"``, or
    none at all when resolution comes back empty.

    Args:
        specs: Parsed host specs
        labels: One label per spec, in the same order
        ping_command: Default ping executable
        ping6_command: IPv6 ping executable
        resolver: Callable ``(record_type, hostname) -> addresses``

    Returns:
        Targets in enumeration order
    """
    if resolver is None:
        resolver = resolve_addresses

    targets: List[ProbeTarget] = []
    for spec, label in zip(specs, labels):
        command = ping6_command if spec.force_ipv6 else ping_command
        if not spec.needs_resolution:
            targets.append(ProbeTarget(label=label, address=spec.address, ping_command=command))
            continue

        addresses = resolver(spec.record_type, spec.address)
        if not addresses:
            logger.info("%s resolved to no addresses; skipping.", spec.raw_token)
        for address in addresses:
            targets.append(ProbeTarget(label=f"{label} ({address})", address=address, ping_command=command))
    return targets


def enumerate_targets(config: ProbeConfig, resolver: Optional[Resolver] = None) -> List[ProbeTarget]:
    """Build the flat target list for a configuration."""
    if resolver is None:

        def _resolve(record_type: str, hostname: str) -> List[str]:
            return resolve_addresses(record_type, hostname, config.host_command, config.probe_timeout)

        resolver = _resolve

    specs = parse_host_list(config.hosts)
    labels = resolve_labels(specs, split_list(config.names))
    return build_probe_targets(specs, labels, config.ping, config.ping6, resolver)


def probe_target(
    target: ProbeTarget,
    config: ProbeConfig,
    mode: MetricMode,
    prober: Optional[Prober] = None,
) -> ProbeResult:
    """Ping one target and parse the selected statistic."""
    if prober is None:
        prober = probe
    try:
        output = prober(
            target.ping_command, config.ping_args, target.address, config.ping_args2, timeout=config.probe_timeout
        )
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.warning("Error probing %s: %s", target.label, e)
        return ProbeResult(target=target, value=None)
    value = parse_output(output, mode)
    if value is None:
        logger.debug("No %s value in output for %s", mode.value, target.label)
    return ProbeResult(target=target, value=value)


def run_probes(
    targets: Sequence[ProbeTarget],
    config: ProbeConfig,
    mode: MetricMode,
    prober: Optional[Prober] = None,
) -> List[ProbeResult]:
    """
    Probe every target and return results in target order.

    With ``config.fork`` disabled the probes run one after another on the
    calling thread. With it enabled every target gets its own worker, and
    therefore its own ping process; all workers are joined before returning.
    A worker that raises yields a result without a value.
    """
    if not config.fork or len(targets) <= 1:
        return [probe_target(target, config, mode, prober) for target in targets]

    results: List[Optional[ProbeResult]] = [None] * len(targets)
    max_workers = min(len(targets), MAX_PROBE_WORKERS)
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="probe") as executor:
        futures = {
            executor.submit(probe_target, target, config, mode, prober): index for index, target in enumerate(targets)
        }
        for future, index in futures.items():
            try:
                results[index] = future.result()
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.warning("Probe for %s failed: %s", targets[index].label, e)
                results[index] = ProbeResult(target=targets[index], value=None)
    return [result for result in results if result is not None]


def collect(
    config: ProbeConfig,
    mode: MetricMode,
    resolver: Optional[Resolver] = None,
    prober: Optional[Prober] = None,
) -> List[ProbeResult]:
    """Enumerate targets for ``config`` and probe all of them."""
    targets = enumerate_targets(config, resolver)
    logger.debug("Probing %d targets (fork=%s)", len(targets), config.fork)
    return run_probes(targets, config, mode, prober)
