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
Command-line interface for MultiPing.

This module contains the munin plugin entry point. The metric reported is
chosen from the name the program was invoked under (``multiping_packetloss``
reports packet loss, anything else reports latency) unless ``--metric`` is
given.
"""

import argparse
import dataclasses
import logging
import os
import shutil
import sys
from typing import List, Mapping, Optional

from multiping.config import ProbeConfig, config_from_dict, config_from_mapping, load_config
from multiping.core import collect, enumerate_targets
from multiping.output_parser import MetricMode
from multiping.report import format_autoconf, format_config, format_fetch

logger = logging.getLogger(__name__)

_MODES = ("fetch", "config", "autoconf")


def _configure_logging(log_level: str, log_file: Optional[str]) -> None:
    """Configure logging handlers for CLI execution. Stdout stays reserved for plugin output."""
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.insert(0, logging.FileHandler(os.path.expanduser(log_file), encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(message)s",
        handlers=handlers,
        force=True,
    )


def build_parser(prog: Optional[str] = None) -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog=prog,
        description="MultiPing - Munin plugin reporting ping latency or packet loss for many hosts",
        epilog="Hosts and ping options are read from the munin plugin environment "
        "(hosts, names, ping, ping6, ping_args, ping_args2, fork).",
    )
    parser.add_argument(
        "mode",
        nargs="?",
        default="fetch",
        choices=_MODES,
        help="Plugin mode: fetch values, print graph config, or autoconf (default: fetch)",
    )
    parser.add_argument(
        "--metric",
        type=str.lower,
        default=None,
        choices=[mode.value for mode in MetricMode],
        help="Statistic to report (default: derived from the program name)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Config file path (default: ~/.multiping.conf)",
    )
    parser.add_argument(
        "--no-config",
        action="store_true",
        default=False,
        help="Skip loading the config file",
    )
    parser.add_argument(
        "--fork",
        action="store_true",
        default=None,
        help="Probe all targets concurrently",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for diagnostics on stderr (default: WARNING)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Optional log file path for persistent logging",
    )
    return parser


def build_config(args: argparse.Namespace, environ: Mapping[str, str]) -> ProbeConfig:
    """
    Merge config file, environment and CLI flags into one ProbeConfig.

    Raises:
        ValueError: If any source holds an invalid value
        ImportError: If a YAML config file is found but PyYAML is missing
    """
    config = ProbeConfig()
    if not args.no_config:
        config = config_from_dict(load_config(args.config), config)
    config = config_from_mapping(environ, config)

    overrides = {}
    if args.fork is not None:
        overrides["fork"] = args.fork
    if args.log_level is not None:
        overrides["log_level"] = args.log_level
    if args.log_file is not None:
        overrides["log_file"] = args.log_file
    return dataclasses.replace(config, **overrides)


def resolve_metric_mode(args: argparse.Namespace, prog: str) -> MetricMode:
    """Pick the metric from ``--metric`` or, failing that, the invocation name."""
    if args.metric:
        return MetricMode(args.metric)
    return MetricMode.from_invocation_name(os.path.basename(prog))


def main(
    argv: Optional[List[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
    prog: Optional[str] = None,
) -> int:
    """
    Run the plugin.

    Args:
        argv: Arguments without the program name (default: sys.argv[1:])
        environ: Plugin variables (default: os.environ)
        prog: Invocation name used to select the metric (default: sys.argv[0])

    Returns:
        Process exit status
    """
    prog = prog if prog is not None else sys.argv[0]
    environ = environ if environ is not None else os.environ
    parser = build_parser(os.path.basename(prog))
    args = parser.parse_args(argv)

    try:
        config = build_config(args, environ)
    except (ValueError, ImportError) as exc:
        parser.error(str(exc))

    _configure_logging(config.log_level, config.log_file)
    mode = resolve_metric_mode(args, prog)

    if args.mode == "autoconf":
        print(format_autoconf(shutil.which(config.ping), config.ping))
        return 0

    if not config.hosts:
        logger.warning("No hosts configured; set the 'hosts' plugin variable.")

    if args.mode == "config":
        lines = format_config(enumerate_targets(config), mode)
    else:
        lines = format_fetch(collect(config, mode))

    for line in lines:
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
