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
Multi-host integration tests for MultiPing.

These tests run real child processes: a small Python script stands in for the
system ping utility and prints canned output after a per-address delay, so
target expansion, concurrent execution, parsing and plugin output are all
exercised together.
"""

import io
import os
import shlex
import shutil
import sys
import tempfile
import textwrap
import unittest
from unittest.mock import patch

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../..")))

from multiping.cli import main  # noqa: E402
from multiping.config import ProbeConfig  # noqa: E402
from multiping.core import collect, enumerate_targets, run_probes  # noqa: E402
from multiping.output_parser import MetricMode  # noqa: E402

FAKE_PING = textwrap.dedent(
    '''
    import sys
    import time

    RTT_OUTPUT = """PING {address} 56(84) bytes of data.

    --- {address} ping statistics ---
    2 packets transmitted, 2 received, 0% packet loss, time 1001ms
    rtt min/avg/max/mdev = 10.0/{avg}/40.0/5.0 ms
    """

    LOSS_OUTPUT = """PING {address} 56(84) bytes of data.

    --- {address} ping statistics ---
    4 packets transmitted, 3 received, 25% packet loss, time 3004ms
    """

    CANNED = {
        "host1.example": (0.0, RTT_OUTPUT, "25.5"),
        "9.9.9.9": (0.0, LOSS_OUTPUT, ""),
        "192.0.2.1": (1.0, RTT_OUTPUT, "1.0"),
        "192.0.2.2": (0.0, RTT_OUTPUT, "2.0"),
        "192.0.2.3": (0.4, RTT_OUTPUT, "3.0"),
        "192.0.2.4": (0.2, RTT_OUTPUT, "4.0"),
    }

    address = sys.argv[-1]
    if address == "198.51.100.9":
        sys.stdout.buffer.write(b"PING caf\\xe9.example (198.51.100.9)\\nrtt min/avg/max/mdev = 1.0/2.0/3.0/0.5 ms\\n")
        sys.exit(0)

    if address not in CANNED:
        print("ping: unknown host " + address, file=sys.stderr)
        sys.exit(2)

    delay, template, avg = CANNED[address]
    time.sleep(delay)
    if len(sys.argv) > 2 and sys.argv[1] == "--log":
        with open(sys.argv[2], "a", encoding="utf-8") as fh:
            fh.write(address + "\\n")
    sys.stdout.write(template.format(address=address, avg=avg))
    '''
)


class FakePingTestCase(unittest.TestCase):
    """Base class providing a fake ping script in a temporary directory."""

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp(prefix="multiping-")
        self.script = os.path.join(self.tmpdir, "fake_ping.py")
        with open(self.script, "w", encoding="utf-8") as fh:
            fh.write(FAKE_PING)
        self.finish_log = os.path.join(self.tmpdir, "finished.log")

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def make_config(self, **kwargs) -> ProbeConfig:
        """Build a config whose ping commands run the fake script."""
        pre_args = f"{shlex.quote(self.script)} --log {shlex.quote(self.finish_log)} -c 2 -w 1"
        defaults = {"ping": sys.executable, "ping6": sys.executable, "ping_args": pre_args}
        defaults.update(kwargs)
        return ProbeConfig(**defaults)

    def finished_order(self):
        with open(self.finish_log, "r", encoding="utf-8") as fh:
            return [line.strip() for line in fh if line.strip()]


class TestEndToEndScenario(FakePingTestCase):
    """The two-host scenario with one forced-IPv6 host and one resolved host."""

    HOSTS = "6:host1.example,A:host2.example"
    NAMES = "H1,H2"

    @staticmethod
    def resolver(record_type, hostname):
        if (record_type, hostname) == ("A", "host2.example"):
            return ["9.9.9.9"]
        return []

    def test_packet_loss_values(self):
        config = self.make_config(hosts=self.HOSTS, names=self.NAMES)
        results = collect(config, MetricMode.PACKET_LOSS, self.resolver)
        self.assertEqual([r.target.label for r in results], ["H1", "H2 (9.9.9.9)"])
        self.assertEqual([r.value for r in results], [0, 25])

    def test_latency_values(self):
        config = self.make_config(hosts=self.HOSTS, names=self.NAMES)
        results = collect(config, MetricMode.LATENCY, self.resolver)
        self.assertAlmostEqual(results[0].value, 0.0255)
        self.assertIsNone(results[1].value)

    def test_plugin_output(self):
        config = self.make_config()
        environ = {
            "hosts": self.HOSTS,
            "names": self.NAMES,
            "ping": config.ping,
            "ping6": config.ping6,
            "ping_args": config.ping_args,
            "fork": "yes",
        }
        stdout = io.StringIO()
        with patch("multiping.core.resolve_addresses", side_effect=lambda t, h, *_: self.resolver(t, h)), patch(
            "multiping.cli._configure_logging"
        ), patch("sys.stdout", stdout):
            status = main(["--no-config"], environ, "multiping_packetloss")
        self.assertEqual(status, 0)
        self.assertEqual(stdout.getvalue().splitlines(), ["H1.value 0", "H2__9_9_9_9_.value 25"])


class TestConcurrentOrdering(FakePingTestCase):
    """Results follow enumeration order even when probes finish out of order."""

    HOSTS = "192.0.2.1,192.0.2.2,192.0.2.3,192.0.2.4"

    def test_fork_results_in_enumeration_order(self):
        config = self.make_config(hosts=self.HOSTS, fork=True)
        targets = enumerate_targets(config, lambda *_: [])
        results = run_probes(targets, config, MetricMode.LATENCY)

        self.assertEqual([r.target.address for r in results], self.HOSTS.split(","))
        for index, result in enumerate(results, start=1):
            self.assertAlmostEqual(result.value, index / 1000.0)
        finished = self.finished_order()
        self.assertEqual(sorted(finished), sorted(self.HOSTS.split(",")))
        self.assertNotEqual(finished[0], "192.0.2.1")

    def test_sequential_finishes_in_order(self):
        config = self.make_config(hosts=self.HOSTS, fork=False)
        results = collect(config, MetricMode.LATENCY, lambda *_: [])
        self.assertEqual([r.target.address for r in results], self.HOSTS.split(","))
        self.assertEqual(self.finished_order(), self.HOSTS.split(","))

    def test_unknown_host_yields_no_value_without_affecting_others(self):
        config = self.make_config(hosts="192.0.2.2,nothere.example,192.0.2.4", fork=True)
        results = collect(config, MetricMode.LATENCY, lambda *_: [])
        self.assertEqual(len(results), 3)
        self.assertAlmostEqual(results[0].value, 0.002)
        self.assertIsNone(results[1].value)
        self.assertAlmostEqual(results[2].value, 0.004)

    def test_undecodable_ping_output_still_parses(self):
        config = self.make_config(hosts="198.51.100.9,192.0.2.2", fork=True)
        results = collect(config, MetricMode.LATENCY, lambda *_: [])
        self.assertAlmostEqual(results[0].value, 0.002)
        self.assertAlmostEqual(results[1].value, 0.002)

    def test_missing_ping_binary_yields_no_values(self):
        config = ProbeConfig(hosts="192.0.2.2,192.0.2.4", ping=os.path.join(self.tmpdir, "no-such-ping"), fork=True)
        results = collect(config, MetricMode.PACKET_LOSS, lambda *_: [])
        self.assertEqual([r.value for r in results], [None, None])

    def test_supervisory_timeout_kills_slow_probe(self):
        config = self.make_config(hosts="192.0.2.1,192.0.2.2", fork=True, probe_timeout=0.5)
        results = collect(config, MetricMode.LATENCY, lambda *_: [])
        self.assertIsNone(results[0].value)
        self.assertAlmostEqual(results[1].value, 0.002)


if __name__ == "__main__":
    unittest.main()
