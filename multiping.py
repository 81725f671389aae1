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
MultiPing - User entrypoint script.

This is the executable entrypoint for running MultiPing from the repository root
or for symlinking into a munin plugins directory:

    ln -s /path/to/multiping.py /etc/munin/plugins/multiping
    ln -s /path/to/multiping.py /etc/munin/plugins/multiping_packetloss

The link name selects the reported metric.
"""

if __name__ == "__main__":
    import sys

    from multiping.cli import main

    sys.exit(main())
