# -------------------------------------------------------------------------------
# MIT License
#
# Copyright (c) 2023 - 2026 Advanced Micro Devices, Inc. All Rights Reserved.
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
# -------------------------------------------------------------------------------

# ethmetrics agent entry point.
#
# Reads runtime configuration, applies command-line overrides and runs the
# collection loop until the process is killed.
# --

import argparse
import logging
import sys

from ethmetrics import utils
from ethmetrics.collector_ethtool import CounterSourceError
from ethmetrics.monitor import Monitor


def parseArgs(argv=None):
    parser = argparse.ArgumentParser(description="Forward ethtool NIC statistics to spectatord")
    parser.add_argument("--configfile", type=str, help="runtime config file", default=None)
    parser.add_argument("--ifaces", type=str, help="Comma separated list of interfaces to query", default=None)
    parser.add_argument("--address", type=str, help="hostname:port where spectatord is listening", default=None)
    parser.add_argument("--frequency", type=str, help="Collect metrics at this frequency (e.g. 30s)", default=None)
    parser.add_argument("--logfile", type=str, help="Write log messages to this file", default=None)
    parser.add_argument("--version", action="version", version=utils.getVersion())
    return parser.parse_args(argv)


def applyOverrides(config, args):
    section = config["ethmetrics"]
    if args.ifaces is not None:
        section["interfaces"] = args.ifaces
    if args.address is not None:
        section["address"] = args.address
    if args.frequency is not None:
        section["frequency"] = args.frequency
    return config


def main(argv=None):
    args = parseArgs(argv)

    try:
        config = applyOverrides(utils.readConfig(args.configfile), args)
        monitor = Monitor(config, logFile=args.logfile)
    except (ValueError, OSError) as e:
        logging.basicConfig(format="%(message)s")
        logging.error("[ERROR]: Unable to start ethmetrics agent: %s" % e)
        sys.exit(1)

    try:
        monitor.run()
    except CounterSourceError as e:
        logging.error("[ERROR]: %s" % e)
        sys.exit(1)
    finally:
        monitor.close()


if __name__ == "__main__":
    main()
