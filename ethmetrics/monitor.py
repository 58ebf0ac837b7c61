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

# Host-side NIC telemetry agent.
#
# Supporting monitor class to periodically gather ethtool statistics for a set
# of interfaces and forward them to spectatord.
# --

import configparser
import logging
import os
import platform
import sys
import time

from prometheus_client import CollectorRegistry, Counter, Gauge, start_http_server

from ethmetrics import utils
from ethmetrics.collector_ethtool import ETHTOOL
from ethmetrics.spectatord import CHUNK_SIZE, DEFAULT_ADDRESS, MAX_ATTEMPTS, SendError, SpectatordSender, encodeAll

DEFAULT_FREQUENCY = "30s"


class Monitor:
    def __init__(self, config: configparser.ConfigParser, logFile=None, sender=None):

        self.config = config  # cache runtime configuration

        logLevel = os.environ.get("ETHMETRICS_LOG_LEVEL", "INFO").upper()
        if logFile:
            hostname = platform.node().split(".", 1)[0]
            logging.basicConfig(
                format=f"[{hostname}: %(asctime)s] %(message)s",
                level=logLevel,
                filename=logFile,
                datefmt="%H:%M:%S",
            )
        else:
            logging.basicConfig(format="%(message)s", level=logLevel, stream=sys.stdout)

        section = self.config["ethmetrics"]
        self.__address = utils.removeQuotes(section.get("address", DEFAULT_ADDRESS))
        self.__interval = utils.parseDuration(section.get("frequency", DEFAULT_FREQUENCY))

        interfaces = utils.splitList(section.get("interfaces", ""))
        if not interfaces:
            interfaces = utils.getInterfaces()
            logging.debug("No interfaces configured, using discovered defaults")
        self.__interfaces = interfaces
        logging.info("Monitored interfaces = %s" % self.__interfaces)

        self.__collector = ETHTOOL(config)

        if sender is None:
            chunk_size = CHUNK_SIZE
            max_attempts = MAX_ATTEMPTS
            if self.config.has_section("ethmetrics.transport"):
                transport = self.config["ethmetrics.transport"]
                chunk_size = transport.getint("chunk_size", chunk_size)
                max_attempts = transport.getint("max_attempts", max_attempts)
            sender = SpectatordSender(self.__address, chunk_size=chunk_size, max_attempts=max_attempts)
        self.__sender = sender
        logging.info("Sending metrics to spectatord at %s every %.1f secs" % (self.__address, self.__interval))

        self.initMetrics()

        logging.debug("Completed monitor initialization")

    @property
    def interfaces(self):
        return list(self.__interfaces)

    @property
    def interval(self) -> float:
        return self.__interval

    @property
    def registry(self) -> CollectorRegistry:
        return self.__registry

    def initMetrics(self):
        """Register self-monitoring metrics in a private registry."""
        self.__registry = CollectorRegistry()
        labels = ["interface"]

        self.__perfMetric = Gauge(
            "ethmetrics_perf_runtime_seconds",
            "Time to collect and send one interface sample in seconds",
            labelnames=labels,
            registry=self.__registry,
        )
        self.__recordsMetric = Counter(
            "ethmetrics_records", "Number of records encoded for spectatord", labelnames=labels, registry=self.__registry
        )
        self.__failuresMetric = Counter(
            "ethmetrics_send_failures",
            "Number of batches that could not be sent to spectatord",
            labelnames=labels,
            registry=self.__registry,
        )
        for dev in self.__interfaces:
            self.__recordsMetric.labels(dev)
            self.__failuresMetric.labels(dev)

        info = Gauge("ethmetrics_info", "Info metric", labelnames=["version", "address"], registry=self.__registry)
        info.labels(version=utils.getVersion(), address=self.__address).set(1)

        port = 0
        if self.config.has_section("ethmetrics.internal"):
            port = self.config["ethmetrics.internal"].getint("metrics_port", 0)
        if port > 0:
            start_http_server(port, registry=self.__registry)
            logging.info("Exposing agent metrics on port %d" % port)

    def collectOnce(self) -> float:
        """Gather, encode and send counters for every interface.

        Counter source errors propagate to the caller. Transport errors are
        logged and the next interface is processed.

        Returns:
            float: Elapsed time for the whole pass in seconds.
        """
        start_time_total = time.perf_counter()

        for dev in self.__interfaces:
            start_time = time.perf_counter()
            logging.info("Gathering ethtool metrics for %s" % dev)
            measurements = self.__collector.updateMetrics(dev)
            updates = encodeAll(measurements)
            self.__recordsMetric.labels(dev).inc(len(updates))
            try:
                self.__sender.sendAll(updates)
            except (ConnectionError, SendError) as e:
                self.__failuresMetric.labels(dev).inc()
                sent = getattr(e, "sent", 0)
                logging.error("Unable to send batch of %d updates (%d sent): %s" % (len(updates), sent, e))
            self.__perfMetric.labels(dev).set(time.perf_counter() - start_time)

        elapsed_time_total = time.perf_counter() - start_time_total
        self.__perfMetric.labels("total").set(elapsed_time_total)
        return elapsed_time_total

    def sleepTime(self, elapsed: float) -> float:
        """Time left in the current sampling period, never negative."""
        return max(0.0, self.__interval - elapsed)

    def run(self, cycles=None):
        """Alternate collection and sleep; cycles=None runs forever."""
        devStr = "interface" if len(self.__interfaces) == 1 else "interfaces"
        count = 0
        while cycles is None or count < cycles:
            elapsed = self.collectOnce()
            toSleep = self.sleepTime(elapsed)
            logging.info(
                "Done processing metrics for %d %s in %.3fs. Sleeping %.3fs"
                % (len(self.__interfaces), devStr, elapsed, toSleep)
            )
            time.sleep(toSleep)
            count += 1

    def close(self):
        self.__sender.close()
