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

"""ethtool counter source

Runs `ethtool -S <interface>` to obtain driver level NIC statistics and
normalizes the output into eth.* measurements. Typical raw output:

NIC statistics:
     rx_bytes: 1482203
     tx_bytes: 902211
     queue_0_tx_unmask_interrupt: 5
"""

import configparser
import logging
import subprocess
from typing import List

from ethmetrics.measurement import Measurement, toMeasurements

ETHTOOL_TIMEOUT_SECS = 2.0


class CounterSourceError(Exception):
    """Counter data could not be read; the agent cannot continue without it."""


class CounterSourceTimeout(CounterSourceError):
    pass


class CounterSourceFailure(CounterSourceError):
    pass


class ETHTOOL:
    def __init__(self, config: configparser.ConfigParser):
        """Initialize the ethtool counter source.

        Args:
            config (configparser.ConfigParser): Cached copy of runtime configuration.
        """
        logging.debug("Initializing ethtool counter source")

        self.__ethtool = "ethtool"
        self.__timeout = ETHTOOL_TIMEOUT_SECS

        if config.has_section("ethmetrics"):
            section = config["ethmetrics"]
            self.__ethtool = section.get("ethtool_path", self.__ethtool)
            self.__timeout = section.getfloat("ethtool_timeout_secs", self.__timeout)

    def getStats(self, dev: str) -> str:
        """Return the raw `ethtool -S` output for one interface.

        Raises:
            CounterSourceTimeout: ethtool did not finish within the timeout.
            CounterSourceFailure: ethtool could not be run or exited non-zero.
        """
        command = [self.__ethtool, "-S", dev]
        try:
            result = subprocess.run(command, capture_output=True, text=True, timeout=self.__timeout, check=True)
        except subprocess.TimeoutExpired as e:
            raise CounterSourceTimeout(f"Timed out getting statistics for interface {dev}") from e
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()
            raise CounterSourceFailure(
                f"{' '.join(command)} exited with status {e.returncode}: {stderr}"
            ) from e
        except OSError as e:
            raise CounterSourceFailure(f"Unable to run {self.__ethtool}: {e}") from e
        return result.stdout

    def updateMetrics(self, dev: str) -> List[Measurement]:
        """Collect and normalize counters for one interface."""
        return toMeasurements(self.getStats(dev))
