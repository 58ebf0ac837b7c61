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

"""NIC counter name normalization

Converts the raw `name: value` lines printed by `ethtool -S` into measurements
under the eth.* namespace. Queue and direction information embedded in the
counter name is moved into tags. Examples:

queue_0_tx_unmask_interrupt: 5  ->  eth.queue.unmaskInterrupt{dir=tx,queue=0} 5
rx_bytes: 100                   ->  eth.bytes{dir=rx} 100
some_other_stat: 7              ->  eth.someOtherStat 7
"""

import re
from typing import Dict, List, NamedTuple, Optional

PREFIX = "eth."

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

QUEUE_RE = re.compile(r"queue_([0-9]+)_(tx|rx)_(.*)")
DIRECTION_RE = re.compile(r"(rx|tx)_(.*)")
VALUE_RE = re.compile(r"[+-]?[0-9]+")


class Measurement(NamedTuple):
    name: str
    tags: Dict[str, str]
    value: int


def toCamelCase(name: str) -> str:
    """Convert snake_case to camelCase.

    Empty segments from repeated or trailing underscores are dropped:
    toCamelCase("rx__bytes_") == "rxBytes".
    """
    parts = name.split("_")
    result = parts[0]
    for part in parts[1:]:
        result += part[:1].upper() + part[1:]
    return result


def parseValue(text: str) -> Optional[int]:
    """Parse a base-10 signed 64-bit integer, or None."""
    if not VALUE_RE.fullmatch(text):
        return None
    value = int(text)
    if value < INT64_MIN or value > INT64_MAX:
        return None
    return value


def getQueueMetric(name: str):
    match = QUEUE_RE.search(name)
    if not match:
        return None
    queue, direction, rest = match.groups()
    return PREFIX + "queue." + toCamelCase(rest), {"queue": queue, "dir": direction}


def getRxTxMetric(name: str):
    match = DIRECTION_RE.match(name)
    if not match:
        return None
    direction, rest = match.groups()
    return PREFIX + toCamelCase(rest), {"dir": direction}


def getMeasurement(line: str) -> Optional[Measurement]:
    """Normalize one line of counter output.

    Args:
        line (str): A single `name: value` line.

    Returns:
        Measurement: The normalized measurement, or None if the line does not
        hold exactly one colon followed by an integer.
    """
    kv = line.split(":")
    if len(kv) != 2:
        return None

    name = kv[0].strip()
    valueStr = kv[1].strip()
    if len(name) == 0 or len(valueStr) == 0:
        return None

    value = parseValue(valueStr)
    if value is None:
        return None

    metric = None
    if name.startswith("queue_"):
        metric = getQueueMetric(name)
    if metric is None and (name.startswith("tx_") or name.startswith("rx_")):
        metric = getRxTxMetric(name)
    if metric is None:
        metric = (PREFIX + toCamelCase(name), {})

    metricName, tags = metric
    return Measurement(metricName, tags, value)


def toMeasurements(text: str) -> List[Measurement]:
    """Normalize a full counter dump, skipping lines that are not counters."""
    measurements = []
    for line in text.splitlines():
        measurement = getMeasurement(line)
        if measurement is not None:
            measurements.append(measurement)
    return measurements
