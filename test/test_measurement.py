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

import pytest

from ethmetrics.measurement import INT64_MAX, INT64_MIN, Measurement, getMeasurement, toCamelCase, toMeasurements

ETHTOOL_OUTPUT = """NIC statistics:
     rx_packets: 1520
     tx_packets: 1311
     rx_bytes: 100
     queue_0_tx_unmask_interrupt: 5
     queue_12_rx_xdp_drop: 0
     some_other_stat: 7
     bogus line
     tx_timeout: -3
"""


class TestCamelCase:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("bytes", "bytes"),
            ("unmask_interrupt", "unmaskInterrupt"),
            ("some_other_stat", "someOtherStat"),
            ("Already_mixedCase", "AlreadyMixedCase"),
            ("lro_aggregated_2", "lroAggregated2"),
        ],
    )
    def test_conversion(self, name, expected):
        assert toCamelCase(name) == expected

    def test_empty_segments_are_dropped(self):
        """Repeated and trailing underscores leave no trace in the output."""
        assert toCamelCase("rx__bytes") == "rxBytes"
        assert toCamelCase("rx_bytes_") == "rxBytes"
        assert toCamelCase("queue_") == "queue"

    def test_segments_are_not_lowercased(self):
        assert toCamelCase("tx_IPsec_OK") == "txIPsecOK"


class TestGetMeasurement:
    def test_queue_metric(self):
        ms = getMeasurement("queue_0_tx_unmask_interrupt: 5")
        assert ms == Measurement("eth.queue.unmaskInterrupt", {"queue": "0", "dir": "tx"}, 5)

    def test_direction_metric(self):
        ms = getMeasurement("rx_bytes: 100")
        assert ms.name == "eth.bytes"
        assert ms.tags == {"dir": "rx"}
        assert ms.value == 100

    def test_generic_metric(self):
        ms = getMeasurement("some_other_stat: 7")
        assert ms.name == "eth.someOtherStat"
        assert ms.tags == {}
        assert ms.value == 7

    def test_surrounding_whitespace(self):
        ms = getMeasurement("\t   tx_errors :   42  ")
        assert ms == Measurement("eth.errors", {"dir": "tx"}, 42)

    @pytest.mark.parametrize("name", ["queue_", "queue_x_tx_drops", "queue_3_in_drops", "queue_3_tx"])
    def test_malformed_queue_names_fall_through(self, name):
        ms = getMeasurement(f"{name}: 1")
        assert ms.name == "eth." + toCamelCase(name)
        assert ms.tags == {}

    def test_queue_pattern_found_later_in_name(self):
        ms = getMeasurement("queue_x_queue_0_tx_foo: 1")
        assert ms == Measurement("eth.queue.foo", {"queue": "0", "dir": "tx"}, 1)

    def test_queue_name_with_direction_prefix_rest(self):
        """The direction rule only applies to names starting with tx_/rx_."""
        ms = getMeasurement("rxq_drops: 9")
        assert ms.name == "eth.rxqDrops"
        assert ms.tags == {}

    def test_bare_direction_prefix(self):
        ms = getMeasurement("tx_: 3")
        assert ms.name == "eth."
        assert ms.tags == {"dir": "tx"}

    def test_signed_values(self):
        assert getMeasurement("rx_bytes: -12").value == -12
        assert getMeasurement("rx_bytes: +12").value == 12

    def test_int64_bounds(self):
        assert getMeasurement(f"rx_bytes: {INT64_MAX}").value == INT64_MAX
        assert getMeasurement(f"rx_bytes: {INT64_MIN}").value == INT64_MIN
        assert getMeasurement(f"rx_bytes: {INT64_MAX + 1}") is None
        assert getMeasurement(f"rx_bytes: {INT64_MIN - 1}") is None

    @pytest.mark.parametrize(
        "line",
        [
            "",
            "NIC statistics:",
            "rx_bytes 100",
            "rx_bytes: 100: 3",
            ": 100",
            "rx_bytes:",
            "rx_bytes: 1.5",
            "rx_bytes: 0x10",
            "rx_bytes: 1_000",
            "rx_bytes: ten",
            "rx_bytes: - 1",
        ],
    )
    def test_rejected_lines(self, line):
        assert getMeasurement(line) is None

    @pytest.mark.parametrize(
        "line",
        ["rx_bytes: 1", "queue_1_rx_packets: 2", "weird__name_: 3", "Q: 4", "tx_: 5"],
    )
    def test_namespace_prefix(self, line):
        assert getMeasurement(line).name.startswith("eth.")


class TestToMeasurements:
    def test_counter_dump(self):
        measurements = toMeasurements(ETHTOOL_OUTPUT)

        names = [m.name for m in measurements]
        assert names == [
            "eth.packets",
            "eth.packets",
            "eth.bytes",
            "eth.queue.unmaskInterrupt",
            "eth.queue.xdpDrop",
            "eth.someOtherStat",
            "eth.timeout",
        ]
        assert measurements[4].tags == {"queue": "12", "dir": "rx"}
        assert measurements[-1].value == -3

    def test_empty_dump(self):
        assert toMeasurements("") == []
