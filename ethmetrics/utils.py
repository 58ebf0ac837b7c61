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

import configparser
import importlib.metadata
import importlib.resources
import logging
import os
import re
from pathlib import Path

IFF_LOOPBACK = 0x8
EXCLUDED_PREFIXES = ("docker",)

DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def removeQuotes(value: str) -> str:
    """Strip one pair of surrounding single or double quotes."""
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def getVersion():
    """Return the installed package version."""
    try:
        return importlib.metadata.version("ethmetrics")
    except importlib.metadata.PackageNotFoundError:
        return "Unknown"


def parseDuration(value) -> float:
    """Convert "30s", "500ms", "1.5m" or a plain number of seconds to seconds."""
    text = removeQuotes(str(value)).lower()
    match = re.fullmatch(r"([0-9]*\.?[0-9]+)\s*(ms|s|m|h)?", text)
    if not match:
        raise ValueError(f"Invalid duration '{value}'")
    number, unit = match.groups()
    return float(number) * DURATION_UNITS[unit or "s"]


def splitList(value: str):
    """Split a comma separated list, dropping empty entries."""
    return [item for item in re.split(r",\s*", removeQuotes(value).strip()) if item]


def defaultConfigFile():
    return importlib.resources.files("ethmetrics").joinpath("config/ethmetrics.default")


def readConfig(configFile=None) -> configparser.ConfigParser:
    """Load runtime configuration.

    Lookup order: explicit file, $ETHMETRICS_CONFIG, packaged default.
    """
    if configFile is None:
        configFile = os.environ.get("ETHMETRICS_CONFIG")
    if configFile is None:
        configFile = defaultConfigFile()

    config = configparser.ConfigParser()
    path = Path(str(configFile))
    if not path.is_file():
        raise ValueError(f"Unable to find runtime config file {path}")
    config.read(path)
    logging.debug(f"Reading runtime config from {path}")

    if not config.has_section("ethmetrics"):
        config.add_section("ethmetrics")
    return config


def isLoopback(nic: Path) -> bool:
    try:
        flags = int((nic / "flags").read_text().strip(), 16)
    except (OSError, ValueError):
        return nic.name == "lo"
    return bool(flags & IFF_LOOPBACK)


def getInterfaces(sysfs="/sys/class/net"):
    """List local network interfaces, excluding loopback and docker bridges."""
    interfaces = []
    for nic in Path(sysfs).iterdir():
        if not nic.is_dir():
            continue
        if nic.name.startswith(EXCLUDED_PREFIXES) or isLoopback(nic):
            continue
        interfaces.append(nic.name)
    return sorted(interfaces)
