"""Host information queries used by the `os` command."""

import os
import getpass
import logging
import platform
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)

CPUINFO_PATH = '/proc/cpuinfo'


@dataclass
class CpuInfo:
    """One logical CPU."""
    model: str
    speed_mhz: Optional[float] = None


def eol() -> str:
    """Default end-of-line marker of the host."""
    return os.linesep


def homedir() -> str:
    return os.path.expanduser('~')


def username() -> str:
    """Name of the user running the process."""
    return getpass.getuser()


def architecture() -> str:
    return platform.machine() or 'unknown'


def _parse_cpuinfo(text: str) -> List[CpuInfo]:
    """Parse the Linux /proc/cpuinfo format, one block per logical CPU."""
    cpus = []
    model = None
    speed = None
    for line in text.splitlines() + ['']:
        if not line.strip():
            if model is not None or speed is not None:
                cpus.append(CpuInfo(model=model or 'unknown', speed_mhz=speed))
            model, speed = None, None
            continue
        key, _, value = line.partition(':')
        key, value = key.strip(), value.strip()
        if key in ('model name', 'Model', 'cpu model') and model is None:
            model = value
        elif key == 'cpu MHz':
            try:
                speed = float(value)
            except ValueError:
                speed = None
    return cpus


def cpus() -> List[CpuInfo]:
    """
    List the host's logical CPUs.

    Reads model and clock speed from /proc/cpuinfo where it exists, and
    falls back to os.cpu_count() entries carrying platform.processor().
    """
    if os.path.exists(CPUINFO_PATH):
        try:
            with open(CPUINFO_PATH, 'r', encoding='utf-8', errors='replace') as f:
                found = _parse_cpuinfo(f.read())
            if found:
                return found
        except OSError as e:
            logger.warning("cannot read %s: %s", CPUINFO_PATH, e)

    model = platform.processor() or platform.machine() or 'unknown'
    return [CpuInfo(model=model) for _ in range(os.cpu_count() or 1)]
