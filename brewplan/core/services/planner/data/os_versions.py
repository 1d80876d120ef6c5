"""
L0 Data — OS version tags.

Bottle tables are keyed by macOS codename (``el_capitan``) or by
``<arch>_linux``. Maps release numbers to codenames, oldest first.
"""

from __future__ import annotations

MACOS_CODENAMES: dict[str, str] = {
    "10.4": "tiger",
    "10.5": "leopard",
    "10.6": "snow_leopard",
    "10.7": "lion",
    "10.8": "mountain_lion",
    "10.9": "mavericks",
    "10.10": "yosemite",
    "10.11": "el_capitan",
    "10.12": "sierra",
    "10.13": "high_sierra",
    "10.14": "mojave",
    "10.15": "catalina",
    "11": "big_sur",
    "12": "monterey",
    "13": "ventura",
    "14": "sonoma",
    "15": "sequoia",
}

# Architecture name normalization (uname -m → bottle naming).
ARCH_ALIASES: dict[str, str] = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "AMD64": "x86_64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "i386",
    "i686": "i386",
    "ppc": "ppc",
    "powerpc": "ppc",
    "ppc64": "ppc64",
}
