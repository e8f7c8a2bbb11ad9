#!/usr/bin/env python3
"""Run the portent bot polling loop."""
from __future__ import annotations

from portent.main import cli

if __name__ == "__main__":
    cli()
