#!/usr/bin/env python3
# anywhere/__main__.py
from __future__ import annotations

from anywhere.boot import main

if __name__ == "__main__":
    raise SystemExit(main())
