#!/usr/bin/env python3
"""Fetch quiet-js and write the self-contained _bundle.js and index.d.ts."""

from __future__ import annotations

from quietbundle.runner import main

if __name__ == "__main__":
    raise SystemExit(main())
