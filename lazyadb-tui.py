#!/usr/bin/env python3
"""Thin entrypoint for the lazyadb dashboard."""

from __future__ import annotations

from lazyadb.app import main


if __name__ == "__main__":
    raise SystemExit(main())
