"""Module entry point: python -m fog_path ..."""

from __future__ import annotations

from fog_path.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
