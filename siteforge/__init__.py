"""Validate site configurations and localize their assets before rendering.

This package exposes the CLI entry points used by the ``siteforge`` console
script to validate a configuration, download remote assets, and run the
pre-build pipeline.

Exports
-------
- ``app``: Cyclopts application holding the subcommands.
- ``main``: Convenience function that configures logging and invokes ``app``.

Examples
--------
>>> from siteforge import main
>>> main()  # doctest: +SKIP
>>> from siteforge import app
>>> app.name[0]
'siteforge'
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
