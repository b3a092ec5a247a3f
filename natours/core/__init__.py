"""
Core module: configuration, logging, errors and telemetry.

Submodules are imported directly (``from natours.core.config import config``)
so that the middleware and the logger can depend on each other's modules
without an import cycle through this package.
"""
