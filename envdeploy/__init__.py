"""envdeploy — stage per-environment config into a project workspace."""

__version__ = "0.1.0"
