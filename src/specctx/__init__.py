"""specctx - Validation engine for spec-driven development workspaces."""

__version__ = "0.1.0"
