"""Step definitions, hooks, scenario contexts and a wire-protocol server for Cucumber."""

__version__ = "0.1.0"