"""flowlint - static analysis for integration-flow XML configuration."""

__version__ = "0.1.0"
