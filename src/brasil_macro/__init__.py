"""brasil-macro: Brazilian macroeconomic indicator aggregation and correction."""

__version__ = "0.1.0"
