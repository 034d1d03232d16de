"""A small MapReduce framework: a coordinator, workers, a sequential runner and sample applications."""

__version__ = "0.1.0"