"""Fixed-step flocking simulation of cats in a bounded arena."""

__version__ = "0.1.0"
