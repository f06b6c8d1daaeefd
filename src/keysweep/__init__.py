"""keysweep — credential leak detection for source files and public GitHub repositories."""

__version__ = "0.1.0"
