"""Parse proposal documents, run preamble and body lints, and render diagnostics."""

__version__ = "0.1.0"