"""Run, verify, watch and grade progress through small Rust exercises."""

__version__ = "5.5.1"