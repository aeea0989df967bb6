"""Kernel: tool contracts, registry and input validation."""
