"""Integration tests.

Purpose
- Exercise real filesystem writes: directory listing and cleanup, barcode files.

Guidelines
- Work under pytest's `tmp_path`; never touch files outside it.
"""
