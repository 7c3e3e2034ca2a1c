"""Unit tests.

Purpose
- Verify a single module, class or function in isolation.

Guidelines
- No filesystem or network access; monkeypatch DNS lookups.
- Keep tests small, fast, and deterministic.
"""
