"""
daylog test suite.

Tests are organized by layer:
    tests/unit/  Engine, config and logging tests (tmp_path files only)
    tests/cli/   Click command tests through CliRunner

Run all tests:
    pytest
"""
