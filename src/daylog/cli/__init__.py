"""daylog.cli: Click CLI entry point for operators."""
