"""
daylog.core: configuration, constants, exceptions, and diagnostics logging.

Modules:
    config      Configuration loading (TOML + env vars)
    constants   Exit codes, filesystem layout, limits, sentinels
    exceptions  daylog exception hierarchy
    logging     stdlib logging setup for the diagnostic channel
"""
