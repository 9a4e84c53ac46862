"""
stackconf - per-stack project configuration with encrypted secrets.

Keep project-wide configuration values and let each deployment stack
override them key by key.

Features:
- text: Store a plain configuration value
- secret: Store a value encrypted with a passphrase-derived key
- ls: Show the effective configuration for a stack (secrets blinded)
- rm: Remove a value from the project or from one stack

Requires: a passphrase (prompted, or STACKCONF_PASSPHRASE) for secrets
"""

__version__ = "0.1.0"
