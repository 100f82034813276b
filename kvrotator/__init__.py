"""
kvrotator: lifecycle automation for Key Vault secrets and certificates.

Decides whether each configured credential needs to be created, rotated,
or just inspected, and performs the action through a vault backend.
"""

__version__ = "0.1.0"
