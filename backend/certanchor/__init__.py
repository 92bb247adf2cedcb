"""Certificate fingerprint anchoring and verification on a public ledger."""

__version__ = "0.1.0"
