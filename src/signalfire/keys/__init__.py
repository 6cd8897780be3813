"""
Keys - Operator key custody.

One encrypted key file (AES-256-GCM, scrypt-derived key) plus the
eth-account helpers that unlock it for signing.
"""
