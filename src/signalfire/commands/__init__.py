"""
Commands - Command implementations for Signal Fire.

Each module corresponds to a top-level CLI command:
- fire:  Send the fire() transaction (runs setup first if needed)
- setup: Capture and encrypt the operator's private key
"""
