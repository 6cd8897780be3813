"""
Chain - On-chain interaction layer for Signal Fire.

Provides the JSON-RPC client, endpoint health probing, gas estimation,
fee selection, transaction signing, receipt polling and the submission
engine that ties them together.

Uses httpx + eth-account + eth-abi instead of the heavyweight web3.py.
"""
