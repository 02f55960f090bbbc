"""Storage and output layer.

This module persists per-stream snapshots and writes exported outputs.
It powers snapshot merges, flat exports, and output naming for the SDK.
"""
