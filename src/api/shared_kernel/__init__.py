"""Shared Kernel module.

Components shared by every bounded context: the observation context carried
by domain probes, and the saga executor used for multi-step operations that
span independent backends.
"""
