"""SuperTokens adapters for the identity backend provider protocols.

The RBAC provider and the metadata-backed parts of the other providers go
through an IMetadataStore, so they can be exercised without a running
SuperTokens core.
"""
