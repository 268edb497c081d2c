"""Client-side state layer.

Explicit cache instances owned by :class:`pyfuelmap.client.FuelMapClient`:
the station index, the brand catalog, and the two-phase wrapper used for
optimistic local updates.
"""
