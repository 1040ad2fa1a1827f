"""
Cache Domain Module

Value objects for keys, TTLs and the tagged value variants.
"""
