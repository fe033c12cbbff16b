"""
EcoLink - citizen environmental problem reporting and RSE organization directory.
"""
