"""
Contact form relay.
"""
