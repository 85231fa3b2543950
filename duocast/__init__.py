"""
DuoCast: two-host podcast generation service.
"""
