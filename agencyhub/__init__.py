"""
AgencyHub

Multi-tenant agency management backend: every record belongs to exactly
one agency, mutations go through a role/capability gate, and removing an
agency's last member removes the agency with everything it owns.
"""

__version__ = "1.0.0"
