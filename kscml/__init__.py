"""
kscml
Decodes Klei texture, build and animation containers and exports Spriter documents
"""

__version__ = "0.1.0"
