"""
PartsCatalogue - Parts catalogue, BoM browser and new-part application service
"""

__version__ = "1.0.0"
