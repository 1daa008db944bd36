"""
Flow Harvester - groups an exported conversation into disjoint topical flows.
"""

VERSION = "1.0.0"
