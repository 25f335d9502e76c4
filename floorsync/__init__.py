"""
floorsync - version conflict detection and merge engine for floor plans.

Editors propose concurrent changes to a shared floor plan as draft
versions; floorsync reconciles those drafts into the canonical layout.
"""

__version__ = "0.1.0"
