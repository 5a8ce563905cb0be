"""
clinicslots - appointment slot allocation for clinic scheduling.
"""

__version__ = "0.1.0"
