"""
Funder fit analysis for nonprofit grantmakers.

Reads a foundation's IRS Form 990 e-file data from ProPublica Nonprofit
Explorer, classifies its itemized grants into cause areas, and scores how
well its giving fits a funder profile.
"""

__version__ = "0.1.0"
