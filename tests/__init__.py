"""
Scheduling Engine Test Suite
Working hours, availability, conflicts, sessions and status lifecycle
"""

from .fixtures import *
