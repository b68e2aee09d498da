"""
Course Sync Service.

Propagates enrollment, profile, progress and user changes of the learning
platform to subscriber systems through webhooks.
"""

__version__ = "0.1.0"
__description__ = "Course Sync Service"
