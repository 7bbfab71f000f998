"""
Services module for the Progressive Profile Engine.
"""

from progressive_profile.services.profile_service import ProgressiveProfileService

__all__ = ["ProgressiveProfileService"]
