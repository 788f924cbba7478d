"""
Guest identity binding.
"""

from civicdesk.services.auth.identity_binder import BindingResult, GuestSubmission, IdentityBinder

__all__ = ["BindingResult", "GuestSubmission", "IdentityBinder"]
