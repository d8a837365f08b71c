"""Blood bank core — donors, requests, inventory and notifications."""

from bloodbank.service import BloodBank

__all__ = ["BloodBank"]
