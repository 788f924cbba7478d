from civicdesk.models.ward.ward import Ward

__all__ = ["Ward"]
