"""Domain layer for projledger application.

Services are imported from their own modules (``projledger.domain.posting``
and so on).
"""
