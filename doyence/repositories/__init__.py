"""
Repository Layer Package.

Provides data-access abstractions over the Supabase data store.
All table and RPC access flows through repositories; services never
touch ``db.supabase`` directly.

Usage:
    from doyence.repositories.profile_repository import ProfileRepository
    from doyence.repositories.company_repository import CompanyRepository
"""

from doyence.repositories.base_repository import BaseRepository
from doyence.repositories.company_repository import CompanyRepository
from doyence.repositories.profile_repository import ProfileRepository

__all__ = [
    "BaseRepository",
    "CompanyRepository",
    "ProfileRepository",
]
