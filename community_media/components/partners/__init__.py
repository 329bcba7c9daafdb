"""
Partners component - Legacy/new project association and logo slot.
"""

from .component import PartnerService
from .ports import PartnerRepoPort, ProjectRepoPort

__all__ = [
    "PartnerService",
    "PartnerRepoPort",
    "ProjectRepoPort",
]
