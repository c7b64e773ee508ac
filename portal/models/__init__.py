"""Models package: import all models so metadata.create_all can discover them."""

from portal.models.user import User
from portal.models.activity import Activity
from portal.models.news import News
from portal.models.bids_award import BidsAward
from portal.models.tourism_package import TourismPackage
from portal.models.awards_recognition import AwardsRecognition
from portal.models.full_disclosure import FullDisclosure
from portal.models.ordinance_resolution import OrdinanceResolution
from portal.models.sangguniang_bayan_member import SangguniangBayanMember

__all__ = [
    "User", "Activity", "News", "BidsAward", "TourismPackage",
    "AwardsRecognition", "FullDisclosure", "OrdinanceResolution",
    "SangguniangBayanMember",
]
