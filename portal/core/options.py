"""Option tables for every content category.

One :class:`CategoryOptions` per permission key. Validation, list payloads
and show payloads all read from here.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from portal.core.permissions import PermissionKey


@dataclass(frozen=True)
class CategoryOptions:
    label: str
    choices: Dict[str, Dict[str, str]] = field(default_factory=dict)

    def values(self, name: str) -> List[str]:
        return list(self.choices.get(name, {}))

    def as_payload(self) -> Dict[str, List[Dict[str, str]]]:
        return {
            name: [{"value": value, "label": label} for value, label in mapping.items()]
            for name, mapping in self.choices.items()
        }


ACTIVE_STATUS = {"active": "Active", "inactive": "Inactive"}

CATEGORY_OPTIONS: Dict[PermissionKey, CategoryOptions] = {
    PermissionKey.NEWS: CategoryOptions(
        label="Article",
        choices={
            "category": {
                "Business": "Business",
                "Finance": "Finance",
                "Events": "Events",
                "Partnerships": "Partnerships",
                "Sustainability": "Sustainability",
                "Company News": "Company News",
                "Announcement": "Announcement",
                "Update": "Update",
                "Event": "Event",
                "Maintenance": "Maintenance",
            },
            "status": {"draft": "Draft", "published": "Published", "archived": "Archived"},
        },
    ),
    PermissionKey.BIDS_AWARDS: CategoryOptions(
        label="Bid/Award",
        choices={
            "status": {
                "draft": "Draft",
                "published": "Published",
                "opened": "Opened",
                "evaluated": "Evaluated",
                "awarded": "Awarded",
                "cancelled": "Cancelled",
            },
            "bid_type": {
                "open_tender": "Open Tender",
                "closed_tender": "Closed Tender",
                "quotation": "Quotation",
                "rfp": "Request for Proposal",
            },
        },
    ),
    PermissionKey.TOURISM: CategoryOptions(
        label="Tourism package",
        choices={
            "category": {
                "adventure": "Adventure",
                "cultural": "Cultural",
                "beach": "Beach",
                "mountain": "Mountain",
                "eco_tourism": "Eco-Tourism",
                "heritage": "Heritage",
                "food": "Food & Culinary",
                "wellness": "Wellness",
            },
            "difficulty_level": {"easy": "Easy", "moderate": "Moderate", "difficult": "Difficult"},
            "status": {"active": "Active", "featured": "Featured"},
        },
    ),
    PermissionKey.AWARDS_RECOGNITION: CategoryOptions(
        label="Award",
        choices={
            "category": {
                "good_governance": "Good Governance",
                "tourism": "Tourism",
                "environmental": "Environmental",
                "health": "Health",
                "education": "Education",
                "infrastructure": "Infrastructure",
                "disaster_preparedness": "Disaster Preparedness",
                "peace_and_order": "Peace and Order",
                "social_services": "Social Services",
                "economic_development": "Economic Development",
                "agriculture": "Agriculture",
                "culture_and_arts": "Culture and Arts",
                "sports": "Sports",
                "innovation": "Innovation",
                "other": "Other",
            },
            "award_type": {
                "international": "International",
                "national": "National",
                "regional": "Regional",
                "provincial": "Provincial",
                "local": "Local",
            },
            "scope": {
                "international": "International",
                "national": "National",
                "regional": "Regional",
                "provincial": "Provincial",
                "municipal": "Municipal",
            },
            "recipient_type": {
                "individual": "Individual",
                "team": "Team",
                "department": "Department",
                "organization": "Organization",
            },
            "status": ACTIVE_STATUS,
        },
    ),
    PermissionKey.FULL_DISCLOSURE: CategoryOptions(
        label="Document",
        choices={
            "category": {
                "approved_budget": "Approved Budget",
                "procurement_plan": "Annual Procurement Plan",
                "gender_development": "Gender and Development",
                "full_disclosure_policy": "Full Disclosure Policy",
                "audit_report": "Annual Audit Report",
                "executive_summary": "Executive Summary",
                "statement_indebtedness": "Statement of Indebtedness",
            },
            "status": {"published": "Published", "unpublished": "Unpublished"},
        },
    ),
    PermissionKey.ORDINANCE_RESOLUTIONS: CategoryOptions(
        label="Ordinance/Resolution",
        choices={
            "type": {"ordinance": "Ordinance", "resolution": "Resolution"},
            "status": {
                "active": "Active",
                "amended": "Amended",
                "repealed": "Repealed",
                "pending": "Pending",
            },
            "category": {
                "revenue": "Revenue",
                "appropriation": "Appropriation",
                "administrative": "Administrative",
                "development": "Development",
                "environment": "Environment",
                "peace_order": "Peace and Order",
                "health": "Health",
                "education": "Education",
                "infrastructure": "Infrastructure",
                "agriculture": "Agriculture",
                "business": "Business",
                "traffic": "Traffic",
                "zoning": "Zoning",
                "personnel": "Personnel",
                "other": "Other",
            },
        },
    ),
    PermissionKey.SANGGUNIANG_BAYAN: CategoryOptions(
        label="Member",
        choices={
            "position_type": {
                "regular": "Regular Member",
                "sk_president": "SK Federation President",
                "liga_president": "Liga ng mga Barangay President",
                "ip_representative": "IP Mandatory Representative",
            },
            "status": ACTIVE_STATUS,
        },
    ),
    PermissionKey.USER_MANAGEMENT: CategoryOptions(
        label="User",
        choices={
            "role": {"admin": "Administrator", "staff": "Staff"},
            "office": {
                "Office of the Mayor": "Office of the Mayor",
                "Public Information Office": "Public Information Office",
                "Municipal Tourism Office": "Municipal Tourism Office",
                "Bids and Awards Committee": "Bids and Awards Committee",
                "Sangguniang Bayan": "Sangguniang Bayan",
                "Municipal Planning and Development Office": "Municipal Planning and Development Office",
                "Municipal Budget Office": "Municipal Budget Office",
                "Human Resource Management Office": "Human Resource Management Office",
            },
            "status": ACTIVE_STATUS,
        },
    ),
}


def options_for(key: PermissionKey) -> CategoryOptions:
    return CATEGORY_OPTIONS[key]
