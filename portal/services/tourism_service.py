"""Tourism package service."""

from portal.core.permissions import PermissionKey
from portal.models.tourism_package import TourismPackage
from portal.schemas.schemas import TourismPackageInput, TourismPackageOut
from portal.services.resource_service import FileField, IMAGE_TYPES, ResourceService


class TourismService(ResourceService):
    model = TourismPackage
    permission = PermissionKey.TOURISM
    input_schema = TourismPackageInput
    output_schema = TourismPackageOut
    base_path = "/api/tourism/"
    search_fields = ("title", "description", "location")
    filter_fields = {"category": "category", "difficulty": "difficulty_level"}
    file_fields = (
        FileField("featured_image", "tourism/featured-images", IMAGE_TYPES, max_kb=5120),
        FileField("gallery_images", "tourism/gallery-images", IMAGE_TYPES, max_kb=5120, multiple=True),
    )
    toggles = ("is_featured", "is_active")
    soft_delete = True

    def apply_filter(self, query, name, value):
        if name == "status":
            if value == "active":
                return query.filter(TourismPackage.is_active.is_(True))
            if value == "featured":
                return query.filter(TourismPackage.is_featured.is_(True))
            return query
        return super().apply_filter(query, name, value)


tourism_service = TourismService()
