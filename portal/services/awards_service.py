"""Awards and recognition service."""

from portal.core.permissions import PermissionKey
from portal.models.awards_recognition import AwardsRecognition
from portal.schemas.schemas import AwardsRecognitionInput, AwardsRecognitionOut
from portal.services.resource_service import DOCUMENT_TYPES, FileField, IMAGE_TYPES, ResourceService


class AwardsService(ResourceService):
    model = AwardsRecognition
    permission = PermissionKey.AWARDS_RECOGNITION
    input_schema = AwardsRecognitionInput
    output_schema = AwardsRecognitionOut
    base_path = "/api/awards-recognition/"
    search_fields = ("title", "description", "awarding_body", "recipient_name")
    filter_fields = {"category": "category", "award_type": "award_type", "scope": "scope"}
    file_fields = (
        FileField("featured_image", "awards/featured-images", IMAGE_TYPES, max_kb=5120),
        FileField("gallery_images", "awards/gallery-images", IMAGE_TYPES, max_kb=5120, multiple=True),
        FileField(
            "supporting_documents", "awards/supporting-documents",
            DOCUMENT_TYPES + IMAGE_TYPES, max_kb=10240, multiple=True,
        ),
    )
    toggles = ("is_featured", "is_active")
    soft_delete = True

    def apply_filter(self, query, name, value):
        if name == "status":
            if value in ("active", "inactive"):
                return query.filter(AwardsRecognition.is_active.is_(value == "active"))
            return query
        return super().apply_filter(query, name, value)

    def order(self, query):
        return query.order_by(AwardsRecognition.award_date.desc(), AwardsRecognition.id.desc())


awards_service = AwardsService()
