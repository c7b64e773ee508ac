"""Bids and awards service."""

from portal.core.permissions import PermissionKey
from portal.models.bids_award import BidsAward
from portal.schemas.schemas import BidsAwardInput, BidsAwardOut
from portal.services.resource_service import DOCUMENT_TYPES, FileField, ResourceService, merge_errors


class BidsAwardService(ResourceService):
    """Procurement notices.

    ``status`` accepts any value from the option table on every update;
    there is no enforced transition order.
    """

    model = BidsAward
    permission = PermissionKey.BIDS_AWARDS
    input_schema = BidsAwardInput
    output_schema = BidsAwardOut
    base_path = "/api/bids-awards/"
    search_fields = ("title", "reference_number", "description")
    filter_fields = {"status": "status", "bid_type": "bid_type"}
    file_fields = (
        FileField("documents", "bids-awards/documents", DOCUMENT_TYPES, max_kb=10240, multiple=True),
    )
    unique_fields = ("reference_number",)
    soft_delete = True

    def check_rules(self, db, values, record=None):
        errors = super().check_rules(db, values, record)
        if values.status == "awarded" and values.award_date is None:
            merge_errors(errors, {"award_date": ["The award date is required when the status is awarded."]})
        return errors


bids_award_service = BidsAwardService()
