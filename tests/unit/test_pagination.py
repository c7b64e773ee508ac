"""Pagination tests."""

from urllib.parse import parse_qs, urlparse

from portal.models.sangguniang_bayan_member import SangguniangBayanMember
from portal.services.pagination import active_filters, page_link, paginate


def query_params(link):
    return {k: v[0] for k, v in parse_qs(urlparse(link).query).items()}


class TestPageLinks:

    def test_active_filters_drop_empty_values(self):
        assert active_filters({"search": "", "status": None, "category": "Event"}) == {"category": "Event"}

    def test_page_link_carries_filters(self):
        link = page_link("/api/news/", {"category": "Event", "search": None}, 2, 10)
        assert link.startswith("/api/news/?")
        assert query_params(link) == {"category": "Event", "page": "2", "page_size": "10"}


class TestPaginate:

    def seed(self, db, count):
        for i in range(count):
            db.add(SangguniangBayanMember(name=f"Member {i}", position="SB Member", order=i))
        db.commit()

    def test_pages_and_links(self, db):
        self.seed(db, 25)
        query = db.query(SangguniangBayanMember).order_by(SangguniangBayanMember.order)
        page = paginate(query, 2, 10, {"position_type": "regular"}, "/api/sangguniang-bayan/")

        assert page["total"] == 25
        assert page["total_pages"] == 3
        assert [m.name for m in page["items"]][0] == "Member 10"
        assert page["filters"] == {"position_type": "regular"}
        for name in ("first", "last", "prev", "next"):
            assert query_params(page["links"][name])["position_type"] == "regular"
        assert query_params(page["links"]["next"])["page"] == "3"

    def test_empty_result_has_one_page(self, db):
        page = paginate(db.query(SangguniangBayanMember), 1, 10, {}, "/api/sangguniang-bayan/")
        assert page["total"] == 0
        assert page["total_pages"] == 1
        assert page["links"]["prev"] is None
        assert page["links"]["next"] is None
