from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class PageLimitPagination(PageNumberPagination):
    """``?page=&limit=`` pagination with totals, capped at 50 rows per page."""

    page_size = 20
    page_size_query_param = "limit"
    max_page_size = 50
    results_key = "results"

    def get_paginated_response(self, data):
        paginator = self.page.paginator
        return Response(
            {
                self.results_key: data,
                "total": paginator.count,
                "page": self.page.number,
                "total_pages": paginator.num_pages,
                "has_more": self.page.has_next(),
            }
        )
