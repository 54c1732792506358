"""Default page-number pagination for the API list endpoints."""

from rest_framework.pagination import PageNumberPagination


class StandardResultsSetPagination(PageNumberPagination):
    # Clients may pick a page size up to the cap.
    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 100
