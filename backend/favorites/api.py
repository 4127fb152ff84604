from rest_framework import generics, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from core.pagination import PageLimitPagination
from properties.serializers import PropertySerializer

from . import services
from .serializers import FavoriteCreateSerializer


class FavoritePagination(PageLimitPagination):
    results_key = "properties"


class FavoriteListView(generics.ListAPIView):
    """List the user's saved properties or save another one."""

    serializer_class = PropertySerializer
    pagination_class = FavoritePagination

    def get_queryset(self):
        return services.get_user_favorites(self.request.user)

    def post(self, request, *args, **kwargs):
        serializer = FavoriteCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        favorite = services.add_to_favorites(request.user, serializer.validated_data["property_id"])
        return Response(
            {"id": favorite.id, "property_id": favorite.property_id},
            status=status.HTTP_201_CREATED,
        )


class FavoriteDetailView(APIView):
    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return super().get_permissions()

    def get(self, request, property_id, *args, **kwargs):
        return Response({"is_favorite": services.is_favorite(request.user, property_id)})

    def delete(self, request, property_id, *args, **kwargs):
        services.remove_from_favorites(request.user, property_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
