from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from . import services
from .serializers import CartItemUpdateSerializer, CartItemWriteSerializer, CartSerializer


class CartView(APIView):
    def get(self, request, *args, **kwargs):
        return Response(CartSerializer(services.get_cart(request.user)).data)

    def delete(self, request, *args, **kwargs):
        return Response({"count": services.clear_cart(request.user)})


class CartItemListView(APIView):
    def post(self, request, *args, **kwargs):
        serializer = CartItemWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.add_to_cart(request.user, **serializer.validated_data)
        return Response(CartSerializer(services.get_cart(request.user)).data, status=status.HTTP_201_CREATED)


class CartItemDetailView(APIView):
    def patch(self, request, item_id, *args, **kwargs):
        serializer = CartItemUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.update_cart_item(request.user, item_id, **serializer.validated_data)
        return Response(CartSerializer(services.get_cart(request.user)).data)

    def delete(self, request, item_id, *args, **kwargs):
        services.remove_from_cart(request.user, item_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
