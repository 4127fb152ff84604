from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from . import services
from .serializers import ReviewCreateSerializer, ReviewSerializer, ReviewUpdateSerializer


class ReviewCreateView(APIView):
    def post(self, request, *args, **kwargs):
        serializer = ReviewCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        review = services.create_review(request.user, **serializer.validated_data)
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)


class ReviewDetailView(APIView):
    def patch(self, request, review_id, *args, **kwargs):
        serializer = ReviewUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        review = services.update_review(request.user, review_id, **serializer.validated_data)
        return Response(ReviewSerializer(review).data)

    def delete(self, request, review_id, *args, **kwargs):
        services.delete_review(request.user, review_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
