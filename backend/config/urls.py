from django.contrib import admin
from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from accounts.api import ChangePasswordView, LoginView, MeView, RegisterView
from availability.api import AvailabilityCheckView
from bookings.api import AdminBookingViewSet, BookingViewSet
from cart.api import CartItemDetailView, CartItemListView, CartView
from favorites.api import FavoriteDetailView, FavoriteListView
from notifications.api import NotificationViewSet
from payments.api import CheckoutView, MidtransNotificationView, PaymentIntentViewSet
from properties.api import PropertyViewSet
from reviews.api import ReviewCreateView, ReviewDetailView

router = DefaultRouter()
router.register(r"properties", PropertyViewSet, basename="property")
router.register(r"bookings", BookingViewSet, basename="booking")
router.register(r"admin/bookings", AdminBookingViewSet, basename="admin-booking")
router.register(r"payments", PaymentIntentViewSet, basename="payment")
router.register(r"notifications", NotificationViewSet, basename="notification")

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/auth/register/", RegisterView.as_view(), name="auth-register"),
    path("api/auth/login/", LoginView.as_view(), name="auth-login"),
    path("api/auth/refresh/", TokenRefreshView.as_view(), name="auth-refresh"),
    path(
        "api/auth/change-password/",
        ChangePasswordView.as_view(),
        name="auth-change-password",
    ),
    path("api/auth/me/", MeView.as_view(), name="auth-me"),
    path(
        "api/availability/check/",
        AvailabilityCheckView.as_view(),
        name="availability-check",
    ),
    path("api/cart/", CartView.as_view(), name="cart"),
    path("api/cart/items/", CartItemListView.as_view(), name="cart-items"),
    path(
        "api/cart/items/<int:item_id>/",
        CartItemDetailView.as_view(),
        name="cart-item-detail",
    ),
    path("api/checkout/", CheckoutView.as_view(), name="checkout"),
    path("api/favorites/", FavoriteListView.as_view(), name="favorites"),
    path(
        "api/favorites/<int:property_id>/",
        FavoriteDetailView.as_view(),
        name="favorite-detail",
    ),
    path("api/reviews/", ReviewCreateView.as_view(), name="review-create"),
    path(
        "api/reviews/<int:review_id>/",
        ReviewDetailView.as_view(),
        name="review-detail",
    ),
    path(
        "api/webhooks/midtrans/",
        MidtransNotificationView.as_view(),
        name="midtrans-webhook",
    ),
    path("api/", include(router.urls)),
]
